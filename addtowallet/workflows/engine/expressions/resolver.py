import logging
from typing import Any, Dict
from jinja2 import StrictUndefined
from jinja2.sandbox import SandboxedEnvironment

logger = logging.getLogger(__name__)


class ExpressionResolver:
    """
    Resolves expressions in node parameters.
    Uses Jinja2 syntax (e.g. {{ json.email }}) with a restricted sandbox.
    """

    def __init__(self, context: Dict[str, Any], strict: bool = False):
        self.env = SandboxedEnvironment(undefined=StrictUndefined) if strict else SandboxedEnvironment()
        self.context = context
        self.strict = strict

    def resolve(self, value: Any) -> Any:
        """
        Recursively resolve expressions in the given value.

        Args:
            value: The value to resolve (string, dict, list, or primitive)

        Returns:
            Resolved value
        """
        if isinstance(value, str):
            return self._resolve_string(value)
        elif isinstance(value, dict):
            return {k: self.resolve(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [self.resolve(v) for v in value]
        else:
            return value

    def _resolve_string(self, value: str) -> Any:
        """
        Resolve a single string value if it contains an expression.
        """
        if not value:
            return value

        # Only fire up Jinja if it looks like a template
        if "{{" in value and "}}" in value:
            try:
                template = self.env.from_string(value)
                return template.render(**self.context)
            except Exception as e:
                if self.strict:
                    raise
                # Keep the raw value so one bad expression doesn't fail the item
                logger.warning(f"Expression resolution failed for '{value}': {e}")
                return value

        return value
