import logging
from typing import Any, Dict, List, Optional

import httpx

from addtowallet.credentials.service import build_auth_headers, resolve_credential
from addtowallet.credentials.types import get_credential_type
from addtowallet.workflows.engine.definitions import WorkflowItem
from addtowallet.workflows.engine.errors import CredentialError, NodeApiError, NodeOperationError
from addtowallet.workflows.engine.expressions.resolver import ExpressionResolver
from addtowallet.workflows.engine.nodes.schema import NodeManifest
from addtowallet.workflows.engine.runtime.http import HTTPRuntime

logger = logging.getLogger(__name__)

MISSING = object()


class NodeContext:
    """
    Execution context for a node.

    This is the boundary between a node package and the engine. Nodes read
    their parameters per item, their credentials and the continue-on-fail
    setting through it, and make authenticated requests with it.
    """

    def __init__(
        self,
        execution_id: str,
        workflow_id: str,
        node_id: str,
        config: Dict[str, Any],
        input_data: Optional[List[WorkflowItem]] = None,
        credentials: Optional[Dict[str, Dict[str, Any]]] = None,
        continue_on_fail: bool = False,
        manifest: Optional[NodeManifest] = None,
        env: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.execution_id = execution_id
        self.workflow_id = workflow_id
        self.node_id = node_id
        self.raw_config = config or {}
        self.input_data = input_data or []
        self.credentials = credentials or {}
        self.manifest = manifest
        self.env = env or {}
        self.transport = transport
        self._continue_on_fail = continue_on_fail

    def _item_context(self, item_index: int) -> Dict[str, Any]:
        # {{ json.field }} reads from the item being processed
        item = self.input_data[item_index] if item_index < len(self.input_data) else WorkflowItem()
        return {
            "json": item.json_data,
            "item_index": item_index,
            "env": self.env,
            "execution": {
                "id": self.execution_id,
                "workflow_id": self.workflow_id,
            },
        }

    def get_input_data(self) -> List[WorkflowItem]:
        return self.input_data

    def continue_on_fail(self) -> bool:
        return self._continue_on_fail

    def resolve_config(self, item_index: int = 0) -> Dict[str, Any]:
        """
        Returns the configuration dictionary with all expressions resolved
        against the given item.
        """
        return ExpressionResolver(self._item_context(item_index)).resolve(self.raw_config)

    def get_node_parameter(self, name: str, item_index: int, default: Any = MISSING) -> Any:
        """
        Read a parameter resolved for one input item.

        Dotted names walk into collections, e.g. "additional_fields.links".
        Falls back to `default`, then to the manifest default.
        """
        if item_index < 0 or (self.input_data and item_index >= len(self.input_data)):
            raise NodeOperationError(f"Item index {item_index} is out of range", node_id=self.node_id)

        value = self.raw_config
        for part in name.split("."):
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                value = MISSING
                break

        if value is MISSING:
            if default is not MISSING:
                return default
            manifest_input = self.manifest.get_input(name) if self.manifest else None
            if manifest_input is None:
                raise NodeOperationError(f'Could not get parameter "{name}"', node_id=self.node_id)
            value = manifest_input.default

        return ExpressionResolver(self._item_context(item_index)).resolve(value)

    def get_credentials(self, name: str) -> Dict[str, Any]:
        """
        Return the resolved credential data for a credential type.
        """
        data = self.credentials.get(name)
        if data is None:
            raise NodeOperationError(
                f'Node does not have any credentials set for "{name}"', node_id=self.node_id
            )

        credential_type = get_credential_type(name)
        if credential_type is None:
            return dict(data)

        try:
            return resolve_credential(credential_type, data)
        except CredentialError as e:
            raise NodeOperationError(str(e), node_id=self.node_id) from e

    async def http_request_with_authentication(
        self,
        credential_name: str,
        method: str,
        path: str,
        body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Make a request against the credential's base URL with its auth
        headers applied. Returns the parsed JSON response.
        """
        credential_data = self.get_credentials(credential_name)
        credential_type = get_credential_type(credential_name)

        headers = {"Accept": "application/json"}
        if credential_type is not None:
            try:
                headers.update(build_auth_headers(credential_type, credential_data))
            except CredentialError as e:
                raise NodeOperationError(str(e), node_id=self.node_id) from e

        if path.startswith(("http://", "https://")):
            url = path
        else:
            url = f"{credential_data.get('base_url', '')}{path}"

        logger.debug(f"Node {self.node_id}: {method.upper()} {url}")
        try:
            return await HTTPRuntime.request_json(
                method, url, headers=headers, body=body, params=params, transport=self.transport
            )
        except NodeApiError as e:
            e.node_id = self.node_id
            raise
