import logging
import re

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

from addtowallet.utils.execution_id import get_execution_id

custom_theme = Theme(
    {
        "info": "dim cyan",
        "warning": "magenta",
        "error": "bold red",
        "node": "bold blue",
        "engine": "bold green",
    }
)

console = Console(theme=custom_theme)

LOGGER_NAME = "addtowallet"


class CompactFilter(logging.Filter):
    """Shortens UUIDs, hides API keys and tags lines with the execution ID."""

    UUID_PATTERN = re.compile(
        r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.I
    )
    # apikey=..., 'apikey': '...', "apikey": "..."
    APIKEY_PATTERN = re.compile(
        r"""(apikey['"]?\s*[:=]\s*['"]?)([^'",\s}]+)""", re.I
    )

    def filter(self, record):
        if not isinstance(record.msg, str):
            return True

        msg = record.msg.replace("addtowallet.workflows.engine.", "engine.")
        msg = self.APIKEY_PATTERN.sub(lambda m: f"{m.group(1)}***", msg)

        execution_id = get_execution_id()
        if execution_id:
            msg = f"[{execution_id[:8]}] {msg}"

        msg = self.UUID_PATTERN.sub(lambda m: f"{m.group(0)[:4]}..", msg)

        record.msg = msg
        return True


def setup_logger(log_level: str = "INFO") -> logging.Logger:
    """
    Configures the package logger using Rich for readable output.
    """
    logger = logging.getLogger(LOGGER_NAME)

    level = getattr(logging, log_level.upper(), logging.INFO)
    logger.setLevel(level)

    # Avoid duplicate handlers
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        rich_handler = RichHandler(
            console=console,
            rich_tracebacks=True,
            markup=False,
            show_path=False,
            show_time=True,
            omit_repeated_times=True,
            keywords=["node", "engine", "pass", "credential"],
        )
        rich_handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        rich_handler.addFilter(CompactFilter())
        logger.addHandler(rich_handler)

    return logger


logger = logging.getLogger(LOGGER_NAME)
