from typing import Any, Optional


class EngineError(Exception):
    """Base class for all engine errors."""
    pass


class UnknownNodeTypeError(EngineError):
    """Raised when a node type is not registered."""
    pass


class CredentialError(EngineError):
    """Raised when a credential is missing or incomplete."""
    pass


class NodeOperationError(EngineError):
    """
    Generic failure of a node operation.

    This is the only error family a node surfaces to the engine. With
    continue-on-fail enabled its message becomes the item's error record.
    """

    def __init__(self, message: str, node_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.node_id = node_id


class NodeApiError(NodeOperationError):
    """Raised when a call to a remote API fails."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Any = None,
        node_id: Optional[str] = None,
    ):
        super().__init__(message, node_id=node_id)
        self.status_code = status_code
        self.response_body = response_body
