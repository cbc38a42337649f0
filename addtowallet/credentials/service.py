"""
Credential service functions for resolving and testing credentials.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from addtowallet.credentials.types import CredentialType
from addtowallet.workflows.engine.errors import CredentialError, NodeApiError
from addtowallet.workflows.engine.expressions.resolver import ExpressionResolver
from addtowallet.workflows.engine.runtime.http import HTTPRuntime

logger = logging.getLogger(__name__)


def resolve_credential(credential_type: CredentialType, data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Merge stored credential data over the type's defaults.

    Raises:
        CredentialError: if a required field is empty
    """
    result = credential_type.defaults()
    for key, value in (data or {}).items():
        # Empty values keep the default (e.g. a blank base URL)
        if value not in (None, ""):
            result[key] = value

    for prop in credential_type.properties:
        if prop.required and not result.get(prop.name):
            raise CredentialError(
                f"Credential '{credential_type.display_name}' is missing '{prop.label}'"
            )

    if isinstance(result.get("base_url"), str):
        result["base_url"] = result["base_url"].rstrip("/")

    return result


def build_auth_headers(credential_type: CredentialType, data: Dict[str, Any]) -> Dict[str, str]:
    """Render the credential type's header templates."""
    resolver = ExpressionResolver({"credentials": data}, strict=True)
    try:
        return {
            name: str(resolver.resolve(template))
            for name, template in credential_type.authenticate.headers.items()
        }
    except Exception as e:
        raise CredentialError(f"Failed to build auth headers for {credential_type.name}: {e}") from e


async def check_credential(
    credential_type: CredentialType,
    data: Optional[Dict[str, Any]],
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dict[str, str]:
    """
    Run the credential type's test request.

    Returns:
        Dict with 'status' ("OK" or "Error") and 'message'
    """
    if not credential_type.test:
        return {"status": "OK", "message": "No test request defined"}

    try:
        resolved = resolve_credential(credential_type, data)
        headers = build_auth_headers(credential_type, resolved)
        url = f"{resolved.get('base_url', '')}{credential_type.test.url}"
        await HTTPRuntime.request_json(
            credential_type.test.method, url, headers=headers, transport=transport
        )
    except (CredentialError, NodeApiError) as e:
        logger.warning(f"Credential test for {credential_type.name} failed: {e}")
        return {"status": "Error", "message": str(e)}

    logger.info(f"Credential test for {credential_type.name} succeeded")
    return {"status": "OK", "message": "Connection successful"}
