"""
Credentials Module

Credential type definitions and helpers that turn stored credential data
into request headers for workflow nodes.
"""

from .service import build_auth_headers, resolve_credential, check_credential
from .types import ADD_TO_WALLET_API, CredentialType, get_credential_type

__all__ = [
    'ADD_TO_WALLET_API',
    'CredentialType',
    'build_auth_headers',
    'get_credential_type',
    'resolve_credential',
    'check_credential',
]
