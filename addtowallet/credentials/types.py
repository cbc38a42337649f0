"""
Credential type definitions.

A credential type declares the fields a user fills in, how those fields are
injected into outgoing requests and which request proves they work.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from addtowallet.config import DEFAULT_BASE_URL


class CredentialProperty(BaseModel):
    name: str
    label: str
    type: str = "string"
    default: Any = ""
    description: Optional[str] = None
    password: bool = False
    required: bool = False


class CredentialAuthenticate(BaseModel):
    """Header templates rendered with `credentials` in scope."""
    headers: Dict[str, str] = Field(default_factory=dict)


class CredentialTestRequest(BaseModel):
    method: str = "GET"
    url: str


class CredentialType(BaseModel):
    name: str
    display_name: str
    documentation_url: Optional[str] = None
    properties: List[CredentialProperty]
    authenticate: CredentialAuthenticate = Field(default_factory=CredentialAuthenticate)
    test: Optional[CredentialTestRequest] = None

    def defaults(self) -> Dict[str, Any]:
        return {p.name: p.default for p in self.properties}


ADD_TO_WALLET_API = CredentialType(
    name="addtowallet_api",
    display_name="AddToWallet API",
    documentation_url="https://app.addtowallet.co/api-docs",
    properties=[
        CredentialProperty(
            name="base_url",
            label="Base URL",
            default=DEFAULT_BASE_URL,
            description="Base URL for the AddToWallet API",
        ),
        CredentialProperty(
            name="api_key",
            label="API Key",
            password=True,
            required=True,
            description="Your AddToWallet API key",
        ),
    ],
    authenticate=CredentialAuthenticate(headers={"apikey": "{{ credentials.api_key }}"}),
    test=CredentialTestRequest(method="GET", url="/api/getCredits"),
)


CREDENTIAL_TYPES: Dict[str, CredentialType] = {
    ADD_TO_WALLET_API.name: ADD_TO_WALLET_API,
}


def get_credential_type(name: str) -> Optional[CredentialType]:
    return CREDENTIAL_TYPES.get(name)
