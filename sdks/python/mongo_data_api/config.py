"""Credential shapes and client configuration.

The Data API accepts exactly one of three credential styles, each sent as
static request headers:

    ApiKeyAuth("...")                   -> api-key
    JwtAuth("...")                      -> jwtTokenString
    EmailPasswordAuth("me@x.io", "pw")  -> email, password

Plain mappings using the wire-style keys (``{"apiKey": ...}``,
``{"jwtTokenString": ...}``, ``{"email": ..., "password": ...}``) are
accepted too and resolved in that order.
"""

from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

from .errors import InvalidAuthOptionsError

JSON_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class ApiKeyAuth:
    api_key: str

    def headers(self) -> Dict[str, str]:
        return {"api-key": self.api_key}


@dataclass(frozen=True)
class JwtAuth:
    jwt_token_string: str

    def headers(self) -> Dict[str, str]:
        return {"jwtTokenString": self.jwt_token_string}


@dataclass(frozen=True)
class EmailPasswordAuth:
    email: str
    password: str

    def headers(self) -> Dict[str, str]:
        return {"email": self.email, "password": self.password}

    def __repr__(self) -> str:
        return f"EmailPasswordAuth(email={self.email!r}, password='***')"


AuthOptions = Union[ApiKeyAuth, JwtAuth, EmailPasswordAuth]


def _checked(auth: AuthOptions) -> AuthOptions:
    # requests silently drops headers whose value is None
    for f in fields(auth):
        value = getattr(auth, f.name)
        if not isinstance(value, str) or not value:
            raise InvalidAuthOptionsError(
                f"Invalid auth options: {f.name} must be a non-empty string"
            )
    return auth


def resolve_auth(auth: Union[AuthOptions, Mapping[str, Any]]) -> AuthOptions:
    """Turn user-supplied credentials into one of the auth variants.

    Raises:
        InvalidAuthOptionsError: if ``auth`` matches none of the shapes, or a
            credential value is not a non-empty string.
    """
    if isinstance(auth, (ApiKeyAuth, JwtAuth, EmailPasswordAuth)):
        return _checked(auth)
    if not isinstance(auth, Mapping):
        raise InvalidAuthOptionsError(
            f"Invalid auth options: expected a mapping or auth object, got {type(auth).__name__}"
        )

    if "apiKey" in auth:
        return _checked(ApiKeyAuth(auth["apiKey"]))
    if "jwtTokenString" in auth:
        return _checked(JwtAuth(auth["jwtTokenString"]))
    if "email" in auth and "password" in auth:
        return _checked(EmailPasswordAuth(auth["email"], auth["password"]))

    raise InvalidAuthOptionsError()


def build_headers(auth: Union[AuthOptions, Mapping[str, Any]]) -> Dict[str, str]:
    """Build the full static header set for a credential."""
    # resolve before touching anything so a bad credential leaves no headers
    resolved = resolve_auth(auth)
    headers = {
        "Content-Type": JSON_CONTENT_TYPE,
        "Accept": JSON_CONTENT_TYPE,
    }
    headers.update(resolved.headers())
    return headers


@dataclass(frozen=True)
class ClientConfig:
    endpoint: str
    data_source: str
    headers: Mapping[str, str] = field(default_factory=dict, repr=False)
    timeout: Optional[float] = None  # passed straight to the HTTP session

    def __post_init__(self):
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    def action_url(self, operation: str) -> str:
        return f"{self.endpoint}/action/{operation}"
