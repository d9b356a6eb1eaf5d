"""Security scheme descriptors.

Each scheme renders an OpenAPI ``securitySchemes`` entry and can check the
credentials carried by a request's headers and query parameters. Token
verification itself (signatures, introspection, user lookup) belongs to the
server adapter.
"""

import base64
import binascii
import re
from collections.abc import Mapping
from http.cookies import CookieError, SimpleCookie
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict

AUTH_TYPES = ("bearer", "api_key", "basic", "oauth2")

BEARER_HEADER = re.compile(r"\ABearer\s+(.*)\Z", re.IGNORECASE | re.DOTALL)
BASIC_HEADER = re.compile(r"\ABasic\s*(.*)\Z", re.IGNORECASE | re.DOTALL)


class CredentialCheck(BaseModel):
    """Result of looking for credentials in a request."""

    valid: bool
    error: str | None = None
    token: str | None = None
    api_key: str | None = None
    username: str | None = None
    password: str | None = None


def find_header(headers: Mapping[str, str], name: str) -> str | None:
    """Case-insensitive header lookup."""
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def _humanize(scope: str) -> str:
    return re.sub(r"[_:.\-]+", " ", scope).strip().capitalize()


class Security(BaseModel):
    """Base class for authentication schemes attached to an endpoint."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    auth_type: ClassVar[str] = ""
    base_name: ClassVar[str] = "auth"

    description: str | None = None

    def to_openapi_scheme(self) -> dict[str, Any]:
        raise NotImplementedError

    def requirement_scopes(self, endpoint_scopes: tuple[str, ...] = ()) -> list[str]:
        """Scopes listed in the operation's security requirement."""
        return []

    def authenticate(
        self, headers: Mapping[str, str], query: Mapping[str, str] | None = None
    ) -> CredentialCheck:
        raise NotImplementedError

    def _with_description(self, spec: dict[str, Any]) -> dict[str, Any]:
        if self.description:
            spec["description"] = self.description
        return spec


def _bearer_token(headers: Mapping[str, str]) -> CredentialCheck:
    header = find_header(headers, "Authorization")
    if header is None:
        return CredentialCheck(valid=False, error="missing Authorization header")
    match = BEARER_HEADER.match(header.lstrip())
    if not match:
        return CredentialCheck(valid=False, error="invalid Authorization header format")
    token = match.group(1).strip()
    if not token:
        return CredentialCheck(valid=False, error="empty token")
    return CredentialCheck(valid=True, token=token)


class BearerAuth(Security):
    auth_type: ClassVar[str] = "bearer"
    base_name: ClassVar[str] = "bearerAuth"

    bearer_format: str | None = None

    def to_openapi_scheme(self) -> dict[str, Any]:
        spec: dict[str, Any] = {"type": "http", "scheme": "bearer"}
        if self.bearer_format:
            spec["bearerFormat"] = self.bearer_format
        return self._with_description(spec)

    def authenticate(self, headers, query=None) -> CredentialCheck:
        return _bearer_token(headers)


class BasicAuth(Security):
    auth_type: ClassVar[str] = "basic"
    base_name: ClassVar[str] = "basicAuth"

    def to_openapi_scheme(self) -> dict[str, Any]:
        return self._with_description({"type": "http", "scheme": "basic"})

    def authenticate(self, headers, query=None) -> CredentialCheck:
        header = find_header(headers, "Authorization")
        if header is None:
            return CredentialCheck(valid=False, error="missing Authorization header")
        match = BASIC_HEADER.match(header.strip())
        if not match:
            return CredentialCheck(valid=False, error="invalid Authorization header format")
        encoded = match.group(1).strip()
        if not encoded:
            return CredentialCheck(valid=False, error="empty credentials")
        try:
            decoded = base64.b64decode(encoded, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            return CredentialCheck(valid=False, error=f"invalid credentials encoding: {exc}")
        username, separator, password = decoded.partition(":")
        if not separator:
            return CredentialCheck(valid=False, error="credentials must be 'username:password'")
        return CredentialCheck(valid=True, username=username, password=password)


class ApiKeyAuth(Security):
    auth_type: ClassVar[str] = "api_key"
    base_name: ClassVar[str] = "apiKeyAuth"

    name: str = "X-API-Key"
    location: Literal["header", "query", "cookie"] = "header"

    def to_openapi_scheme(self) -> dict[str, Any]:
        return self._with_description({"type": "apiKey", "name": self.name, "in": self.location})

    def authenticate(self, headers, query=None) -> CredentialCheck:
        if self.location == "query":
            value = (query or {}).get(self.name)
        elif self.location == "cookie":
            value = self._cookie_value(headers)
        else:
            value = find_header(headers, self.name)

        if value is None:
            return CredentialCheck(valid=False, error=f"missing API key: {self.name}")
        if not value.strip():
            return CredentialCheck(valid=False, error="empty API key")
        return CredentialCheck(valid=True, api_key=value.strip())

    def _cookie_value(self, headers: Mapping[str, str]) -> str | None:
        raw = find_header(headers, "Cookie")
        if not raw:
            return None
        cookie = SimpleCookie()
        try:
            cookie.load(raw)
        except CookieError:
            return None
        morsel = cookie.get(self.name)
        return morsel.value if morsel else None


OAuth2Flow = Literal["implicit", "password", "clientCredentials", "authorizationCode"]


class OAuth2Auth(Security):
    auth_type: ClassVar[str] = "oauth2"
    base_name: ClassVar[str] = "oauth2Auth"

    scopes: tuple[str, ...] = ()
    scope_descriptions: dict[str, str] = {}
    flow: OAuth2Flow = "implicit"
    authorization_url: str = "https://example.com/oauth/authorize"
    token_url: str = "https://example.com/oauth/token"
    refresh_url: str | None = None

    def to_openapi_scheme(self) -> dict[str, Any]:
        flow: dict[str, Any] = {}
        if self.flow in ("implicit", "authorizationCode"):
            flow["authorizationUrl"] = self.authorization_url
        if self.flow in ("password", "clientCredentials", "authorizationCode"):
            flow["tokenUrl"] = self.token_url
        if self.refresh_url:
            flow["refreshUrl"] = self.refresh_url
        flow["scopes"] = {
            scope: self.scope_descriptions.get(scope, _humanize(scope)) for scope in self.scopes
        }
        return self._with_description({"type": "oauth2", "flows": {self.flow: flow}})

    def requirement_scopes(self, endpoint_scopes: tuple[str, ...] = ()) -> list[str]:
        return list(dict.fromkeys([*self.scopes, *endpoint_scopes]))

    def authenticate(self, headers, query=None) -> CredentialCheck:
        return _bearer_token(headers)
