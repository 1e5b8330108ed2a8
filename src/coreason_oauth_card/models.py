# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_oauth_card

"""
Data models for the coreason-oauth-card package.

Every model is frozen: requests, cards and responses are built fresh per call
and never mutated once constructed.
"""

from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class OAuthCardMode(StrEnum):
    STATUS_CARD = "status-card"
    START_SIGN_IN = "start-sign-in"
    COMPLETE_SIGN_IN = "complete-sign-in"
    ENSURE_TOKEN = "ensure-token"
    DISCONNECT = "disconnect"


class OAuthStatus(StrEnum):
    OK = "ok"
    NEEDS_SIGN_IN = "needs-sign-in"
    ERROR = "error"


class MessageCardKind(StrEnum):
    STANDARD = "standard"
    OAUTH = "oauth"


class OauthPrompt(StrEnum):
    NONE = "none"
    CONSENT = "consent"
    LOGIN = "login"


class OauthProvider(StrEnum):
    MICROSOFT = "microsoft"
    GOOGLE = "google"
    GITHUB = "github"
    CUSTOM = "custom"

    @classmethod
    def from_provider_id(cls, provider_id: str) -> "OauthProvider":
        """
        Derives the well-known provider from a free-form provider id.

        Matching is case-insensitive; unknown ids map to CUSTOM.
        """
        return _PROVIDER_ALIASES.get(provider_id.lower(), cls.CUSTOM)


_PROVIDER_ALIASES: dict[str, OauthProvider] = {
    "microsoft": OauthProvider.MICROSOFT,
    "msgraph": OauthProvider.MICROSOFT,
    "m365": OauthProvider.MICROSOFT,
    "google": OauthProvider.GOOGLE,
    "github": OauthProvider.GITHUB,
}


class OAuthCardInput(BaseModel):
    """
    A request to the OAuth card component.

    Unknown fields are ignored so that newer hosts can send additional keys.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        json_schema_extra={
            "example": {
                "mode": "status-card",
                "provider_id": "msgraph",
                "subject": "user-1",
                "scopes": ["openid"],
            }
        },
    )

    mode: OAuthCardMode = Field(..., description="The operation to perform.")
    provider_id: str = Field(..., min_length=1, description="Broker provider id (e.g. 'msgraph').")
    subject: str = Field(..., min_length=1, description="Logical subject (user or service) this card operates on.")
    tenant: str | None = Field(default=None, description="Tenant context; echoed back, not enforced locally.")
    team: str | None = None
    scopes: list[str] = Field(default_factory=list)
    state_id: str | None = Field(default=None, description="Correlation handle used by sign-in flows.")
    auth_code: str | None = Field(default=None, description="Authorization code returned by the provider.")
    allow_auto_sign_in: bool = False
    redirect_path: str | None = Field(
        default=None, description="Redirect path; defaults to '/oauth/callback/{provider_id}'."
    )
    extra_json: Any = Field(default=None, description="Provider-specific options forwarded to the broker.")


class TokenSet(BaseModel):
    """
    A currently valid credential as returned by the broker.

    Attributes:
        access_token (str): The access token.
        refresh_token (str | None): The refresh token, if the broker exposes it.
        expires_at (int | None): Expiry as a unix timestamp.
        token_type (str | None): The token type (e.g. "Bearer").
        extra (Any): Opaque provider payload. Only "email" is ever read from it.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    access_token: str
    refresh_token: str | None = None
    expires_at: int | None = Field(default=None, ge=0)
    token_type: str | None = None
    extra: Any = None


class ImageRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    alt: str | None = None


class PostBackData(BaseModel):
    """Payload of a post-back action, sufficient to resubmit a follow-up request."""

    model_config = ConfigDict(frozen=True)

    mode: OAuthCardMode
    provider_id: str
    subject: str
    state_id: str | None = None
    scopes: list[str] = Field(default_factory=list)


class OpenUrlAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["open_url"] = "open_url"
    title: str
    url: str


class PostBackAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["post_back"] = "post_back"
    title: str
    data: PostBackData


Action = Annotated[OpenUrlAction | PostBackAction, Field(discriminator="type")]


class OauthCard(BaseModel):
    """Provider metadata attached to an OAuth card."""

    model_config = ConfigDict(frozen=True)

    provider: OauthProvider
    scopes: list[str] = Field(default_factory=list)
    resource: str | None = None
    prompt: OauthPrompt | None = None
    start_url: str | None = None
    connection_name: str | None = None
    metadata: dict[str, Any] | None = None


class MessageCard(BaseModel):
    """A renderable card: message, buttons and optional OAuth metadata."""

    model_config = ConfigDict(frozen=True)

    kind: MessageCardKind = MessageCardKind.STANDARD
    title: str | None = None
    text: str | None = None
    footer: str | None = None
    images: list[ImageRef] = Field(default_factory=list)
    actions: list[Action] = Field(default_factory=list)
    allow_markdown: bool = True
    adaptive: Any = None
    oauth: OauthCard | None = None


class AuthContext(BaseModel):
    """Identity echo for callers that need the subject without the raw header."""

    model_config = ConfigDict(frozen=True)

    provider_id: str
    subject: str
    email: str | None = None
    tenant: str | None = None
    team: str | None = None
    scopes: list[str] = Field(default_factory=list)
    expires_at: int | None = None


class AuthHeader(BaseModel):
    model_config = ConfigDict(frozen=True)

    headers: list[tuple[str, str]] = Field(default_factory=list)

    def get(self, name: str) -> str | None:
        """Returns the first header value matching `name` (case-insensitive)."""
        wanted = name.lower()
        for key, value in self.headers:
            if key.lower() == wanted:
                return value
        return None


class OAuthCardOutput(BaseModel):
    """
    The response of the OAuth card component.

    An error response carries only the error message; a non-error response
    never carries one.
    """

    model_config = ConfigDict(frozen=True)

    status: OAuthStatus = OAuthStatus.OK
    card: MessageCard | None = None
    auth_context: AuthContext | None = None
    auth_header: AuthHeader | None = None
    state_id: str | None = None
    error: str | None = None

    @model_validator(mode="after")
    def check_error_shape(self) -> "OAuthCardOutput":
        if self.status == OAuthStatus.ERROR:
            if self.error is None:
                raise ValueError("error responses must carry an error message")
            populated = [
                name
                for name in ("card", "auth_context", "auth_header", "state_id")
                if getattr(self, name) is not None
            ]
            if populated:
                raise ValueError(f"error responses must not carry {', '.join(populated)}")
        elif self.error is not None:
            raise ValueError(f"'{self.status}' responses must not carry an error message")
        return self

    @classmethod
    def failure(cls, message: str) -> "OAuthCardOutput":
        return cls(status=OAuthStatus.ERROR, error=message)
