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
Card and auth artifact builders shared by every flow.
"""

from collections.abc import Mapping
from typing import Any

from coreason_oauth_card.models import (
    Action,
    AuthContext,
    AuthHeader,
    MessageCard,
    MessageCardKind,
    OAuthCardInput,
    OAuthCardMode,
    OauthCard,
    OauthPrompt,
    OauthProvider,
    OpenUrlAction,
    PostBackAction,
    PostBackData,
    TokenSet,
)

AUTHORIZATION_HEADER = "Authorization"
DEFAULT_TOKEN_TYPE = "Bearer"


def _team_suffix(request: OAuthCardInput) -> str:
    return f" (team {request.team})" if request.team else ""


def post_back(title: str, mode: OAuthCardMode, request: OAuthCardInput, state_id: str | None = None) -> PostBackAction:
    """Builds a post-back action that resubmits `request` in `mode`."""
    return PostBackAction(
        title=title,
        data=PostBackData(
            mode=mode,
            provider_id=request.provider_id,
            subject=request.subject,
            state_id=state_id,
            scopes=list(request.scopes),
        ),
    )


def _oauth_card(
    request: OAuthCardInput,
    metadata: dict[str, Any],
    prompt: OauthPrompt | None = None,
    start_url: str | None = None,
) -> OauthCard:
    return OauthCard(
        provider=OauthProvider.from_provider_id(request.provider_id),
        scopes=list(request.scopes),
        prompt=prompt,
        start_url=start_url,
        metadata={**metadata, "provider_id": request.provider_id, "subject": request.subject},
    )


def sign_in_card(request: OAuthCardInput, state_id: str, url: str) -> MessageCard:
    """
    Builds the "Connect account" card.

    The Connect link is only offered when the broker produced a consent URL; the
    Continue post-back is always present and carries the correlation `state_id`.
    """
    actions: list[Action] = []
    if url:
        actions.append(OpenUrlAction(title="Connect", url=url))
    actions.append(post_back("Continue", OAuthCardMode.COMPLETE_SIGN_IN, request, state_id))

    return MessageCard(
        kind=MessageCardKind.OAUTH,
        title=f"Connect {request.provider_id} account",
        text=f"Click Connect to sign in as {request.subject}{_team_suffix(request)}.",
        actions=actions,
        oauth=_oauth_card(
            request,
            {"state_id": state_id},
            prompt=OauthPrompt.CONSENT,
            start_url=url or None,
        ),
    )


def connected_card(request: OAuthCardInput, token: TokenSet, headline: str = "Connected") -> MessageCard:
    """Builds the card shown once the subject holds a valid token."""
    metadata: dict[str, Any] = {}
    if token.expires_at is not None:
        metadata["expires_at"] = token.expires_at

    return MessageCard(
        kind=MessageCardKind.OAUTH,
        title=f"{headline}: {request.provider_id}",
        text=f"Signed in as {request.subject}{_team_suffix(request)}.",
        actions=[
            post_back("Refresh token", OAuthCardMode.ENSURE_TOKEN, request),
            post_back("Use different account", OAuthCardMode.START_SIGN_IN, request),
            post_back("Disconnect", OAuthCardMode.DISCONNECT, request),
        ],
        oauth=_oauth_card(request, metadata),
    )


def disconnected_card(request: OAuthCardInput) -> MessageCard:
    return MessageCard(
        kind=MessageCardKind.OAUTH,
        title=f"Disconnected from {request.provider_id}",
        text="You can reconnect this account at any time.",
        actions=[post_back("Reconnect", OAuthCardMode.START_SIGN_IN, request)],
        oauth=_oauth_card(request, {}),
    )


def token_email(token: TokenSet) -> str | None:
    """Reads `email` from the opaque token payload, if it is a string."""
    if isinstance(token.extra, Mapping):
        email = token.extra.get("email")
        if isinstance(email, str):
            return email
    return None


def auth_context(request: OAuthCardInput, token: TokenSet) -> AuthContext:
    return AuthContext(
        provider_id=request.provider_id,
        subject=request.subject,
        email=token_email(token),
        tenant=request.tenant,
        team=request.team,
        scopes=list(request.scopes),
        expires_at=token.expires_at,
    )


def auth_header(token: TokenSet) -> AuthHeader:
    prefix = token.token_type or DEFAULT_TOKEN_TYPE
    return AuthHeader(headers=[(AUTHORIZATION_HEADER, f"{prefix} {token.access_token}")])
