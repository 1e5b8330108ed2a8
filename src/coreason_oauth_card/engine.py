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
Flow engine: maps a request and the broker's answers to a card response.
"""

import uuid
from typing import assert_never

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from coreason_oauth_card.broker import OAuthBroker
from coreason_oauth_card.cards import (
    auth_context,
    auth_header,
    connected_card,
    disconnected_card,
    sign_in_card,
)
from coreason_oauth_card.exceptions import BrokerError, InvalidInputError, OAuthCardError
from coreason_oauth_card.models import (
    MessageCard,
    OAuthCardInput,
    OAuthCardMode,
    OAuthCardOutput,
    OAuthStatus,
    TokenSet,
)
from coreason_oauth_card.utils.logger import logger

tracer = trace.get_tracer(__name__)

CALLBACK_PATH_TEMPLATE = "/oauth/callback/{provider_id}"


def handle(broker: OAuthBroker, request: OAuthCardInput) -> OAuthCardOutput:
    """
    Runs one request through the flow for its mode.

    Emits an OpenTelemetry span `oauth_card.handle` tagged with the mode, provider
    and resulting status.

    Args:
        broker: The token broker capability.
        request: The decoded request.

    Returns:
        OAuthCardOutput: The response for the caller.

    Raises:
        InvalidInputError: If complete-sign-in is requested without an auth code.
        OAuthCardError: Any failure from the broker's get_token or exchange_code.
        BrokerError: If the flow raises something other than an OAuthCardError.
    """
    with tracer.start_as_current_span("oauth_card.handle") as span:
        span.set_attribute("oauth_card.mode", request.mode.value)
        span.set_attribute("oauth_card.provider", request.provider_id)
        try:
            output = _dispatch(broker, request)
        except OAuthCardError as e:
            logger.warning(f"{request.mode} flow for provider {request.provider_id} failed: {e.describe()}")
            span.record_exception(e)
            span.set_status(Status(StatusCode.ERROR, str(e)))
            raise
        except Exception as e:
            logger.exception(f"Unexpected error during {request.mode} flow")
            span.record_exception(e)
            span.set_status(Status(StatusCode.ERROR, str(e)))
            raise BrokerError(f"Unexpected error during {request.mode} flow: {e}") from e

        span.set_attribute("oauth_card.status", output.status.value)
        span.set_status(Status(StatusCode.OK))
        logger.info(f"{request.mode} flow for provider {request.provider_id} -> {output.status}")
        return output


def _dispatch(broker: OAuthBroker, request: OAuthCardInput) -> OAuthCardOutput:
    mode = request.mode
    if mode is OAuthCardMode.STATUS_CARD:
        return status_card(broker, request)
    if mode is OAuthCardMode.START_SIGN_IN:
        return start_sign_in(broker, request)
    if mode is OAuthCardMode.COMPLETE_SIGN_IN:
        return complete_sign_in(broker, request)
    if mode is OAuthCardMode.ENSURE_TOKEN:
        return ensure_token(broker, request)
    if mode is OAuthCardMode.DISCONNECT:
        return disconnect(request)
    assert_never(mode)


def status_card(broker: OAuthBroker, request: OAuthCardInput) -> OAuthCardOutput:
    token = broker.get_token(request.provider_id, request.subject, request.scopes)
    if token is not None:
        return _connected(request, token, connected_card(request, token))

    # The generated state id lives only in the card's Continue action.
    return OAuthCardOutput(
        status=OAuthStatus.NEEDS_SIGN_IN,
        card=sign_in_card(request, new_state_id(), ""),
    )


def start_sign_in(broker: OAuthBroker, request: OAuthCardInput) -> OAuthCardOutput:
    card, state_id = _prepare_sign_in(broker, request)
    return OAuthCardOutput(status=OAuthStatus.OK, card=card, state_id=state_id)


def complete_sign_in(broker: OAuthBroker, request: OAuthCardInput) -> OAuthCardOutput:
    if request.auth_code is None:
        raise InvalidInputError("auth_code is required to complete sign-in")

    token = broker.exchange_code(
        request.provider_id,
        request.subject,
        request.auth_code,
        redirect_path(request),
    )
    return _connected(request, token, connected_card(request, token))


def ensure_token(broker: OAuthBroker, request: OAuthCardInput) -> OAuthCardOutput:
    token = broker.get_token(request.provider_id, request.subject, request.scopes)
    if token is not None:
        return _connected(request, token, card=None)

    if not request.allow_auto_sign_in:
        return OAuthCardOutput(status=OAuthStatus.NEEDS_SIGN_IN)

    card, state_id = _prepare_sign_in(broker, request)
    return OAuthCardOutput(status=OAuthStatus.NEEDS_SIGN_IN, card=card, state_id=state_id)


def disconnect(request: OAuthCardInput) -> OAuthCardOutput:
    return OAuthCardOutput(status=OAuthStatus.OK, card=disconnected_card(request))


def new_state_id() -> str:
    return str(uuid.uuid4())


def redirect_path(request: OAuthCardInput) -> str:
    if request.redirect_path is not None:
        return request.redirect_path
    return CALLBACK_PATH_TEMPLATE.format(provider_id=request.provider_id)


def _prepare_sign_in(broker: OAuthBroker, request: OAuthCardInput) -> tuple[MessageCard, str]:
    """
    Resolves the correlation state and consent URL, and builds the sign-in card.

    A failing consent URL lookup is not fatal: the card still carries the
    Continue post-back, so the URL falls back to empty.
    """
    state_id = request.state_id if request.state_id is not None else new_state_id()
    try:
        url = broker.get_consent_url(
            request.provider_id,
            request.subject,
            request.scopes,
            redirect_path(request),
            request.extra_json,
        )
    except Exception as e:
        logger.warning(f"Consent URL lookup for provider {request.provider_id} failed, continuing without it: {e}")
        url = ""
    return sign_in_card(request, state_id, url or ""), state_id


def _connected(request: OAuthCardInput, token: TokenSet, card: MessageCard | None) -> OAuthCardOutput:
    return OAuthCardOutput(
        status=OAuthStatus.OK,
        card=card,
        auth_context=auth_context(request, token),
        auth_header=auth_header(token),
    )
