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
OAuthCardComponent: the text-in, text-out boundary of the OAuth card.
"""

from typing import Any

import httpx
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from pydantic import ValidationError

from coreason_oauth_card import engine
from coreason_oauth_card.broker import OAuthBroker, default_broker
from coreason_oauth_card.config import OAuthCardConfig
from coreason_oauth_card.decoder import decode_request, encode_response
from coreason_oauth_card.exceptions import InvalidInputError, OAuthCardError
from coreason_oauth_card.models import OAuthCardInput, OAuthCardOutput
from coreason_oauth_card.utils.logger import logger


def handle_message(raw: str, broker: OAuthBroker | None = None, operation: str = "invoke") -> str:
    """
    Decodes a request, runs it and encodes the response.

    Never raises: an invalid environment configuration and every `OAuthCardError`
    are returned as error responses.

    Args:
        raw: The JSON encoded request.
        broker: The broker to use. Defaults to a component configured from the environment.
        operation: The host operation name. All operations share one handler.

    Returns:
        str: The JSON encoded response.
    """
    if broker is None:
        try:
            component = OAuthCardComponent(OAuthCardConfig())
        except ValidationError as e:
            logger.error(f"Invalid broker configuration: {e}")
            error = InvalidInputError(f"broker configuration: {e}")
            return encode_response(OAuthCardOutput.failure(error.describe()))
        with component:
            return component.handle_message(raw, operation=operation)

    logger.debug(f"Handling '{operation}' message")
    try:
        output = engine.handle(broker, decode_request(raw))
    except OAuthCardError as e:
        output = OAuthCardOutput.failure(e.describe())
    return encode_response(output)


class OAuthCardComponent:
    """
    Holds the broker for the lifetime of a host process.
    Handles the HTTP client via context manager when it creates one.
    """

    def __init__(
        self,
        config: OAuthCardConfig,
        broker: OAuthBroker | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        """
        Initialize the OAuthCardComponent.

        Args:
            config: The configuration object.
            broker: Explicit broker (optional). Overrides the one selected from `config`.
            client: External HTTP client for the HTTP broker (optional). If not provided
                and a broker URL is configured, one is created and owned by the component.
        """
        self.config = config
        self._client: httpx.Client | None = None

        if broker is None and config.broker_url:
            self._internal_client = client is None
            self._client = client or httpx.Client(timeout=config.http_timeout)
            HTTPXClientInstrumentor().instrument_client(self._client)
            broker = default_broker(config, self._client)
        else:
            self._internal_client = False

        self.broker: OAuthBroker = broker if broker is not None else default_broker(config)

    def __enter__(self) -> "OAuthCardComponent":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._internal_client and self._client is not None:
            self._client.close()

    def handle(self, request: OAuthCardInput) -> OAuthCardOutput:
        """
        Runs a decoded request.

        Raises:
            OAuthCardError: As raised by the flow engine.
        """
        return engine.handle(self.broker, request)

    def handle_message(self, raw: str, operation: str = "invoke") -> str:
        """Text boundary using this component's broker. See `handle_message`."""
        return handle_message(raw, broker=self.broker, operation=operation)
