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
Token broker capability and its implementations.

The flow engine depends only on the `OAuthBroker` protocol. The concrete
broker is chosen once at startup by `default_broker`.
"""

from typing import Any, Protocol

import httpx
from pydantic import ValidationError

from coreason_oauth_card.config import OAuthCardConfig
from coreason_oauth_card.exceptions import BrokerError, ParseError, UnsupportedError
from coreason_oauth_card.models import TokenSet
from coreason_oauth_card.utils.logger import logger


class OAuthBroker(Protocol):
    """Protocol for the external token broker that owns token storage and code exchange."""

    def get_token(self, provider_id: str, subject: str, scopes: list[str]) -> TokenSet | None:
        """Returns the cached token for the subject, or None when there is none."""
        ...

    def get_consent_url(
        self,
        provider_id: str,
        subject: str,
        scopes: list[str],
        redirect_path: str,
        extra_json: Any = None,
    ) -> str:
        """Returns the provider consent URL the user should visit."""
        ...

    def exchange_code(self, provider_id: str, subject: str, code: str, redirect_path: str) -> TokenSet:
        """Exchanges an authorization code for a token."""
        ...


class NoopBroker:
    """
    Stand-in broker used when no broker service is configured.
    Never has a token and never produces a consent URL.
    """

    def get_token(self, provider_id: str, subject: str, scopes: list[str]) -> TokenSet | None:
        return None

    def get_consent_url(
        self,
        provider_id: str,
        subject: str,
        scopes: list[str],
        redirect_path: str,
        extra_json: Any = None,
    ) -> str:
        return ""

    def exchange_code(self, provider_id: str, subject: str, code: str, redirect_path: str) -> TokenSet:
        raise UnsupportedError("exchange_code unavailable on native test backend")


class MemoryBroker:
    """
    In-memory broker for tests and local development.

    Returns the same token and consent URL for every subject and records each call
    as a `(operation, args)` tuple in `calls`. Not suitable for real deployments.
    """

    def __init__(self, token: TokenSet | None = None, consent_url: str = "") -> None:
        self.token = token
        self.consent_url = consent_url
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def get_token(self, provider_id: str, subject: str, scopes: list[str]) -> TokenSet | None:
        self.calls.append(("get_token", (provider_id, subject, list(scopes))))
        return self.token

    def get_consent_url(
        self,
        provider_id: str,
        subject: str,
        scopes: list[str],
        redirect_path: str,
        extra_json: Any = None,
    ) -> str:
        self.calls.append(("get_consent_url", (provider_id, subject, list(scopes), redirect_path, extra_json)))
        return self.consent_url

    def exchange_code(self, provider_id: str, subject: str, code: str, redirect_path: str) -> TokenSet:
        self.calls.append(("exchange_code", (provider_id, subject, code, redirect_path)))
        if self.token is None:
            raise UnsupportedError("no token in mock")
        return self.token


class HttpBroker:
    """
    Broker delegating to a host token broker service over HTTP.

    Endpoints (all POST, JSON bodies, relative to `base_url`):
        /token        -> TokenSet JSON, or an empty body / 204 / 404 when no token is cached.
        /consent-url  -> {"url": "..."} or the URL as plain text.
        /exchange     -> TokenSet JSON.

    Attributes:
        base_url (str): The broker service base URL.
        client (httpx.Client): The HTTP client used for every call.
    """

    def __init__(self, base_url: str, client: httpx.Client) -> None:
        """
        Initialize the HttpBroker.

        Args:
            base_url: The broker service base URL (e.g., https://broker.internal/v1).
            client: The HTTP client to use. The caller owns its lifecycle.
        """
        self.base_url = base_url.rstrip("/")
        self.client = client

    def _post(self, path: str, payload: dict[str, Any]) -> httpx.Response:
        url = f"{self.base_url}/{path}"
        try:
            return self.client.post(url, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Broker request to {path} failed: {e}")
            raise BrokerError(f"Broker request to {path} failed: {e}") from e

    @staticmethod
    def _raise_for_status(response: httpx.Response, operation: str) -> None:
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Broker {operation} failed with status {response.status_code}")
            raise BrokerError(f"Broker {operation} failed with status {response.status_code}") from e

    @staticmethod
    def _parse_token(body: str, label: str) -> TokenSet:
        try:
            return TokenSet.model_validate_json(body)
        except ValidationError as e:
            raise ParseError(f"{label}: {e}") from e

    def get_token(self, provider_id: str, subject: str, scopes: list[str]) -> TokenSet | None:
        response = self._post(
            "token",
            {"provider_id": provider_id, "subject": subject, "scopes": scopes},
        )
        if response.status_code in (httpx.codes.NO_CONTENT, httpx.codes.NOT_FOUND):
            return None
        self._raise_for_status(response, "get_token")

        body = response.text.strip()
        if not body:
            return None
        return self._parse_token(body, "token json")

    def get_consent_url(
        self,
        provider_id: str,
        subject: str,
        scopes: list[str],
        redirect_path: str,
        extra_json: Any = None,
    ) -> str:
        response = self._post(
            "consent-url",
            {
                "provider_id": provider_id,
                "subject": subject,
                "scopes": scopes,
                "redirect_path": redirect_path,
                "extra_json": extra_json,
            },
        )
        self._raise_for_status(response, "get_consent_url")

        if response.headers.get("content-type", "").startswith("application/json"):
            try:
                data = response.json()
            except ValueError as e:
                raise ParseError(f"consent url json: {e}") from e
            if not isinstance(data, dict) or not isinstance(data.get("url", ""), str):
                raise ParseError("consent url json: expected an object with a string 'url'")
            return str(data.get("url", ""))
        return response.text.strip()

    def exchange_code(self, provider_id: str, subject: str, code: str, redirect_path: str) -> TokenSet:
        response = self._post(
            "exchange",
            {
                "provider_id": provider_id,
                "subject": subject,
                "code": code,
                "redirect_path": redirect_path,
            },
        )
        self._raise_for_status(response, "exchange_code")
        return self._parse_token(response.text.strip(), "exchange json")


def default_broker(config: OAuthCardConfig, client: httpx.Client | None = None) -> OAuthBroker:
    """
    Selects the broker for this process.

    Args:
        config: The component configuration.
        client: HTTP client for the HTTP broker. If omitted, one is created with the configured timeout.

    Returns:
        An `HttpBroker` when `config.broker_url` is set, otherwise a `NoopBroker`.
    """
    if not config.broker_url:
        logger.debug("No broker URL configured, using the no-op broker")
        return NoopBroker()

    if client is None:
        client = httpx.Client(timeout=config.http_timeout)
    logger.debug(f"Using HTTP broker at {config.broker_url}")
    return HttpBroker(config.broker_url, client)
