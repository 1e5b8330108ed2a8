# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_oauth_card

from collections.abc import Callable, Generator
from typing import Any

import pytest

from coreason_oauth_card.broker import MemoryBroker
from coreason_oauth_card.models import OAuthCardInput, OAuthCardMode, TokenSet

MOCK_PROVIDER = "msgraph"
MOCK_SUBJECT = "user-1"
MOCK_CONSENT_URL = "https://consent/start"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keeps host environment settings from selecting a real broker during tests."""
    for name in (
        "COREASON_OAUTH_CARD_BROKER_URL",
        "COREASON_OAUTH_CARD_HTTP_TIMEOUT",
        "COREASON_OAUTH_CARD_UNSAFE_LOCAL_DEV",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def token() -> TokenSet:
    return TokenSet(
        access_token="token123",
        refresh_token="refresh",
        expires_at=999,
        extra={"email": "user@example.com"},
    )


@pytest.fixture
def connected_broker(token: TokenSet) -> MemoryBroker:
    return MemoryBroker(token=token, consent_url=MOCK_CONSENT_URL)


@pytest.fixture
def empty_broker() -> MemoryBroker:
    return MemoryBroker(token=None, consent_url=MOCK_CONSENT_URL)


@pytest.fixture
def make_request() -> Callable[..., OAuthCardInput]:
    """Factory for requests with sensible defaults; keyword arguments override fields."""

    def _make(mode: OAuthCardMode, **overrides: Any) -> OAuthCardInput:
        fields: dict[str, Any] = {
            "mode": mode,
            "provider_id": MOCK_PROVIDER,
            "subject": MOCK_SUBJECT,
            "scopes": ["openid"],
        }
        fields.update(overrides)
        return OAuthCardInput(**fields)

    return _make
