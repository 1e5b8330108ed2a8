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
Configuration for the coreason-oauth-card package.
"""

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class OAuthCardConfig(BaseSettings):
    """
    Configuration settings for coreason-oauth-card.

    Attributes:
        broker_url (str | None): Base URL of the token broker service. When unset,
            the component runs against the no-op broker (no cached tokens, no consent URLs).
        http_timeout (float): Timeout in seconds for broker calls.
        unsafe_local_dev (bool): Allows a plain-HTTP broker URL for local testing.
    """

    model_config = SettingsConfigDict(
        env_prefix="COREASON_OAUTH_CARD_",
        case_sensitive=False,
    )

    unsafe_local_dev: bool = False
    broker_url: str | None = None
    http_timeout: float = Field(default=10.0, gt=0, description="Timeout in seconds for all broker calls.")

    @field_validator("broker_url", mode="after")
    @classmethod
    def validate_broker_url(cls, v: str | None, info: ValidationInfo) -> str | None:
        """
        Normalizes the broker URL and enforces HTTPS unless local dev is opted into.

        Args:
            v: The configured broker URL.
            info: Validation info, used to read `unsafe_local_dev`.

        Returns:
            The URL without a trailing slash, or None when unset or blank.

        Raises:
            ValueError: If the URL has no scheme or uses plain HTTP outside local dev.
        """
        if v is None or not v.strip():
            return None
        v = v.strip().rstrip("/")
        if not v.startswith(("https://", "http://")):
            raise ValueError(f"Broker URL must be absolute (got '{v}').")
        if v.startswith("http://") and not info.data.get("unsafe_local_dev", False):
            raise ValueError("HTTPS is required for the broker. Set 'unsafe_local_dev=True' only for local testing.")
        return v
