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
Custom exceptions for the coreason-oauth-card package.
"""

from typing import ClassVar


class OAuthCardError(Exception):
    """
    Base exception for all coreason-oauth-card errors.

    `kind` is the label used when the error is reported back to the caller
    as an error response (e.g. "invalid input: auth_code is required").
    """

    kind: ClassVar[str] = "oauth card error"

    def describe(self) -> str:
        return f"{self.kind}: {self}"


class InvalidInputError(OAuthCardError):
    """Raised when a request field is missing or malformed (e.g. complete-sign-in without auth_code)."""

    kind = "invalid input"


class ParseError(OAuthCardError):
    """Raised when a request or a broker payload cannot be decoded."""

    kind = "parse error"


class UnsupportedError(OAuthCardError):
    """Raised when a broker capability is not available in the current environment."""

    kind = "unsupported"


class BrokerError(OAuthCardError):
    """Raised when the token broker cannot be reached or rejects a call."""

    kind = "broker error"
