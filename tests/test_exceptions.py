# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_oauth_card

import pytest

from coreason_oauth_card.exceptions import (
    BrokerError,
    InvalidInputError,
    OAuthCardError,
    ParseError,
    UnsupportedError,
)


def test_exception_hierarchy() -> None:
    """All custom exceptions inherit from OAuthCardError."""
    for exc in (InvalidInputError, ParseError, UnsupportedError, BrokerError):
        assert issubclass(exc, OAuthCardError)


@pytest.mark.parametrize(
    ("exc", "expected"),
    [
        (InvalidInputError("auth_code is required"), "invalid input: auth_code is required"),
        (ParseError("input json: EOF"), "parse error: input json: EOF"),
        (UnsupportedError("no host"), "unsupported: no host"),
        (BrokerError("timeout"), "broker error: timeout"),
    ],
)
def test_describe(exc: OAuthCardError, expected: str) -> None:
    assert exc.describe() == expected
    assert str(exc) == expected.split(": ", 1)[1]
