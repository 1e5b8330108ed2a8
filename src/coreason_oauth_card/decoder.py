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
Request decoding and response encoding for the component boundary.
"""

from pydantic import ValidationError

from coreason_oauth_card.exceptions import InvalidInputError, ParseError
from coreason_oauth_card.models import OAuthCardInput, OAuthCardMode, OAuthCardOutput

# Pydantic error types that mean the text itself is not a JSON object
_STRUCTURAL_ERRORS = frozenset({"json_invalid", "json_type", "model_type", "model_attributes_type"})


def _is_structural(error: ValidationError) -> bool:
    return any(detail["type"] in _STRUCTURAL_ERRORS and not detail["loc"] for detail in error.errors())


def decode_request(raw: str) -> OAuthCardInput:
    """
    Parses raw text into a validated request.

    Args:
        raw: The JSON encoded request. Surrounding whitespace is ignored.

    Returns:
        OAuthCardInput: The decoded request.

    Raises:
        ParseError: If the text is not a JSON object.
        InvalidInputError: If a required field is missing or malformed, or the
            mode's own requirements are not met.
    """
    try:
        request = OAuthCardInput.model_validate_json(raw.strip())
    except ValidationError as e:
        if _is_structural(e):
            raise ParseError(f"input json: {e}") from e
        raise InvalidInputError(f"input json: {e}") from e

    validate_request(request)
    return request


def validate_request(request: OAuthCardInput) -> None:
    """
    Checks per-mode requirements that the field types alone cannot express.

    Raises:
        InvalidInputError: If complete-sign-in is requested without an auth code.
    """
    if request.mode is OAuthCardMode.COMPLETE_SIGN_IN and request.auth_code is None:
        raise InvalidInputError("auth_code is required to complete sign-in")


def encode_response(output: OAuthCardOutput) -> str:
    """Serializes a response to JSON, leaving out absent fields."""
    return output.model_dump_json(exclude_none=True)


def decode_response(raw: str) -> OAuthCardOutput:
    """
    Parses a response produced by `encode_response`.

    Raises:
        ParseError: If the text is not a valid response encoding.
    """
    try:
        return OAuthCardOutput.model_validate_json(raw.strip())
    except ValidationError as e:
        raise ParseError(f"output json: {e}") from e
