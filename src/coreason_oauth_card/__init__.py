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
Decision logic for the OAuth "connect account" card: decides what the UI and the caller
should do next, given the token broker's view of a subject's authorization.
"""

__version__ = "0.1.0"
__author__ = "Gowtham A Rao"
__email__ = "gowtham.rao@coreason.ai"

from .broker import HttpBroker, MemoryBroker, NoopBroker, OAuthBroker, default_broker
from .component import OAuthCardComponent, handle_message
from .config import OAuthCardConfig
from .decoder import decode_request, decode_response, encode_response
from .engine import handle
from .exceptions import BrokerError, InvalidInputError, OAuthCardError, ParseError, UnsupportedError
from .models import (
    AuthContext,
    AuthHeader,
    MessageCard,
    OAuthCardInput,
    OAuthCardMode,
    OAuthCardOutput,
    OAuthStatus,
    OauthProvider,
    TokenSet,
)

__all__ = [
    "AuthContext",
    "AuthHeader",
    "BrokerError",
    "HttpBroker",
    "InvalidInputError",
    "MemoryBroker",
    "MessageCard",
    "NoopBroker",
    "OAuthBroker",
    "OAuthCardComponent",
    "OAuthCardConfig",
    "OAuthCardError",
    "OAuthCardInput",
    "OAuthCardMode",
    "OAuthCardOutput",
    "OAuthStatus",
    "OauthProvider",
    "ParseError",
    "TokenSet",
    "UnsupportedError",
    "decode_request",
    "decode_response",
    "default_broker",
    "encode_response",
    "handle",
    "handle_message",
]
