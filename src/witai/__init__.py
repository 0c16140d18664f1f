"""Cliente Python para la API HTTP de Wit.ai.

Uso típico::

    from witai import WitClient

    with WitClient("TOKEN") as client:
        message = client.query_message("how's the weather today?")
        print(message)
"""

from __future__ import annotations

import logging

from witai.core.domain.models import (
    Context,
    Converse,
    ConverseType,
    Deleted,
    Entity,
    EntityValue,
    Intent,
    IntentExpression,
    Location,
    Message,
    Outcome,
    ResponseError,
    error_message,
    expressions_of,
    has_error,
)
from witai.core.errors import (
    ConversationLimitError,
    WitError,
    WitParseError,
    WitRequestError,
    WitResponseError,
)
from witai.core.services.client import ClientConfig, WitClient

logging.getLogger("witai").addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "ClientConfig",
    "Context",
    "ConversationLimitError",
    "Converse",
    "ConverseType",
    "Deleted",
    "Entity",
    "EntityValue",
    "Intent",
    "IntentExpression",
    "Location",
    "Message",
    "Outcome",
    "ResponseError",
    "WitClient",
    "WitError",
    "WitParseError",
    "WitRequestError",
    "WitResponseError",
    "error_message",
    "expressions_of",
    "has_error",
]
