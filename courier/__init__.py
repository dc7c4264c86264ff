"""Courier -- a typed client for the Telegram Bot API.

Method calls become outbound HTTP requests (form, query or multipart), and
JSON results come back as lazily hydrated domain objects.

Usage::

    from courier import BotClient, ApiError
    from courier.markup import InlineKeyboardMarkup, InlineKeyboardButton

    with BotClient("123:abc") as bot:
        msg = bot.send_message(42, "hello :wave:")
        msg.chat.id
"""

from courier.client import BotClient
from courier.exceptions import (
    ApiError,
    CourierError,
    HydrationError,
    TransportError,
    UploadConfigurationError,
    ValidationError,
)
from courier.input_file import InputFile

__all__ = [
    "BotClient",
    "InputFile",
    "CourierError",
    "ValidationError",
    "UploadConfigurationError",
    "TransportError",
    "ApiError",
    "HydrationError",
]
