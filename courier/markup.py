"""Keyboard and reply-markup builders.

Every markup class serialises to its wire form through ``str()``: compact JSON
with unset (``None``) fields left out.  The request builder relies on that
contract when it encodes the ``reply_markup`` parameter.
"""

from __future__ import annotations

import json
from typing import Any, List, Optional

from pydantic import BaseModel, Field


class ReplyMarkup(BaseModel):
    """Base class for all ``reply_markup`` payloads."""

    model_config = {"populate_by_name": True}

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True, by_alias=True)

    def __str__(self) -> str:
        return self.to_json()


class KeyboardButton(BaseModel):
    """One button of a reply keyboard."""

    text: str
    request_contact: Optional[bool] = None
    request_location: Optional[bool] = None

    model_config = {"populate_by_name": True}


class ReplyKeyboardMarkup(ReplyMarkup):
    """A custom keyboard with reply options."""

    keyboard: List[List[KeyboardButton]] = Field(default_factory=list)
    resize_keyboard: Optional[bool] = None
    one_time_keyboard: Optional[bool] = None
    selective: Optional[bool] = None

    def row(self, *buttons: KeyboardButton | str) -> "ReplyKeyboardMarkup":
        """Append a row; plain strings become text buttons."""
        self.keyboard.append([KeyboardButton(text=b) if isinstance(b, str) else b for b in buttons])
        return self


class ReplyKeyboardRemove(ReplyMarkup):
    """Ask clients to hide the current custom keyboard."""

    remove_keyboard: bool = True
    selective: Optional[bool] = None


class InlineKeyboardButton(BaseModel):
    """One button of an inline keyboard.  Exactly one optional field must be set."""

    text: str
    url: Optional[str] = None
    callback_data: Optional[str] = None
    switch_inline_query: Optional[str] = None
    switch_inline_query_current_chat: Optional[str] = None
    pay: Optional[bool] = None

    model_config = {"populate_by_name": True}


class InlineKeyboardMarkup(ReplyMarkup):
    """An inline keyboard attached to a message."""

    inline_keyboard: List[List[InlineKeyboardButton]] = Field(default_factory=list)

    def row(self, *buttons: InlineKeyboardButton) -> "InlineKeyboardMarkup":
        self.inline_keyboard.append(list(buttons))
        return self


class ForceReply(ReplyMarkup):
    """Show a reply interface to the user."""

    force_reply: bool = True
    selective: Optional[bool] = None


def encode_markup(value: Any) -> str:
    """Return the canonical string encoding of a ``reply_markup`` value.

    Strings pass through unchanged; builder objects use their ``str()``
    contract; dicts and lists become compact JSON.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, ReplyMarkup):
        return str(value)
    if isinstance(value, BaseModel):
        return value.model_dump_json(exclude_none=True, by_alias=True)
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return str(value)
