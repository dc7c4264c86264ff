"""Outbound inline-query result builders used by ``answerInlineQuery``."""

from __future__ import annotations

import json
from typing import List, Literal, Optional, Sequence

from pydantic import BaseModel

from courier.markup import InlineKeyboardMarkup


class InlineQueryResult(BaseModel):
    """Base class for one result of an inline query."""

    type: str
    id: str

    model_config = {"populate_by_name": True}


class InlineQueryResultCachedDocument(InlineQueryResult):
    """A link to a file already stored on the Telegram servers."""

    type: Literal["document"] = "document"
    title: str
    document_file_id: str
    description: Optional[str] = None
    caption: Optional[str] = None
    parse_mode: Optional[str] = None
    reply_markup: Optional[InlineKeyboardMarkup] = None
    input_message_content: Optional[dict] = None


def encode_results(results: Sequence[InlineQueryResult | dict]) -> str:
    """Serialise a list of results to the JSON array the API expects."""
    payload: List[dict] = [
        r.model_dump(exclude_none=True, by_alias=True) if isinstance(r, BaseModel) else r
        for r in results
    ]
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
