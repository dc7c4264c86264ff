"""BotClient -- the public entry point of the Courier SDK.

The client owns one :class:`~courier.request.RequestBuilder` (parameters and
settings) and one :class:`~courier.dispatcher.Dispatcher` (transport and the
last-response slot) and delegates to them.  Endpoint helpers are thin: one
HTTP call each, the ``result`` hydrated into the matching model.

In async mode every call returns a :class:`concurrent.futures.Future` that
resolves to the same value the blocking call would have returned.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Type, Union

from courier.dispatcher import DEFAULT_BASE_URL, Dispatcher
from courier.exceptions import ValidationError
from courier.hydration import TelegramObject, hydrate, hydrate_many
from courier.inline import InlineQueryResult, encode_results
from courier.input_file import InputFile
from courier.markup import ReplyMarkup
from courier.models import File, Message, Update, User, UserProfilePhotos
from courier.request import DEFAULT_CONNECT_TIMEOUT, DEFAULT_TIMEOUT, OutboundRequest, RequestBuilder
from courier.response import InboundResponse
from courier.transport import HttpTransport

logger = logging.getLogger("courier.client")

# Sentinel meaning "no update has been seen in this batch yet".
NO_UPDATE_ID = -1

FileValue = Union[InputFile, str]
MarkupValue = Union[ReplyMarkup, Dict[str, Any], str]


class BotClient:
    """Client for the Telegram Bot API.

    Not thread-safe: settings and ``last_response`` belong to one instance and
    must not be mutated concurrently.
    """

    def __init__(
        self,
        access_token: Optional[str] = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        is_async: bool = False,
        transport: Optional[HttpTransport] = None,
    ) -> None:
        self._builder = RequestBuilder(access_token, timeout, connect_timeout, is_async)
        self._dispatcher = Dispatcher(transport, base_url=base_url)

    @classmethod
    def from_env(cls, transport: Optional[HttpTransport] = None) -> "BotClient":
        """Build a client from the values loaded by :mod:`config`."""
        import config  # deferred so importing the SDK never reads the environment

        return cls(
            config.BOT_TOKEN,
            base_url=config.API_BASE_URL,
            timeout=config.REQUEST_TIMEOUT,
            connect_timeout=config.CONNECT_TIMEOUT,
            is_async=config.ASYNC_REQUESTS,
            transport=transport,
        )

    # ------------------------------------------------------------------
    #  Settings
    # ------------------------------------------------------------------

    @property
    def builder(self) -> RequestBuilder:
        return self._builder

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    @property
    def access_token(self) -> Optional[str]:
        return self._builder.access_token

    @access_token.setter
    def access_token(self, value: str) -> None:
        self._builder.access_token = value

    @property
    def timeout(self) -> float:
        return self._builder.timeout

    @timeout.setter
    def timeout(self, value: float) -> None:
        self._builder.timeout = value

    @property
    def connect_timeout(self) -> float:
        return self._builder.connect_timeout

    @connect_timeout.setter
    def connect_timeout(self, value: float) -> None:
        self._builder.connect_timeout = value

    @property
    def is_async(self) -> bool:
        return self._builder.is_async

    @is_async.setter
    def is_async(self, value: bool) -> None:
        self._builder.is_async = value

    @property
    def last_response(self) -> Optional[InboundResponse]:
        """Most recent successful response; see :mod:`courier.dispatcher` for async caveats."""
        return self._dispatcher.last_response

    def close(self) -> None:
        self._dispatcher.close()

    def __enter__(self) -> "BotClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    #  Generic calls
    # ------------------------------------------------------------------

    def get(self, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> Union[InboundResponse, Future]:
        """Send a GET request and return the raw :class:`InboundResponse`."""
        return self._send(self._builder.build("GET", endpoint, params))

    def post(self, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> Union[InboundResponse, Future]:
        """Send a form-encoded POST request and return the raw :class:`InboundResponse`."""
        return self._send(self._builder.build("POST", endpoint, params))

    def upload_file(
        self, endpoint: str, params: Mapping[str, Any], file_field: str
    ) -> Union[InboundResponse, Future]:
        """POST *params*, using multipart/form-data when *file_field* needs uploading.

        A ``file_id`` or URL in *file_field* is sent as a normal form value.
        """
        return self._send(self._builder.build("POST", endpoint, params, is_upload=True, file_field=file_field))

    def call(
        self,
        endpoint: str,
        params: Optional[Mapping[str, Any]] = None,
        result_type: Optional[Type[TelegramObject]] = None,
        *,
        method: str = "POST",
        file_field: Optional[str] = None,
        many: bool = False,
    ) -> Any:
        """Send one request and hydrate its ``result`` as *result_type*.

        Without a *result_type* the raw ``result`` value is returned.
        """
        request = self._builder.build(
            method, endpoint, params, is_upload=file_field is not None, file_field=file_field
        )
        outcome = self._send(request)
        if isinstance(outcome, Future):
            return _chain(outcome, lambda response: _hydrate_result(response, result_type, many))
        return _hydrate_result(outcome, result_type, many)

    def _send(self, request: OutboundRequest) -> Union[InboundResponse, Future]:
        return self._dispatcher.send(request)

    # ------------------------------------------------------------------
    #  Endpoint helpers
    # ------------------------------------------------------------------

    def get_me(self) -> User:
        """A simple method for testing your bot's auth token."""
        return self.call("getMe", result_type=User, method="GET")

    def get_updates(
        self,
        offset: Optional[int] = None,
        limit: Optional[int] = None,
        timeout: Optional[int] = None,
        allowed_updates: Optional[List[str]] = None,
    ) -> List[Update]:
        """Receive incoming updates using long polling."""
        params = {"offset": offset, "limit": limit, "timeout": timeout, "allowed_updates": allowed_updates}
        return self.call("getUpdates", params, Update, many=True)

    def send_message(
        self,
        chat_id: Union[int, str],
        text: str,
        parse_mode: Optional[str] = None,
        disable_web_page_preview: Optional[bool] = None,
        disable_notification: Optional[bool] = None,
        reply_to_message_id: Optional[int] = None,
        reply_markup: Optional[MarkupValue] = None,
    ) -> Message:
        """Send a text message.  On success, the sent Message is returned."""
        params = {
            "chat_id": chat_id,
            "text": text,
            "parse_mode": parse_mode,
            "disable_web_page_preview": disable_web_page_preview,
            "disable_notification": disable_notification,
            "reply_to_message_id": reply_to_message_id,
            "reply_markup": reply_markup,
        }
        return self.call("sendMessage", params, Message)

    def forward_message(
        self,
        chat_id: Union[int, str],
        from_chat_id: Union[int, str],
        message_id: int,
        disable_notification: Optional[bool] = None,
    ) -> Message:
        params = {
            "chat_id": chat_id,
            "from_chat_id": from_chat_id,
            "message_id": message_id,
            "disable_notification": disable_notification,
        }
        return self.call("forwardMessage", params, Message)

    def send_photo(
        self,
        chat_id: Union[int, str],
        photo: FileValue,
        caption: Optional[str] = None,
        reply_to_message_id: Optional[int] = None,
        reply_markup: Optional[MarkupValue] = None,
    ) -> Message:
        params = {
            "chat_id": chat_id,
            "photo": photo,
            "caption": caption,
            "reply_to_message_id": reply_to_message_id,
            "reply_markup": reply_markup,
        }
        return self.call("sendPhoto", params, Message, file_field="photo")

    def send_audio(
        self,
        chat_id: Union[int, str],
        audio: FileValue,
        caption: Optional[str] = None,
        duration: Optional[int] = None,
        performer: Optional[str] = None,
        title: Optional[str] = None,
        reply_markup: Optional[MarkupValue] = None,
    ) -> Message:
        params = {
            "chat_id": chat_id,
            "audio": audio,
            "caption": caption,
            "duration": duration,
            "performer": performer,
            "title": title,
            "reply_markup": reply_markup,
        }
        return self.call("sendAudio", params, Message, file_field="audio")

    def send_document(
        self,
        chat_id: Union[int, str],
        document: FileValue,
        caption: Optional[str] = None,
        reply_to_message_id: Optional[int] = None,
        reply_markup: Optional[MarkupValue] = None,
    ) -> Message:
        """Send a general file, uploading it when *document* is a local path or InputFile."""
        params = {
            "chat_id": chat_id,
            "document": document,
            "caption": caption,
            "reply_to_message_id": reply_to_message_id,
            "reply_markup": reply_markup,
        }
        return self.call("sendDocument", params, Message, file_field="document")

    def send_video(
        self,
        chat_id: Union[int, str],
        video: FileValue,
        duration: Optional[int] = None,
        caption: Optional[str] = None,
        reply_markup: Optional[MarkupValue] = None,
    ) -> Message:
        params = {
            "chat_id": chat_id,
            "video": video,
            "duration": duration,
            "caption": caption,
            "reply_markup": reply_markup,
        }
        return self.call("sendVideo", params, Message, file_field="video")

    def send_voice(
        self,
        chat_id: Union[int, str],
        voice: FileValue,
        duration: Optional[int] = None,
        reply_markup: Optional[MarkupValue] = None,
    ) -> Message:
        params = {"chat_id": chat_id, "voice": voice, "duration": duration, "reply_markup": reply_markup}
        return self.call("sendVoice", params, Message, file_field="voice")

    def send_sticker(
        self,
        chat_id: Union[int, str],
        sticker: FileValue,
        reply_markup: Optional[MarkupValue] = None,
    ) -> Message:
        params = {"chat_id": chat_id, "sticker": sticker, "reply_markup": reply_markup}
        return self.call("sendSticker", params, Message, file_field="sticker")

    def send_chat_action(self, chat_id: Union[int, str], action: str) -> bool:
        return self.call("sendChatAction", {"chat_id": chat_id, "action": action})

    def get_file(self, file_id: str) -> File:
        """Resolve a ``file_id`` to a downloadable :class:`File`."""
        return self.call("getFile", {"file_id": file_id}, File, method="GET")

    def get_user_profile_photos(
        self, user_id: int, offset: Optional[int] = None, limit: Optional[int] = None
    ) -> UserProfilePhotos:
        params = {"user_id": user_id, "offset": offset, "limit": limit}
        return self.call("getUserProfilePhotos", params, UserProfilePhotos, method="GET")

    def answer_callback_query(
        self,
        callback_query_id: str,
        text: Optional[str] = None,
        show_alert: Optional[bool] = None,
        url: Optional[str] = None,
        cache_time: Optional[int] = None,
    ) -> bool:
        """Acknowledge a callback query so the spinner disappears for the user."""
        params = {
            "callback_query_id": callback_query_id,
            "text": text,
            "show_alert": show_alert,
            "url": url,
            "cache_time": cache_time,
        }
        return self.call("answerCallbackQuery", params)

    def answer_inline_query(
        self,
        inline_query_id: str,
        results: Sequence[Union[InlineQueryResult, Dict[str, Any]]],
        cache_time: Optional[int] = None,
        is_personal: Optional[bool] = None,
        next_offset: Optional[str] = None,
    ) -> bool:
        params = {
            "inline_query_id": inline_query_id,
            "results": encode_results(results),
            "cache_time": cache_time,
            "is_personal": is_personal,
            "next_offset": next_offset,
        }
        return self.call("answerInlineQuery", params)

    def edit_message_text(
        self,
        text: str,
        chat_id: Optional[Union[int, str]] = None,
        message_id: Optional[int] = None,
        inline_message_id: Optional[str] = None,
        parse_mode: Optional[str] = None,
        reply_markup: Optional[MarkupValue] = None,
    ) -> Union[Message, bool]:
        """Edit a text message.  Returns True for inline messages, the Message otherwise."""
        params = {
            "chat_id": chat_id,
            "message_id": message_id,
            "inline_message_id": inline_message_id,
            "text": text,
            "parse_mode": parse_mode,
            "reply_markup": reply_markup,
        }
        result_type = None if inline_message_id is not None else Message
        return self.call("editMessageText", params, result_type)

    def delete_message(self, chat_id: Union[int, str], message_id: int) -> bool:
        return self.call("deleteMessage", {"chat_id": chat_id, "message_id": message_id})

    def set_webhook(
        self,
        url: str,
        certificate: Optional[FileValue] = None,
        max_connections: Optional[int] = None,
        allowed_updates: Optional[List[str]] = None,
    ) -> bool:
        """Register a webhook URL, uploading *certificate* when given."""
        params = {
            "url": url,
            "certificate": certificate,
            "max_connections": max_connections,
            "allowed_updates": allowed_updates,
        }
        return self.call("setWebhook", params, file_field="certificate")

    def delete_webhook(self, drop_pending_updates: Optional[bool] = None) -> bool:
        return self.call("deleteWebhook", {"drop_pending_updates": drop_pending_updates})

    # ------------------------------------------------------------------
    #  Update polling
    # ------------------------------------------------------------------

    def process_updates(self, handler: Callable[[Update], None], **params: Any) -> List[Update]:
        """Fetch one batch of updates, hand each to *handler*, then acknowledge.

        Updates are acknowledged only after the whole batch was processed, by
        requesting ``offset = highest update_id + 1``.  Handler exceptions
        propagate and leave the batch unacknowledged.  Blocking mode only.
        """
        if self.is_async:
            raise ValidationError("process_updates requires blocking mode")
        updates = self.get_updates(**params)
        highest_id = NO_UPDATE_ID
        for update in updates:
            highest_id = max(highest_id, update.update_id)
            handler(update)

        if highest_id != NO_UPDATE_ID:
            self.mark_updates_as_read(highest_id)
        return updates

    def mark_updates_as_read(self, highest_id: int) -> List[Update]:
        """Confirm every update up to and including *highest_id*."""
        logger.debug("Acknowledging updates", extra={"api_endpoint": "getUpdates", "offset": highest_id + 1})
        return self.get_updates(offset=highest_id + 1, limit=1)


# ── Result helpers ───────────────────────────────────────────────────────────


def _hydrate_result(response: InboundResponse, result_type: Optional[Type[TelegramObject]], many: bool) -> Any:
    result = response.result
    if result_type is None or result is None:
        return result
    if many:
        return hydrate_many(result, result_type)
    return hydrate(result, result_type)


def _chain(source: Future, transform: Callable[[Any], Any]) -> Future:
    """Return a future resolving to ``transform(source.result())``."""
    target: Future = Future()

    def _done(fut: Future) -> None:
        try:
            target.set_result(transform(fut.result()))
        except Exception as exc:  # delivered to whoever waits on target
            target.set_exception(exc)

    source.add_done_callback(_done)
    return target
