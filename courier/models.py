"""Typed domain objects returned by the Bot API.

Every class is a :class:`~courier.hydration.TelegramObject`: a thin wrapper
over the raw payload whose ``relations`` registry says which fields hold
nested objects.  Properties below are convenience accessors that delegate to
:meth:`~courier.hydration.TelegramObject.resolve`; any field without a
property is still reachable through ``resolve("field_name")``.
"""

from __future__ import annotations

from typing import List, Optional

from courier import emojify
from courier.hydration import TelegramObject, grid, many, one


class User(TelegramObject):
    """This object represents a Telegram user or bot."""

    @property
    def id(self) -> Optional[int]:
        return self.resolve("id")

    @property
    def is_bot(self) -> Optional[bool]:
        return self.resolve("is_bot")

    @property
    def first_name(self) -> Optional[str]:
        return self.resolve("first_name")

    @property
    def username(self) -> Optional[str]:
        return self.resolve("username")


class Chat(TelegramObject):
    """This object represents a chat."""

    relations = {
        "pinned_message": one("Message"),
    }

    @property
    def id(self) -> Optional[int]:
        return self.resolve("id")

    @property
    def type(self) -> Optional[str]:
        return self.resolve("type")

    @property
    def title(self) -> Optional[str]:
        return self.resolve("title")


class PhotoSize(TelegramObject):
    """One size of a photo or a file / sticker thumbnail."""

    @property
    def file_id(self) -> Optional[str]:
        return self.resolve("file_id")

    @property
    def width(self) -> Optional[int]:
        return self.resolve("width")

    @property
    def height(self) -> Optional[int]:
        return self.resolve("height")


class Audio(TelegramObject):
    relations = {"thumb": one(PhotoSize)}


class Document(TelegramObject):
    relations = {"thumb": one(PhotoSize)}

    @property
    def file_id(self) -> Optional[str]:
        return self.resolve("file_id")

    @property
    def file_name(self) -> Optional[str]:
        return self.resolve("file_name")


class Video(TelegramObject):
    relations = {"thumb": one(PhotoSize)}


class Voice(TelegramObject):
    pass


class Sticker(TelegramObject):
    relations = {"thumb": one(PhotoSize)}


class Contact(TelegramObject):
    pass


class Location(TelegramObject):
    @property
    def latitude(self) -> Optional[float]:
        return self.resolve("latitude")

    @property
    def longitude(self) -> Optional[float]:
        return self.resolve("longitude")


class Venue(TelegramObject):
    relations = {"location": one(Location)}

    @property
    def location(self) -> Optional[Location]:
        return self.resolve("location")


class MessageEntity(TelegramObject):
    """One special entity in a text message: hashtag, username, URL, etc."""

    relations = {"user": one(User)}

    @property
    def type(self) -> Optional[str]:
        return self.resolve("type")

    @property
    def offset(self) -> Optional[int]:
        return self.resolve("offset")

    @property
    def length(self) -> Optional[int]:
        return self.resolve("length")


class Message(TelegramObject):
    """This object represents a message.

    ``text`` and ``caption`` are returned with ``:emoji:`` shortcodes
    translated.  Use :meth:`get_text` / :meth:`get_caption` with
    ``emojify=False`` (or ``resolve("text")``) for the stored value.
    """

    relations = {
        "from": one(User),
        "chat": one(Chat),
        "forward_from": one(User),
        "reply_to_message": one("Message"),
        "entities": many(MessageEntity),
        "audio": one(Audio),
        "document": one(Document),
        "photo": many(PhotoSize),
        "sticker": one(Sticker),
        "video": one(Video),
        "voice": one(Voice),
        "contact": one(Contact),
        "location": one(Location),
        "venue": one(Venue),
        "new_chat_member": one(User),
        "left_chat_member": one(User),
        "new_chat_photo": many(PhotoSize),
        "pinned_message": one("Message"),
    }

    @property
    def message_id(self) -> Optional[int]:
        return self.resolve("message_id")

    @property
    def date(self) -> Optional[int]:
        return self.resolve("date")

    @property
    def chat(self) -> Optional[Chat]:
        return self.resolve("chat")

    @property
    def from_user(self) -> Optional[User]:
        return self.resolve("from")

    @property
    def reply_to_message(self) -> Optional["Message"]:
        return self.resolve("reply_to_message")

    @property
    def entities(self) -> Optional[List[MessageEntity]]:
        return self.resolve("entities")

    @property
    def photo(self) -> Optional[List[PhotoSize]]:
        return self.resolve("photo")

    @property
    def document(self) -> Optional[Document]:
        return self.resolve("document")

    @property
    def text(self) -> Optional[str]:
        return self.get_text()

    @property
    def caption(self) -> Optional[str]:
        return self.get_caption()

    def get_text(self, emojify: bool = True) -> Optional[str]:
        text = self.resolve("text")
        return _emojify(text) if emojify else text

    def get_caption(self, emojify: bool = True) -> Optional[str]:
        caption = self.resolve("caption")
        return _emojify(caption) if emojify else caption


def _emojify(text: Optional[str]) -> Optional[str]:
    return emojify.translate(text)


class File(TelegramObject):
    """A file ready to be downloaded from ``/file/bot<token>/<file_path>``."""

    @property
    def file_id(self) -> Optional[str]:
        return self.resolve("file_id")

    @property
    def file_path(self) -> Optional[str]:
        return self.resolve("file_path")


class UserProfilePhotos(TelegramObject):
    relations = {"photos": grid(PhotoSize)}

    @property
    def total_count(self) -> Optional[int]:
        return self.resolve("total_count")

    @property
    def photos(self) -> Optional[List[List[PhotoSize]]]:
        return self.resolve("photos")


class CallbackQuery(TelegramObject):
    """An incoming callback query from an inline keyboard button."""

    relations = {
        "from": one(User),
        "message": one(Message),
    }

    @property
    def id(self) -> Optional[str]:
        return self.resolve("id")

    @property
    def from_user(self) -> Optional[User]:
        return self.resolve("from")

    @property
    def message(self) -> Optional[Message]:
        return self.resolve("message")

    @property
    def data(self) -> Optional[str]:
        return self.resolve("data")


class InlineQuery(TelegramObject):
    relations = {
        "from": one(User),
        "location": one(Location),
    }

    @property
    def id(self) -> Optional[str]:
        return self.resolve("id")

    @property
    def query(self) -> Optional[str]:
        return self.resolve("query")


class ChosenInlineResult(TelegramObject):
    relations = {
        "from": one(User),
        "location": one(Location),
    }


class ResponseParameters(TelegramObject):
    """Why a request was unsuccessful (``retry_after``, ``migrate_to_chat_id``)."""

    @property
    def migrate_to_chat_id(self) -> Optional[int]:
        return self.resolve("migrate_to_chat_id")

    @property
    def retry_after(self) -> Optional[int]:
        return self.resolve("retry_after")


class Update(TelegramObject):
    """An incoming update.  At most one of the optional payloads is present."""

    relations = {
        "message": one(Message),
        "edited_message": one(Message),
        "channel_post": one(Message),
        "edited_channel_post": one(Message),
        "inline_query": one(InlineQuery),
        "chosen_inline_result": one(ChosenInlineResult),
        "callback_query": one(CallbackQuery),
    }

    @property
    def update_id(self) -> Optional[int]:
        return self.resolve("update_id")

    @property
    def message(self) -> Optional[Message]:
        return self.resolve("message")

    @property
    def callback_query(self) -> Optional[CallbackQuery]:
        return self.resolve("callback_query")

    def detect_type(self) -> Optional[str]:
        """Name of the payload field this update carries, if any."""
        for field in self.keys():
            if field != "update_id":
                return field
        return None
