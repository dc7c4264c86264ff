"""Tests for RequestBuilder and OutboundRequest."""

import dataclasses
import json
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from courier.exceptions import UploadConfigurationError, ValidationError
from courier.input_file import InputFile
from courier.markup import InlineKeyboardButton, InlineKeyboardMarkup
from courier.request import MultipartPart, RequestBuilder, RequestEncoding, encode_value


def _keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup().row(InlineKeyboardButton(text="Yes", callback_data="y"))


@pytest.fixture()
def builder() -> RequestBuilder:
    return RequestBuilder("123:abc", timeout=30, connect_timeout=5)


# ── Plain requests ───────────────────────────────────────────────────────────


class TestPlainRequests:
    """Form and query encodings."""

    def test_send_message_form_params(self, builder: RequestBuilder) -> None:
        kb = _keyboard()
        req = builder.build("POST", "sendMessage", {"chat_id": 123, "text": "hi", "reply_markup": kb})
        assert req.encoding is RequestEncoding.FORM
        assert dict(req.params) == {"chat_id": "123", "text": "hi", "reply_markup": str(kb)}
        assert req.parts == ()

    def test_get_uses_query_encoding(self, builder: RequestBuilder) -> None:
        req = builder.build("get", "getFile", {"file_id": "abc"})
        assert req.method == "GET"
        assert req.encoding is RequestEncoding.QUERY
        assert dict(req.params) == {"file_id": "abc"}

    def test_reply_markup_encoded_identically_for_get_and_post(self, builder: RequestBuilder) -> None:
        kb = _keyboard()
        get_req = builder.build("GET", "sendMessage", {"reply_markup": kb})
        post_req = builder.build("POST", "sendMessage", {"reply_markup": kb})
        assert get_req.params["reply_markup"] == post_req.params["reply_markup"] == str(kb)

    def test_dict_reply_markup_becomes_compact_json(self, builder: RequestBuilder) -> None:
        markup = {"remove_keyboard": True}
        req = builder.build("POST", "sendMessage", {"reply_markup": markup})
        assert req.params["reply_markup"] == '{"remove_keyboard":true}'

    def test_string_reply_markup_passes_through(self, builder: RequestBuilder) -> None:
        req = builder.build("POST", "sendMessage", {"reply_markup": '{"force_reply":true}'})
        assert req.params["reply_markup"] == '{"force_reply":true}'

    def test_null_params_dropped(self, builder: RequestBuilder) -> None:
        req = builder.build("POST", "sendMessage", {"chat_id": 1, "text": "x", "parse_mode": None})
        assert "parse_mode" not in req.params
        req = builder.build("GET", "getUpdates", {"offset": None, "limit": 5})
        assert dict(req.params) == {"limit": "5"}

    def test_scalar_encoding(self) -> None:
        assert encode_value("a", True) == "true"
        assert encode_value("a", False) == "false"
        assert encode_value("a", 1.5) == "1.5"
        assert encode_value("a", ["message", "callback_query"]) == '["message","callback_query"]'

    def test_parameter_order_preserved(self, builder: RequestBuilder) -> None:
        req = builder.build("POST", "sendMessage", {"text": "a", "chat_id": 1, "parse_mode": "HTML"})
        assert list(req.params) == ["text", "chat_id", "parse_mode"]

    def test_input_file_outside_upload_rejected(self, builder: RequestBuilder) -> None:
        with pytest.raises(ValidationError):
            builder.build("POST", "sendDocument", {"document": InputFile.from_bytes(b"x", "x.txt")})


# ── Upload requests ──────────────────────────────────────────────────────────


class TestUploadRequests:
    """Multipart decisions and part layout."""

    def test_remote_reference_never_multipart(self, builder: RequestBuilder) -> None:
        req = builder.build(
            "POST", "sendPhoto", {"chat_id": 1, "photo": "AgACAgIAAxkBAAIB"}, is_upload=True, file_field="photo"
        )
        assert req.encoding is RequestEncoding.FORM
        assert req.params["photo"] == "AgACAgIAAxkBAAIB"

    def test_url_is_remote_reference(self, builder: RequestBuilder) -> None:
        req = builder.build(
            "POST", "sendPhoto", {"chat_id": 1, "photo": "https://example.com/a.jpg"}, is_upload=True, file_field="photo"
        )
        assert not req.is_multipart

    def test_missing_file_field_degrades_to_form(self, builder: RequestBuilder) -> None:
        req = builder.build("POST", "setWebhook", {"url": "https://x"}, is_upload=True, file_field="certificate")
        assert req.encoding is RequestEncoding.FORM
        assert dict(req.params) == {"url": "https://x"}

    def test_local_path_becomes_file_part(self, builder: RequestBuilder, tmp_path) -> None:
        path = tmp_path / "report.pdf"
        path.write_bytes(b"%PDF-1.4 binary\x00\xff")
        req = builder.build(
            "POST",
            "sendDocument",
            {"chat_id": 7, "document": str(path), "caption": None, "reply_markup": _keyboard()},
            is_upload=True,
            file_field="document",
        )
        assert req.encoding is RequestEncoding.MULTIPART
        names = [p.name for p in req.parts]
        assert names == ["chat_id", "document", "reply_markup"]
        doc = req.parts[1]
        assert doc.filename == "report.pdf"
        assert doc.contents == b"%PDF-1.4 binary\x00\xff"
        assert req.parts[0] == MultipartPart(name="chat_id", contents="7")
        assert req.parts[2].filename is None
        assert json.loads(req.parts[2].contents)["inline_keyboard"][0][0]["text"] == "Yes"

    def test_input_file_part(self, builder: RequestBuilder) -> None:
        wrapped = InputFile.from_bytes(b"data", "notes.txt")
        req = builder.build("POST", "sendDocument", {"document": wrapped}, is_upload=True, file_field="document")
        assert req.parts == (MultipartPart(name="document", contents=b"data", filename="notes.txt"),)

    def test_upload_without_file_field_raises(self, builder: RequestBuilder) -> None:
        with pytest.raises(ValidationError):
            builder.build("POST", "sendDocument", {"document": "x"}, is_upload=True)

    def test_upload_with_get_raises(self, builder: RequestBuilder) -> None:
        with pytest.raises(ValidationError):
            builder.build("GET", "sendDocument", {"document": "x"}, is_upload=True, file_field="document")

    def test_prepare_multipart_requires_field(self, builder: RequestBuilder) -> None:
        with pytest.raises(ValidationError, match="document"):
            builder.prepare_multipart({"chat_id": 1}, "document")

    def test_stream_in_file_field_raises(self, builder: RequestBuilder, tmp_path) -> None:
        path = tmp_path / "a.bin"
        path.write_bytes(b"abc")
        with open(path, "rb") as fh:
            with pytest.raises(UploadConfigurationError) as exc_info:
                builder.build("POST", "sendDocument", {"document": fh}, is_upload=True, file_field="document")
        assert exc_info.value.field == "document"

    def test_stream_in_other_field_raises(self, builder: RequestBuilder) -> None:
        wrapped = InputFile.from_bytes(b"data", "a.txt")
        with pytest.raises(UploadConfigurationError):
            builder.build(
                "POST", "sendDocument", {"document": wrapped, "thumb": b"raw"}, is_upload=True, file_field="document"
            )


# ── Validation & snapshots ───────────────────────────────────────────────────


class TestValidationAndSnapshot:
    """Pre-flight errors and settings capture."""

    def test_missing_token(self) -> None:
        with pytest.raises(ValidationError, match="token"):
            RequestBuilder().build("POST", "getMe")

    def test_bad_method(self, builder: RequestBuilder) -> None:
        with pytest.raises(ValidationError):
            builder.build("PUT", "getMe")

    def test_empty_endpoint(self, builder: RequestBuilder) -> None:
        with pytest.raises(ValidationError):
            builder.build("POST", "")

    def test_settings_snapshot(self, builder: RequestBuilder) -> None:
        req = builder.build("POST", "getMe")
        builder.timeout = 99
        builder.connect_timeout = 99
        builder.access_token = "other"
        builder.is_async = True
        assert req.timeout == 30
        assert req.connect_timeout == 5
        assert req.access_token == "123:abc"
        assert req.is_async is False

    def test_async_override(self, builder: RequestBuilder) -> None:
        assert builder.build("POST", "getMe", is_async=True).is_async is True

    def test_request_is_immutable(self, builder: RequestBuilder) -> None:
        req = builder.build("POST", "sendMessage", {"text": "x"})
        with pytest.raises(dataclasses.FrozenInstanceError):
            req.endpoint = "other"  # type: ignore[misc]
        with pytest.raises(TypeError):
            req.params["text"] = "y"  # type: ignore[index]

    def test_url_embeds_token(self, builder: RequestBuilder) -> None:
        req = builder.build("POST", "getMe")
        assert req.url("https://api.telegram.org/") == "https://api.telegram.org/bot123:abc/getMe"
        assert "123:abc" not in repr(req)
