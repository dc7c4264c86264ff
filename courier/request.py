"""Outbound request model and the builder that assembles it.

The builder owns the per-client settings (access token, timeouts, async flag)
and snapshots them into every :class:`OutboundRequest` it creates, so changing
a setting never affects a request that has already been built.
"""

from __future__ import annotations

import dataclasses
import enum
import json
import logging
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from pydantic import BaseModel
from pydantic_core import to_jsonable_python

from courier.exceptions import UploadConfigurationError, ValidationError
from courier.input_file import InputFile, is_remote_reference, is_stream, resolve
from courier.markup import encode_markup

logger = logging.getLogger("courier.request")

REPLY_MARKUP_FIELD = "reply_markup"

DEFAULT_TIMEOUT: float = 60
DEFAULT_CONNECT_TIMEOUT: float = 10


class RequestEncoding(str, enum.Enum):
    """How the parameters travel on the wire."""

    QUERY = "query"
    FORM = "form"
    MULTIPART = "multipart"


@dataclasses.dataclass(frozen=True, slots=True)
class MultipartPart:
    """One named chunk of a multipart/form-data body."""

    name: str
    contents: Union[str, bytes]
    filename: Optional[str] = None

    def as_requests_file(self) -> Tuple[str, Tuple[Optional[str], Union[str, bytes]]]:
        """Return the ``(name, (filename, contents))`` tuple ``requests`` expects.

        A ``None`` filename makes ``requests`` emit a plain form field.
        """
        return self.name, (self.filename, self.contents)


@dataclasses.dataclass(frozen=True, slots=True)
class OutboundRequest:
    """An immutable, fully encoded API call."""

    method: str
    endpoint: str
    access_token: str = dataclasses.field(repr=False)
    params: Mapping[str, Any]
    encoding: RequestEncoding
    timeout: float
    connect_timeout: float
    is_async: bool = False
    parts: Tuple[MultipartPart, ...] = ()

    @property
    def is_multipart(self) -> bool:
        return self.encoding is RequestEncoding.MULTIPART

    def url(self, base_url: str) -> str:
        """Full endpoint URL with the token embedded in the path."""
        return f"{base_url.rstrip('/')}/bot{self.access_token}/{self.endpoint}"


# ── Value encoding ───────────────────────────────────────────────────────────


def encode_value(name: str, value: Any) -> str:
    """Encode a non-file parameter value as the string sent on the wire."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, InputFile):
        raise ValidationError(f"Parameter '{name}' holds an InputFile but the request is not an upload")
    if isinstance(value, (bytes, bytearray, memoryview)) or is_stream(value):
        raise UploadConfigurationError(name)
    if isinstance(value, (BaseModel, dict, list, tuple)):
        return json.dumps(to_jsonable_python(value, exclude_none=True), separators=(",", ":"), ensure_ascii=False)
    return str(value)


def reply_markup_to_string(params: Dict[str, Any]) -> Dict[str, Any]:
    """Replace a non-string ``reply_markup`` value with its string encoding."""
    if params.get(REPLY_MARKUP_FIELD) is not None:
        params[REPLY_MARKUP_FIELD] = encode_markup(params[REPLY_MARKUP_FIELD])
    return params


def drop_nulls(params: Mapping[str, Any]) -> Dict[str, Any]:
    return {name: value for name, value in params.items() if value is not None}


def generate_multipart_part(name: str, contents: Any) -> MultipartPart:
    """Turn one parameter into a multipart part.

    :class:`InputFile` values carry a filename; everything else is sent as a
    plain named field.
    """
    if isinstance(contents, InputFile):
        return MultipartPart(name=name, contents=contents.contents, filename=contents.filename)
    return MultipartPart(name=name, contents=encode_value(name, contents))


# ── Builder ──────────────────────────────────────────────────────────────────


class RequestBuilder:
    """Assemble :class:`OutboundRequest` objects from caller parameters.

    Attributes:
        access_token: Bot token embedded in every request URL.
        timeout: Send (read) timeout in seconds.
        connect_timeout: Connection timeout in seconds.
        is_async: Default fire-and-forget flag for built requests.
    """

    def __init__(
        self,
        access_token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        is_async: bool = False,
    ) -> None:
        self.access_token = access_token
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self.is_async = is_async

    def build(
        self,
        method: str,
        endpoint: str,
        params: Optional[Mapping[str, Any]] = None,
        is_upload: bool = False,
        is_async: Optional[bool] = None,
        file_field: Optional[str] = None,
    ) -> OutboundRequest:
        """Build one request.

        Args:
            method: ``"GET"`` or ``"POST"``.
            endpoint: API method name, e.g. ``"sendMessage"``.
            params: Ordered parameter mapping; ``None`` values are dropped.
            is_upload: Whether *file_field* may need a multipart upload.
            is_async: Override the builder's fire-and-forget default.
            file_field: The parameter that carries the file for uploads.

        Raises:
            ValidationError: On a bad verb, empty endpoint, missing token, or
                an upload request without a *file_field*.
            UploadConfigurationError: If a raw stream is passed as a value.
        """
        method = method.upper()
        if method not in ("GET", "POST"):
            raise ValidationError(f"Unsupported HTTP method: {method}")
        if not endpoint:
            raise ValidationError("Endpoint name must not be empty")
        if not self.access_token:
            raise ValidationError("Access token is not configured")

        params = reply_markup_to_string(dict(params or {}))

        if is_upload:
            if method != "POST":
                raise ValidationError("File uploads must use POST")
            if not file_field:
                raise ValidationError("Upload requested without a file field")
            value = params.get(file_field)
            if value is not None and not is_remote_reference(value):
                parts = self.prepare_multipart(params, file_field)
                logger.debug(
                    "Built multipart request",
                    extra={"api_endpoint": endpoint, "file_field": file_field, "part_count": len(parts)},
                )
                return self._snapshot(
                    method,
                    endpoint,
                    {part.name: part.contents for part in parts},
                    RequestEncoding.MULTIPART,
                    is_async,
                    parts,
                )

        encoded = {name: encode_value(name, value) for name, value in drop_nulls(params).items()}
        encoding = RequestEncoding.QUERY if method == "GET" else RequestEncoding.FORM
        return self._snapshot(method, endpoint, encoded, encoding, is_async)

    def prepare_multipart(self, params: Mapping[str, Any], file_field: str) -> Tuple[MultipartPart, ...]:
        """Convert *params* into ordered multipart parts.

        The file field is resolved through :func:`courier.input_file.resolve`;
        null values are dropped entirely.

        Raises:
            ValidationError: If *file_field* is missing from *params*.
        """
        if params.get(file_field) is None:
            raise ValidationError(f"Missing required upload parameter '{file_field}'")

        params = dict(params)
        params[file_field] = resolve(params[file_field], file_field)
        return tuple(generate_multipart_part(name, value) for name, value in drop_nulls(params).items())

    def _snapshot(
        self,
        method: str,
        endpoint: str,
        params: Dict[str, Any],
        encoding: RequestEncoding,
        is_async: Optional[bool],
        parts: Tuple[MultipartPart, ...] = (),
    ) -> OutboundRequest:
        return OutboundRequest(
            method=method,
            endpoint=endpoint,
            access_token=self.access_token,
            params=MappingProxyType(params),
            encoding=encoding,
            timeout=self.timeout,
            connect_timeout=self.connect_timeout,
            is_async=self.is_async if is_async is None else is_async,
            parts=parts,
        )
