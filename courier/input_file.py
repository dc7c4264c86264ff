"""InputFile model and the resolver that classifies upload parameter values.

A value destined for an upload field is one of three things:

* a remote reference (a ``file_id`` the server issued earlier, or a URL),
  which is sent as a plain form value;
* a path to a local file, which is read eagerly into an :class:`InputFile`;
* an :class:`InputFile` the caller built explicitly.

Open file handles and raw bytes are rejected: the caller must wrap them with
:meth:`InputFile.from_stream` or :meth:`InputFile.from_bytes` so the filename
and resource lifetime stay under their control.
"""

from __future__ import annotations

import io
import os
from typing import Any, BinaryIO, Union

from pydantic import BaseModel

from courier.exceptions import UploadConfigurationError, ValidationError


class InputFile(BaseModel):
    """Contents of a local file, ready to be posted as a multipart part."""

    filename: str
    contents: bytes

    model_config = {"frozen": True}

    @classmethod
    def from_path(cls, path: Union[str, os.PathLike], filename: str | None = None) -> "InputFile":
        """Read *path* fully and wrap it.

        Raises:
            ValidationError: If *path* does not name a regular file.
        """
        path = os.fspath(path)
        if not os.path.isfile(path):
            raise ValidationError(f"Local file not found: {path}")
        with open(path, "rb") as fh:
            contents = fh.read()
        return cls(filename=filename or os.path.basename(path), contents=contents)

    @classmethod
    def from_stream(cls, stream: BinaryIO, filename: str) -> "InputFile":
        """Read an already-open binary stream to the end.

        The stream is left open; closing it remains the caller's job.
        """
        contents = stream.read()
        if isinstance(contents, str):
            contents = contents.encode("utf-8")
        return cls(filename=filename, contents=contents)

    @classmethod
    def from_bytes(cls, contents: bytes, filename: str) -> "InputFile":
        return cls(filename=filename, contents=bytes(contents))

    def __repr__(self) -> str:
        return f"InputFile(filename={self.filename!r}, size={len(self.contents)})"


def is_stream(value: Any) -> bool:
    """Return True for file handles and other objects exposing ``read()``."""
    return isinstance(value, io.IOBase) or callable(getattr(value, "read", None))


def is_remote_reference(value: Any) -> bool:
    """Return True if *value* is a string that does not name a local file.

    Such strings are ``file_id`` values or URLs and are sent verbatim.
    """
    return isinstance(value, str) and not os.path.isfile(value)


def resolve(value: Any, field: str = "file") -> Union[InputFile, str]:
    """Classify an upload parameter value.

    Returns:
        The value unchanged for remote references and existing
        :class:`InputFile` objects, or a freshly read :class:`InputFile` for
        local paths.

    Raises:
        UploadConfigurationError: For open streams and raw bytes.
        ValidationError: For path objects that do not exist, or any other
            unsupported type.
    """
    if isinstance(value, InputFile):
        return value
    if isinstance(value, str):
        if is_remote_reference(value):
            return value
        return InputFile.from_path(value)
    if isinstance(value, os.PathLike):
        return InputFile.from_path(value)
    if isinstance(value, (bytes, bytearray, memoryview)) or is_stream(value):
        raise UploadConfigurationError(field)
    raise ValidationError(
        f"Parameter '{field}' must be a file_id, URL, local path or InputFile, got {type(value).__name__}"
    )
