"""Response envelope parsing and the :class:`InboundResponse` wrapper."""

from __future__ import annotations

import dataclasses
from typing import Any, Dict

from pydantic import BaseModel, StrictBool
from pydantic import ValidationError as PydanticValidationError

from courier.exceptions import TransportError
from courier.request import OutboundRequest


class Envelope(BaseModel):
    """Top-level JSON shape returned by every API call."""

    ok: StrictBool
    result: Any = None
    error_code: Any = None
    description: Any = None
    parameters: Any = None

    model_config = {"extra": "allow"}


@dataclasses.dataclass(frozen=True, slots=True)
class InboundResponse:
    """One HTTP exchange, decoded.

    ``is_ok`` mirrors the envelope's ``ok`` field and ignores the HTTP status.
    """

    request: OutboundRequest
    status_code: int
    body: bytes
    envelope: Envelope

    @property
    def is_ok(self) -> bool:
        return self.envelope.ok

    @property
    def is_error(self) -> bool:
        return not self.envelope.ok

    @property
    def result(self) -> Any:
        return self.envelope.result

    @property
    def error_code(self) -> Any:
        return self.envelope.error_code

    @property
    def description(self) -> Any:
        return self.envelope.description

    @property
    def decoded_body(self) -> Dict[str, Any]:
        return self.envelope.model_dump(exclude_none=True)

    @classmethod
    def parse(cls, request: OutboundRequest, status_code: int, body: bytes) -> "InboundResponse":
        """Decode *body* as an envelope.

        Raises:
            TransportError: If the body is not JSON, not an object, or lacks a
                boolean ``ok`` field.
        """
        try:
            envelope = Envelope.model_validate_json(body)
        except PydanticValidationError as exc:
            raise TransportError(
                f"Malformed response from {request.endpoint}: {exc.errors()[0]['msg']}",
                status_code=status_code,
                body=body,
            ) from exc
        return cls(request=request, status_code=status_code, body=body, envelope=envelope)
