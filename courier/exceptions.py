"""Exception hierarchy for the Courier Bot API client."""

from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

if TYPE_CHECKING:
    from courier.models import ResponseParameters


class CourierError(Exception):
    """Base class for every error raised by the client."""


class ValidationError(CourierError):
    """Caller-supplied parameters are malformed or incomplete.

    Raised before any network activity takes place.
    """


class UploadConfigurationError(CourierError):
    """An unmanaged stream or raw bytes were passed where a file was expected.

    Attributes:
        field: Name of the parameter that held the offending value.
    """

    def __init__(self, field: str, message: Optional[str] = None) -> None:
        self.field = field
        super().__init__(
            message
            or f"Parameter '{field}' holds a raw stream or bytes; wrap it with "
            f"InputFile.from_stream() or InputFile.from_bytes() before uploading."
        )


class TransportError(CourierError):
    """Network failure, timeout, or a response body that is not a valid envelope.

    Attributes:
        status_code: HTTP status of the response, when one was received.
        body: Raw response body, when one was received.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[bytes] = None) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class ApiError(CourierError):
    """The API answered with ``"ok": false``.

    Attributes:
        error_code: ``error_code`` from the envelope, unchanged.
        description: ``description`` from the envelope, unchanged.
        status_code: HTTP status code (informational only).
        parameters: Optional ``parameters`` object (``retry_after`` etc.).
    """

    def __init__(
        self,
        error_code: Any,
        description: Any,
        status_code: Optional[int] = None,
        parameters: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.error_code = error_code
        self.description = description
        self.status_code = status_code
        self.parameters = parameters or {}
        super().__init__(f"API error {error_code}: {description or 'Unknown error'}")

    @property
    def response_parameters(self) -> Optional["ResponseParameters"]:
        """``parameters`` as a :class:`~courier.models.ResponseParameters`, or ``None``."""
        from courier.hydration import hydrate
        from courier.models import ResponseParameters

        if not isinstance(self.parameters, Mapping) or not self.parameters:
            return None
        return hydrate(self.parameters, ResponseParameters)


class HydrationError(CourierError):
    """A declared relation holds a value of the wrong shape.

    Attributes:
        owner: Name of the domain type that declares the relation.
        field: Relation field name.
        value: The offending raw value.
    """

    def __init__(self, owner: str, field: Optional[str], value: Any, expected: str) -> None:
        self.owner = owner
        self.field = field
        self.value = value
        location = f"{owner}.{field}" if field else owner
        super().__init__(f"Cannot hydrate {location}: expected {expected}, got {type(value).__name__}")
