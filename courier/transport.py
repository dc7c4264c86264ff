"""Pluggable HTTP transport.

Anything that satisfies :class:`HttpTransport` can carry requests; the
default :class:`RequestsTransport` uses a :class:`requests.Session`.  A
transport only moves bytes: it never interprets the body and raises
:class:`~courier.exceptions.TransportError` for network-level failures.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, List, Mapping, Optional, Protocol, Sequence, Tuple, runtime_checkable

import requests

from courier.exceptions import TransportError

logger = logging.getLogger("courier.transport")

FileTuple = Tuple[str, Tuple[Optional[str], Any]]


@dataclasses.dataclass(frozen=True, slots=True)
class RawResponse:
    """Status code and undecoded body of one HTTP exchange."""

    status_code: int
    content: bytes


@runtime_checkable
class HttpTransport(Protocol):
    """Capability required from an HTTP client."""

    def send(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Mapping[str, str]] = None,
        data: Optional[Mapping[str, str]] = None,
        files: Optional[Sequence[FileTuple]] = None,
        timeout: Tuple[float, float],
    ) -> RawResponse: ...  # noqa: E704

    def close(self) -> None: ...  # noqa: E704


class RequestsTransport:
    """Blocking transport backed by :mod:`requests`."""

    def __init__(self, session: Optional[requests.Session] = None) -> None:
        self._owns_session = session is None
        self._session = session or requests.Session()

    def send(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Mapping[str, str]] = None,
        data: Optional[Mapping[str, str]] = None,
        files: Optional[Sequence[FileTuple]] = None,
        timeout: Tuple[float, float],
    ) -> RawResponse:
        """Perform one HTTP exchange.

        Raises:
            TransportError: On connection, DNS, TLS or timeout failures.
        """
        try:
            response = self._session.request(
                method,
                url,
                params=params,
                data=data,
                files=list(files) if files else None,
                timeout=timeout,
            )
        except requests.RequestException as exc:
            raise TransportError(f"{method} request failed: {type(exc).__name__}") from exc
        return RawResponse(status_code=response.status_code, content=response.content)

    def close(self) -> None:
        if self._owns_session:
            self._session.close()


def requests_files(parts: Sequence[Any]) -> List[FileTuple]:
    """Map multipart parts onto the ``files=`` list format of ``requests``."""
    return [part.as_requests_file() for part in parts]
