"""Send built requests through a transport and classify the outcome.

Thread-safety: the ``last_response`` slot is a plain attribute shared by every
call made through one :class:`Dispatcher`.  With overlapping fire-and-forget
calls it holds whichever call *finished* last.  Callers that need the result
of a specific async call must keep the :class:`~concurrent.futures.Future`
returned by :meth:`Dispatcher.send`.
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional, Union

from courier.exceptions import ApiError, TransportError
from courier.request import OutboundRequest, RequestEncoding
from courier.response import InboundResponse
from courier.transport import HttpTransport, RequestsTransport, requests_files

logger = logging.getLogger("courier.dispatcher")

DEFAULT_BASE_URL = "https://api.telegram.org"


class Dispatcher:
    """Single-attempt request dispatcher.  No retries, no rate limiting."""

    _MAX_WORKERS: int = 4

    def __init__(
        self,
        transport: Optional[HttpTransport] = None,
        base_url: str = DEFAULT_BASE_URL,
        max_workers: int = _MAX_WORKERS,
    ) -> None:
        self._transport: HttpTransport = transport or RequestsTransport()
        self._base_url = base_url.rstrip("/")
        self._max_workers = max_workers
        self._executor: Optional[ThreadPoolExecutor] = None
        self._last_response: Optional[InboundResponse] = None

    @property
    def transport(self) -> HttpTransport:
        return self._transport

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def last_response(self) -> Optional[InboundResponse]:
        """The most recent successful response, or ``None`` before the first one."""
        return self._last_response

    def send(self, request: OutboundRequest) -> Union[InboundResponse, "Future[InboundResponse]"]:
        """Dispatch *request*.

        Blocking requests return the :class:`InboundResponse`.  Async requests
        are submitted to a worker pool and return a future immediately; errors
        surface through the future.

        Raises:
            TransportError: Network failure or malformed envelope.
            ApiError: The envelope reported ``"ok": false``.
        """
        if request.is_async:
            return self._get_executor().submit(self._exchange, request)
        return self._exchange(request)

    async def asend(self, request: OutboundRequest) -> InboundResponse:
        """Run the blocking exchange in a thread to keep the event loop free."""
        return await asyncio.to_thread(self._exchange, request)

    def close(self) -> None:
        """Wait for in-flight async calls, then release the transport."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        self._transport.close()

    # ------------------------------------------------------------------
    #  Internal helpers
    # ------------------------------------------------------------------

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="courier")
        return self._executor

    def _exchange(self, request: OutboundRequest) -> InboundResponse:
        params = data = files = None
        if request.encoding is RequestEncoding.QUERY:
            params = dict(request.params)
        elif request.encoding is RequestEncoding.FORM:
            data = dict(request.params)
        else:
            files = requests_files(request.parts)

        logger.debug(
            "Dispatching request",
            extra={"api_endpoint": request.endpoint, "http_method": request.method, "encoding": request.encoding.value},
        )
        try:
            raw = self._transport.send(
                request.method,
                request.url(self._base_url),
                params=params,
                data=data,
                files=files,
                timeout=(request.connect_timeout, request.timeout),
            )
        except TransportError as exc:
            logger.error("Transport failure", extra={"api_endpoint": request.endpoint, "error": str(exc)})
            raise
        except Exception as exc:
            logger.error("Transport failure", extra={"api_endpoint": request.endpoint, "error": type(exc).__name__})
            raise TransportError(f"{request.method} request failed: {type(exc).__name__}") from exc

        response = InboundResponse.parse(request, raw.status_code, raw.content)
        if not response.is_ok:
            logger.warning(
                "API returned an error",
                extra={
                    "api_endpoint": request.endpoint,
                    "status_code": raw.status_code,
                    "error_code": response.error_code,
                    "description": response.description,
                },
            )
            raise ApiError(
                response.error_code,
                response.description,
                status_code=raw.status_code,
                parameters=response.envelope.parameters,
            )

        self._last_response = response
        return response
