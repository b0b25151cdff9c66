"""
HTTP client for the swarm consensus service.

Sends instructions to POST /v1/ask and maps every failure to a single
RequestError type. Cancellation is cooperative through a CancelToken.

Usage:
    client = ConsensusClient(load_config())
    result = await client.submit("task.reply.email.v1", "finish the task ...")
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Optional

import httpx

from .config import ClientConfig
from .models import AskRequest, ConsensusResult, HealthStatus


logger = logging.getLogger(__name__)


class ErrorKind(Enum):
    TRANSPORT = "transport"
    STATUS = "status"
    MALFORMED = "malformed"
    CANCELLED = "cancelled"


class RequestError(Exception):
    """Raised when a call to the consensus service does not produce a result."""

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.TRANSPORT,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.status_code = status_code


class RequestCancelled(RequestError):
    """Raised when the caller's CancelToken fires before the call completes."""

    def __init__(self, message: str = "Request cancelled"):
        super().__init__(message, kind=ErrorKind.CANCELLED)


class CancelToken:
    """
    Cancellation signal passed into a client call.

    Calling cancel() aborts the in-flight request it was passed to; a token
    that is already cancelled makes new calls fail immediately.
    """

    def __init__(self):
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()


class ConsensusClient:
    """
    Stateless client for the consensus service.

    A fresh httpx.AsyncClient is opened per call, so one instance may be
    shared by concurrent callers.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or ClientConfig()
        self._transport = transport

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.config.origin,
            timeout=self.config.timeout,
            transport=self._transport,
        )

    async def submit(
        self,
        template_id: Optional[str],
        instruction: str,
        cancel: CancelToken | None = None,
    ) -> ConsensusResult:
        """
        Ask the swarm and return the judge's verdict.

        Args:
            template_id: Server-side prompt template; omitted from the
                         payload when None or empty
            instruction: Instruction text, sent verbatim
            cancel: Optional token aborting the call when cancelled

        Raises:
            RequestCancelled: The token fired before the call completed
            RequestError: Transport failure, error status, or malformed body
        """
        request = AskRequest(instruction=instruction, template_id=template_id)
        return await self._with_cancel(
            self._request(
                "POST",
                self.config.ask_path,
                ConsensusResult.from_dict,
                json=request.to_payload(),
            ),
            cancel,
        )

    async def health(self, cancel: CancelToken | None = None) -> HealthStatus:
        """Probe the service health endpoint."""
        return await self._with_cancel(
            self._request("GET", self.config.health_path, HealthStatus.from_dict),
            cancel,
        )

    async def _with_cancel(self, call, cancel: CancelToken | None):
        """Await `call`, racing it against `cancel` so only one outcome is delivered."""
        if cancel is None:
            return await call
        if cancel.cancelled:
            call.close()
            raise RequestCancelled()

        call_task = asyncio.ensure_future(call)
        cancel_task = asyncio.ensure_future(cancel.wait())
        try:
            done, _ = await asyncio.wait(
                {call_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            call_task.cancel()
            cancel_task.cancel()
            raise
        cancel_task.cancel()

        if call_task not in done:
            call_task.cancel()
            # Outcome is cancellation whatever the aborted call ends with
            await asyncio.gather(call_task, return_exceptions=True)
            raise RequestCancelled()
        return call_task.result()

    async def _request(
        self,
        method: str,
        path: str,
        parse: Callable[[Any], Any],
        json: dict[str, Any] | None = None,
    ):
        url = self.config.endpoint(path)
        headers = {"Content-Type": "application/json"} if json is not None else {}
        logger.debug("%s %s", method, url)

        async with self._http_client() as http:
            try:
                async with http.stream(method, url, json=json, headers=headers) as response:
                    logger.debug("%s %s -> %d", method, url, response.status_code)
                    if not response.is_success:
                        raise RequestError(
                            await _error_message(response),
                            kind=ErrorKind.STATUS,
                            status_code=response.status_code,
                        )
                    await response.aread()
            except httpx.HTTPError as e:
                raise RequestError(
                    f"Network error: could not complete request to {url}",
                    kind=ErrorKind.TRANSPORT,
                ) from e

        try:
            return parse(response.json())
        except ValueError as e:
            raise RequestError(
                f"Malformed response from {url}: {e}",
                kind=ErrorKind.MALFORMED,
                status_code=response.status_code,
            ) from e


async def _error_message(response: httpx.Response) -> str:
    """Body text of an error response, or the status code when there is none."""
    try:
        await response.aread()
        text = response.text
    except httpx.HTTPError:
        text = ""
    return text or f"HTTP {response.status_code}"
