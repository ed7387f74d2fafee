"""
Action Executor

Sends one built request over a shared httpx.AsyncClient and normalizes
the response. Any HTTP status counts as a result; only transport and
read failures are errors.
"""

import logging

import httpx

from eventactions.contracts.types import RunResult
from eventactions.errors import ResponseReadError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class ActionExecutor:
    """
    Executes action requests.

    The client is safe to share between dispatcher workers; its connection
    pool is reused across publishes. A client passed in is borrowed and
    left open by aclose().
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._owns_client = client is None
        self._client = client
        self.timeout = timeout

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client if this executor created it."""
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "ActionExecutor":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def execute(self, request: httpx.Request) -> RunResult:
        """
        Send the request and read the whole response body.

        Raises:
            TransportError: the endpoint could not be reached
            ResponseReadError: the response body could not be read
        """
        client = self._get_client()

        try:
            response = await client.send(request, stream=True)
        except httpx.RequestError as e:
            raise TransportError(
                f"cannot perform request: {e}",
                details={"url": str(request.url), "cause": type(e).__name__},
            ) from e

        try:
            await response.aread()
            body = response.text
        except (httpx.HTTPError, httpx.StreamError) as e:
            raise ResponseReadError(
                f"cannot read response body: {e}",
                details={"url": str(request.url), "status_code": response.status_code},
            ) from e
        finally:
            await response.aclose()

        logger.debug(
            "Action request completed",
            extra={"url": str(request.url), "status_code": response.status_code},
        )

        return RunResult(status_code=response.status_code, body=body)
