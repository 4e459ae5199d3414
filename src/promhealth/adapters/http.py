"""httpx adapter for fetching metrics and alerts endpoints.

Requests are made once: there are no retries, and no timeout unless one
is configured. Failures surface as FetchError naming the stage that failed.
"""

from types import TracebackType

import httpx

from promhealth.core.errors import FetchError
from promhealth.core.logs import get_logger

logger = get_logger(__name__)


class HttpEndpointSource:
    """EndpointSourcePort implementation backed by ``httpx.AsyncClient``.

    Example:
        ```python
        async with HttpEndpointSource(timeout=10) as source:
            body = await source.fetch("http://localhost:9419/metrics")
        ```
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the source.

        Args:
            client: Client to use. A client passed in is owned by the caller
                and is not closed by aclose().
            timeout: Request timeout in seconds when creating a client.
                None waits indefinitely.
        """
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient(timeout=timeout)

    async def fetch(self, url: str) -> str:
        """GET ``url`` and return the response body as text.

        Raises:
            FetchError: On transport failure (stage "request") or a non-2xx
                status (stage "status"). Bodies are read in full by the
                request, so an undeclared or unknown charset falls back to
                UTF-8 rather than failing.
        """
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as e:
            logger.warning("Request to %s failed: %s", url, e)
            raise FetchError(url, "request", f"could not query endpoint: {e}") from e

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning("%s answered with HTTP %d", url, response.status_code)
            raise FetchError(
                url, "status", f"endpoint answered HTTP {response.status_code}"
            ) from e

        return response.text

    async def aclose(self) -> None:
        """Close the underlying client if this source created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpEndpointSource":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.aclose()
