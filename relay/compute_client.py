# relay/compute_client.py
import time
from typing import Any, Dict, Optional, Tuple

import httpx

from relay.config import Settings
from relay.errors import UpstreamError


class ComputeClient:
    """
    Thin async client for the compute collaborator's GET /compute.

    fetch() returns (body, elapsed_ms) where elapsed_ms is measured by the relay
    between issuing the request and receiving the full response.
    Raises UpstreamError on transport errors, timeouts, non-2xx status,
    or a body that is not a JSON object with a "time" field.
    """

    def __init__(self, url: str, http: Optional[httpx.AsyncClient] = None, timeout: float = 30.0):
        self.url = url
        self._owns_http = http is None
        self.http = http if http is not None else httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings, http: Optional[httpx.AsyncClient] = None) -> "ComputeClient":
        return cls(settings.compute_url, http=http, timeout=settings.compute_timeout)

    async def fetch(self) -> Tuple[Dict[str, Any], int]:
        start = time.perf_counter()
        try:
            resp = await self.http.get(self.url)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise UpstreamError(f"compute returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"compute request failed: {e!r}") from e
        elapsed_ms = max(0, int(round((time.perf_counter() - start) * 1000)))

        try:
            body = resp.json()
        except ValueError as e:
            raise UpstreamError("compute returned a non-JSON body") from e
        if not isinstance(body, dict) or "time" not in body:
            raise UpstreamError("compute response has no 'time' field")
        return body, elapsed_ms

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()
