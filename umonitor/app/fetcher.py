import logging
from typing import List, Optional

import httpx

from .config import MonitorConfig
from .models import TargetRecord, parse_records

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """The status feed could not be read: transport failure, timeout or bad payload."""


class StatusFetcher:
    def __init__(self, config: MonitorConfig, client: Optional[httpx.AsyncClient] = None):
        self.url = config.status_url
        self.user_agent = config.user_agent
        self.timeout = httpx.Timeout(config.fetch_timeout_s, connect=config.connect_timeout_s)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            limits=httpx.Limits(max_connections=2, max_keepalive_connections=2))

    async def fetch(self) -> List[TargetRecord]:
        try:
            r = await self._client.get(
                self.url,
                headers={"User-Agent": self.user_agent, "Accept": "application/json"},
                timeout=self.timeout,
            )
            r.raise_for_status()
            data = r.json()
        except httpx.HTTPError as e:
            raise FetchError(f"{type(e).__name__}: {e}") from e
        except ValueError as e:
            raise FetchError(f"malformed payload: {e}") from e

        if not isinstance(data, list):
            raise FetchError(f"expected a JSON array, got {type(data).__name__}")
        try:
            return parse_records(data)
        except (TypeError, ValueError, OverflowError) as e:
            raise FetchError(f"malformed payload: {e}") from e

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
