"""HTTP transport for the Mixpanel ingestion API."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

import aiohttp
from yarl import URL

from pymixpanel._constants import USER_AGENT
from pymixpanel.config import MixpanelConfig
from pymixpanel.exceptions import MixpanelTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the client.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete.
    """

    async def get(self, path: str, query: str) -> tuple[int, str]:
        ...


class HttpTransport:
    """Issue a single GET per call and return ``(status, body)``."""

    def __init__(self, config: MixpanelConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session

    def build_url(self, path: str, query: str) -> URL:
        # The query is already form-encoded; keep yarl from re-quoting it.
        return URL(f"{self._config.base_url}{path}?{query}", encoded=True)

    async def get(self, path: str, query: str) -> tuple[int, str]:
        url = self.build_url(path, query)
        _logger.debug("GET %s%s", self._config.base_url, path)

        try:
            async with self._http.get(url, headers={"user-agent": USER_AGENT}) as resp:
                # Proxy error pages are not always valid UTF-8.
                text = await resp.text(errors="replace")
                return resp.status, text
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
            raise MixpanelTransportError(
                f"Request to {path} failed: {exc}",
                endpoint=path,
                cause=exc,
            ) from exc
