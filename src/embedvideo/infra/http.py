"""Blocking HTTP fetches for provider lookups and oEmbed descriptors."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from email.utils import formatdate
from typing import Optional

import httpx

from embedvideo.core.config import Settings

logger = logging.getLogger(__name__)

USER_AGENT_PREFIX: str = "EmbedVideo/1.0"


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one GET: the body on success, the reason otherwise."""

    text: Optional[str] = None
    status_code: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.text is not None


class HttpFetcher:
    """One configured ``httpx.Client`` shared by every outbound lookup.

    Notes
    -----
    - Connect and overall timeouts both come from ``timeout``.
    - Redirects are followed up to ``max_redirects``.
    - Requests are never retried; failures come back as a ``FetchResult``
      without a body instead of raising.
    """

    def __init__(
        self,
        server: str = "http://localhost",
        timeout: float = 10.0,
        max_redirects: int = 10,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.user_agent: str = f"{USER_AGENT_PREFIX}/{server}"
        self._client: httpx.Client = httpx.Client(
            timeout=httpx.Timeout(timeout, connect=timeout),
            follow_redirects=True,
            max_redirects=max_redirects,
            headers={"User-Agent": self.user_agent},
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[httpx.BaseTransport] = None) -> "HttpFetcher":
        return cls(
            server=settings.server,
            timeout=settings.http_timeout,
            max_redirects=settings.max_redirects,
            transport=transport,
        )

    def get(self, url: str) -> FetchResult:
        """GET ``url`` and return its body, or the reason there is none."""

        headers: dict[str, str] = {"Date": formatdate(usegmt=True)}
        try:
            response: httpx.Response = self._client.get(url, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as ex:
            logger.warning("GET %s returned HTTP %d", url, ex.response.status_code)
            return FetchResult(status_code=ex.response.status_code, error=str(ex))
        except (httpx.HTTPError, httpx.InvalidURL) as ex:
            logger.warning("GET %s failed: %s", url, ex)
            return FetchResult(error=str(ex))
        logger.debug("GET %s returned %d bytes", url, len(response.content))
        return FetchResult(text=response.text, status_code=response.status_code)

    def close(self) -> None:
        self._client.close()
