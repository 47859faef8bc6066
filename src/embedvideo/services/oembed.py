"""oEmbed client: fetch a provider descriptor and pull the iframe out of it."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from embedvideo.infra.http import FetchResult, HttpFetcher

logger = logging.getLogger(__name__)

HtmlNarrower = Callable[[str], str]


def first_iframe(markup: str) -> str:
    """Return the first ``<iframe`` through the first ``</iframe>``, inclusive.

    Plain substring search, not parsing. Markup without an iframe is returned
    unchanged.
    """

    start: int = markup.find("<iframe")
    if start == -1:
        return markup
    end: int = markup.find("</iframe>", start)
    if end == -1:
        return markup[start:]
    return markup[start : end + len("</iframe>")]


class OEmbed:
    """Read-only view over an oEmbed descriptor; every accessor may return None."""

    def __init__(self, data: dict[str, Any], narrow_html: HtmlNarrower = first_iframe) -> None:
        self._data: dict[str, Any] = data
        self._narrow_html: HtmlNarrower = narrow_html

    @property
    def data(self) -> dict[str, Any]:
        return dict(self._data)

    def get_html(self) -> Optional[str]:
        html: Any = self._data.get("html")
        if not isinstance(html, str):
            return None
        return self._narrow_html(html)

    def _text(self, key: str) -> Optional[str]:
        value: Any = self._data.get(key)
        return str(value) if value is not None else None

    def _int(self, key: str) -> Optional[int]:
        value: Any = self._data.get(key)
        if value is None:
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None

    def get_title(self) -> Optional[str]:
        return self._text("title")

    def get_author_name(self) -> Optional[str]:
        return self._text("author_name")

    def get_author_url(self) -> Optional[str]:
        return self._text("author_url")

    def get_provider_name(self) -> Optional[str]:
        return self._text("provider_name")

    def get_provider_url(self) -> Optional[str]:
        return self._text("provider_url")

    def get_width(self) -> Optional[int]:
        return self._int("width")

    def get_height(self) -> Optional[int]:
        return self._int("height")

    def get_thumbnail_width(self) -> Optional[int]:
        return self._int("thumbnail_width")

    def get_thumbnail_height(self) -> Optional[int]:
        return self._int("thumbnail_height")


class FetchStatus(str, Enum):
    """Why an oEmbed descriptor is, or is not, available."""

    OK = "ok"
    UNAVAILABLE = "unavailable"
    PARSE_FAILURE = "parse_failure"


@dataclass(frozen=True)
class OEmbedResult:
    status: FetchStatus
    oembed: Optional[OEmbed] = field(default=None)

    @property
    def ok(self) -> bool:
        return self.status is FetchStatus.OK


def parse_oembed(body: str, narrow_html: HtmlNarrower = first_iframe) -> OEmbedResult:
    """Parse a descriptor body; anything but a JSON object is a parse failure."""

    try:
        data: Any = json.loads(body)
    except json.JSONDecodeError as ex:
        logger.warning("oEmbed body is not valid JSON: %s", ex)
        return OEmbedResult(FetchStatus.PARSE_FAILURE)
    if not isinstance(data, dict) or not data:
        logger.warning("oEmbed body is not a JSON object")
        return OEmbedResult(FetchStatus.PARSE_FAILURE)
    return OEmbedResult(FetchStatus.OK, OEmbed(data, narrow_html))


def fetch_oembed(url: str, fetcher: HttpFetcher, narrow_html: HtmlNarrower = first_iframe) -> OEmbedResult:
    """Fetch and parse the oEmbed descriptor at ``url``.

    Parameters
    ----------
    url: str
        Full oEmbed endpoint URL, including the target video's URL.
    fetcher: HttpFetcher
        Configured HTTP client (timeouts, user agent, redirect cap).
    narrow_html: HtmlNarrower
        Strategy cutting the playable fragment out of the ``html`` field.

    Returns
    -------
    OEmbedResult
        ``UNAVAILABLE`` on transport errors or non-success status,
        ``PARSE_FAILURE`` when the body is not a JSON object.
    """

    fetched: FetchResult = fetcher.get(url)
    if not fetched.ok or fetched.text is None:
        return OEmbedResult(FetchStatus.UNAVAILABLE)
    return parse_oembed(fetched.text, narrow_html)
