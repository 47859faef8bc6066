"""Service-specific steps that run before generic templating.

Some providers cannot embed their raw ids: the playback URL has to be looked
up first (rutube, yandex). Others use structured ids that must be decomposed
(screen9).
"""
from __future__ import annotations

import html
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Optional
from urllib.parse import quote

from embedvideo.domain.embed import ResolvedEmbed
from embedvideo.domain.services import ServiceProfile
from embedvideo.infra.http import FetchResult, HttpFetcher
from embedvideo.services.markup import substitute

logger = logging.getLogger(__name__)


def extract_between(text: str, start_marker: str, end_marker: str) -> str:
    """Return the text after the first ``start_marker`` up to the next ``end_marker``.

    An empty string means either marker was not found.
    """

    start: int = text.find(start_marker)
    if start == -1:
        return ""
    start += len(start_marker)
    end: int = text.find(end_marker, start)
    if end == -1:
        return ""
    return text[start:end]


def _oembed_html(body: str) -> str:
    try:
        data: Any = json.loads(body)
    except ValueError:
        return body
    if isinstance(data, dict) and isinstance(data.get("html"), str):
        return data["html"]
    return body


def rutube_playback_url(body: str) -> str:
    """The player URL sits in the first ``value="…"`` attribute of the oEmbed html.

    A body that is not a JSON object with an ``html`` string is searched as is.
    """

    return extract_between(_oembed_html(body), 'value="', '"></')


def yandex_playback_url(body: str) -> str:
    return html.unescape(extract_between(body, "<html>", "</html>")).strip()


PlaybackUrlExtractor = Callable[[str], str]


@dataclass(frozen=True)
class PlaybackUrlLookup:
    """Resolves a raw id to a playback URL through the profile's ``lookup_url``."""

    extract: PlaybackUrlExtractor

    def __call__(self, profile: ServiceProfile, video_id: str, fetcher: HttpFetcher) -> str:
        if not profile.lookup_url:
            return ""
        url: str = substitute(profile.lookup_url, {"id": quote(video_id, safe="")})
        fetched: FetchResult = fetcher.get(url)
        if not fetched.ok or fetched.text is None:
            return ""
        playback_url: str = self.extract(fetched.text)
        if not playback_url:
            logger.warning("No playback URL in %s lookup response for %s", profile.name, video_id)
        return playback_url


PLAYBACK_URL_LOOKUPS: dict[str, PlaybackUrlLookup] = {
    "rutube": PlaybackUrlLookup(rutube_playback_url),
    "yandex": PlaybackUrlLookup(yandex_playback_url),
    "yandexvideo": PlaybackUrlLookup(yandex_playback_url),
}


_SCREEN9_WRAPPER = re.compile(r"^\s*screen9\.api\.embed\s*\((.*)\)\s*;?\s*$", re.DOTALL)
_SCREEN9_TOKEN = re.compile(r"^[A-Za-z0-9_\-]+$")


@dataclass(frozen=True)
class Screen9Id:
    """A decomposed screen9 embed identifier."""

    mediaid: str
    token: str
    options: dict[str, Any]

    @classmethod
    def parse(cls, raw: str) -> Optional["Screen9Id"]:
        """Parse a JSON object, optionally wrapped in ``screen9.api.embed(...)``.

        ``mediaid`` and ``token`` are required and limited to letters, digits,
        ``_`` and ``-``. Any other keys are passed through as player options.
        """

        match = _SCREEN9_WRAPPER.match(raw)
        payload: str = match.group(1) if match else raw
        try:
            data: Any = json.loads(payload)
        except json.JSONDecodeError:
            return None
        if not isinstance(data, dict):
            return None
        mediaid: Any = data.pop("mediaid", None)
        token: Any = data.pop("token", None)
        for value in (mediaid, token):
            if not isinstance(value, str) or not _SCREEN9_TOKEN.match(value):
                return None
        data.pop("containerid", None)
        data.pop("width", None)
        data.pop("height", None)
        return cls(mediaid=mediaid, token=token, options=data)

    def to_markup(self, width: int, height: int) -> str:
        container: str = f"screen9-{self.mediaid}"
        params: dict[str, Any] = {
            "mediaid": self.mediaid,
            "token": self.token,
            "containerid": container,
            "width": width,
            "height": height,
            **self.options,
        }
        # Keep the JSON from closing the script element early.
        encoded: str = json.dumps(params, sort_keys=True).replace("</", "<\\/")
        return (
            f'<div id="{container}"></div>'
            '<script type="text/javascript" src="//api.screen9.com/player/embed.js"></script>'
            f'<script type="text/javascript">screen9.api.embed({encoded});</script>'
        )


def screen9_transform(raw_id: str, embed: ResolvedEmbed) -> Optional[str]:
    parsed: Optional[Screen9Id] = Screen9Id.parse(raw_id)
    if parsed is None:
        return None
    return parsed.to_markup(embed.width, embed.height)


CustomTransform = Callable[[str, ResolvedEmbed], Optional[str]]

CUSTOM_TRANSFORMS: dict[str, CustomTransform] = {
    "screen9": screen9_transform,
}
