"""Message catalog for user-facing text.

The host normally owns localization; ``MessageCatalog`` is the seam it plugs
into. The bundled English catalog is used when nothing else is supplied.
"""
from __future__ import annotations

import html
from typing import Mapping

ENGLISH: dict[str, str] = {
    "embedvideo-error": "EmbedVideo could not render this video.",
    "embedvideo-missing-params": "EmbedVideo is missing a required parameter.",
    "embedvideo-unrecognized-service": 'EmbedVideo does not recognize the video service "{0}".',
    "embedvideo-illegal-width": 'EmbedVideo received the illegal width parameter "{0}".',
    "embedvideo-illegal-alignment": 'EmbedVideo received the illegal alignment parameter "{0}".',
    "embedvideo-bad-id": 'EmbedVideo received the bad id "{0}" for the service "{1}".',
    "embedvideo-illegal-service-id": 'EmbedVideo received an identifier the service "{0}" cannot parse.',
    "embedvideo-unresolved-url": 'EmbedVideo could not look up the video "{1}" on the service "{0}".',
    "ev_video_short_desc": "{0}, {1} × {2} pixels",
    "ev_video_short_desc_size": "{0}, {1} × {2} pixels, file size: {3}",
    "ev_video_long_desc": "{0} video file, {1}, length {2}, {3} × {4} pixels, {5} overall",
    "ev_media_generic_desc": "Media file",
    "ev_media_generic_desc_size": "Media file, file size: {0}",
}


class MessageCatalog:
    """Key → template lookup with ``str.format`` positional arguments."""

    def __init__(self, messages: Mapping[str, str] | None = None) -> None:
        self._messages: dict[str, str] = dict(ENGLISH)
        if messages:
            self._messages.update(messages)

    def text(self, key: str, *args: object) -> str:
        """Return the message for ``key``; unknown keys render as ``⧼key⧽``."""

        template: str | None = self._messages.get(key)
        if template is None:
            return f"⧼{key}⧽"
        return template.format(*args)

    def error_box(self, key: str, *args: str) -> str:
        """Render an inline error block with every argument HTML-escaped."""

        escaped: list[str] = [html.escape(a) for a in args]
        return f'<div class="errorbox">{self.text(key, *escaped)}</div>'
