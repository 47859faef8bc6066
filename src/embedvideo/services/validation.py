"""Parameter validation and normalization for embed requests."""
from __future__ import annotations

import html
import math
import re
from typing import Callable, Optional

from embedvideo.core.config import EmbedLimits
from embedvideo.domain.embed import ResolvedEmbed
from embedvideo.domain.services import ServiceProfile
from embedvideo.exceptions import InvalidAlignmentError, InvalidIdentifierError, InvalidWidthError

InlineExpander = Callable[[str], str]

ALIGNMENTS: frozenset[str] = frozenset({"left", "right", "center", "auto"})
NUMERIC_WIDTH = re.compile(r"[+-]?[0-9]+(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?")


def escape_inline(text: str) -> str:
    """Default inline expansion: no wiki markup, just HTML escaping."""

    return html.escape(text, quote=False)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or value.strip() == ""


def resolve_width(profile: ServiceProfile, raw_width: Optional[str], limits: EmbedLimits) -> int:
    """Return the embed width.

    Notes
    -----
    - Blank, absent or ``*`` falls back to the profile's default width, then to
      ``limits.default_width``. Defaults are not bounds-checked.
    - Anything else must be an integral number inside
      ``[limits.min_width, limits.max_width]``.

    Raises
    ------
    InvalidWidthError
        If the width is non-numeric, fractional or out of bounds.
    """

    if _is_blank(raw_width) or raw_width.strip() == "*":
        return profile.default_width or limits.default_width

    text: str = raw_width.strip()
    if not NUMERIC_WIDTH.fullmatch(text):
        raise InvalidWidthError(text)
    try:
        value: float = float(text)
    except ValueError as ex:
        raise InvalidWidthError(text) from ex
    if not math.isfinite(value) or not value.is_integer():
        raise InvalidWidthError(text)
    if not limits.min_width <= value <= limits.max_width:
        raise InvalidWidthError(text)
    return int(value)


def compute_height(width: int, ratio: float) -> int:
    """``round(width / ratio)`` with halves rounded away from zero."""

    return max(1, math.floor(width / ratio + 0.5))


def resolve_alignment(raw_align: Optional[str]) -> Optional[str]:
    """Return the CSS class for an alignment, or None when none was requested.

    Raises
    ------
    InvalidAlignmentError
        If the alignment is not left, right, center or auto.
    """

    if _is_blank(raw_align):
        return None
    align: str = raw_align.strip()
    if align not in ALIGNMENTS:
        raise InvalidAlignmentError(align)
    if align in ("left", "right"):
        return f"t{align}"
    return align


def description_markup(raw_description: Optional[str], expand: InlineExpander) -> str:
    if raw_description is None or raw_description == "":
        return ""
    return f'<div class="thumbcaption">{expand(raw_description)}</div>'


def sanitize_id(service: str, video_id: str) -> str:
    """HTML-escape the identifier; an empty result is rejected."""

    escaped: str = html.escape(video_id)
    if not escaped:
        raise InvalidIdentifierError(video_id, service)
    return escaped


def normalize(
    profile: ServiceProfile,
    video_id: str,
    raw_width: Optional[str],
    raw_align: Optional[str],
    raw_description: Optional[str],
    limits: EmbedLimits,
    expand: InlineExpander = escape_inline,
) -> ResolvedEmbed:
    """Validate and fill in the parameters of one embed.

    Checks run in order width, alignment, identifier; the first failure wins.
    The caption is only rendered for aligned embeds.
    """

    width: int = resolve_width(profile, raw_width, limits)
    height: int = compute_height(width, profile.ratio)
    alignment_class: Optional[str] = resolve_alignment(raw_align)
    escaped_id: str = sanitize_id(profile.name, video_id)
    caption: str = description_markup(raw_description, expand) if alignment_class is not None else ""
    return ResolvedEmbed(
        id=escaped_id,
        width=width,
        height=height,
        alignment_class=alignment_class,
        description_markup=caption,
    )
