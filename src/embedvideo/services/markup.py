"""Markup generation for normalized embeds. No validation happens here."""
from __future__ import annotations

import re
from typing import Mapping

from embedvideo.domain.embed import ResolvedEmbed

_PLACEHOLDER = re.compile(r"\{(script_path|id|width|height|url)\}")


def substitute(template: str, values: Mapping[str, object]) -> str:
    """Replace the known ``{name}`` placeholders, leaving other braces alone."""

    def _repl(match: re.Match[str]) -> str:
        key: str = match.group(1)
        if key not in values:
            return match.group(0)
        return str(values[key])

    return _PLACEHOLDER.sub(_repl, template)


def player_element(url: str, width: int, height: int) -> str:
    return (
        f'<iframe src="{url}" width="{width}" height="{height}" '
        f'frameborder="0" allowfullscreen="true"></iframe>'
    )


def _thumb_wrapper(inner: str, embed: ResolvedEmbed) -> str:
    return (
        f'<div class="thumb {embed.alignment_class}">'
        f'<div class="thumbinner" style="width: {embed.width}px;">'
        f"{inner}{embed.description_markup}"
        "</div></div>"
    )


def generate_plain(url: str, embed: ResolvedEmbed) -> str:
    return player_element(url, embed.width, embed.height)


def generate_aligned(url: str, embed: ResolvedEmbed) -> str:
    return _thumb_wrapper(player_element(url, embed.width, embed.height), embed)


def generate_aligned_extern(clause: str, embed: ResolvedEmbed) -> str:
    return _thumb_wrapper(clause, embed)


def generate(url: str, embed: ResolvedEmbed) -> str:
    """Plain or aligned player element, depending on the requested alignment."""

    if embed.aligned:
        return generate_aligned(url, embed)
    return generate_plain(url, embed)


def wrap_clause(clause: str, embed: ResolvedEmbed) -> str:
    """Ready-made service markup, wrapped only when alignment was requested."""

    if embed.aligned:
        return generate_aligned_extern(clause, embed)
    return clause
