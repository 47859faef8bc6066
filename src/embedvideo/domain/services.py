"""Service profiles and the read-only registry that holds them."""
from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_RATIO: float = 4 / 3


class ServiceProfile(BaseModel):
    """How to turn an identifier into embeddable markup for one provider.

    Notes
    -----
    - ``url`` placeholders: ``{id}``, ``{width}``, ``{height}``.
    - ``extern`` overrides ``url`` when present; it additionally understands
      ``{script_path}`` and ``{url}`` (a resolved playback URL).
    - ``lookup_url`` is the provider endpoint used to resolve a playback URL
      from the raw id, for services whose id cannot be embedded directly.
    - ``oembed_url`` delegates markup to the provider's oEmbed descriptor.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Unique service key")
    url: str = Field(default="", description="Embed URL template")
    extern: Optional[str] = Field(default=None, description="Full markup template overriding the URL template")
    default_width: Optional[int] = Field(default=None, gt=0, description="Width used when none is requested")
    default_ratio: Optional[float] = Field(default=None, gt=0, description="Width / height ratio")
    lookup_url: Optional[str] = Field(default=None, description="Playback URL lookup endpoint template")
    oembed_url: Optional[str] = Field(default=None, description="oEmbed endpoint template")

    @property
    def ratio(self) -> float:
        return self.default_ratio if self.default_ratio is not None else DEFAULT_RATIO


class ServiceRegistry(Mapping[str, ServiceProfile]):
    """Immutable name → profile mapping, safe to share between requests."""

    def __init__(self, profiles: Iterable[ServiceProfile], enabled: Optional[Iterable[str]] = None) -> None:
        allowed: Optional[set[str]] = set(enabled) if enabled is not None else None
        table: dict[str, ServiceProfile] = {}
        for profile in profiles:
            if allowed is not None and profile.name not in allowed:
                continue
            table[profile.name] = profile
        self._profiles: Mapping[str, ServiceProfile] = MappingProxyType(table)

    def __getitem__(self, name: str) -> ServiceProfile:
        return self._profiles[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._profiles)

    def __len__(self) -> int:
        return len(self._profiles)


_IFRAME_16_9: float = 16 / 9

BUILTIN_PROFILES: tuple[ServiceProfile, ...] = (
    ServiceProfile(
        name="youtube",
        url="https://www.youtube.com/embed/{id}",
        default_width=640,
        default_ratio=_IFRAME_16_9,
    ),
    ServiceProfile(
        name="youtubehd",
        url="https://www.youtube.com/embed/{id}?vq=hd720",
        default_width=853,
        default_ratio=_IFRAME_16_9,
    ),
    ServiceProfile(name="vimeo", url="https://player.vimeo.com/video/{id}", default_ratio=_IFRAME_16_9),
    ServiceProfile(name="dailymotion", url="https://www.dailymotion.com/embed/video/{id}"),
    ServiceProfile(
        name="archiveorg",
        url="https://archive.org/embed/{id}",
        default_width=320,
        default_ratio=320 / 263,
    ),
    ServiceProfile(
        name="rutube",
        url="https://rutube.ru/play/embed/{id}",
        lookup_url="https://rutube.ru/api/oembed/?url=https://rutube.ru/video/{id}/&format=json",
        default_ratio=_IFRAME_16_9,
    ),
    ServiceProfile(
        name="yandex",
        extern=(
            '<iframe src="{url}" width="{width}" height="{height}" '
            'frameborder="0" allowfullscreen="true"></iframe>'
        ),
        lookup_url="https://video.yandex.ru/oembed.xml?url=https://video.yandex.ru/users/{id}",
    ),
    ServiceProfile(
        name="yandexvideo",
        extern=(
            '<iframe src="{url}" width="{width}" height="{height}" '
            'frameborder="0" allowfullscreen="true"></iframe>'
        ),
        lookup_url="https://video.yandex.ru/oembed.xml?url=https://video.yandex.ru/users/{id}",
    ),
    ServiceProfile(
        name="screen9",
        default_width=640,
        default_ratio=_IFRAME_16_9,
    ),
    ServiceProfile(
        name="soundcloud",
        oembed_url="https://soundcloud.com/oembed?format=json&url={id}",
        default_width=400,
        default_ratio=1.0,
    ),
    ServiceProfile(
        name="html5",
        extern=(
            '<video src="{id}" width="{width}" height="{height}" controls="controls" '
            'preload="metadata"></video>'
        ),
    ),
)


def default_registry(enabled: Optional[Iterable[str]] = None) -> ServiceRegistry:
    """Return the built-in registry, restricted to ``enabled`` when given."""

    return ServiceRegistry(BUILTIN_PROFILES, enabled)
