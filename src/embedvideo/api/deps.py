"""FastAPI dependencies: process-wide resolver, fetcher and catalog."""
from __future__ import annotations

from functools import lru_cache

from embedvideo.core.config import EmbedLimits, Settings, get_settings
from embedvideo.domain.services import ServiceRegistry, default_registry
from embedvideo.infra.http import HttpFetcher
from embedvideo.infra.messages import MessageCatalog
from embedvideo.services.resolver import EmbedResolver


@lru_cache(maxsize=1)
def get_fetcher() -> HttpFetcher:
    """Single configured HTTP client for lookups and oEmbed requests."""

    return HttpFetcher.from_settings(get_settings())


@lru_cache(maxsize=1)
def get_catalog() -> MessageCatalog:
    return MessageCatalog()


@lru_cache(maxsize=1)
def get_registry() -> ServiceRegistry:
    return default_registry(get_settings().enabled_services)


@lru_cache(maxsize=1)
def get_resolver() -> EmbedResolver:
    """Build the resolver once; limits are snapshotted from settings here."""

    settings: Settings = get_settings()
    return EmbedResolver(
        registry=get_registry(),
        limits=EmbedLimits.from_settings(settings),
        fetcher=get_fetcher(),
        catalog=get_catalog(),
        script_path=settings.script_path,
    )


def reset_dependencies() -> None:
    """Drop every cached instance, settings included."""

    for cached in (get_resolver, get_registry, get_catalog, get_fetcher, get_settings):
        cached.cache_clear()
