"""HTTP API routes for the EmbedVideo service."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from embedvideo.api.deps import get_catalog, get_fetcher, get_registry, get_resolver
from embedvideo.core.config import Settings, get_settings
from embedvideo.domain.embed import EmbedRequest, EmbedResponse, ParserFunctionCall
from embedvideo.domain.probe import MediaMetadata, MediaProbeRequest, MediaProbeResponse
from embedvideo.domain.services import ServiceProfile, ServiceRegistry
from embedvideo.infra.fs import resolve_media_path
from embedvideo.infra.http import HttpFetcher
from embedvideo.infra.messages import MessageCatalog
from embedvideo.services.ffprobe import FFProbe
from embedvideo.services.media import VideoHandler
from embedvideo.services.oembed import OEmbed, OEmbedResult, fetch_oembed
from embedvideo.services.resolver import EmbedResolver

router: APIRouter = APIRouter(prefix="/api", tags=["api"])


@router.post("/embed", response_model=EmbedResponse)
def post_embed(payload: EmbedRequest, resolver: EmbedResolver = Depends(get_resolver)) -> EmbedResponse:
    """Render embed markup for one request in the primary parameter order.

    Notes
    -----
    - Author errors are not HTTP errors: the response carries an inline
      ``errorbox`` fragment the host renders as-is.
    - ``noparse`` and ``isHTML`` are always true.
    """

    return resolver.render(payload)


@router.post("/parser/{name}", response_model=EmbedResponse)
def post_parser_function(
    name: str,
    payload: ParserFunctionCall,
    resolver: EmbedResolver = Depends(get_resolver),
) -> EmbedResponse:
    """Dispatch positional arguments to the ``ev`` or ``evp`` parser function.

    Raises
    ------
    HTTPException
        404 for an unregistered parser function name.
    """

    try:
        return resolver.call(name, payload.args)
    except KeyError as ex:
        raise HTTPException(status_code=404, detail=f"Unknown parser function: {name}") from ex


@router.get("/services", response_model=list[ServiceProfile])
def get_services(registry: ServiceRegistry = Depends(get_registry)) -> list[ServiceProfile]:
    """List the enabled service profiles."""

    return list(registry.values())


@router.post("/media/probe", response_model=MediaProbeResponse)
def post_media_probe(
    payload: MediaProbeRequest,
    catalog: MessageCatalog = Depends(get_catalog),
) -> MediaProbeResponse:
    """Probe a local media file and describe it.

    Notes
    -----
    - The path is sandboxed under ``media_base_dir``.
    - A missing ffprobe or unreadable output is not an error: the response
      carries the probe ``status``, no streams, and fallback dimensions.

    Raises
    ------
    HTTPException
        400 for paths outside the media directory; 404 for missing files.
    """

    settings: Settings = get_settings()
    try:
        file_path: Path = resolve_media_path(payload.path, settings)
    except ValueError as ve:
        raise HTTPException(status_code=400, detail=str(ve)) from ve
    except FileNotFoundError as fe:
        raise HTTPException(status_code=404, detail=str(fe)) from fe

    probe: FFProbe = FFProbe(file_path, settings.ffprobe_location)
    handler: VideoHandler = VideoHandler(probe, catalog)
    metadata: MediaMetadata = probe.get_metadata()
    params: dict[str, Any] = handler.normalise_params({"width": payload.width, "height": payload.height})

    return MediaProbeResponse(
        status=metadata.status,
        format=metadata.format,
        streams=metadata.streams,
        width=params["width"],
        height=params["height"],
        dimensions=handler.get_dimensions_string(),
        shortDesc=handler.get_short_desc(),
        longDesc=handler.get_long_desc(),
    )


@router.get("/oembed")
def get_oembed(
    url: str = Query(description="Full oEmbed endpoint URL"),
    fetcher: HttpFetcher = Depends(get_fetcher),
) -> dict[str, Optional[Any]]:
    """Fetch an oEmbed descriptor and return its embeddable fields.

    Raises
    ------
    HTTPException
        502 when the descriptor is unavailable or unparseable.
    """

    result: OEmbedResult = fetch_oembed(url, fetcher)
    if result.oembed is None:
        raise HTTPException(status_code=502, detail=f"oEmbed descriptor {result.status.value}")
    info: OEmbed = result.oembed
    return {
        "html": info.get_html(),
        "title": info.get_title(),
        "authorName": info.get_author_name(),
        "authorUrl": info.get_author_url(),
        "providerName": info.get_provider_name(),
        "providerUrl": info.get_provider_url(),
        "width": info.get_width(),
        "height": info.get_height(),
        "thumbnailWidth": info.get_thumbnail_width(),
        "thumbnailHeight": info.get_thumbnail_height(),
    }
