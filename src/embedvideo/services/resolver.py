"""Embed resolution: registry lookup, validation, strategy choice, markup."""
from __future__ import annotations

import logging
from typing import Callable, Mapping, Optional, Sequence
from urllib.parse import quote

from embedvideo.core.config import EmbedLimits
from embedvideo.domain.embed import EmbedRequest, EmbedResponse, ResolvedEmbed
from embedvideo.domain.services import ServiceProfile, ServiceRegistry
from embedvideo.exceptions import (
    EmbedError,
    InvalidServiceIdentifierError,
    MissingParametersError,
    UnknownServiceError,
    UnresolvedPlaybackUrlError,
)
from embedvideo.infra.http import HttpFetcher
from embedvideo.infra.messages import MessageCatalog
from embedvideo.services import markup
from embedvideo.services.lookups import CUSTOM_TRANSFORMS, PLAYBACK_URL_LOOKUPS, CustomTransform, PlaybackUrlLookup
from embedvideo.services.oembed import HtmlNarrower, OEmbedResult, fetch_oembed, first_iframe
from embedvideo.services.validation import InlineExpander, escape_inline, normalize

logger = logging.getLogger(__name__)

ParserFunction = Callable[..., EmbedResponse]


class EmbedResolver:
    """Turns ``(service, id, width, align, description)`` into embed markup.

    Notes
    -----
    - Strategy order: custom per-service transform, oEmbed delegation, the
      profile's ``extern`` template, then the default URL template.
    - Services listed in ``lookups`` get their playback URL resolved over the
      network before the ``extern`` or URL template is applied.
    - Author errors are rendered as inline error markup by ``render``;
      ``resolve`` raises them.
    - Parser functions are registered by name in ``handlers``: ``ev`` takes
      the primary argument order, ``evp`` the legacy one.
    """

    def __init__(
        self,
        registry: ServiceRegistry,
        limits: EmbedLimits,
        fetcher: HttpFetcher,
        catalog: Optional[MessageCatalog] = None,
        expand: InlineExpander = escape_inline,
        script_path: str = "",
        lookups: Optional[Mapping[str, PlaybackUrlLookup]] = None,
        transforms: Optional[Mapping[str, CustomTransform]] = None,
        narrow_html: HtmlNarrower = first_iframe,
    ) -> None:
        self.registry: ServiceRegistry = registry
        self.limits: EmbedLimits = limits
        self.fetcher: HttpFetcher = fetcher
        self.catalog: MessageCatalog = catalog or MessageCatalog()
        self.expand: InlineExpander = expand
        self.script_path: str = script_path
        self.lookups: Mapping[str, PlaybackUrlLookup] = lookups if lookups is not None else PLAYBACK_URL_LOOKUPS
        self.transforms: Mapping[str, CustomTransform] = (
            transforms if transforms is not None else CUSTOM_TRANSFORMS
        )
        self.narrow_html: HtmlNarrower = narrow_html
        self.handlers: dict[str, ParserFunction] = {
            "ev": self.parse_ev,
            "evp": self.parse_evp,
        }

    def parse_ev(
        self,
        service: Optional[str] = None,
        video_id: Optional[str] = None,
        width: Optional[str] = None,
        align: Optional[str] = None,
        description: Optional[str] = None,
    ) -> EmbedResponse:
        return self.render(EmbedRequest(service=service, id=video_id, width=width, align=align, description=description))

    def parse_evp(
        self,
        service: Optional[str] = None,
        video_id: Optional[str] = None,
        description: Optional[str] = None,
        align: Optional[str] = None,
        width: Optional[str] = None,
    ) -> EmbedResponse:
        return self.parse_ev(service, video_id, width, align, description)

    def call(self, name: str, args: Sequence[Optional[str]]) -> EmbedResponse:
        """Dispatch positional parser-function arguments to a registered handler.

        Raises
        ------
        KeyError
            If no handler is registered under ``name``.
        """

        handler: ParserFunction = self.handlers[name]
        return handler(*list(args)[:5])

    def render(self, request: EmbedRequest) -> EmbedResponse:
        """Resolve ``request``; author errors become an inline error block."""

        try:
            html: str = self.resolve(request)
        except EmbedError as ex:
            logger.info("Embed rejected: %s", ex, extra={"service": request.service, "errorKey": ex.message_key})
            html = self.catalog.error_box(ex.message_key, *ex.args_for_message)
        return EmbedResponse(html=html)

    def resolve(self, request: EmbedRequest) -> str:
        """Return embed markup for ``request``.

        Raises
        ------
        EmbedError
            The subclass names the first check that failed.
        """

        if request.service is None or request.id is None:
            raise MissingParametersError()
        service: str = request.service.strip()
        video_id: str = request.id.strip()

        profile: Optional[ServiceProfile] = self.registry.get(service)
        if profile is None:
            raise UnknownServiceError(service)

        embed: ResolvedEmbed = normalize(
            profile,
            video_id,
            request.width,
            request.align,
            request.description,
            self.limits,
            self.expand,
        )

        transform: Optional[CustomTransform] = self.transforms.get(service)
        if transform is not None:
            clause: Optional[str] = transform(video_id, embed)
            if clause is None:
                raise InvalidServiceIdentifierError(service)
            return markup.wrap_clause(clause, embed)

        if profile.oembed_url:
            return markup.wrap_clause(self._oembed_clause(profile, profile.oembed_url, video_id), embed)

        playback_url: Optional[str] = None
        lookup: Optional[PlaybackUrlLookup] = self.lookups.get(service)
        if lookup is not None:
            playback_url = lookup(profile, video_id, self.fetcher)
            if not playback_url:
                raise UnresolvedPlaybackUrlError(service, video_id)

        if profile.extern:
            clause = markup.substitute(
                profile.extern,
                {
                    "script_path": self.script_path,
                    "id": embed.id,
                    "width": embed.width,
                    "height": embed.height,
                    "url": playback_url or "",
                },
            )
            return markup.wrap_clause(clause, embed)

        url: str = playback_url or markup.substitute(
            profile.url,
            {"id": embed.id, "width": embed.width, "height": embed.height},
        )
        return markup.generate(url, embed)

    def _oembed_clause(self, profile: ServiceProfile, oembed_url: str, video_id: str) -> str:
        url: str = markup.substitute(oembed_url, {"id": quote(video_id, safe="")})
        result: OEmbedResult = fetch_oembed(url, self.fetcher, self.narrow_html)
        fragment: Optional[str] = result.oembed.get_html() if result.oembed is not None else None
        if not fragment:
            raise UnresolvedPlaybackUrlError(profile.name, video_id)
        return fragment
