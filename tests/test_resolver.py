"""Unit tests for EmbedResolver strategy selection and error rendering."""
from __future__ import annotations

import json
import unittest
from typing import Callable

import httpx

from embedvideo.core.config import EmbedLimits
from embedvideo.domain.embed import EmbedRequest, EmbedResponse
from embedvideo.domain.services import BUILTIN_PROFILES, ServiceProfile, ServiceRegistry
from embedvideo.exceptions import (
    InvalidAlignmentError,
    InvalidIdentifierError,
    InvalidServiceIdentifierError,
    InvalidWidthError,
    MissingParametersError,
    UnknownServiceError,
    UnresolvedPlaybackUrlError,
)
from embedvideo.infra.http import HttpFetcher
from embedvideo.services.resolver import EmbedResolver

ACME: ServiceProfile = ServiceProfile(name="acme", url="https://acme.example/embed/{id}?w={width}&h={height}")
LIMITS: EmbedLimits = EmbedLimits(min_width=100, max_width=1024, default_width=425)

Handler = Callable[[httpx.Request], httpx.Response]


def _not_called(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected request to {request.url}")


class ResolverTestCase(unittest.TestCase):
    """Shared construction of a resolver over a mocked transport."""

    def make_resolver(self, handler: Handler = _not_called, enabled: list[str] | None = None) -> EmbedResolver:
        self.requests: list[httpx.Request] = []

        def recording(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        fetcher: HttpFetcher = HttpFetcher(server="http://wiki.example", transport=httpx.MockTransport(recording))
        self.addCleanup(fetcher.close)
        registry: ServiceRegistry = ServiceRegistry((ACME, *BUILTIN_PROFILES), enabled)
        return EmbedResolver(registry, LIMITS, fetcher, script_path="/w")


class TestResolverBasics(ResolverTestCase):
    """Validation order and the default URL-template strategy."""

    def test_end_to_end_plain_embed(self) -> None:
        """acme/42 at width 300 renders the plain element at 300×225."""
        resolver: EmbedResolver = self.make_resolver()
        html: str = resolver.resolve(EmbedRequest(service="acme", id="42", width="300"))
        self.assertEqual(
            html,
            '<iframe src="https://acme.example/embed/42?w=300&h=225" width="300" height="225" '
            'frameborder="0" allowfullscreen="true"></iframe>',
        )

    def test_default_width_and_height(self) -> None:
        """Without a width the global default and the 4:3 ratio apply."""
        resolver: EmbedResolver = self.make_resolver()
        html: str = resolver.resolve(EmbedRequest(service=" acme ", id=" 42 "))
        self.assertIn("embed/42?w=425&h=319", html)

    def test_typed_failures(self) -> None:
        """Each invalid input raises its own error type."""
        resolver: EmbedResolver = self.make_resolver()
        cases = [
            (EmbedRequest(service="acme"), MissingParametersError),
            (EmbedRequest(id="42"), MissingParametersError),
            (EmbedRequest(service="nope", id="42"), UnknownServiceError),
            (EmbedRequest(service="acme", id="42", width="5000"), InvalidWidthError),
            (EmbedRequest(service="acme", id="42", width="wide"), InvalidWidthError),
            (EmbedRequest(service="acme", id="42", align="middle"), InvalidAlignmentError),
            (EmbedRequest(service="acme", id="   "), InvalidIdentifierError),
        ]
        for request, error in cases:
            with self.assertRaises(error, msg=repr(request)):
                resolver.resolve(request)

    def test_allowlist_hides_services(self) -> None:
        """Services outside the enabled allowlist are unknown."""
        resolver: EmbedResolver = self.make_resolver(enabled=["youtube"])
        with self.assertRaises(UnknownServiceError):
            resolver.resolve(EmbedRequest(service="acme", id="42"))
        self.assertIn("youtube.com/embed/abc", resolver.resolve(EmbedRequest(service="youtube", id="abc")))

    def test_render_turns_errors_into_markup(self) -> None:
        """render returns an escaped inline error block with the raw-markup flags."""
        resolver: EmbedResolver = self.make_resolver()
        response: EmbedResponse = resolver.render(EmbedRequest(service="<acme>", id="42"))
        self.assertTrue(response.noparse)
        self.assertTrue(response.isHTML)
        self.assertTrue(response.html.startswith('<div class="errorbox">'))
        self.assertIn("&lt;acme&gt;", response.html)
        self.assertNotIn("<acme>", response.html)

    def test_aligned_embed_with_caption(self) -> None:
        """Alignment wraps the element and adds the caption."""
        resolver: EmbedResolver = self.make_resolver()
        html: str = resolver.resolve(EmbedRequest(service="acme", id="42", width="300", align="left", description="Cap"))
        self.assertTrue(html.startswith('<div class="thumb tleft">'))
        self.assertIn('<div class="thumbcaption">Cap</div>', html)


class TestParserFunctions(ResolverTestCase):
    """The ev and evp handlers registered on the resolver."""

    def test_legacy_order_matches_primary(self) -> None:
        """evp takes description before alignment and width."""
        resolver: EmbedResolver = self.make_resolver()
        primary: EmbedResponse = resolver.parse_ev("acme", "42", "300", "left", "Cap")
        legacy: EmbedResponse = resolver.parse_evp("acme", "42", "Cap", "left", "300")
        self.assertEqual(primary, legacy)

    def test_call_dispatches_by_name(self) -> None:
        """call routes positional args through the handler table."""
        resolver: EmbedResolver = self.make_resolver()
        self.assertEqual(resolver.call("ev", ["acme", "42", "300"]), resolver.parse_ev("acme", "42", "300"))
        self.assertEqual(resolver.call("evp", ["acme", "42"]).html, resolver.parse_ev("acme", "42").html)
        with self.assertRaises(KeyError):
            resolver.call("nope", [])


class TestServiceStrategies(ResolverTestCase):
    """Custom transforms, lookups, oEmbed delegation and extern templates."""

    def test_screen9_structured_id(self) -> None:
        """A valid screen9 id is decomposed into player parameters."""
        resolver: EmbedResolver = self.make_resolver()
        raw_id: str = 'screen9.api.embed({"mediaid": "abc123", "token": "tok_1", "autoplay": true});'
        html: str = resolver.resolve(EmbedRequest(service="screen9", id=raw_id))
        self.assertIn('<div id="screen9-abc123"></div>', html)
        self.assertIn('"mediaid": "abc123"', html)
        self.assertIn('"token": "tok_1"', html)
        self.assertIn('"width": 640', html)
        self.assertIn('"height": 360', html)
        self.assertIn('"autoplay": true', html)

    def test_screen9_malformed_id_aborts(self) -> None:
        """A malformed screen9 id fails instead of falling back to generic templating."""
        resolver: EmbedResolver = self.make_resolver()
        for raw_id in ("not json", '{"mediaid": "abc"}', '{"mediaid": "a b", "token": "t"}', "[1]"):
            with self.assertRaises(InvalidServiceIdentifierError, msg=raw_id):
                resolver.resolve(EmbedRequest(service="screen9", id=raw_id))

    def test_rutube_playback_url_lookup(self) -> None:
        """The rutube id is resolved to a player URL through its lookup endpoint."""

        def handler(request: httpx.Request) -> httpx.Response:
            body: str = json.dumps(
                {"html": '<object><param name="movie" value="https://rutube.ru/play/embed/abc"></param></object>'}
            )
            return httpx.Response(200, text=body)

        resolver: EmbedResolver = self.make_resolver(handler)
        html: str = resolver.resolve(EmbedRequest(service="rutube", id="12345"))
        self.assertIn('src="https://rutube.ru/play/embed/abc" width="425" height="239"', html)
        self.assertEqual(len(self.requests), 1)
        self.assertIn("rutube.ru/video/12345/", str(self.requests[0].url))

    def test_rutube_lookup_decodes_json_escapes(self) -> None:
        """Unicode and slash escapes in the lookup body are decoded before extraction."""
        body: str = (
            '{"html": "<object><param name=\\"movie\\" '
            'value=\\"https:\\/\\/rutube.ru\\/play\\/embed\\/abc?a=1\\u0026b=2\\"><\\/param><\\/object>"}'
        )
        resolver: EmbedResolver = self.make_resolver(lambda request: httpx.Response(200, text=body))
        html: str = resolver.resolve(EmbedRequest(service="rutube", id="12345"))
        self.assertIn('src="https://rutube.ru/play/embed/abc?a=1&b=2" width="425"', html)
        self.assertNotIn("u0026", html)

    def test_lookup_uses_configured_client(self) -> None:
        """The lookup request carries the configured user agent and a Date header."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<oembed><html>https://video.yandex.ru/iframe/u/42/</html></oembed>")

        resolver: EmbedResolver = self.make_resolver(handler)
        html: str = resolver.resolve(EmbedRequest(service="yandex", id="42", width="400"))
        self.assertIn('<iframe src="https://video.yandex.ru/iframe/u/42/" width="400" height="300"', html)
        request: httpx.Request = self.requests[0]
        self.assertEqual(request.headers["User-Agent"], "EmbedVideo/1.0/http://wiki.example")
        self.assertTrue(request.headers["Date"].endswith("GMT"))

    def test_failed_lookup_is_unresolved(self) -> None:
        """A failed or patternless lookup response is UnresolvedPlaybackUrl."""
        resolver: EmbedResolver = self.make_resolver(lambda request: httpx.Response(503))
        with self.assertRaises(UnresolvedPlaybackUrlError):
            resolver.resolve(EmbedRequest(service="rutube", id="12345"))

        resolver = self.make_resolver(lambda request: httpx.Response(200, text='{"html": "<p>nothing</p>"}'))
        with self.assertRaises(UnresolvedPlaybackUrlError):
            resolver.resolve(EmbedRequest(service="rutube", id="12345"))

    def test_oembed_delegation(self) -> None:
        """oEmbed services embed the narrowed iframe from the descriptor."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={"html": "<div><iframe src=x></iframe><script>evil()</script></div>", "title": "T"},
            )

        resolver: EmbedResolver = self.make_resolver(handler)
        html: str = resolver.resolve(EmbedRequest(service="soundcloud", id="https://soundcloud.com/a/b"))
        self.assertEqual(html, "<iframe src=x></iframe>")
        self.assertIn("url=https%3A%2F%2Fsoundcloud.com%2Fa%2Fb", str(self.requests[0].url))

        aligned: str = resolver.resolve(
            EmbedRequest(service="soundcloud", id="https://soundcloud.com/a/b", align="right", description="Song")
        )
        self.assertTrue(aligned.startswith('<div class="thumb tright">'))
        self.assertIn("<iframe src=x></iframe>", aligned)
        self.assertIn('<div class="thumbcaption">Song</div>', aligned)

    def test_oembed_unavailable_is_unresolved(self) -> None:
        """An unavailable descriptor fails the embed."""
        resolver: EmbedResolver = self.make_resolver(lambda request: httpx.Response(404))
        with self.assertRaises(UnresolvedPlaybackUrlError):
            resolver.resolve(EmbedRequest(service="soundcloud", id="https://soundcloud.com/a/b"))

    def test_extern_template(self) -> None:
        """Extern clauses substitute id, width and height and honour alignment."""
        resolver: EmbedResolver = self.make_resolver()
        html: str = resolver.resolve(
            EmbedRequest(service="html5", id="/media/clip.mp4", width="320", align="center", description="Clip")
        )
        self.assertTrue(html.startswith('<div class="thumb center">'))
        self.assertIn('<video src="/media/clip.mp4" width="320" height="240"', html)
        self.assertIn('<div class="thumbcaption">Clip</div>', html)


if __name__ == "__main__":
    unittest.main()
