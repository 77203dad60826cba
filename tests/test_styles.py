"""Tests for siteprofile.services.styles."""

import asyncio

import httpx
import respx
from bs4 import BeautifulSoup

from siteprofile.services.fetcher import new_client
from siteprofile.services.styles import (
    StyleCorpus,
    StyleSignals,
    build_corpus,
    collect_page_styles,
    collect_site_styles,
    google_font_families,
    merge_signals,
    scan_css,
    split_font_family,
    stylesheet_urls,
)

_PAGE = "https://a.com/about"


def _scan(css: str, **corpus_fields) -> StyleSignals:
    return scan_css(StyleCorpus(url=_PAGE, css=css, **corpus_fields))


def _collect(html: str, cache=None) -> StyleCorpus:
    async def go():
        async with new_client() as client:
            return await collect_page_styles(client, _PAGE, html, cache)

    return asyncio.run(go())


class TestColorScan:
    def test_custom_property_declaration_weighs_five(self):
        css = (
            ":root { --brand: #ff0000; }\n"
            + "".join(f".a{i} {{ color: #ff0000; }}\n" for i in range(5))
            + "".join(f".b{i} {{ background: #00ff00; }}\n" for i in range(3))
        )
        colors = _scan(css).colors
        assert colors["#ff0000"] == 10
        assert colors["#00ff00"] == 3

    def test_rgb_and_hsl_forms_canonicalised(self):
        css = (
            ".a { color: RGB(10, 20, 30); } .b { color: rgb(10,20,30); }"
            " .c { color: hsla(200, 50%, 40%, 0.5); }"
        )
        colors = _scan(css).colors
        assert colors["rgb(10,20,30)"] == 2
        assert colors["hsla(200,50%,40%,0.5)"] == 1

    def test_hex_lengths(self):
        css = ".a { color: #ABC; border-color: #aabbccdd; background: #123456; }"
        assert set(_scan(css).colors) == {"#abc", "#aabbccdd", "#123456"}

    def test_variable_referencing_color_counts_once(self):
        css = ":root { --shadow: 0 1px #000000; }"
        assert _scan(css).colors["#000000"] == 1


class TestCustomProperties:
    def test_first_declaration_wins(self):
        css = ":root { --brand: #111111; --space-lg: 2rem } .dark { --brand: #222222; }"
        assert _scan(css).css_variables == {"--brand": "#111111", "--space-lg": "2rem"}


class TestFonts:
    def test_split_font_family_skips_generics_and_variables(self):
        value = "'Inter', \"Helvetica Neue\", var(--font), system-ui, sans-serif !important"
        assert split_font_family(value) == ["Inter", "Helvetica Neue"]

    def test_font_family_tally(self):
        css = (
            "h1 { font-family: 'Playfair Display', serif }"
            " p { font-family: Inter; } a { font-family: Inter }"
        )
        fonts = _scan(css).fonts
        assert fonts["Inter"] == 2
        assert fonts["Playfair Display"] == 1
        assert "serif" not in fonts

    def test_google_font_families_weigh_ten(self):
        fonts = _scan("p { font-family: Lato }", google_fonts=["Lato", "Roboto Slab"]).fonts
        assert fonts["Lato"] == 11
        assert fonts["Roboto Slab"] == 10

    def test_google_font_href_forms(self):
        legacy = "https://fonts.googleapis.com/css?family=Open+Sans:400,700|Roboto"
        css2 = (
            "https://fonts.googleapis.com/css2"
            "?family=Inter:wght@400;700&family=Roboto+Mono&display=swap"
        )
        assert google_font_families(legacy) == ["Open Sans", "Roboto"]
        assert google_font_families(css2) == ["Inter", "Roboto Mono"]

    def test_font_imports_from_css(self):
        css = "@import url('https://fonts.googleapis.com/css2?family=Inter'); body { margin: 0 }"
        assert _scan(css).font_imports == ["https://fonts.googleapis.com/css2?family=Inter"]


class TestSnippets:
    def test_button_layout_and_visual_rules(self):
        css = (
            ".btn-primary { background: #2563eb; padding: 12px 24px; }\n"
            "button { x: 1 }\n"
            ".container { max-width: 1200px; margin: 0 auto; }\n"
            ".row { gap: 1px }\n"
            ".card { border-radius: 8px; box-shadow: 0 1px 2px #0003; transition: all .2s; }\n"
        )
        signals = _scan(css)

        assert signals.buttons == ["background: #2563eb; padding: 12px 24px;"]
        assert signals.layouts == [
            ".container { max-width: 1200px; margin: 0 auto; }",
            ".card { border-radius: 8px; box-shadow: 0 1px 2px #0003; transition: all .2s; }",
        ]
        assert signals.visual == [
            "border-radius: 8px",
            "box-shadow: 0 1px 2px #0003",
            "transition: all .2s",
        ]

    def test_visual_properties_capped_and_deduplicated(self):
        css = "".join(
            f".x{i} {{ border-radius: {i}px; }} .y {{ border-radius: 1px; }}" for i in range(40)
        )
        visual = _scan(css).visual
        assert len(visual) == 20
        assert len(set(visual)) == 20


class TestCorpus:
    def test_inline_blocks_and_style_attributes(self):
        html = (
            "<html><head><style>h1 { color: #ff0000 }</style></head>"
            '<body><div style="color: #00ff00">x</div></body></html>'
        )
        corpus = build_corpus(_PAGE, html)
        assert "h1 { color: #ff0000 }" in corpus.css
        assert "inline { color: #00ff00 }" in corpus.css

    def test_assets(self):
        html = (
            '<html><head><link rel="icon" href="/favicon.ico">'
            '<meta property="og:image" content="/og.png">'
            '<link rel="stylesheet" href="https://fonts.googleapis.com/css2?family=Inter">'
            "</head><body>"
            '<img src="/img/logo.svg" alt="Acme">'
            '<img src="/img/a.png" class="site-Logo">'
            '<img src="/img/photo.jpg" width="640">'
            '<img src="/img/small.jpg" width="100">'
            '<img src="/img/x.jpg" alt="Hero shot">'
            '<img src="data:image/png;base64,AAAA" alt="logo">'
            "</body></html>"
        )
        corpus = build_corpus(_PAGE, html)

        assert corpus.logos == ["https://a.com/img/logo.svg", "https://a.com/img/a.png"]
        assert corpus.images == ["https://a.com/img/photo.jpg", "https://a.com/img/x.jpg"]
        assert corpus.favicon == "https://a.com/favicon.ico"
        assert corpus.og_image == "https://a.com/og.png"
        assert corpus.google_fonts == ["Inter"]
        assert corpus.font_imports == ["https://fonts.googleapis.com/css2?family=Inter"]

    def test_stylesheet_urls_limited_to_three(self):
        links = "".join(f'<link rel="stylesheet" href="/css/{i}.css">' for i in range(5))
        html = f"<html><head>{links}<link rel='preload' href='/p.css'></head></html>"
        soup = BeautifulSoup(html, "lxml")
        assert stylesheet_urls(soup, _PAGE) == [
            "https://a.com/css/0.css",
            "https://a.com/css/1.css",
            "https://a.com/css/2.css",
        ]


class TestCollectPageStyles:
    _HTML = (
        '<html><head><link rel="stylesheet" href="/main.css">'
        '<link rel="stylesheet" href="/broken.css"></head><body></body></html>'
    )

    def test_linked_stylesheets_fetched_and_failures_skipped(self):
        with respx.mock(assert_all_called=False) as router:
            router.get("https://a.com/main.css").respond(
                200, text=".a { color: #123456 }", headers={"content-type": "text/css"}
            )
            router.get("https://a.com/broken.css").mock(side_effect=httpx.ConnectError)
            corpus = _collect(self._HTML)

        assert ".a { color: #123456 }" in corpus.css

    def test_cached_sheet_not_refetched(self):
        cache = {"https://a.com/main.css": ".a { color: #abcdef }", "https://a.com/broken.css": ""}
        with respx.mock(assert_all_called=False) as router:
            route = router.route().respond(500)
            corpus = _collect(self._HTML, cache)

        assert not route.called
        assert "#abcdef" in corpus.css

    def test_shared_sheet_counted_per_page(self):
        html = '<html><head><link rel="stylesheet" href="https://a.com/site.css"></head></html>'
        with respx.mock(assert_all_called=False) as router:
            route = router.get("https://a.com/site.css").respond(
                200, text=".a { color: #abcdef }", headers={"content-type": "text/css"}
            )
            signals = asyncio.run(collect_site_styles([("https://a.com", html), (_PAGE, html)]))

        assert route.call_count == 1
        assert merge_signals(signals).colors["#abcdef"] == 2


    def test_malformed_stylesheet_href_skipped(self):
        html = (
            '<html><head><link rel="stylesheet" href="https://cdn.a.com:abc/s.css">'
            '<link rel="stylesheet" href="/main.css"></head></html>'
        )
        with respx.mock(assert_all_called=False) as router:
            router.get("https://a.com/main.css").respond(
                200, text=".a { color: #123456 }", headers={"content-type": "text/css"}
            )
            router.route().respond(404)
            signals = asyncio.run(collect_site_styles([(_PAGE, html)]))

        assert merge_signals(signals).colors["#123456"] == 1


class TestMergeSignals:
    def test_merge_sums_and_leaves_inputs_untouched(self):
        first = _scan(":root { --brand: #ff0000 } p { font-family: Inter }")
        second = _scan(":root { --brand: #00ff00 } p { color: #ff0000; font-family: Inter }")
        first_colors = dict(first.colors)

        merged = merge_signals([first, second])

        assert merged.colors["#ff0000"] == 6
        assert merged.fonts["Inter"] == 2
        assert merged.css_variables == {"--brand": "#ff0000"}
        assert dict(first.colors) == first_colors
        assert merged is not first

    def test_first_favicon_wins(self):
        pages = [
            StyleSignals(favicon=""),
            StyleSignals(favicon="https://a.com/1.ico"),
            StyleSignals(favicon="https://a.com/2.ico"),
        ]
        assert merge_signals(pages).favicon == "https://a.com/1.ico"
