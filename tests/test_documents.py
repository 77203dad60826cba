"""Tests for siteprofile.services.documents."""

from siteprofile.models.branding import (
    BrandingProfile,
    ColorPalette,
    FontSelection,
    RankedColor,
    RankedFont,
    StyleSnippets,
)
from siteprofile.services.documents import (
    build_content_markdown,
    build_styles_markdown,
    page_markdown,
)
from siteprofile.services.sanitizer import DOCUMENT_NOISE_TAGS, sanitize

_PAGE = """
<html>
  <head>
    <title>Acme Anvils</title>
    <meta name="description" content="The finest anvils.">
    <style>body { color: red }</style>
  </head>
  <body>
    <nav><a href="/">Home</a><a href="/about">About us</a></nav>
    <h1>Welcome to Acme</h1>
    <p>Acme makes the finest anvils anywhere.</p>
    <p>Too short.</p>
    <ul>
      <li><p>Durable steel body</p></li>
      <li>Tiny</li>
    </ul>
    <blockquote>Great anvils, five stars!</blockquote>
    <a class="btn btn-primary" href="/buy">Buy now</a>
    <script>var hidden = "script text";</script>
    <footer><p>Copyright Acme Corporation, all rights reserved.</p></footer>
  </body>
</html>
"""


def _markdown(html: str) -> str:
    return page_markdown(sanitize(html, remove=DOCUMENT_NOISE_TAGS))


class TestPageMarkdown:
    def test_block_mapping(self):
        md = _markdown(_PAGE)

        assert "\n### Welcome to Acme\n" in md
        assert "Acme makes the finest anvils anywhere.\n" in md
        assert "- Durable steel body" in md
        assert "\n> Great anvils, five stars!\n" in md
        assert "[CTA: Buy now]" in md
        assert "Copyright Acme Corporation, all rights reserved." in md

    def test_short_and_noise_elements_dropped(self):
        md = _markdown(_PAGE)

        assert "Too short." not in md
        assert "- Tiny" not in md
        assert "script text" not in md
        assert "color: red" not in md
        assert "Home" not in md

    def test_nested_text_emitted_once(self):
        md = _markdown(_PAGE)
        assert md.count("Durable steel body") == 1

    def test_document_order(self):
        md = _markdown(_PAGE)
        assert md.index("Welcome to Acme") < md.index("Durable steel body") < md.index("Buy now")

    def test_heading_levels_and_definitions(self):
        html = (
            "<body><h2>Pricing plans</h2><h3>Starter tier</h3><h5>Small print</h5>"
            "<dl><dt>Seats</dt><dd>Up to five</dd></dl>"
            "<figure><figcaption>Our workshop</figcaption></figure>"
            "<table><tr><th>Plan</th><td>Pro</td><td>$10/mo</td></tr></table></body>"
        )
        md = _markdown(html)

        assert "\n#### Pricing plans\n" in md
        assert "\n##### Starter tier\n" in md
        assert "\n**Small print**\n" in md
        assert "\n**Seats**" in md
        assert "Up to five\n" in md
        assert "*Our workshop*\n" in md
        assert "| Plan |" in md
        assert "| $10/mo |" in md
        assert "| Pro |" not in md

    def test_long_button_text_not_a_cta(self):
        md = _markdown(f"<body><button>{'z' * 80}</button><button>OK go</button></body>")
        assert "[CTA: OK go]" in md
        assert "z" * 80 not in md


class TestBuildContentMarkdown:
    def test_header_and_page_sections(self):
        pages = [
            ("https://a.com", _PAGE),
            ("https://a.com/blank", "<html><body><p>Just one paragraph of text.</p></body></html>"),
        ]
        md = build_content_markdown("https://a.com", pages)

        assert md.startswith("# Website Content — https://a.com\n")
        assert md.count("---\n") == 2
        assert "## Page: Acme Anvils\n" in md
        assert "**URL**: https://a.com\n" in md
        assert "**Description**: The finest anvils." in md
        assert "## Page: https://a.com/blank\n" in md
        assert md.index("Acme Anvils") < md.index("https://a.com/blank")

    def test_no_pages(self):
        assert build_content_markdown("https://a.com", []).strip() == (
            "# Website Content — https://a.com"
        )


class TestBuildStylesMarkdown:
    def test_default_profile_reports_fallbacks(self):
        md = build_styles_markdown("https://a.com", BrandingProfile())

        assert md.startswith("# Website Styles — https://a.com\n")
        assert "No brand colors detected, use defaults: primary #2563eb" in md
        assert "- **Background**: #ffffff" in md
        assert "- **Text**: #1f2937" in md
        assert "No custom fonts detected (uses system-ui)" in md
        assert "- No logos detected" in md
        assert "- No key images detected" in md
        assert "CSS Custom Properties" not in md
        assert "Button Styles" not in md

    def test_full_profile(self):
        profile = BrandingProfile(
            colors=ColorPalette(
                primary="#ff0000",
                secondary="#00ff00",
                accent="#0000ff",
                ranked=[
                    RankedColor(value="#ff0000", weight=10, monochrome=False),
                    RankedColor(value="#333333", weight=4, monochrome=True),
                ],
                palette=["#ff0000", "#00ff00", "#0000ff"],
                neutrals=["#333333"],
            ),
            fonts=FontSelection(
                heading="Lora",
                body="Inter",
                ranked=[RankedFont(name="Lora", weight=12), RankedFont(name="Inter", weight=3)],
                imports=["https://fonts.googleapis.com/css2?family=Lora"],
            ),
            logos=["https://a.com/logo.svg"],
            images=["https://a.com/hero.jpg"],
            favicon="https://a.com/favicon.ico",
            og_image="https://a.com/og.png",
            css_variables={"--brand": "#ff0000"},
        )
        snippets = StyleSnippets(
            buttons=["background: #ff0000; padding: 8px;"],
            layouts=[".container { max-width: 1200px; margin: 0 auto; }"],
            visual=["border-radius: 8px"],
        )
        md = build_styles_markdown("https://a.com", profile, snippets)

        assert "## CSS Custom Properties (Design Tokens)" in md
        assert "  --brand: #ff0000;" in md
        assert "- **Primary**: #ff0000" in md
        assert "- **Full palette**: #ff0000, #00ff00, #0000ff" in md
        assert "### Neutrals / Monochrome\n- #333333" in md
        assert "- #ff0000: 10" in md
        assert "- **Heading font**: Lora" in md
        assert "- **Body font**: Inter" in md
        assert "- https://fonts.googleapis.com/css2?family=Lora" in md
        assert ".btn { background: #ff0000; padding: 8px; }" in md
        assert ".container { max-width: 1200px; margin: 0 auto; }" in md
        assert "border-radius: 8px;" in md
        assert "- https://a.com/logo.svg" in md
        assert "### Favicon\n- https://a.com/favicon.ico" in md
        assert "### OG Image\n- https://a.com/og.png" in md
        palette_at = md.index("## Color Palette")
        assert palette_at < md.index("## Typography") < md.index("## Brand Assets")
