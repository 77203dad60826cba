"""Markdown report builders for the content document and the styles profile."""

import re
from typing import List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup, Tag

from siteprofile.models.branding import BrandingProfile, StyleSnippets
from siteprofile.services.sanitizer import DOCUMENT_NOISE_TAGS, element_text, sanitize

# Elements already emitted are recognised by this many leading characters
DEDUP_KEY_LENGTH = 80

_BLOCK_TAGS = [
    "h1", "h2", "h3", "h4", "h5", "h6",
    "p", "li", "blockquote", "figcaption",
    "td", "th", "dt", "dd",
    "button", "a",
]
_CTA_LINK_RE = re.compile(r"btn|cta")


def _is_block(tag: Tag) -> bool:
    if tag.name not in _BLOCK_TAGS:
        return False
    if tag.name == "a":
        classes = tag.get("class") or []
        if isinstance(classes, str):
            classes = [classes]
        return bool(_CTA_LINK_RE.search(" ".join(classes)))
    return True


def _format_block(tag_name: str, text: str) -> Optional[str]:
    """Map one element to its Markdown line, or None when it is too short."""
    if tag_name == "h1":
        return f"\n### {text}\n"
    if tag_name == "h2":
        return f"\n#### {text}\n"
    if tag_name == "h3":
        return f"\n##### {text}\n"
    if tag_name in ("h4", "h5", "h6"):
        return f"\n**{text}**\n"
    if tag_name == "p":
        return f"{text}\n" if len(text) > 15 else None
    if tag_name == "li":
        return f"- {text}" if len(text) > 5 else None
    if tag_name == "blockquote":
        return f"\n> {text}\n"
    if tag_name == "figcaption":
        return f"*{text}*\n"
    if tag_name in ("td", "th"):
        return f"| {text} |" if len(text) > 3 else None
    if tag_name == "dt":
        return f"\n**{text}**"
    if tag_name == "dd":
        return f"{text}\n"
    # buttons and CTA links
    return f"[CTA: {text}]" if 1 < len(text) < 60 else None


def page_markdown(soup: BeautifulSoup) -> str:
    """Walk the body of *soup* in document order and render it as Markdown.

    An element whose first 80 characters were already seen on the page is
    suppressed, so text repeated by nested elements (a ``<li>`` wrapping a
    ``<p>``) or by page chrome appears only once.
    """
    root = soup.body or soup
    lines: List[str] = []
    seen: set = set()

    for tag in root.find_all(_is_block):
        text = element_text(tag)
        if len(text) < 3:
            continue
        key = text[:DEDUP_KEY_LENGTH]
        if key in seen:
            continue
        seen.add(key)

        line = _format_block(tag.name, text)
        if line is not None:
            lines.append(line)

    return "\n".join(lines)


def build_content_markdown(base_url: str, pages: Sequence[Tuple[str, str]]) -> str:
    """Render every ``(url, html)`` page into one content Markdown document.

    Navigation, headers and footers are kept so no text is lost; scripts,
    styles, iframes, noscript and svg are dropped.
    """
    sections: List[str] = [f"# Website Content — {base_url}\n"]

    for url, html in pages:
        soup = sanitize(html, remove=DOCUMENT_NOISE_TAGS)
        title_tag = soup.find("title")
        title = title_tag.get_text(strip=True) if title_tag else ""
        meta = soup.find("meta", attrs={"name": "description"})
        description = str(meta.get("content") or "").strip() if meta else ""

        sections.append("---\n")
        sections.append(f"## Page: {title or url}\n")
        sections.append(f"**URL**: {url}")
        if description:
            sections.append(f"**Description**: {description}")
        sections.append("")

        content = page_markdown(soup)
        if content.strip():
            sections.append(content)
        sections.append("")

    return "\n".join(sections)


def _css_block(lines: Sequence[str]) -> List[str]:
    return ["```css", *lines, "```\n"]


def build_styles_markdown(
    base_url: str,
    profile: BrandingProfile,
    snippets: Optional[StyleSnippets] = None,
) -> str:
    """Render a branding profile and raw style snippets as a styles report."""
    snippets = snippets or StyleSnippets()
    colors = profile.colors
    fonts = profile.fonts
    sections: List[str] = [f"# Website Styles — {base_url}\n"]

    if profile.css_variables:
        sections.append("## CSS Custom Properties (Design Tokens)\n")
        sections.extend(
            _css_block(
                [":root {"]
                + [f"  {name}: {value};" for name, value in profile.css_variables.items()]
                + ["}"]
            )
        )

    sections.append("## Color Palette\n")
    sections.append("### Brand Colors (by frequency)")
    if colors.palette:
        sections.append(f"- **Primary**: {colors.primary}")
        sections.append(f"- **Secondary**: {colors.secondary}")
        sections.append(f"- **Accent**: {colors.accent}")
        sections.append(f"- **Full palette**: {', '.join(colors.palette)}")
    else:
        sections.append(
            f"- No brand colors detected, use defaults: primary {colors.primary}, "
            f"secondary {colors.secondary}, accent {colors.accent}"
        )
    sections.append(f"- **Background**: {colors.background}")
    sections.append(f"- **Text**: {colors.text}")
    sections.append("\n### Neutrals / Monochrome")
    sections.append(f"- {', '.join(colors.neutrals) or 'none detected'}")
    if colors.ranked:
        sections.append("\n### Usage Weights")
        for entry in colors.ranked:
            sections.append(f"- {entry.value}: {entry.weight}")
    sections.append("")

    sections.append("## Typography\n")
    if fonts.ranked:
        sections.append(f"- **Heading font**: {fonts.heading}")
        sections.append(f"- **Body font**: {fonts.body}")
        sections.append(f"- **All fonts**: {', '.join(font.name for font in fonts.ranked)}")
    else:
        sections.append(f"- No custom fonts detected (uses {fonts.heading})")
    if fonts.imports:
        sections.append("\n### Font Imports")
        sections.extend(f"- {url}" for url in fonts.imports)
    sections.append("")

    if snippets.buttons:
        sections.append("## Button Styles\n")
        sections.extend(_css_block([f".btn {{ {body} }}\n" for body in snippets.buttons]))

    if snippets.layouts:
        sections.append("## Layout Patterns\n")
        sections.extend(_css_block([f"{rule}\n" for rule in snippets.layouts]))

    if snippets.visual:
        sections.append("## Visual Properties\n")
        sections.extend(_css_block([f"{prop};" for prop in snippets.visual]))

    sections.append("## Brand Assets\n")
    sections.append("### Logos")
    sections.extend([f"- {logo}" for logo in profile.logos] or ["- No logos detected"])
    sections.append("\n### Key Images")
    sections.extend([f"- {image}" for image in profile.images] or ["- No key images detected"])
    if profile.favicon:
        sections.append(f"\n### Favicon\n- {profile.favicon}")
    if profile.og_image:
        sections.append(f"\n### OG Image\n- {profile.og_image}")

    return "\n".join(sections)
