"""Per-page CSS collection and regex-level style token scanning.

The scan is pattern-based, not a CSS parser: it reads the concatenated
``<style>`` blocks, ``style`` attributes and a few linked stylesheets of one
page and tallies the tokens that make up a brand's look (colors, font
families, design tokens, button / layout snippets).

Each page yields an independent :class:`StyleSignals` accumulator;
:func:`merge_signals` combines them without mutating its inputs.
"""

import asyncio
import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from urllib.parse import unquote, urlsplit

import httpx
from bs4 import BeautifulSoup, Tag

from siteprofile.services.fetcher import FETCH_ERRORS, fetch_text, new_client
from siteprofile.services.normalizer import ensure_absolute

logger = logging.getLogger(__name__)

STYLESHEET_TIMEOUT = 4  # seconds
MAX_STYLESHEETS = 3
MAX_VISUAL_PROPS = 20

CUSTOM_PROPERTY_WEIGHT = 5
GOOGLE_FONT_WEIGHT = 10

GENERIC_FONTS = frozenset(
    {
        "serif",
        "sans-serif",
        "monospace",
        "cursive",
        "fantasy",
        "system-ui",
        "inherit",
        "initial",
        "unset",
        "revert",
        "ui-serif",
        "ui-sans-serif",
        "ui-monospace",
        "ui-rounded",
    }
)

# ---------------------------------------------------------------------------
# Token patterns
# ---------------------------------------------------------------------------
_HEX = r"#(?:[0-9a-fA-F]{8}|[0-9a-fA-F]{6}|[0-9a-fA-F]{3,4})\b"
_RGB = r"rgba?\(\s*\d+\s*,\s*\d+\s*,\s*\d+\s*(?:,\s*[\d.]+%?\s*)?\)"
_HSL = r"hsla?\(\s*[\d.]+(?:deg)?\s*,\s*[\d.]+%?\s*,\s*[\d.]+%?\s*(?:,\s*[\d.]+%?\s*)?\)"
COLOR_RE = re.compile(f"{_HEX}|{_RGB}|{_HSL}", re.IGNORECASE)

_CUSTOM_PROPERTY_RE = re.compile(r"--([\w-]+)\s*:\s*([^;}{]+)")
_FONT_FAMILY_RE = re.compile(r"font-family\s*:\s*([^;}{]+)", re.IGNORECASE)
_FONT_IMPORT_RE = re.compile(r"""@import\s+url\(["']?([^"')]+fonts[^"')]+)["']?\)""", re.IGNORECASE)
_GOOGLE_FAMILY_RE = re.compile(r"family=([^&]+)")
_BUTTON_RULE_RE = re.compile(
    r"""(?:\.btn[^{]*|\.button[^{]*|button[^{]*|\[class\*="btn"\][^{]*)\{([^}]+)\}""",
    re.IGNORECASE,
)
_LAYOUT_RULE_RE = re.compile(
    r"\.(?:container|wrapper|grid|flex|row|col|section|hero|card|header|footer|nav)[^{]*\{([^}]+)\}",
    re.IGNORECASE,
)
_VISUAL_PROP_RE = re.compile(r"(border-radius|box-shadow|transition)\s*:\s*([^;}{]+)", re.IGNORECASE)
_IMPORTANT_RE = re.compile(r"\s*!important\s*$", re.IGNORECASE)
_LEADING_INT_RE = re.compile(r"\s*(\d+)")
_WHITESPACE_RE = re.compile(r"\s+")

_KEY_IMAGE_HINTS = ("hero", "banner", "featured")


@dataclass
class StyleCorpus:
    """Raw style material gathered from one page."""

    url: str
    css: str = ""
    google_fonts: List[str] = field(default_factory=list)
    font_imports: List[str] = field(default_factory=list)
    logos: List[str] = field(default_factory=list)
    images: List[str] = field(default_factory=list)
    favicon: str = ""
    og_image: str = ""


@dataclass
class StyleSignals:
    """Style tallies and snippets scanned from one or more pages."""

    colors: Counter = field(default_factory=Counter)
    fonts: Counter = field(default_factory=Counter)
    css_variables: Dict[str, str] = field(default_factory=dict)
    buttons: List[str] = field(default_factory=list)
    layouts: List[str] = field(default_factory=list)
    visual: List[str] = field(default_factory=list)
    font_imports: List[str] = field(default_factory=list)
    logos: List[str] = field(default_factory=list)
    images: List[str] = field(default_factory=list)
    favicon: str = ""
    og_image: str = ""


def unique(items: Iterable[str]) -> List[str]:
    """Deduplicate *items*, keeping first-seen order."""
    return list(dict.fromkeys(items))


# ---------------------------------------------------------------------------
# Markup: CSS sources and assets
# ---------------------------------------------------------------------------

def _rel(tag: Tag) -> List[str]:
    rel = tag.get("rel") or []
    if isinstance(rel, str):
        rel = rel.split()
    return [value.lower() for value in rel]


def _resolve_asset(src: str, page_url: str) -> str:
    """Return *src* as an absolute http(s) URL, or ``""`` when it cannot be."""
    src = src.strip()
    if not src:
        return ""
    absolute = ensure_absolute(src, page_url)
    if urlsplit(absolute).scheme not in ("http", "https"):
        return ""
    return absolute


def _attr_text(tag: Tag, *names: str) -> str:
    parts = []
    for name in names:
        value = tag.get(name) or ""
        if isinstance(value, list):
            value = " ".join(value)
        parts.append(str(value))
    return " ".join(parts).lower()


def _pixel_width(tag: Tag) -> int:
    match = _LEADING_INT_RE.match(str(tag.get("width") or ""))
    return int(match.group(1)) if match else 0


def stylesheet_urls(soup: BeautifulSoup, page_url: str) -> List[str]:
    """Return the first ``MAX_STYLESHEETS`` linked stylesheets as absolute URLs."""
    urls: List[str] = []
    for link in soup.find_all("link", href=True):
        if "stylesheet" not in _rel(link):
            continue
        url = _resolve_asset(str(link["href"]), page_url)
        if url and url not in urls:
            urls.append(url)
        if len(urls) == MAX_STYLESHEETS:
            break
    return urls


def google_font_families(href: str) -> List[str]:
    """Return the family names requested by a Google Fonts stylesheet URL.

    Handles both the legacy ``family=A|B:400`` form and the CSS2 API's
    repeated ``family=A:wght@400&family=B`` parameters.
    """
    families: List[str] = []
    for value in _GOOGLE_FAMILY_RE.findall(href):
        for family in value.split("|"):
            name = unquote(family.split(":")[0].replace("+", " ")).strip()
            if name:
                families.append(name)
    return families


def _inline_css(soup: BeautifulSoup) -> List[str]:
    blocks: List[str] = []
    for style in soup.find_all("style"):
        css = style.get_text().strip()
        if css:
            blocks.append(css)
    for tag in soup.find_all(style=True):
        declarations = str(tag["style"]).strip()
        if declarations:
            blocks.append(f"inline {{ {declarations} }}")
    return blocks


def _collect_assets(corpus: StyleCorpus, soup: BeautifulSoup) -> None:
    page_url = corpus.url
    for img in soup.find_all("img"):
        src = _resolve_asset(str(img.get("src") or ""), page_url)
        if not src:
            continue
        if "logo" in _attr_text(img, "src", "alt", "class", "id"):
            corpus.logos.append(src)
        hints = _attr_text(img, "src", "class", "alt")
        if _pixel_width(img) > 200 or any(hint in hints for hint in _KEY_IMAGE_HINTS):
            corpus.images.append(src)

    for link in soup.find_all("link", href=True):
        if any("icon" in rel for rel in _rel(link)):
            corpus.favicon = _resolve_asset(str(link["href"]), page_url)
            if corpus.favicon:
                break

    og = soup.find("meta", attrs={"property": "og:image"})
    if og and og.get("content"):
        corpus.og_image = _resolve_asset(str(og["content"]), page_url)

    for link in soup.find_all("link", href=True):
        href = str(link["href"])
        if "fonts.googleapis.com" in href:
            corpus.google_fonts.extend(google_font_families(href))
            corpus.font_imports.append(href)


def build_corpus(page_url: str, html: str, stylesheets: Sequence[str] = ()) -> StyleCorpus:
    """Assemble a page's style corpus from its markup and fetched stylesheet bodies."""
    soup = BeautifulSoup(html, "lxml")
    corpus = StyleCorpus(url=page_url)
    blocks = _inline_css(soup)
    blocks.extend(sheet for sheet in stylesheets if sheet)
    corpus.css = "\n".join(blocks)
    _collect_assets(corpus, soup)
    return corpus


async def _fetch_stylesheet(
    client: httpx.AsyncClient,
    url: str,
    cache: Dict[str, str],
) -> str:
    if url in cache:
        return cache[url]
    try:
        css = await asyncio.wait_for(
            fetch_text(client, url, STYLESHEET_TIMEOUT), STYLESHEET_TIMEOUT
        )
    except FETCH_ERRORS as exc:
        logger.debug("Styles: skipping stylesheet %s – %s", url, exc)
        css = ""
    cache[url] = css
    return css


async def collect_page_styles(
    client: httpx.AsyncClient,
    page_url: str,
    html: str,
    cache: Optional[Dict[str, str]] = None,
) -> StyleCorpus:
    """Gather inline CSS plus up to three linked stylesheets for one page.

    *cache* maps stylesheet URLs to their bodies so a sheet shared by several
    pages is downloaded once; a failed download is cached as empty.
    """
    if cache is None:
        cache = {}
    soup = BeautifulSoup(html, "lxml")
    urls = stylesheet_urls(soup, page_url)
    sheets = await asyncio.gather(*(_fetch_stylesheet(client, url, cache) for url in urls))
    return build_corpus(page_url, html, sheets)


# ---------------------------------------------------------------------------
# CSS scanning
# ---------------------------------------------------------------------------

def _canonical_color(token: str) -> str:
    return _WHITESPACE_RE.sub("", token).lower()


def _scan_colors(css: str) -> Counter:
    """Tally colors; one declared as a custom property counts 5 instead of 1."""
    declared_at = set()
    for match in _CUSTOM_PROPERTY_RE.finditer(css):
        if COLOR_RE.match(match.group(2)):
            declared_at.add(match.start(2))

    colors: Counter = Counter()
    for match in COLOR_RE.finditer(css):
        weight = CUSTOM_PROPERTY_WEIGHT if match.start() in declared_at else 1
        colors[_canonical_color(match.group(0))] += weight
    return colors


def _scan_custom_properties(css: str) -> Dict[str, str]:
    variables: Dict[str, str] = {}
    for match in _CUSTOM_PROPERTY_RE.finditer(css):
        name = f"--{match.group(1)}"
        if name not in variables:
            variables[name] = match.group(2).strip()
    return variables


def split_font_family(value: str) -> List[str]:
    """Return the non-generic family names of one ``font-family`` value."""
    families: List[str] = []
    for raw in value.split(","):
        family = _IMPORTANT_RE.sub("", raw).strip().replace('"', "").replace("'", "").strip()
        if not family or family.lower() in GENERIC_FONTS or family.lower().startswith("var("):
            continue
        families.append(family)
    return families


def _scan_fonts(css: str, google_fonts: Sequence[str]) -> Counter:
    fonts: Counter = Counter()
    for match in _FONT_FAMILY_RE.finditer(css):
        for family in split_font_family(match.group(1)):
            fonts[family] += 1
    for family in google_fonts:
        fonts[family] += GOOGLE_FONT_WEIGHT
    return fonts


def _collapse(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def _scan_snippets(css: str) -> Tuple[List[str], List[str], List[str]]:
    buttons = unique(
        body
        for body in (_collapse(m.group(1)) for m in _BUTTON_RULE_RE.finditer(css))
        if len(body) > 10
    )

    layouts: List[str] = []
    for match in _LAYOUT_RULE_RE.finditer(css):
        body = _collapse(match.group(1))
        if len(body) > 15:
            selector = _collapse(match.group(0).split("{", 1)[0])
            layouts.append(f"{selector} {{ {body} }}")

    visual = unique(
        f"{m.group(1).lower()}: {_collapse(m.group(2))}" for m in _VISUAL_PROP_RE.finditer(css)
    )
    return buttons, unique(layouts), visual[:MAX_VISUAL_PROPS]


def scan_css(corpus: StyleCorpus) -> StyleSignals:
    """Scan one page's corpus into a fresh :class:`StyleSignals` value."""
    css = corpus.css
    buttons, layouts, visual = _scan_snippets(css)
    font_imports = list(corpus.font_imports)
    font_imports.extend(m.group(1) for m in _FONT_IMPORT_RE.finditer(css))

    return StyleSignals(
        colors=_scan_colors(css),
        fonts=_scan_fonts(css, corpus.google_fonts),
        css_variables=_scan_custom_properties(css),
        buttons=buttons,
        layouts=layouts,
        visual=visual,
        font_imports=unique(font_imports),
        logos=unique(corpus.logos),
        images=unique(corpus.images),
        favicon=corpus.favicon,
        og_image=corpus.og_image,
    )


def merge_signals(signals: Iterable[StyleSignals]) -> StyleSignals:
    """Combine per-page signals into a new accumulator.

    Tallies are summed, CSS variables keep their first-seen value, lists are
    concatenated without duplicates and the first non-empty favicon / OG image
    wins.  Inputs are left untouched.
    """
    merged = StyleSignals()
    for page in signals:
        merged.colors.update(page.colors)
        merged.fonts.update(page.fonts)
        for name, value in page.css_variables.items():
            merged.css_variables.setdefault(name, value)
        merged.buttons = unique([*merged.buttons, *page.buttons])
        merged.layouts = unique([*merged.layouts, *page.layouts])
        merged.visual = unique([*merged.visual, *page.visual])
        merged.font_imports = unique([*merged.font_imports, *page.font_imports])
        merged.logos = unique([*merged.logos, *page.logos])
        merged.images = unique([*merged.images, *page.images])
        merged.favicon = merged.favicon or page.favicon
        merged.og_image = merged.og_image or page.og_image
    return merged


async def collect_site_styles(pages: Sequence[Tuple[str, str]]) -> List[StyleSignals]:
    """Collect and scan styles for every ``(url, html)`` pair, one page at a time."""
    cache: Dict[str, str] = {}
    signals: List[StyleSignals] = []
    async with new_client() as client:
        for url, html in pages:
            corpus = await collect_page_styles(client, url, html, cache)
            signals.append(scan_css(corpus))
    logger.info(
        "Styles: scanned %d pages, %d distinct stylesheets fetched",
        len(signals),
        sum(1 for css in cache.values() if css),
    )
    return signals
