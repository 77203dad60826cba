"""Content extraction: headings, copy, features, testimonials and calls to action."""

import re
from typing import List

from bs4 import BeautifulSoup, Tag

from siteprofile.models.content import ContentDocument, Heading
from siteprofile.services.sanitizer import class_and_id, element_text, sanitize

HERO_SEPARATOR = " — "

MAX_FEATURES = 10
MAX_TESTIMONIALS = 5
MAX_CTAS = 8

_FEATURE_RE = re.compile(r"feature|benefit|card|service|advantage")
_TESTIMONIAL_RE = re.compile(r"testimonial|quote|review")
_CTA_LINK_RE = re.compile(r"btn|cta|action")


def _classes(tag: Tag) -> str:
    classes = tag.get("class") or []
    if isinstance(classes, str):
        return classes.lower()
    return " ".join(classes).lower()


def _extract_title(soup: BeautifulSoup) -> str:
    title_tag = soup.find("title")
    return title_tag.get_text(strip=True) if title_tag else ""


def _extract_description(soup: BeautifulSoup) -> str:
    meta = soup.find("meta", attrs={"name": "description"})
    if meta and meta.get("content"):
        return str(meta["content"]).strip()
    return ""


def _extract_headings(soup: BeautifulSoup) -> List[Heading]:
    headings: List[Heading] = []
    for tag in soup.find_all(["h1", "h2", "h3", "h4"]):
        text = element_text(tag)
        if text:
            headings.append(Heading(level=int(tag.name[1]), text=text))
    return headings


def _first_text(soup: BeautifulSoup, name: str) -> str:
    tag = soup.find(name)
    return element_text(tag) if tag else ""


def _extract_features(soup: BeautifulSoup) -> List[str]:
    features: List[str] = []
    for tag in soup.find_all(lambda t: bool(_FEATURE_RE.search(class_and_id(t)))):
        text = element_text(tag)[:200]
        if 20 < len(text) < 500:
            features.append(text)
            if len(features) == MAX_FEATURES:
                break
    return features


def _is_testimonial(tag: Tag) -> bool:
    return tag.name == "blockquote" or bool(_TESTIMONIAL_RE.search(class_and_id(tag)))


def _extract_testimonials(soup: BeautifulSoup) -> List[str]:
    testimonials: List[str] = []
    for tag in soup.find_all(_is_testimonial):
        text = element_text(tag)[:300]
        if len(text) > 20:
            testimonials.append(text)
            if len(testimonials) == MAX_TESTIMONIALS:
                break
    return testimonials


def _is_cta(tag: Tag) -> bool:
    if tag.name == "button":
        return True
    classes = _classes(tag)
    if "button" in classes:
        return True
    return tag.name == "a" and bool(_CTA_LINK_RE.search(classes))


def _extract_ctas(soup: BeautifulSoup) -> List[str]:
    seen: set = set()
    ctas: List[str] = []
    for tag in soup.find_all(_is_cta):
        text = element_text(tag)
        if 1 < len(text) < 50 and text not in seen:
            seen.add(text)
            ctas.append(text)
            if len(ctas) == MAX_CTAS:
                break
    return ctas


def extract_content(url: str, html: str) -> ContentDocument:
    """Extract a :class:`ContentDocument` from one page's markup.

    Scripts, styles, navigation, headers, footers, asides and iframes are
    dropped first.  Never raises; absent signals produce empty fields.
    """
    soup = sanitize(html)

    paragraphs = [text for text in (element_text(p) for p in soup.find_all("p")) if len(text) > 20]
    list_items = [
        text for text in (element_text(li) for li in soup.find_all("li")) if 10 < len(text) < 300
    ]
    hero_parts = [_first_text(soup, "h1"), _first_text(soup, "p")]

    return ContentDocument(
        url=url,
        title=_extract_title(soup),
        headings=_extract_headings(soup),
        paragraphs=paragraphs,
        list_items=list_items,
        meta_description=_extract_description(soup),
        hero_text=HERO_SEPARATOR.join(part for part in hero_parts if part),
        features=_extract_features(soup),
        testimonials=_extract_testimonials(soup),
        cta_text=_extract_ctas(soup),
    )
