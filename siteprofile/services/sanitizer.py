"""Noise removal for parsed markup before text extraction."""

import re
from typing import Iterable

from bs4 import BeautifulSoup, Comment

# Tags that never carry readable page text
SCRIPTING_TAGS = frozenset({"script", "style", "iframe", "noscript", "svg"})

# Page chrome dropped for structured extraction; the full-page document keeps it
CHROME_TAGS = frozenset({"nav", "footer", "aside", "header"})

EXTRACTION_NOISE_TAGS = SCRIPTING_TAGS | CHROME_TAGS
DOCUMENT_NOISE_TAGS = SCRIPTING_TAGS

_WHITESPACE_RE = re.compile(r"\s+")


def sanitize(html: str, remove: Iterable[str] = EXTRACTION_NOISE_TAGS) -> BeautifulSoup:
    """Parse *html* and drop every element named in *remove*, plus comments."""
    soup = BeautifulSoup(html, "lxml")

    for tag in soup.find_all(list(remove)):
        tag.decompose()

    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()

    return soup


def element_text(tag) -> str:
    """Return the text of *tag* with runs of whitespace collapsed to one space."""
    return _WHITESPACE_RE.sub(" ", tag.get_text()).strip()


def class_and_id(tag) -> str:
    """Return a tag's class list and id as one lower-cased string."""
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = [classes]
    return " ".join([*classes, str(tag.get("id") or "")]).lower()
