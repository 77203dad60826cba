from typing import List

from pydantic import BaseModel, Field


class Heading(BaseModel):
    level: int = Field(ge=1, le=4)
    text: str


class ContentDocument(BaseModel):
    """Structured textual content extracted from one page."""

    url: str
    title: str = ""
    headings: List[Heading] = []
    paragraphs: List[str] = []
    list_items: List[str] = []
    meta_description: str = ""
    hero_text: str = ""
    features: List[str] = []
    testimonials: List[str] = []
    cta_text: List[str] = []
