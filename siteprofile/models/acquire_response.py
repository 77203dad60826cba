from typing import List

from pydantic import BaseModel

from siteprofile.models.branding import BrandingProfile, StyleSnippets
from siteprofile.models.content import ContentDocument


class AcquireResponse(BaseModel):
    start_url: str
    pages_crawled: int
    pages: List[str]
    documents: List[ContentDocument]
    branding: BrandingProfile
    snippets: StyleSnippets
    content_markdown: str
    styles_markdown: str
