from typing import List, Literal

from pydantic import BaseModel, Field

from siteprofile.models.branding import BrandingProfile, StyleSnippets
from siteprofile.models.content import ContentDocument

Outcome = Literal["acquired", "no_content"]


class SiteAcquisition(BaseModel):
    """Everything the acquisition pipeline produced for one start URL.

    ``outcome == "no_content"`` means the crawl finished without a single
    usable page (site unreachable or blocking automated requests); every
    artifact field is then left at its empty default.
    """

    outcome: Outcome
    start_url: str
    pages: List[str] = []
    documents: List[ContentDocument] = []
    branding: BrandingProfile = Field(default_factory=BrandingProfile)
    snippets: StyleSnippets = Field(default_factory=StyleSnippets)
    content_markdown: str = ""
    styles_markdown: str = ""
