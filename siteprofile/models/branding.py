from typing import Dict, List

from pydantic import BaseModel, Field

DEFAULT_PRIMARY = "#2563eb"
DEFAULT_SECONDARY = "#1e40af"
DEFAULT_ACCENT = "#f59e0b"
DEFAULT_BACKGROUND = "#ffffff"
DEFAULT_TEXT = "#1f2937"
DEFAULT_FONT = "system-ui"


class RankedColor(BaseModel):
    value: str
    weight: int
    monochrome: bool


class RankedFont(BaseModel):
    name: str
    weight: int


class ColorPalette(BaseModel):
    primary: str = DEFAULT_PRIMARY
    secondary: str = DEFAULT_SECONDARY
    accent: str = DEFAULT_ACCENT
    background: str = DEFAULT_BACKGROUND
    text: str = DEFAULT_TEXT
    ranked: List[RankedColor] = []
    palette: List[str] = []  # chromatic colors only, by weight
    neutrals: List[str] = []  # monochrome colors, by weight


class FontSelection(BaseModel):
    heading: str = DEFAULT_FONT
    body: str = DEFAULT_FONT
    ranked: List[RankedFont] = []
    imports: List[str] = []


class BrandingProfile(BaseModel):
    """Site-wide visual identity ranked from every crawled page."""

    colors: ColorPalette = Field(default_factory=ColorPalette)
    fonts: FontSelection = Field(default_factory=FontSelection)
    logos: List[str] = []
    images: List[str] = []
    favicon: str = ""
    og_image: str = ""
    css_variables: Dict[str, str] = {}


class StyleSnippets(BaseModel):
    """Raw CSS declaration bodies worth reproducing verbatim."""

    buttons: List[str] = []
    layouts: List[str] = []
    visual: List[str] = []
