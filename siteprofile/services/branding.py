"""Cross-page brand ranking: colors, fonts and assets into a BrandingProfile."""

import colorsys
import re
from collections import Counter
from typing import List, Optional, Sequence, Tuple

from siteprofile.models.branding import (
    DEFAULT_ACCENT,
    DEFAULT_FONT,
    DEFAULT_PRIMARY,
    DEFAULT_SECONDARY,
    BrandingProfile,
    ColorPalette,
    FontSelection,
    RankedColor,
    RankedFont,
    StyleSnippets,
)
from siteprofile.services.styles import StyleSignals, merge_signals

MAX_COLORS = 10
MAX_NEUTRALS = 8
MAX_FONTS = 5
MAX_LOGOS = 3
MAX_IMAGES = 15
MAX_BUTTON_SNIPPETS = 5
MAX_LAYOUT_SNIPPETS = 10
MAX_VISUAL_SNIPPETS = 20

# Channels closer than this to each other read as gray
MONOCHROME_THRESHOLD = 20

_NUMBER_RE = re.compile(r"[\d.]+")

RGB = Tuple[int, int, int]


def _clamp(value: float) -> int:
    return max(0, min(255, int(round(value))))


def _hex_to_rgb(digits: str) -> Optional[RGB]:
    if len(digits) in (3, 4):
        return (int(digits[0] * 2, 16), int(digits[1] * 2, 16), int(digits[2] * 2, 16))
    if len(digits) in (6, 8):
        return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))
    return None


def to_rgb(color: str) -> Optional[RGB]:
    """Decode a hex, ``rgb()`` or ``hsl()`` color to an RGB triple.

    Alpha is ignored.  Returns None for anything it cannot decode.
    """
    color = color.strip().lower()
    try:
        if color.startswith("#"):
            return _hex_to_rgb(color[1:])
        numbers = [float(n) for n in _NUMBER_RE.findall(color)]
        if len(numbers) < 3:
            return None
        if color.startswith("rgb"):
            return (_clamp(numbers[0]), _clamp(numbers[1]), _clamp(numbers[2]))
        if color.startswith("hsl"):
            hue, sat, light = numbers[0] % 360 / 360, numbers[1] / 100, numbers[2] / 100
            r, g, b = colorsys.hls_to_rgb(hue, min(light, 1.0), min(sat, 1.0))
            return (_clamp(r * 255), _clamp(g * 255), _clamp(b * 255))
    except ValueError:
        return None
    return None


def is_monochrome(color: str) -> bool:
    """Return True for near-gray colors, which never become brand colors.

    Colors that cannot be decoded are treated as chromatic.
    """
    rgb = to_rgb(color)
    if rgb is None:
        return False
    r, g, b = rgb
    return (
        abs(r - g) < MONOCHROME_THRESHOLD
        and abs(g - b) < MONOCHROME_THRESHOLD
        and abs(r - b) < MONOCHROME_THRESHOLD
    )


def rank(tally: Counter) -> List[Tuple[str, int]]:
    """Sort a tally by descending weight; ties keep first-seen order."""
    return sorted(tally.items(), key=lambda item: item[1], reverse=True)


def _pick(candidates: Sequence[str], index: int, default: str) -> str:
    return candidates[index] if len(candidates) > index else default


def rank_colors(tally: Counter) -> ColorPalette:
    ordered = rank(tally)
    chromatic = [color for color, _ in ordered if not is_monochrome(color)]
    neutrals = [color for color, _ in ordered if is_monochrome(color)]
    return ColorPalette(
        primary=_pick(chromatic, 0, DEFAULT_PRIMARY),
        secondary=_pick(chromatic, 1, DEFAULT_SECONDARY),
        accent=_pick(chromatic, 2, DEFAULT_ACCENT),
        ranked=[
            RankedColor(value=color, weight=weight, monochrome=is_monochrome(color))
            for color, weight in ordered[:MAX_COLORS]
        ],
        palette=chromatic[:MAX_COLORS],
        neutrals=neutrals[:MAX_NEUTRALS],
    )


def rank_fonts(tally: Counter, imports: Sequence[str] = ()) -> FontSelection:
    ordered = rank(tally)
    names = [name for name, _ in ordered]
    heading = _pick(names, 0, DEFAULT_FONT)
    return FontSelection(
        heading=heading,
        body=_pick(names, 1, heading),
        ranked=[RankedFont(name=name, weight=weight) for name, weight in ordered[:MAX_FONTS]],
        imports=list(imports),
    )


def rank_branding(signals: Sequence[StyleSignals]) -> BrandingProfile:
    """Rank merged per-page signals into a :class:`BrandingProfile`.

    Pure function of *signals*.  Always returns a usable profile: with no
    chromatic colors the default triple is used, with no fonts ``system-ui``.
    """
    merged = merge_signals(signals)
    return BrandingProfile(
        colors=rank_colors(merged.colors),
        fonts=rank_fonts(merged.fonts, merged.font_imports),
        logos=merged.logos[:MAX_LOGOS],
        images=merged.images[:MAX_IMAGES],
        favicon=merged.favicon,
        og_image=merged.og_image,
        css_variables=dict(merged.css_variables),
    )


def merge_snippets(signals: Sequence[StyleSignals]) -> StyleSnippets:
    """Merge raw button / layout / visual snippets across pages, capped."""
    merged = merge_signals(signals)
    return StyleSnippets(
        buttons=merged.buttons[:MAX_BUTTON_SNIPPETS],
        layouts=merged.layouts[:MAX_LAYOUT_SNIPPETS],
        visual=merged.visual[:MAX_VISUAL_SNIPPETS],
    )
