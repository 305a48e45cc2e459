"""
WCAG 2.x color math.

Colors arrive from the browser as computed CSS strings (``rgb(...)``,
``rgba(...)``, occasionally ``#rrggbb`` or ``transparent``) and are
normalised to 8-bit RGB before luminance and contrast are computed.
"""

import re
from typing import Optional, Tuple

RGB = Tuple[int, int, int]

WHITE: RGB = (255, 255, 255)

AA_NORMAL_TEXT_RATIO = 4.5
AAA_NORMAL_TEXT_RATIO = 7.0
LARGE_TEXT_MIN_PX = 18.0
LARGE_BOLD_TEXT_MIN_PX = 14.0
BOLD_FONT_WEIGHT = 700

_RGB_FUNC = re.compile(
    r"rgba?\(\s*([\d.]+)[\s,]+([\d.]+)[\s,]+([\d.]+)(?:\s*[,/]\s*([\d.]+%?))?\s*\)",
    re.IGNORECASE,
)
_HEX = re.compile(r"^#([0-9a-f]{3,4}|[0-9a-f]{6}|[0-9a-f]{8})$", re.IGNORECASE)


def _clamp_channel(value: float) -> int:
    return max(0, min(255, int(round(value))))


def _parse_alpha(raw: Optional[str]) -> float:
    if raw is None:
        return 1.0
    if raw.endswith("%"):
        return max(0.0, min(1.0, float(raw[:-1]) / 100))
    return max(0.0, min(1.0, float(raw)))


def parse_css_color(value: Optional[str]) -> Optional[Tuple[RGB, float]]:
    """
    Parse a computed CSS color into ``((r, g, b), alpha)``.

    Returns None for anything that is not an rgb()/rgba()/hex/transparent
    value, which callers treat as "unknown".
    """
    if not value:
        return None
    value = value.strip()

    if value.lower() == "transparent":
        return (0, 0, 0), 0.0

    match = _RGB_FUNC.fullmatch(value)
    if match:
        r, g, b, alpha = match.groups()
        rgb = (_clamp_channel(float(r)), _clamp_channel(float(g)), _clamp_channel(float(b)))
        return rgb, _parse_alpha(alpha)

    match = _HEX.match(value)
    if match:
        digits = match.group(1)
        if len(digits) in (3, 4):
            digits = "".join(ch * 2 for ch in digits)
        rgb = (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))
        alpha = int(digits[6:8], 16) / 255 if len(digits) == 8 else 1.0
        return rgb, alpha

    return None


def blend(foreground: RGB, alpha: float, backdrop: RGB) -> RGB:
    """Alpha-composite ``foreground`` over an opaque ``backdrop``."""
    if alpha >= 1.0:
        return foreground
    return tuple(
        _clamp_channel(f * alpha + b * (1 - alpha)) for f, b in zip(foreground, backdrop)
    )


def resolve_background(value: Optional[str]) -> RGB:
    """Computed background -> opaque RGB. Transparent or unknown becomes white."""
    parsed = parse_css_color(value)
    if parsed is None:
        return WHITE
    rgb, alpha = parsed
    if alpha == 0:
        return WHITE
    return blend(rgb, alpha, WHITE)


def resolve_foreground(value: Optional[str], background: RGB) -> RGB:
    parsed = parse_css_color(value)
    if parsed is None:
        return (0, 0, 0)
    rgb, alpha = parsed
    return blend(rgb, alpha, background)


def to_hex(rgb: RGB) -> str:
    return "#{:02x}{:02x}{:02x}".format(*rgb)


def _linearize(channel: int) -> float:
    c = channel / 255
    return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4


def relative_luminance(rgb: RGB) -> float:
    r, g, b = (_linearize(c) for c in rgb)
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_ratio(first: RGB, second: RGB) -> float:
    l1 = relative_luminance(first)
    l2 = relative_luminance(second)
    return (max(l1, l2) + 0.05) / (min(l1, l2) + 0.05)


def parse_font_weight(value) -> int:
    if value is None:
        return 400
    text = str(value).strip().lower()
    if text in ("bold", "bolder"):
        return BOLD_FONT_WEIGHT
    if text in ("normal", "lighter", ""):
        return 400
    try:
        return int(float(text))
    except ValueError:
        return 400


def is_large_text(font_size_px: float, font_weight) -> bool:
    if font_size_px >= LARGE_TEXT_MIN_PX:
        return True
    return font_size_px >= LARGE_BOLD_TEXT_MIN_PX and parse_font_weight(font_weight) >= BOLD_FONT_WEIGHT


def meets_aa(ratio: float) -> bool:
    # Applied uniformly; the 3:1 large-text allowance is left to consumers via is_large_text.
    return ratio >= AA_NORMAL_TEXT_RATIO


def meets_aaa(ratio: float) -> bool:
    return ratio >= AAA_NORMAL_TEXT_RATIO
