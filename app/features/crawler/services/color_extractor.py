from typing import Any, Dict, List

from app.features.crawler.schemas.evidence import ColorSample
from app.features.crawler.services.page_scripts import COLORS_SCRIPT
from app.features.crawler.services.session_manager import PageSession
from app.features.crawler.utils import contrast

COLOR_CONTEXT_MAX_CHARS = 50


class ColorExtractor:
    """Foreground/background contrast for every text-bearing element in the allowlist."""

    @staticmethod
    def extract_colors(session: PageSession) -> List[ColorSample]:
        return [ColorExtractor.build_sample(raw) for raw in session.evaluate(COLORS_SCRIPT) or []]

    @staticmethod
    def build_sample(raw: Dict[str, Any]) -> ColorSample:
        background = contrast.resolve_background(raw.get("backgroundColor"))
        foreground = contrast.resolve_foreground(raw.get("color"), background)
        ratio = contrast.contrast_ratio(foreground, background)
        font_size = _parse_px(raw.get("fontSize"))

        return ColorSample(
            foreground=contrast.to_hex(foreground),
            background=contrast.to_hex(background),
            selector=raw.get("selector", ""),
            contrast=ratio,
            meets_aa=contrast.meets_aa(ratio),
            meets_aaa=contrast.meets_aaa(ratio),
            font_size=font_size,
            is_large_text=contrast.is_large_text(font_size, raw.get("fontWeight")),
            context=(raw.get("text") or "").strip()[:COLOR_CONTEXT_MAX_CHARS],
        )


def _parse_px(value: Any) -> float:
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip().lower()
    if text.endswith("px"):
        text = text[:-2]
    try:
        return float(text)
    except ValueError:
        return 0.0
