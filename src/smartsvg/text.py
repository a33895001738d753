"""Text width measurement used to fit titles and legend labels."""
from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from PIL import ImageFont

DEFAULT_FONT_FAMILY = "sans-serif"
GENERIC_FONT_FALLBACKS = {
    "sans-serif": ["DejaVu Sans", "Helvetica", "Arial", "Liberation Sans"],
    "serif": ["DejaVu Serif", "Times New Roman", "Times", "Liberation Serif"],
    "monospace": ["DejaVu Sans Mono", "Courier New", "Courier", "Liberation Mono"],
}
MIN_FONT_SIZE = 4.0


class TextMeasurer:
    """Caches Pillow fonts and exposes a width helper."""

    FONT_DIRS = [
        Path("/usr/share/fonts"),
        Path("/usr/local/share/fonts"),
        Path("~/.fonts").expanduser(),
        Path("/System/Library/Fonts"),
        Path("/Library/Fonts"),
        Path("C:/Windows/Fonts"),
    ]

    def __init__(self) -> None:
        self._font_cache: Dict[Tuple[str, int], Optional[ImageFont.FreeTypeFont]] = {}
        self._font_paths: Dict[str, Optional[str]] = {}

    def font(self, size: float, family: Optional[str] = None) -> Optional[ImageFont.FreeTypeFont]:
        key_size = max(1, int(round(size)))
        family = family or DEFAULT_FONT_FAMILY
        cache_key = (family.lower(), key_size)
        if cache_key in self._font_cache:
            return self._font_cache[cache_key]

        candidates: List[str] = []
        for fam in GENERIC_FONT_FALLBACKS.get(family.lower(), [family]):
            resolved = self._locate_font(fam)
            if resolved:
                candidates.append(resolved)
        candidates.append("DejaVuSans.ttf")

        font: Optional[ImageFont.FreeTypeFont] = None
        for candidate in candidates:
            try:
                font = ImageFont.truetype(candidate, key_size)
                break
            except OSError:
                continue
        self._font_cache[cache_key] = font
        return font

    def measure(self, text: str, size: float, family: Optional[str] = None) -> float:
        font = self.font(size, family)
        if font is None:
            return heuristic_width(text, size)
        return float(font.getlength(text))

    def _locate_font(self, family: str) -> Optional[str]:
        key = family.lower()
        if key in self._font_paths:
            return self._font_paths[key]
        normalized = re.sub(r"[^a-z0-9]+", "", key)
        resolved: Optional[str] = None
        best_score: Optional[int] = None
        for directory in self.FONT_DIRS:
            if not normalized or not directory.is_dir():
                continue
            for path in directory.rglob("*.ttf"):
                stem = re.sub(r"[^a-z0-9]+", "", path.stem.lower())
                if stem == normalized:
                    score = 0
                elif stem.startswith(normalized):
                    score = 1
                else:
                    continue
                if best_score is None or score < best_score:
                    best_score, resolved = score, str(path)
        self._font_paths[key] = resolved
        return resolved


def heuristic_width(text: str, font_size: float) -> float:
    width = 0.0
    for ch in text:
        if ch.isspace():
            width += font_size * 0.33
        elif ch in "il.,":
            width += font_size * 0.3
        elif ch in "mwMW@#":
            width += font_size * 0.9
        else:
            width += font_size * 0.6
    return width


_TEXT_MEASURER = TextMeasurer()


def measure_text(text: str, size: float, family: Optional[str] = None) -> float:
    return _TEXT_MEASURER.measure(text, size, family)


def fit_font_size(text: str, size: float, available: float, family: Optional[str] = None) -> float:
    """Largest size up to ``size`` at which ``text`` fits in ``available``."""
    if not text or available <= 0:
        return size
    width = measure_text(text, size, family)
    if width <= available:
        return size
    return max(MIN_FONT_SIZE, size * available / width)
