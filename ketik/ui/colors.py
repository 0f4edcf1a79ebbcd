"""Highlight colors for the typed text and color utilities."""

from __future__ import annotations

from typing import Optional, Tuple

Rgb = Tuple[int, int, int]


def _parse_hex(color: str) -> Optional[Rgb]:
    if len(color) != 7 or color[0] != "#":
        return None
    try:
        return (int(color[1:3], 16), int(color[3:5], 16), int(color[5:7], 16))
    except ValueError:
        return None


def blend_hex(a: str, b: str, t: float) -> str:
    """Mix two #RRGGBB colors; t=0 gives *a*, t=1 gives *b*.

    Anything that is not a #RRGGBB pair comes back as *a* unchanged.
    """
    start, end = _parse_hex(a.strip()), _parse_hex(b.strip())
    if start is None or end is None:
        return a.strip()
    t = min(max(float(t), 0.0), 1.0)
    mixed = tuple(int(s + (e - s) * t) for s, e in zip(start, end))
    return "#" + "".join(f"{c:02X}" for c in mixed)


class TypingColors:
    """Palette for correct, wrong, current and not-yet-typed characters."""

    CORRECT = "#2E7D32"
    WRONG = "#C62828"
    SPACE_ERROR = "#C62828"
    CURRENT = "#00838F"
    DEFAULT = "#90A4AE"
    BACKGROUND = "#FFFFFF"

    CURRENT_BG = blend_hex(CURRENT, BACKGROUND, 0.85)
    WRONG_BG = blend_hex(WRONG, BACKGROUND, 0.9)
