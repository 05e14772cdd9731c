"""Color normalization and distance."""

from __future__ import annotations

import math
import re

HEX_PREFIX = "#"
MAX_RGB_DISTANCE = math.sqrt(3 * 255**2)

_HEX_RE = re.compile(r"^#([0-9a-f]{3,4}|[0-9a-f]{6}|[0-9a-f]{8})$")
_FUNC_RE = re.compile(r"^rgba?\((.*)\)$")


def _hex_byte(value: int) -> str:
    return f"{max(0, min(255, value)):02x}"


def _channels_to_hex(r: int, g: int, b: int, a: int = 255) -> str:
    hex_value = f"{HEX_PREFIX}{_hex_byte(r)}{_hex_byte(g)}{_hex_byte(b)}"
    if a < 255:
        return hex_value + _hex_byte(a)
    return hex_value


def rgb_to_hex(color: dict[str, float]) -> str:
    """Convert a {r, g, b, a} color with 0-1 channels to hex.

    The alpha byte is only appended when the color is not fully opaque.
    """
    r = round(color.get("r", 0.0) * 255)
    g = round(color.get("g", 0.0) * 255)
    b = round(color.get("b", 0.0) * 255)
    alpha = color.get("a")
    a = round(alpha * 255) if alpha is not None else 255
    return _channels_to_hex(r, g, b, a)


def _parse_alpha(raw: str) -> int:
    raw = raw.strip()
    if raw.endswith("%"):
        return round(float(raw[:-1]) * 255 / 100)
    value = float(raw)
    # rgba() alpha is 0-1; anything larger is taken as a byte
    if value <= 1:
        return round(value * 255)
    return round(value)


def normalize_color(color: str) -> str:
    """Normalize a color string to lowercase #rrggbb or #rrggbbaa.

    Accepts #rgb, #rgba, #rrggbb, #rrggbbaa, rgb(...) and rgba(...). Strings
    that are not recognized are returned lower-cased and stripped.
    """
    s = color.strip().lower()

    m = _HEX_RE.match(s)
    if m:
        digits = m.group(1)
        if len(digits) in (3, 4):
            digits = "".join(ch * 2 for ch in digits)
        if len(digits) == 8 and digits.endswith("ff"):
            digits = digits[:6]
        return HEX_PREFIX + digits

    m = _FUNC_RE.match(s)
    if m:
        parts = [p for p in re.split(r"[\s,/]+", m.group(1)) if p]
        if len(parts) >= 3:
            try:
                r, g, b = (round(float(p)) for p in parts[:3])
                a = _parse_alpha(parts[3]) if len(parts) >= 4 else 255
            except (ValueError, OverflowError):
                return s
            return _channels_to_hex(r, g, b, a)

    return s


def hex_to_rgba(color: str) -> tuple[int, int, int, int] | None:
    """Split a normalized hex color into channels, or None if not a hex color."""
    m = _HEX_RE.match(color)
    if not m or len(m.group(1)) not in (6, 8):
        return None
    digits = m.group(1)
    r, g, b = (int(digits[i:i + 2], 16) for i in (0, 2, 4))
    a = int(digits[6:8], 16) if len(digits) == 8 else 255
    return r, g, b, a


def color_distance_similarity(color1: str, color2: str) -> float:
    """Similarity in [0, 1] from the Euclidean RGB distance of two colors.

    Colors with differing alpha, or that cannot be parsed, score 0.0.
    """
    c1 = hex_to_rgba(normalize_color(color1))
    c2 = hex_to_rgba(normalize_color(color2))
    if c1 is None or c2 is None or c1[3] != c2[3]:
        return 0.0

    distance = math.sqrt(sum((x - y) ** 2 for x, y in zip(c1[:3], c2[:3])))
    return max(0.0, 1.0 - distance / MAX_RGB_DISTANCE)


def color_similarity(observed: str, candidate: str, min_similarity: float = 0.9) -> float:
    """Color value similarity: 1.0 when identical, else the distance score if >= min_similarity."""
    if normalize_color(observed) == normalize_color(candidate):
        return 1.0
    similarity = color_distance_similarity(observed, candidate)
    return similarity if similarity >= min_similarity else 0.0
