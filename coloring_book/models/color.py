import re
from typing import Tuple

Color = Tuple[int, int, int]

_HEX_RE = re.compile(r"#([0-9a-fA-F]{6})")

# Canonical padding colours for palettes with too few observed colours.
FALLBACK_PALETTE = (
    "#ff6b6b",
    "#4ecdc4",
    "#45b7d1",
    "#96ceb4",
    "#ffeaa7",
    "#dda0dd",
    "#98d8c8",
    "#f7dc6f",
)


def clamp_channel(value) -> int:
    return int(min(255, max(0, round(value))))


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """(r, g, b) → '#rrggbb' (lowercase, zero-padded)."""
    return "#" + "".join(f"{clamp_channel(c):02x}" for c in (r, g, b))


def hex_to_rgb(value: str) -> Color:
    """
    '#rrggbb' → (r, g, b). Upper-case digits are accepted.

    Raises:
        ValueError: if *value* is not a 6-digit hex colour.
    """
    match = _HEX_RE.fullmatch(value or "")
    if match is None:
        raise ValueError(f"Invalid hex colour: {value!r}")
    digits = match.group(1)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)
