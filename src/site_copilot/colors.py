from __future__ import annotations

import re

HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def is_hex_color(value: object) -> bool:
    return isinstance(value, str) and bool(HEX_COLOR_RE.match(value))


def _channels(color: str) -> tuple[int, int, int]:
    hex_value = color.lstrip("#")
    if len(hex_value) == 3:
        hex_value = "".join(ch * 2 for ch in hex_value)
    return int(hex_value[0:2], 16), int(hex_value[2:4], 16), int(hex_value[4:6], 16)


def _to_hex(r: int, g: int, b: int) -> str:
    return f"#{r:02x}{g:02x}{b:02x}"


def darken(color: str, amount: int = 50) -> str:
    """Subtract ``amount`` from every channel, clamped at zero."""
    r, g, b = _channels(color)
    return _to_hex(max(0, r - amount), max(0, g - amount), max(0, b - amount))


def complement(color: str) -> str:
    r, g, b = _channels(color)
    return _to_hex(255 - r, 255 - g, 255 - b)


__all__ = ["HEX_COLOR_RE", "is_hex_color", "darken", "complement"]
