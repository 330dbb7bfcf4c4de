from __future__ import annotations

from functools import lru_cache

from reportlab.lib import colors


def _expand_short_hex(digits: str) -> str:
    return "".join(ch * 2 for ch in digits)


@lru_cache(maxsize=256)
def parse_color(value: str) -> colors.Color:
    """Resolve a fabric colour string (hex, css rgb()/rgba(), named) to a reportlab Color.

    Raises ValueError for anything reportlab cannot interpret.
    """
    raw = str(value or "").strip()
    if not raw:
        raise ValueError("empty colour")

    if raw.startswith("#"):
        digits = raw[1:]
        if len(digits) in {3, 4}:
            digits = _expand_short_hex(digits)
        if len(digits) not in {6, 8}:
            raise ValueError(f"invalid hex colour: {raw}")
        try:
            int(digits, 16)
        except ValueError as e:
            raise ValueError(f"invalid hex colour: {raw}") from e
        return colors.HexColor(f"#{digits}", hasAlpha=len(digits) == 8)

    try:
        return colors.toColor(raw.lower())
    except ValueError as e:
        raise ValueError(f"invalid colour: {raw}") from e
