"""Text colour parsing."""

import re
from typing import Tuple

from ..errors import InvalidColor

_HEX_COLOR = re.compile(r"#?([0-9a-f]{2})([0-9a-f]{2})([0-9a-f]{2})", re.IGNORECASE)


def parse_hex_color(value: str) -> Tuple[float, float, float]:
    """Convert "#RRGGBB" into an (r, g, b) tuple with components in 0..1."""
    match = _HEX_COLOR.fullmatch(value.strip()) if value else None
    if match is None:
        raise InvalidColor(f"Invalid text color: {value!r}")
    return tuple(int(group, 16) / 255 for group in match.groups())
