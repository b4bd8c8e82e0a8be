import math
from typing import Any, Optional


def round_half_up(value: float, digits: int = 2) -> float:
    """Round like a shop till: 0.125 -> 0.13, -0.125 -> -0.12."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def to_float(value: Any) -> Optional[float]:
    """Best-effort numeric coercion; None for blanks, junk and non-finite values."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().replace(",", ".")
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number
