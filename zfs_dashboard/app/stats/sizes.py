"""Human-readable ZFS size strings (``12.3G``, ``512B``, ``-``) to bytes and back."""

import math
import re
from decimal import ROUND_HALF_UP, Context, Decimal

UNITS = ("B", "K", "M", "G", "T", "P", "E")
THRESHOLD = 1024

_EMPTY_SIZES = {"-", "0B"}
UNKNOWN_SIZE = "-"
_SIZE_RE = re.compile(r"^(\d+(?:\.\d*)?|\.\d+)([KMGTPE]?)B?$", re.IGNORECASE)
# Wide enough for any finite float at two decimal places
_FIXED_CONTEXT = Context(prec=400)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _fixed(value: float, places: int) -> str:
    # Ties round away from zero on the exact binary value, e.g. 1.125 -> "1.13"
    quantum = Decimal(1).scaleb(-places)
    return str(
        Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP, context=_FIXED_CONTEXT)
    )


def parse_size(size_str: str) -> int:
    """Parse a ZFS size string into bytes.

    ``"-"``, ``"0B"`` and anything that does not look like a size parse to 0.
    """
    if not isinstance(size_str, str) or size_str in _EMPTY_SIZES:
        return 0

    match = _SIZE_RE.match(size_str)
    if not match:
        return 0

    value = float(match.group(1))
    exponent = UNITS.index(match.group(2).upper()) if match.group(2) else 0
    size_bytes = value * THRESHOLD**exponent
    if not math.isfinite(size_bytes):
        return 0
    return _round_half_up(size_bytes)


def format_size(size_bytes: int) -> str:
    """Format bytes into a ZFS-like size string (``1.50K``, ``15.0M``, ``150G``).

    Values that do not fit a float come back as ``"-"``.
    """
    if size_bytes == 0:
        return "0B"

    try:
        size = float(size_bytes)
    except (OverflowError, TypeError, ValueError):
        return UNKNOWN_SIZE
    if not math.isfinite(size):
        return UNKNOWN_SIZE

    unit_index = 0
    while size >= THRESHOLD and unit_index < len(UNITS) - 1:
        size /= THRESHOLD
        unit_index += 1

    unit = UNITS[unit_index]
    if unit_index == 0:
        return f"{size_bytes}{unit}"
    if size >= 100:
        return f"{_fixed(size, 0)}{unit}"
    if size >= 10:
        return f"{_fixed(size, 1)}{unit}"
    return f"{_fixed(size, 2)}{unit}"


def get_usage_percentage(used: str, available: str) -> int:
    """Return used / (used + available) as a whole percentage, 0 when both are empty."""
    used_bytes = parse_size(used)
    available_bytes = parse_size(available)
    total = used_bytes + available_bytes

    if total == 0:
        return 0
    return _round_half_up(used_bytes / total * 100)
