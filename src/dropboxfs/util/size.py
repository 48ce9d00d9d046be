from __future__ import annotations

_SI_PREFIXES: str = "kMGTPE"


def human_readable_bytes(num_bytes: int) -> str:
    """
    Format a byte count with SI (power of 1000) units.

    Examples:
        999 -> "999 B", 1_000 -> "1.0 kB", 250_000_000 -> "250.0 MB"
    """
    if -1000 < num_bytes < 1000:
        return f"{num_bytes} B"

    sign = -1 if num_bytes < 0 else 1
    value = abs(num_bytes)
    idx = 0
    while value >= 999_950:
        value //= 1000
        idx += 1
    return f"{sign * value / 1000.0:.1f} {_SI_PREFIXES[idx]}B"
