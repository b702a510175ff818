"""
L1 Domain — Human-readable formatting (pure).

No I/O, no subprocess.
"""

from __future__ import annotations


def format_duration(seconds: int | float) -> str:
    """Format elapsed seconds the way the summary line prints them.

    Examples::

        format_duration(42)     → "42 seconds"
        format_duration(3725)   → "1 hours 2 minutes and 5 seconds"
    """
    total = max(int(seconds), 0)
    days, rem = divmod(total, 86400)
    hours, rem = divmod(rem, 3600)
    minutes, secs = divmod(rem, 60)

    parts: list[str] = []
    if days:
        parts.append(f"{days} days")
    if hours:
        parts.append(f"{hours} hours")
    if minutes:
        parts.append(f"{minutes} minutes")

    if parts:
        return " ".join(parts) + f" and {secs} seconds"
    return f"{secs} seconds"
