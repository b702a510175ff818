"""
L1 Domain — Dotted version comparison (pure).

Versions are 1–4 numeric segments; missing segments count as 0.
Segments compare numerically, so ``10.0 > 9.5``.  A trailing
suffix such as ImageMagick's ``-15`` patch level or an ``rc1``
marker is stripped before comparison.  When both sides carry a
numeric ``-N`` patch level it breaks ties, so ``7.1.1-16 > 7.1.1-15``
while ``7.1.0-15 == 7.1.0``.
No I/O, no subprocess.
"""

from __future__ import annotations

import re

from imei.core.errors import MalformedVersion

MAX_SEGMENTS = 4

# Everything from the first char that is neither a digit nor a dot
_SUFFIX_RE = re.compile(r"[^\d.].*$")

# ImageMagick-style patch level: 7.1.1-15
_PATCH_RE = re.compile(r"^[vV]?\d+(?:\.\d+)*-(\d+)$")


def parse_version(version: str) -> tuple[int, int, int, int]:
    """Parse a dotted version into a fixed-width tuple.

    Examples::

        parse_version("3.6")        → (3, 6, 0, 0)
        parse_version("v1.16.2")    → (1, 16, 2, 0)
        parse_version("7.1.0-15")   → (7, 1, 0, 0)

    Raises:
        MalformedVersion: If the string is empty, has more than four
            segments, or a segment is not a non-negative integer.
    """
    if version is None:
        raise MalformedVersion("Version is empty")

    raw = str(version).strip()
    if raw[:1] in ("v", "V"):
        raw = raw[1:]

    stripped = _SUFFIX_RE.sub("", raw)
    if not stripped:
        raise MalformedVersion(f"Not a dotted numeric version: {version!r}")

    segments = stripped.split(".")
    if len(segments) > MAX_SEGMENTS:
        raise MalformedVersion(
            f"Version {version!r} has {len(segments)} segments "
            f"(at most {MAX_SEGMENTS} allowed)"
        )

    parts: list[int] = []
    for segment in segments:
        if not segment.isdigit():
            raise MalformedVersion(
                f"Segment {segment!r} of version {version!r} is not a number"
            )
        parts.append(int(segment))

    while len(parts) < MAX_SEGMENTS:
        parts.append(0)
    return parts[0], parts[1], parts[2], parts[3]


def patch_level(version: str) -> int | None:
    """Numeric ``-N`` patch level of ``version``, or None.

    ``patch_level("7.1.1-15")`` is 15; ``"7.1.1"`` and ``"1.0rc1"`` have none.
    """
    match = _PATCH_RE.match(str(version).strip())
    return int(match.group(1)) if match else None


def compare_versions(left: str, right: str) -> int:
    """Three-way compare two versions.

    Returns:
        ``-1`` if ``left < right``, ``0`` if equal, ``1`` if greater.
    """
    a = parse_version(left)
    b = parse_version(right)
    if a == b:
        pa, pb = patch_level(left), patch_level(right)
        if pa is not None and pb is not None:
            return (pa > pb) - (pa < pb)
    return (a > b) - (a < b)


def is_up_to_date(installed: str | None, target: str) -> bool:
    """Whether an installed version satisfies ``target`` (``>=``).

    ``None`` means not installed and is never up to date.
    """
    if not installed:
        return False
    return compare_versions(installed, target) >= 0


def meets_minimum(version: str | None, minimum: str) -> bool:
    """Toolchain gate: is ``version`` present and at least ``minimum``?

    Unparsable toolchain versions fail the gate rather than raise —
    a broken ``cmake --version`` is treated like a missing cmake.
    """
    if not version:
        return False
    try:
        return compare_versions(version, minimum) >= 0
    except MalformedVersion:
        return False
