"""
L4 Execution — Download, checksum verification, and extraction.

HTTP goes through ``urllib.request`` so the installer has no
dependency on curl, wget, or httpie being present.
"""

from __future__ import annotations

import hashlib
import http.client
import logging
import shutil
import tarfile
import urllib.error
import urllib.request
from pathlib import Path

from imei.core.errors import FetchError, HashMismatch

logger = logging.getLogger(__name__)

_CHUNK = 64 * 1024


def _open(url: str, headers: dict[str, str] | None, timeout: int | None):
    try:
        req = urllib.request.Request(url, headers=headers or {})
        if timeout is None:
            return urllib.request.urlopen(req)
        return urllib.request.urlopen(req, timeout=timeout)
    except urllib.error.HTTPError as exc:
        raise FetchError(url, f"HTTP {exc.code}") from exc
    except (urllib.error.URLError, OSError, http.client.HTTPException) as exc:
        raise FetchError(url, str(getattr(exc, "reason", exc))) from exc
    except ValueError as exc:
        # No scheme or an unknown one: "unknown url type"
        raise FetchError(url, str(exc)) from exc


def http_get(
    url: str,
    *,
    headers: dict[str, str] | None = None,
    timeout: int | None = 30,
) -> bytes:
    """Fetch a small resource fully into memory.

    Raises:
        FetchError: On any HTTP or network failure.
    """
    logger.debug("GET %s", url)
    with _open(url, headers, timeout) as resp:
        try:
            return resp.read()
        except (OSError, http.client.HTTPException) as exc:
            raise FetchError(url, str(exc)) from exc


def http_get_text(
    url: str,
    *,
    headers: dict[str, str] | None = None,
    timeout: int | None = 30,
) -> str:
    """Fetch a plain-text resource, stripped of surrounding whitespace."""
    return http_get(url, headers=headers, timeout=timeout).decode(
        "utf-8", errors="replace",
    ).strip()


def download_file(
    url: str,
    dest: Path,
    *,
    headers: dict[str, str] | None = None,
) -> Path:
    """Stream ``url`` into ``dest``.  Blocks until the transfer ends.

    Raises:
        FetchError: On any HTTP, network, or write failure.
    """
    logger.info("Downloading %s → %s", url, dest)
    dest.parent.mkdir(parents=True, exist_ok=True)
    with _open(url, headers, None) as resp:
        try:
            with open(dest, "wb") as fh:
                shutil.copyfileobj(resp, fh, _CHUNK)
        except (OSError, http.client.HTTPException) as exc:
            raise FetchError(url, str(exc)) from exc
    return dest


def file_digest(path: Path, algo: str = "sha1") -> str:
    """Hex digest of a file, read in chunks."""
    h = hashlib.new(algo)
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK), b""):
            h.update(chunk)
    return h.hexdigest()


def verify_checksum(path: Path, expected: str, algo: str = "sha1") -> str:
    """Compare a file's digest against ``expected``.

    The manifest publishes bare SHA-1 hex digests; an ``algo:`` prefix
    (``sha256:abc…``) is also accepted.

    Returns:
        The actual digest.

    Raises:
        HashMismatch: If the digests differ.
    """
    expected = expected.strip().lower()
    if ":" in expected:
        algo, expected = expected.split(":", 1)
    actual = file_digest(path, algo)
    if actual != expected:
        raise HashMismatch(str(path), expected, actual)
    return actual


def extract_archive(archive: Path, dest: Path) -> list[str]:
    """Extract a (possibly compressed) tarball into ``dest``.

    Uses the ``data`` extraction filter, which rejects absolute paths,
    ``..`` traversal and device files.

    Returns:
        Top-level entry names found in the archive.

    Raises:
        tarfile.TarError, OSError: If the archive is unreadable.
    """
    dest.mkdir(parents=True, exist_ok=True)
    with tarfile.open(archive, "r:*") as tar:
        top_level = sorted({
            m.name.split("/", 1)[0] for m in tar.getmembers()
            if m.name and not m.name.startswith("pax_global_header")
        })
        tar.extractall(dest, filter="data")
    logger.debug("Extracted %s → %s (%s)", archive, dest, ", ".join(top_level))
    return top_level
