"""
L4 Execution — Installer self-integrity verification.

Before anything privileged happens, the installer fetches a detached
signature and the publisher's public key and checks the signature
over its own bytes — the equivalent of::

    openssl dgst -sha512 -verify public.pem -signature imei.sh.sig imei.sh

This gate is fail-closed: any problem (network, bad key, bad
signature) raises ``IntegrityCheckFailed`` and no build runs.  The
key and signature live in a scoped temporary directory that is
removed on every exit path.
"""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa
from cryptography.hazmat.primitives.serialization import load_pem_public_key

from imei.core.errors import FetchError, IntegrityCheckFailed
from imei.core.models.run_config import RunConfig
from imei.core.services.install.execution.download import http_get

logger = logging.getLogger(__name__)

SIGNATURE_FILENAME = "imei.sh.sig"
PUBLIC_KEY_FILENAME = "imei.pem"


@contextmanager
def transient_dir(prefix: str = "imei-sig-") -> Iterator[Path]:
    """Temporary directory for key/signature artifacts, always removed."""
    with tempfile.TemporaryDirectory(prefix=prefix) as tmp:
        yield Path(tmp)


def verify_signature(data: bytes, signature: bytes, public_key_pem: bytes) -> None:
    """Verify a detached SHA-512 signature over ``data``.

    RSA keys use PKCS#1 v1.5 padding and EC keys use ECDSA — the two
    schemes ``openssl dgst -sha512 -sign`` produces.

    Raises:
        IntegrityCheckFailed: If the key is unusable or the signature
            does not match.
    """
    try:
        key = load_pem_public_key(public_key_pem)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise IntegrityCheckFailed(f"Unusable public key: {exc}") from exc

    try:
        if isinstance(key, rsa.RSAPublicKey):
            key.verify(signature, data, padding.PKCS1v15(), hashes.SHA512())
        elif isinstance(key, ec.EllipticCurvePublicKey):
            key.verify(signature, data, ec.ECDSA(hashes.SHA512()))
        else:
            raise IntegrityCheckFailed(
                f"Unsupported public key type: {type(key).__name__}"
            )
    except InvalidSignature as exc:
        raise IntegrityCheckFailed("Signature verification failed!") from exc


def verify_installer(
    config: RunConfig,
    *,
    fetch: Callable[..., bytes] = http_get,
) -> bool:
    """Run the self-integrity gate for this run.

    Args:
        config: Run configuration (URLs, installer path, toggle).
        fetch: Byte fetcher, ``http_get`` by default.

    Returns:
        True if the signature verified, False if verification was
        disabled or the installer was piped (no file on disk).

    Raises:
        IntegrityCheckFailed: On any verification problem, including a
            configured installer path that is not a file.
    """
    if not config.verify_signature:
        logger.warning("Signature verification disabled")
        return False

    installer = config.installer_path
    if installer is None:
        # Piped installs have no file on disk to check
        logger.warning("Installer was piped, no file to verify; skipping signature check")
        return False
    if not installer.is_file():
        raise IntegrityCheckFailed(f"Installer file not found: {installer}")

    headers = config.http_headers()
    with transient_dir() as tmp:
        sig_path = tmp / SIGNATURE_FILENAME
        key_path = tmp / PUBLIC_KEY_FILENAME
        try:
            sig_path.write_bytes(fetch(config.signature_url, headers=headers))
            key_path.write_bytes(fetch(config.public_key_url, headers=headers))
        except FetchError as exc:
            raise IntegrityCheckFailed(str(exc)) from exc

        try:
            data = installer.read_bytes()
        except OSError as exc:
            raise IntegrityCheckFailed(f"Cannot read {installer}: {exc}") from exc

        verify_signature(data, sig_path.read_bytes(), key_path.read_bytes())

    logger.info("Signature of %s verified", installer)
    return True
