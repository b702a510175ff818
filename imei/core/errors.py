"""
Error taxonomy for the installer.

Every fatal condition is an ``ImeiError`` subclass.  They bubble
straight up to ``imei.main``, which prints them and exits with
status 1.  The execution layer never raises for a failed command:
it returns a ``CommandResult`` and the orchestration layer decides.

    PreconditionFailed    not root / unsupported OS / no HTTPS support
    IntegrityCheckFailed  installer signature did not verify (fail-closed)
    VersionUnresolved     no target version for a component
    StageFailed           a build stage failed — halts the pipeline
    HashMismatch          archive digest differs (caught, reported, tolerated)
    MalformedVersion      version string cannot be parsed
    FetchError            remote resource could not be downloaded
    ConfigError           invalid configuration file or values
"""

from __future__ import annotations


class ImeiError(Exception):
    """Base class for every installer error."""


class ConfigError(ImeiError):
    """Raised when configuration is invalid or unreadable."""


class PreconditionFailed(ImeiError):
    """Raised when the host cannot run the installer at all."""


class IntegrityCheckFailed(ImeiError):
    """Raised when the installer's own signature does not verify."""


class VersionUnresolved(ImeiError):
    """Raised when no target version can be determined for a component."""

    def __init__(self, component: str, reason: str = "") -> None:
        self.component = component
        self.reason = reason
        message = f"Unable to determine version number for {component}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class StageFailed(ImeiError):
    """Raised when a build stage fails.  Always fatal for the run."""

    def __init__(self, component: str, detail: str) -> None:
        self.component = component
        self.detail = detail
        super().__init__(f"Building {component} failed: {detail}")


class HashMismatch(ImeiError):
    """Raised by the checksum helper when an archive digest differs.

    Stages catch this and report it as a warning — the build still
    proceeds.
    """

    def __init__(self, path: str, expected: str, actual: str) -> None:
        self.path = path
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Checksum mismatch for {path}: expected {expected}, got {actual}"
        )


class MalformedVersion(ImeiError, ValueError):
    """Raised when a version string is not a dotted numeric version."""


class FetchError(ImeiError):
    """Raised when a remote resource cannot be downloaded."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch {url}: {reason}")
