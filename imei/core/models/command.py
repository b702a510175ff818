"""
CommandResult — structured outcome of one external command.

Every tool invocation (cmake, make, apt-get, ldconfig, …) returns
one of these instead of raising.  The orchestration layer decides
whether a failed result is fatal.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class CommandResult(BaseModel):
    """Exit status and captured output of a command."""

    command: list[str] = Field(default_factory=list)
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""
    elapsed_ms: int = 0
    error: str | None = None        # set when the command could not be started

    @property
    def ok(self) -> bool:
        """Whether the command ran and exited with status 0."""
        return self.error is None and self.returncode == 0

    @property
    def output(self) -> str:
        """Combined stdout and stderr (some tools print versions to stderr)."""
        return (self.stdout or "") + (self.stderr or "")

    def describe_failure(self) -> str:
        """One-line description of why the command failed."""
        cmd = " ".join(self.command)
        if self.error:
            return f"{cmd}: {self.error}"
        return f"{cmd}: exit {self.returncode}"
