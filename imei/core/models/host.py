"""Host information shown in the banner and used by recipes."""

from __future__ import annotations

from pydantic import BaseModel


class HostInfo(BaseModel):
    """What we know about the machine we are building on."""

    distro_id: str = ""             # debian, ubuntu, raspbian
    codename: str = ""              # bookworm, jammy
    pretty_name: str = ""           # "Debian GNU/Linux 12 (bookworm)"
    arch: str = ""
    cpu_count: int = 1
    cmake_version: str | None = None

    @property
    def is_raspbian(self) -> bool:
        return "raspbian" in (self.distro_id + " " + self.pretty_name).lower()

    def make_env(self) -> dict[str, str]:
        """Compiler environment for every build command."""
        cores = max(self.cpu_count, 1)
        return {
            "CC": "gcc",
            "CXX": "g++",
            "MAKEFLAGS": f"-j{cores + 1} -l{cores}",
        }
