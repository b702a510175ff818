"""
Test doubles shared across the suite.

Nothing here touches the real host: commands go to ``FakeRunner``,
downloads to ``FakeArchiveServer``.
"""

import io
import tarfile
from pathlib import Path

from imei.core.errors import FetchError
from imei.core.models.command import CommandResult
from imei.core.services.install.data.components import COMPONENTS


class FakeRunner:
    """Records every command; fails the ones matching ``fail_on``."""

    def __init__(self, fail_on=None, outputs=None):
        self.calls: list[dict] = []
        self.fail_on = fail_on
        self.outputs = outputs or {}

    def __call__(self, cmd, *, cwd=None, env_overrides=None, log_file=None, timeout=None):
        self.calls.append({"command": list(cmd), "cwd": cwd, "env": env_overrides})
        if self.fail_on and self.fail_on(cmd):
            return CommandResult(command=list(cmd), returncode=2, stderr="boom")
        stdout = self.outputs.get(Path(cmd[0]).name, "")
        return CommandResult(command=list(cmd), returncode=0, stdout=stdout)

    @property
    def commands(self) -> list[list[str]]:
        return [c["command"] for c in self.calls]


def write_tarball(dest: Path, top_dir: str, files: dict[str, str] | None = None) -> Path:
    """Create a source tarball whose members live under ``top_dir/``."""
    files = files or {"README": "sources\n"}
    mode = "w:gz" if dest.name.endswith(".gz") else "w"
    dest.parent.mkdir(parents=True, exist_ok=True)
    with tarfile.open(dest, mode) as tar:
        for name, content in files.items():
            data = content.encode()
            info = tarfile.TarInfo(f"{top_dir}/{name}")
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return dest


class FakeArchiveServer:
    """Stands in for ``download_file``: serves a tarball per component URL."""

    def __init__(self, versions: dict[str, str], missing=()):
        self.urls = {
            c.archive_url(versions[c.name]): c.source_dir(versions[c.name])
            for c in COMPONENTS if c.name in versions
        }
        self.missing = set(missing)
        self.requested: list[str] = []

    def __call__(self, url, dest, *, headers=None):
        self.requested.append(url)
        if url in self.missing or url not in self.urls:
            raise FetchError(url, "HTTP 404")
        return write_tarball(dest, self.urls[url])


class FakeRemote:
    """Stands in for ``http_get`` / ``http_get_text``: URL → payload."""

    def __init__(self, resources=None):
        self.resources = dict(resources or {})
        self.requests: list[tuple[str, dict]] = []

    def __call__(self, url, *, headers=None):
        self.requests.append((url, headers or {}))
        if url not in self.resources:
            raise FetchError(url, "HTTP 404")
        return self.resources[url]
