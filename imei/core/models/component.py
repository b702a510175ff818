"""
Component model — one buildable unit of the install.

A component knows where its sources live, what it depends on,
and which upstream rebuilds force it to be rebuilt too.  The
four concrete components are declared in
``imei.core.services.install.data.components``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Component(BaseModel):
    """Static description of a buildable component."""

    model_config = ConfigDict(frozen=True)

    name: str                              # aom, libheif, jpeg-xl, imagemagick
    label: str                             # human-readable, e.g. "JPEG XL"
    order: int                             # position in the build order
    url_template: str                      # archive URL, ``{version}`` placeholder
    archive_template: str                  # local archive filename
    source_dir_template: str               # directory the archive unpacks to

    # Components that must already be installed on the host.
    hard_dependencies: tuple[str, ...] = ()
    # Upstream components whose rebuild in this run forces a rebuild here.
    rebuild_triggers: tuple[str, ...] = ()

    min_cmake_version: str | None = None

    # Shared library basename probed under ``<lib_dir>/lib`` (None = binary probe)
    library: str | None = None

    def archive_url(self, version: str) -> str:
        """Download URL of the source archive for ``version``."""
        return self.url_template.format(version=version)

    def archive_name(self, version: str) -> str:
        """Local filename of the downloaded archive."""
        return self.archive_template.format(version=version)

    def source_dir(self, version: str) -> str:
        """Name of the directory the archive extracts to."""
        return self.source_dir_template.format(version=version)
