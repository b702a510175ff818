"""
L0 Data — The four components, in build order.

libheif needs aom's shared library to exist before it can build;
ImageMagick links against all three codecs and is always evaluated
last.  ``rebuild_triggers`` encodes ABI coupling: when a trigger is
rebuilt in this run, the dependent component is rebuilt as well.
"""

from __future__ import annotations

from imei.core.models.component import Component
from imei.core.services.install.data.constants import GH_FILE_BASE

AOM = Component(
    name="aom",
    label="aom",
    order=0,
    url_template=f"{GH_FILE_BASE}/jbeich/aom/tar.gz/v{{version}}",
    archive_template="aom-{version}.tar.gz",
    source_dir_template="aom-{version}",
    min_cmake_version="3.6",
    library="libaom",
)

LIBHEIF = Component(
    name="libheif",
    label="libheif",
    order=1,
    url_template=f"{GH_FILE_BASE}/strukturag/libheif/tar.gz/v{{version}}",
    archive_template="libheif-{version}.tar.gz",
    source_dir_template="libheif-{version}",
    hard_dependencies=("aom",),
    rebuild_triggers=("aom",),
    library="libheif",
)

JPEG_XL = Component(
    name="jpeg-xl",
    label="jpegxl",
    order=2,
    url_template="https://gitlab.com/wg1/jpeg-xl/-/archive/v{version}/jpeg-xl-v{version}.tar",
    archive_template="jpeg-xl-v{version}.tar",
    source_dir_template="jpeg-xl-v{version}",
    rebuild_triggers=("aom",),
    min_cmake_version="3.10",
    library="libjxl",
)

IMAGEMAGICK = Component(
    name="imagemagick",
    label="ImageMagick",
    order=3,
    url_template=f"{GH_FILE_BASE}/ImageMagick/ImageMagick/tar.gz/{{version}}",
    archive_template="ImageMagick-{version}.tar.gz",
    source_dir_template="ImageMagick-{version}",
    rebuild_triggers=("aom", "libheif", "jpeg-xl"),
)

COMPONENTS: tuple[Component, ...] = (AOM, LIBHEIF, JPEG_XL, IMAGEMAGICK)

COMPONENTS_BY_NAME: dict[str, Component] = {c.name: c for c in COMPONENTS}

COMPONENT_NAMES: tuple[str, ...] = tuple(c.name for c in COMPONENTS)


def get_component(name: str) -> Component:
    """Look up a component by name.

    Raises:
        KeyError: If ``name`` is not one of the four components.
    """
    return COMPONENTS_BY_NAME[name]
