"""
L0 Data — Build recipes per component.

Each recipe is a list of command steps run after the archive has
been extracted.  Tokens in ``{braces}`` are substituted by
``execution.build_helpers`` before running:

    {source_dir}  absolute path of the extracted sources
    {build_dir}   out-of-tree build directory (``build_subdir``)
    {prefix}      install prefix (RunConfig.build_dir)

``cwd`` is one of ``"source"`` or ``"build"``.  ``ldconfig`` is not
listed here — every successful recipe is followed by a linker cache
refresh.
"""

from __future__ import annotations

_IMAGEMAGICK_CONFIGURE_ARGS: list[str] = [
    "--prefix={prefix}",
    "CFLAGS=-O3 -march=native",
    "CXXFLAGS=-O3 -march=native",
    "--disable-static",
    "--enable-shared",
    "--enable-openmp",
    "--enable-opencl",
    "--enable-cipher",
    "--enable-hdri",
    "--enable-docs",
    "--with-threads",
    "--with-modules",
    "--with-quantum-depth=32",
    "--with-magick-plus-plus",
    "--with-perl",
    "--with-jemalloc",
    "--without-tcmalloc",
    "--without-umem",
    "--without-autotrace",
    "--with-bzlib",
    "--with-x",
    "--with-zlib",
    "--with-zstd",
    "--without-dps",
    "--with-fftw",
    "--without-flif",
    "--without-fpx",
    "--with-djvu",
    "--with-fontconfig",
    "--with-freetype",
    "--with-raqm",
    "--with-gslib",
    "--with-gvc",
    "--with-heic",
    "--with-jbig",
    "--with-jpeg",
    "--with-jxl=yes",
    "--with-lcms",
    "--with-openjp2",
    "--with-lqr",
    "--with-lzma",
    "--with-openexr",
    "--with-pango",
    "--with-png",
    "--with-raw",
    "--with-rsvg",
    "--with-tiff",
    "--with-webp",
    "--with-wmf",
    "--with-xml",
    "--with-dejavu-font-dir=/usr/share/fonts/truetype/ttf-dejavu",
    "--with-gs-font-dir=/usr/share/fonts/type1/gsfonts",
    "--with-urw-base35-font-dir=/usr/share/fonts/type1/urw-base35",
    "--with-fontpath=/usr/share/fonts/type1",
    "PSDelegate=/usr/bin/gs",
]

BUILD_RECIPES: dict[str, dict] = {
    "aom": {
        # aom refuses in-source builds
        "build_subdir": "build_aom",
        "steps": [
            {
                "label": "CMake configure",
                "command": ["cmake", "{source_dir}", "-DBUILD_SHARED_LIBS=1"],
                "cwd": "build",
                # see https://github.com/SoftCreatR/imei/issues/9
                "raspbian_args": [
                    "-DCMAKE_C_FLAGS=-mfloat-abi=hard -march=armv7-a -marm -mfpu=neon",
                ],
            },
            {"label": "Compile", "command": ["make"], "cwd": "build"},
            {"label": "Install", "command": ["make", "install"], "cwd": "build"},
        ],
    },
    "libheif": {
        "steps": [
            {"label": "Bootstrap", "command": ["./autogen.sh"], "cwd": "source"},
            {"label": "Configure", "command": ["./configure"], "cwd": "source"},
            {"label": "Compile", "command": ["make"], "cwd": "source"},
            {"label": "Install", "command": ["make", "install"], "cwd": "source"},
        ],
    },
    "jpeg-xl": {
        "build_subdir": "{source_dir}/build",
        "steps": [
            {"label": "Fetch third-party deps", "command": ["./deps.sh"], "cwd": "source"},
            {
                "label": "CMake configure",
                "command": [
                    "cmake", "-DCMAKE_BUILD_TYPE=Release", "-DBUILD_TESTING=OFF", "..",
                ],
                "cwd": "build",
            },
            {"label": "Compile", "command": ["make"], "cwd": "build"},
            {"label": "Install", "command": ["make", "install"], "cwd": "build"},
        ],
    },
    "imagemagick": {
        "steps": [
            {
                "label": "Configure",
                "command": ["./configure"] + _IMAGEMAGICK_CONFIGURE_ARGS,
                "cwd": "source",
            },
            {"label": "Compile", "command": ["make"], "cwd": "source"},
            {"label": "Install", "command": ["make", "install"], "cwd": "source"},
        ],
    },
}

# Refresh the dynamic linker cache after every install
LDCONFIG_COMMAND: list[str] = ["ldconfig"]
