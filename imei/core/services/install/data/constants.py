"""
L0 Data — Module-level constants.

Pure data. No logic. No imports beyond stdlib.
"""

from __future__ import annotations

# ── Default paths ───────────────────────────────────────────────

DEFAULT_WORK_DIR = "/usr/local/src/imei"
DEFAULT_BUILD_DIR = "/usr/local"
DEFAULT_LIB_DIR = "/usr/local"
DEFAULT_LOG_FILE = "/var/log/imei.log"

# Temporary apt source list enabling deb-src entries; removed on exit.
SOURCE_LIST = "/etc/apt/sources.list.d/imei.list"

# ── Remote resources ────────────────────────────────────────────

_RAW_BASE = "https://raw.githubusercontent.com/SoftCreatR/imei/main"

MANIFEST_BASE_URL = f"{_RAW_BASE}/versions"
SIGNATURE_URL = f"{_RAW_BASE}/imei.sh.sig"
PUBLIC_KEY_URL = f"{_RAW_BASE}/public.pem"
INSTALLER_URL = f"{_RAW_BASE}/imei.sh"

GH_FILE_BASE = "https://codeload.github.com"

# Installer header line carrying its version, e.g. "# Version : 6.1.1"
INSTALLER_VERSION_PATTERN = r"Version\s+:\s+([\d.]+)"

# ── Probes ──────────────────────────────────────────────────────

MAGICK_VERSION_PATTERN = r"Version: ImageMagick\s+([\d.\-]+)"

# ── System prerequisites (apt) ──────────────────────────────────

BUILD_PACKAGES: tuple[str, ...] = (
    "git", "curl", "make", "cmake", "automake", "libtool", "yasm", "g++",
    "pkg-config", "perl", "libde265-dev", "libx265-dev", "libltdl-dev",
    "libopenjp2-7-dev", "liblcms2-dev", "libbrotli-dev", "libzip-dev",
    "libbz2-dev", "liblqr-1-0-dev", "libzstd-dev", "libgif-dev",
    "libjpeg-dev", "libopenexr-dev", "libpng-dev", "libwebp-dev",
    "librsvg2-dev", "libwmf-dev", "libxml2-dev", "libtiff-dev",
    "libraw-dev", "ghostscript", "gsfonts", "ffmpeg", "libpango1.0-dev",
    "libdjvulibre-dev", "libfftw3-dev", "libgs-dev", "libgraphviz-dev",
    "libjemalloc-dev",
)

# libraqm is not packaged on these releases
RAQM_PACKAGES: tuple[str, ...] = ("libraqm-dev", "libraqm0")
RAQM_UNSUPPORTED_CODENAMES: tuple[str, ...] = ("stretch", "xenial")

# deb / deb-src lines per distro family; {codename} is substituted.
APT_SOURCES: dict[str, tuple[str, ...]] = {
    "ubuntu": (
        "deb http://archive.ubuntu.com/ubuntu {codename} main restricted",
        "deb-src http://archive.ubuntu.com/ubuntu {codename} main restricted universe multiverse",
    ),
    "debian": (
        "deb http://deb.debian.org/debian {codename} main contrib non-free",
        "deb-src http://deb.debian.org/debian {codename} main contrib non-free",
    ),
    "raspbian": (
        "deb http://archive.raspbian.org/raspbian {codename} main contrib non-free",
        "deb-src http://archive.raspbian.org/raspbian {codename} main contrib non-free",
    ),
}
