"""
L2 Resolver — ``__init__.py`` re-exports the version resolvers.
"""

from imei.core.services.install.resolver.installer_update import (  # noqa: F401
    latest_installer_version,
    newer_installer_available,
)
from imei.core.services.install.resolver.version_oracle import (  # noqa: F401
    manifest_url,
    resolve_all,
    resolve_version,
)
