"""
L1 Domain — ``__init__.py`` re-exports all pure domain functions.

No I/O, no subprocess.  Everything here is safe to call in tests
without mocking.
"""

from imei.core.services.install.domain.decision import (  # noqa: F401
    DecisionInputs,
    decide_build,
)
from imei.core.services.install.domain.display import format_duration  # noqa: F401
from imei.core.services.install.domain.version_compare import (  # noqa: F401
    compare_versions,
    is_up_to_date,
    meets_minimum,
    parse_version,
)
