"""
L5 Orchestration — stage state machine, pipeline and the full install run.
"""

from imei.core.services.install.orchestration.installer import (  # noqa: F401
    InstallPlan,
    InstallReport,
    collect_status,
    install_prerequisites,
    run_install,
)
from imei.core.services.install.orchestration.pipeline import (  # noqa: F401
    Pipeline,
    PipelineFailed,
)
from imei.core.services.install.orchestration.stage import (  # noqa: F401
    BuildStage,
    StageContext,
)
from imei.core.services.install.orchestration.verification import (  # noqa: F401
    magick_binary,
    verify_installation,
)
