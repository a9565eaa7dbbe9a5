from .step_10_preconditions import PreconditionsStep
from .step_20_install_dependencies import InstallDependenciesStep
from .step_30_install_runtime import InstallRuntimeStep
from .step_40_verify_runtime import VerifyRuntimeStep
from .step_50_install_packages import InstallPackagesStep

__all__ = [
    "PreconditionsStep",
    "InstallDependenciesStep",
    "InstallRuntimeStep",
    "VerifyRuntimeStep",
    "InstallPackagesStep",
]
