from __future__ import annotations


class BootstrapError(RuntimeError):
    """Fatal condition that aborts the bootstrap run."""


class PreconditionError(BootstrapError):
    pass


class InstallError(BootstrapError):
    """The OS package store rejected a package file."""


class DependencyInstallError(BootstrapError):
    pass


class RuntimeInstallError(BootstrapError):
    pass


class RuntimeNotFoundError(BootstrapError):
    pass
