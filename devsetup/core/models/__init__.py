"""
Domain models — Pydantic types for the provisioner.

All models are re-exported here for convenient access:

    from devsetup.core.models import ProvisionConfig, Receipt, TargetPackage
"""

from devsetup.core.models.action import Receipt
from devsetup.core.models.profile import ProvisionConfig, ShellSettings
from devsetup.core.models.target import (
    PACKAGE_MANAGERS,
    ComponentSpec,
    PackageManager,
    PlatformDescriptor,
    ReleaseArtifact,
    ReleaseBinary,
    RuntimeSpec,
    TargetPackage,
)

__all__ = [
    # target.py
    "PACKAGE_MANAGERS",
    "ComponentSpec",
    "PackageManager",
    "PlatformDescriptor",
    # profile.py
    "ProvisionConfig",
    # action.py
    "Receipt",
    "ReleaseArtifact",
    "ReleaseBinary",
    "RuntimeSpec",
    "ShellSettings",
    "TargetPackage",
]
