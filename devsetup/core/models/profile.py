"""
Provisioning profile — the declared desired state of a workstation.

Loaded from devsetup.yml (optional).  Every key that the file omits
keeps the built-in default from the data catalog, so an empty file
and no file at all describe the same machine.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from devsetup.core.models.target import (
    ComponentSpec,
    ReleaseBinary,
    RuntimeSpec,
    TargetPackage,
)
from devsetup.core.services.provision.data import catalog


class ShellSettings(BaseModel):
    """Settings for the zsh + prompt theme pipeline."""

    theme: str = catalog.POSH_THEME
    plugins: dict[str, str] = Field(default_factory=lambda: dict(catalog.ZSH_PLUGINS))
    prerequisites: list[TargetPackage] = Field(
        default_factory=lambda: [TargetPackage(**p) for p in catalog.SHELL_PREREQUISITES]
    )
    upgrade: bool = False


class ProvisionConfig(BaseModel):
    """Root provisioning profile.

    ``databases`` and ``docker`` pre-answer the interactive prompts;
    ``None`` means "ask the operator".
    """

    essential_packages: list[TargetPackage] = Field(
        default_factory=lambda: [TargetPackage(**p) for p in catalog.ESSENTIAL_PACKAGES]
    )
    release_binaries: list[ReleaseBinary] = Field(
        default_factory=lambda: [ReleaseBinary(**b) for b in catalog.RELEASE_BINARIES]
    )
    runtimes: list[RuntimeSpec] = Field(
        default_factory=lambda: [RuntimeSpec(**r) for r in catalog.RUNTIMES]
    )
    npm_packages: list[str] = Field(default_factory=lambda: list(catalog.NPM_PACKAGES))
    pip_packages: list[str] = Field(default_factory=lambda: list(catalog.PIP_PACKAGES))
    config_dirs: list[str] = Field(default_factory=lambda: list(catalog.CONFIG_DIRS))

    databases: list[str] | None = None
    docker: bool | None = None

    network_timeout: int = 60
    shell: ShellSettings = Field(default_factory=ShellSettings)

    def database_catalog(self) -> dict[str, ComponentSpec]:
        """Selectable databases keyed by their prompt number."""
        return {num: ComponentSpec(**spec) for num, spec in catalog.DATABASES.items()}

    def container_engine(self) -> ComponentSpec:
        return ComponentSpec(**catalog.DOCKER)
