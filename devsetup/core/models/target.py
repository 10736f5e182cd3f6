"""
Target models — what the provisioner is asked to make present.

A target's satisfied/unsatisfied state is NOT stored here.  It is
re-derived by the detection layer every time it is needed, because
an earlier step may have changed it moments ago.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

PackageManager = Literal["apt", "dnf", "pacman"]

# Fixed detection priority: the first manager found wins.
PACKAGE_MANAGERS: tuple[PackageManager, ...] = ("apt", "dnf", "pacman")

RELEASES_BASE_URL = "https://github.com"

DEFAULT_ASSET_TEMPLATE = "{binary}_{version}_{os}_{arch}.tar.gz"


class TargetPackage(BaseModel):
    """A logical package and its spelling per package manager.

    The same logical package is named differently across ecosystems
    (``libssl-dev`` on apt, ``openssl-devel`` on dnf, ``openssl`` on
    pacman), and may expand to several real packages
    (``postgresql`` + ``postgresql-contrib``).

    A manager missing from ``names`` means the package is not
    available there; a target with no ``names`` at all uses
    ``name`` everywhere.
    """

    name: str
    names: dict[str, str | list[str]] = Field(default_factory=dict)
    command: str | None = None      # probe this executable instead of the package DB

    def names_for(self, manager: str) -> list[str]:
        """Real package names for ``manager`` (empty = unavailable)."""
        if not self.names:
            return [self.name]
        value = self.names.get(manager)
        if value is None:
            return []
        if isinstance(value, str):
            return value.split()
        return list(value)


class PlatformDescriptor(BaseModel):
    """The detected package manager plus normalized OS/arch tokens."""

    package_manager: PackageManager
    os_name: str = "linux"
    arch: str = "x86_64"
    is_root: bool = False

    @property
    def os_title(self) -> str:
        """Capitalized OS token (``Linux``), used by some release assets."""
        return self.os_name.capitalize()


class ReleaseBinary(BaseModel):
    """A tool installed from a GitHub release archive."""

    repo: str                       # "owner/project"
    binary: str
    asset_template: str = DEFAULT_ASSET_TEMPLATE


class ReleaseArtifact(BaseModel):
    """A resolved, platform-specific release download."""

    repo: str
    binary: str
    version: str                    # raw tag, e.g. "v1.2.3"
    os_name: str
    arch: str
    asset_template: str = DEFAULT_ASSET_TEMPLATE

    @property
    def bare_version(self) -> str:
        """Tag with a single leading ``v`` removed."""
        return self.version.removeprefix("v")

    @property
    def asset_name(self) -> str:
        return (
            self.asset_template
            .replace("{binary}", self.binary)
            .replace("{version}", self.bare_version)
            .replace("{os_title}", self.os_name.capitalize())
            .replace("{os}", self.os_name)
            .replace("{arch}", self.arch)
        )

    @property
    def download_url(self) -> str:
        # The path segment keeps the raw tag; only the filename strips "v".
        return (
            f"{RELEASES_BASE_URL}/{self.repo}/releases/download/"
            f"{self.version}/{self.asset_name}"
        )


class RuntimeSpec(BaseModel):
    """A language runtime delegated to the version manager."""

    tool: str                       # mise plugin name
    channel: Literal["lts", "latest", "stable"] = "latest"
    command: str = ""               # executable used for probe + verification
    version_args: list[str] = Field(default_factory=lambda: ["--version"])

    @property
    def probe_command(self) -> str:
        return self.command or self.tool

    @property
    def selector(self) -> str:
        return f"{self.tool}@{self.channel}"


class ComponentSpec(BaseModel):
    """An optional component (database or container engine).

    Installed only when the operator opts in.  ``services`` maps a
    package manager to the systemd unit enabled after install; a
    missing entry falls back to ``default_service``.
    """

    key: str
    label: str
    probe: str                      # command that proves it is installed
    package: TargetPackage
    default_service: str = ""
    services: dict[str, str] = Field(default_factory=dict)
    apt_only: bool = False

    def service_for(self, manager: str) -> str:
        return self.services.get(manager, self.default_service)
