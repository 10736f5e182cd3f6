"""
L4 Execution — GitHub release binary installer.

Resolves the latest release tag of a project, downloads the
platform-matched archive into a throwaway directory, extracts the
binary and moves it into a system-wide bin directory.

Known fragility: the asset name is computed from a naming
convention, not looked up.  If the project publishes under a
different name (or for an architecture we do not normalize) the
download fails and there is no fallback.
"""

from __future__ import annotations

import logging
import tarfile
import tempfile
from pathlib import Path

from devsetup.core.context import is_dry_run
from devsetup.core.models.action import Receipt
from devsetup.core.models.target import (
    PlatformDescriptor,
    ReleaseArtifact,
    ReleaseBinary,
)
from devsetup.core.services.provision.data.catalog import RELEASE_INSTALL_DIR
from devsetup.core.services.provision.detection.probes import command_exists
from devsetup.core.services.provision.execution.download import (
    download_file,
    fetch_json,
)
from devsetup.core.services.provision.execution.subprocess_runner import run_command

logger = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"


class ReleaseError(Exception):
    """Raised when release metadata cannot be resolved."""


def fetch_latest_tag(repo: str, *, timeout: int = 60) -> str:
    """Return ``tag_name`` of the latest release of ``repo``.

    Parses the JSON document rather than pattern-matching the raw
    response text.

    Raises:
        ReleaseError: on network failure or when the document has
            no usable ``tag_name``.
    """
    url = f"{GITHUB_API}/repos/{repo}/releases/latest"
    try:
        data = fetch_json(url, timeout=timeout)
    except (OSError, ValueError) as exc:
        raise ReleaseError(f"Failed to fetch release metadata for {repo}: {exc}") from exc

    tag = data.get("tag_name") if isinstance(data, dict) else None
    if not isinstance(tag, str) or not tag:
        raise ReleaseError(f"No tag_name in latest release metadata for {repo}")
    return tag


def build_artifact(
    spec: ReleaseBinary,
    version: str,
    platform: PlatformDescriptor,
) -> ReleaseArtifact:
    """Bind a release declaration to a version and platform."""
    return ReleaseArtifact(
        repo=spec.repo,
        binary=spec.binary,
        version=version,
        os_name=platform.os_name,
        arch=platform.arch,
        asset_template=spec.asset_template,
    )


def _extract_binary(archive: Path, binary: str, dest_dir: Path) -> Path | None:
    """Extract the member named ``binary`` from a tar archive.

    Only regular files whose basename matches are considered; the
    file lands directly in ``dest_dir`` whatever its path inside
    the archive.
    """
    with tarfile.open(archive, "r:*") as tar:
        for member in tar.getmembers():
            if member.isfile() and Path(member.name).name == binary:
                fobj = tar.extractfile(member)
                if fobj is None:
                    continue
                out = dest_dir / binary
                with fobj, open(out, "wb") as f:
                    f.write(fobj.read())
                out.chmod(0o755)
                return out
    return None


def install_release_binary(
    spec: ReleaseBinary,
    platform: PlatformDescriptor,
    *,
    install_dir: str = RELEASE_INSTALL_DIR,
    timeout: int = 60,
) -> Receipt:
    """Ensure ``spec.binary`` is on PATH, installing it from GitHub if not."""
    step = f"release:{spec.binary}"

    if command_exists(spec.binary):
        logger.info("✓ %s is already installed", spec.binary)
        return Receipt.skip(step, f"{spec.binary} is already installed")

    try:
        version = fetch_latest_tag(spec.repo, timeout=timeout)
    except ReleaseError as exc:
        return Receipt.failure(step, error=str(exc))

    artifact = build_artifact(spec, version, platform)
    url = artifact.download_url
    meta = {"url": url, "version": version}

    if is_dry_run():
        logger.info("[dry-run] install %s %s from %s", spec.binary, version, url)
        return Receipt.success(step, output=f"[dry-run] {url}", metadata={**meta, "dry_run": True})

    # The working directory is removed whatever happens below.
    with tempfile.TemporaryDirectory(prefix=f"devsetup-{spec.binary}-") as tmp:
        tmp_dir = Path(tmp)
        archive = tmp_dir / f"{spec.binary}.tar.gz"

        fetched = download_file(url, archive, timeout=timeout)
        if not fetched["ok"]:
            return Receipt.failure(step, error=fetched["error"], metadata=meta)

        try:
            extracted = _extract_binary(archive, spec.binary, tmp_dir)
        except (tarfile.TarError, OSError) as exc:
            return Receipt.failure(step, error=f"Cannot extract {archive.name}: {exc}", metadata=meta)
        if extracted is None:
            return Receipt.failure(
                step,
                error=f"{spec.binary} not found inside {artifact.asset_name}",
                metadata=meta,
            )

        target = f"{install_dir.rstrip('/')}/{spec.binary}"
        moved = run_command(["mv", str(extracted), target], needs_sudo=True, timeout=60)
        if not moved["ok"]:
            return Receipt.from_run(step, moved)

    return Receipt.success(step, output=f"Installed {spec.binary} {version} to {target}", metadata=meta)
