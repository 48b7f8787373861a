"""Download a run's artifact bundles into one directory."""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path

from assetpub.core.result import Err, Ok, Result
from assetpub.output.console import ConsoleProtocol, Style
from assetpub.services.publish.errors import PublishError
from assetpub.services.publish.gh import download_artifact, list_run_artifacts
from assetpub.services.publish.model import ArtifactFile


def list_files(root: Path) -> list[ArtifactFile]:
    """Every regular file below ``root``, sorted by relative path."""
    if not root.is_dir():
        return []
    files = [
        ArtifactFile(root=root, relpath=p.relative_to(root).as_posix())
        for p in root.rglob("*")
        if p.is_file()
    ]
    return sorted(files, key=lambda f: f.relpath)


def merge_bundle(bundle_dir: Path, dest: Path) -> list[str]:
    """Copy ``bundle_dir`` into ``dest``; existing files are overwritten.

    Returns the relative paths written.
    """
    written: list[str] = []
    for src in sorted(p for p in bundle_dir.rglob("*") if p.is_file()):
        rel = src.relative_to(bundle_dir)
        target = dest / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(src, target)
        written.append(rel.as_posix())
    return written


def fetch_artifacts(
    *,
    workdir: Path,
    repo: str,
    run_id: str,
    dest: Path,
    console: ConsoleProtocol,
) -> Result[list[ArtifactFile], PublishError]:
    """Materialize every artifact of ``run_id`` under ``dest``.

    Bundles are merged in name order, so for duplicate paths the bundle whose
    name sorts last wins. Any failure aborts the whole fetch.
    """
    artifacts = list_run_artifacts(workdir=workdir, repo=repo, run_id=run_id)
    if isinstance(artifacts, Err):
        return artifacts

    expired = sorted(a.name for a in artifacts.value if a.expired)
    if expired:
        return Err(
            PublishError(
                kind="download_failed",
                message=f"run {run_id} has expired artifacts: {', '.join(expired)}",
                hint="Re-run the build workflow, then dispatch with the new run id",
            )
        )

    names = sorted(a.name for a in artifacts.value)
    if not names:
        console.warning(f"run {run_id} has no artifacts")

    try:
        dest.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return Err(PublishError(kind="io_error", message=f"cannot create {dest}: {e}"))

    merged: set[str] = set()
    with tempfile.TemporaryDirectory(prefix="assetpub-") as staging:
        for index, name in enumerate(names):
            bundle_dir = Path(staging) / f"{index:03d}"
            console.print(f"Downloading {name} (run {run_id})", Style.DIM)
            result = download_artifact(
                workdir=workdir, repo=repo, run_id=run_id, name=name, dest=bundle_dir
            )
            if isinstance(result, Err):
                return result

            try:
                written = merge_bundle(bundle_dir, dest)
            except OSError as e:
                return Err(
                    PublishError(kind="io_error", message=f"cannot merge '{name}' into {dest}: {e}")
                )

            overwritten = merged.intersection(written)
            for rel in sorted(overwritten):
                console.print(f"{rel}: replaced by bundle {name}", Style.DIM)
            merged.update(written)

    return Ok([ArtifactFile(root=dest, relpath=rel) for rel in sorted(merged)])
