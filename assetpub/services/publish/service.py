"""Resolve, fetch and publish in one pass."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from assetpub.core.config import PublishConfig
from assetpub.core.result import Err, Ok, Result
from assetpub.output.console import ConsoleProtocol, Style
from assetpub.services.publish.errors import PublishError
from assetpub.services.publish.fetch import fetch_artifacts
from assetpub.services.publish.model import (
    NoCompletedRun,
    PublishReport,
    Resolution,
    Trigger,
)
from assetpub.services.publish.resolve import resolve_target
from assetpub.services.publish.upload import publish_assets

type PublishOutcome = NoCompletedRun | PublishReport


def run_publish(
    *,
    workdir: Path,
    repo: str,
    config: PublishConfig,
    trigger: Trigger,
    console: ConsoleProtocol,
    on_resolved: Callable[[Resolution], None] | None = None,
) -> Result[PublishOutcome, PublishError]:
    """Run the full pipeline for ``trigger``.

    Stops early with ``NoCompletedRun`` when the release commit has no
    completed build. Errors from resolving or fetching are returned as-is;
    upload failures only show up in the report.
    """
    console.header("Resolve CI run")
    resolved = resolve_target(
        workdir=workdir,
        repo=repo,
        workflow=config.workflow,
        trigger=trigger,
        per_page=config.runs_per_page,
    )
    if isinstance(resolved, Err):
        return resolved

    resolution = resolved.value
    if on_resolved is not None:
        on_resolved(resolution)

    if isinstance(resolution, NoCompletedRun):
        console.info(f"No completed runs found for {resolution.head_sha}")
        return Ok(resolution)

    target = resolution
    console.print(f"run {target.run_id} -> release {target.tag}")

    console.header(f"Download artifacts of run {target.run_id}")
    dest = workdir / config.download_dir
    fetched = fetch_artifacts(
        workdir=workdir, repo=repo, run_id=target.run_id, dest=dest, console=console
    )
    if isinstance(fetched, Err):
        return fetched

    for f in fetched.value:
        console.print(f.relpath, Style.DIM)

    console.header(f"Upload release assets to {target.tag}")
    report = publish_assets(
        workdir=workdir, repo=repo, target=target, files=fetched.value, console=console
    )
    return Ok(report)
