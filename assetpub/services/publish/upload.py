"""Attach files to a release, one at a time."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from assetpub.core.result import Err
from assetpub.output.console import ConsoleProtocol, Style
from assetpub.services.publish.gh import upload_release_asset
from assetpub.services.publish.model import (
    ArtifactFile,
    PublishReport,
    ResolvedTarget,
    UploadOutcome,
)


def publish_assets(
    *,
    workdir: Path,
    repo: str,
    target: ResolvedTarget,
    files: Sequence[ArtifactFile],
    console: ConsoleProtocol,
) -> PublishReport:
    """Upload each file to ``target.tag`` with clobber semantics.

    Every file gets exactly one attempt. A failed upload is reported and
    skipped; it never stops the remaining uploads.
    """
    outcomes: list[UploadOutcome] = []
    for f in files:
        console.print(f"Uploading {f.relpath}...")
        result = upload_release_asset(workdir=workdir, repo=repo, tag=target.tag, path=f.path)
        if isinstance(result, Err):
            console.warning(f"{f.relpath}: Something went wrong, skipping.")
            if result.error.hint:
                console.print(f"  {result.error.hint}", Style.DIM)
            outcomes.append(UploadOutcome(file=f, ok=False, detail=result.error.hint))
            continue
        outcomes.append(UploadOutcome(file=f, ok=True))

    return PublishReport(target=target, outcomes=tuple(outcomes))
