from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

import typer

from assetpub.cli.commands._helpers import fail, unwrap_or_exit
from assetpub.cli.context import CLIContext, build_context
from assetpub.core.result import Err, Ok, Result
from assetpub.output.console import Style
from assetpub.services.publish.actions import (
    input_value,
    trigger_from_env,
    write_step_outputs,
)
from assetpub.services.publish.errors import PublishError
from assetpub.services.publish.fetch import fetch_artifacts, list_files
from assetpub.services.publish.gh import ensure_gh_available
from assetpub.services.publish.model import (
    ArtifactFile,
    ManualTrigger,
    NoCompletedRun,
    PublishReport,
    ReleaseTrigger,
    Resolution,
    ResolvedTarget,
    Trigger,
)
from assetpub.services.publish.resolve import resolve_target
from assetpub.services.publish.service import run_publish
from assetpub.services.publish.upload import publish_assets


def resolve_trigger(
    *,
    tag: str | None,
    action_id: str | None,
    sha: str | None,
    release_tag: str | None,
    env: Mapping[str, str],
) -> Result[Trigger, PublishError]:
    """Trigger from explicit options, falling back to the Actions event."""
    manual = tag is not None or action_id is not None
    release = sha is not None or release_tag is not None

    if manual and release:
        return Err(
            PublishError(
                kind="invalid_input",
                message="--tag/--action-id cannot be combined with --sha/--release-tag",
            )
        )
    given = {"--tag": tag, "--action-id": action_id, "--sha": sha, "--release-tag": release_tag}
    bad = [opt for opt, v in given.items() if v is not None and input_value(v) is None]
    if bad:
        return Err(
            PublishError(
                kind="invalid_input",
                message=f"{', '.join(bad)} must be a non-blank single line",
            )
        )
    if manual:
        if not tag or not action_id:
            return Err(
                PublishError(kind="invalid_input", message="--tag and --action-id go together")
            )
        return Ok(ManualTrigger(tag=tag, action_id=action_id))
    if release:
        if not sha or not release_tag:
            return Err(
                PublishError(kind="invalid_input", message="--sha and --release-tag go together")
            )
        return Ok(ReleaseTrigger(head_sha=sha, tag=release_tag))

    return trigger_from_env(env)


def _record_outputs(ctx: CLIContext, resolution: Resolution) -> None:
    written = write_step_outputs(ctx.env, resolution)
    if isinstance(written, Err):
        ctx.console.warning(written.error.message)


def _summarize(ctx: CLIContext, report: PublishReport) -> None:
    uploaded = len(report.uploaded)
    if report.attempted == 0:
        ctx.console.warning(f"nothing to upload for {report.target.tag}")
        return
    if report.failed:
        ctx.console.warning(
            f"{len(report.failed)} of {report.attempted} asset(s) failed to upload to "
            f"{report.target.tag}"
        )
        for outcome in report.failed:
            ctx.console.print(f"  {outcome.file.relpath}", Style.DIM)
    if uploaded:
        ctx.console.success(f"uploaded {uploaded} asset(s) to {report.target.tag}")


_TAG = typer.Option(None, "--tag", help="Release tag (manual dispatch)")
_ACTION_ID = typer.Option(None, "--action-id", help="CI run id (manual dispatch)")
_SHA = typer.Option(None, "--sha", help="Release commit (release event)")
_RELEASE_TAG = typer.Option(None, "--release-tag", help="Published tag (release event)")
_REPO = typer.Option(None, "--repo", help="OWNER/NAME (default: $GITHUB_REPOSITORY)")
_WORKFLOW = typer.Option(None, "--workflow", help="Build workflow file (default: ci.yml)")
_DIR = typer.Option(None, "--dir", help="Download directory (default: artifacts)")
_CONFIG = typer.Option(None, "--config", help="Path to assetpub.toml")


def publish(
    tag: str | None = _TAG,
    action_id: str | None = _ACTION_ID,
    sha: str | None = _SHA,
    release_tag: str | None = _RELEASE_TAG,
    repo: str | None = _REPO,
    workflow: str | None = _WORKFLOW,
    download_dir: str | None = _DIR,
    config: Path | None = _CONFIG,
) -> None:
    """Upload the artifacts of a CI run to a release."""
    ctx = build_context(
        config_path=config, repo=repo, workflow=workflow, download_dir=download_dir
    )
    unwrap_or_exit(ensure_gh_available(), ctx)
    trigger = unwrap_or_exit(
        resolve_trigger(
            tag=tag, action_id=action_id, sha=sha, release_tag=release_tag, env=ctx.env
        ),
        ctx,
    )

    outcome = unwrap_or_exit(
        run_publish(
            workdir=ctx.workdir,
            repo=ctx.repo,
            config=ctx.config,
            trigger=trigger,
            console=ctx.console,
            on_resolved=lambda r: _record_outputs(ctx, r),
        ),
        ctx,
    )
    ctx.close()

    if isinstance(outcome, PublishReport):
        _summarize(ctx, outcome)


def resolve(
    tag: str | None = _TAG,
    action_id: str | None = _ACTION_ID,
    sha: str | None = _SHA,
    release_tag: str | None = _RELEASE_TAG,
    repo: str | None = _REPO,
    workflow: str | None = _WORKFLOW,
    config: Path | None = _CONFIG,
) -> None:
    """Resolve the CI run and tag, and write them as step outputs."""
    ctx = build_context(config_path=config, repo=repo, workflow=workflow)
    trigger = unwrap_or_exit(
        resolve_trigger(
            tag=tag, action_id=action_id, sha=sha, release_tag=release_tag, env=ctx.env
        ),
        ctx,
    )
    if isinstance(trigger, ReleaseTrigger):
        unwrap_or_exit(ensure_gh_available(), ctx)

    resolution = unwrap_or_exit(
        resolve_target(
            workdir=ctx.workdir,
            repo=ctx.repo,
            workflow=ctx.config.workflow,
            trigger=trigger,
            per_page=ctx.config.runs_per_page,
        ),
        ctx,
    )
    _record_outputs(ctx, resolution)

    if isinstance(resolution, NoCompletedRun):
        ctx.console.info(f"No completed runs found for {resolution.head_sha}")
        return
    ctx.console.print(f"ci_id={resolution.run_id}")
    ctx.console.print(f"tag={resolution.tag}")


def fetch(
    run_id: str = typer.Argument(..., help="CI run id"),
    repo: str | None = _REPO,
    download_dir: str | None = _DIR,
    config: Path | None = _CONFIG,
) -> None:
    """Download and merge every artifact of a CI run."""
    ctx = build_context(config_path=config, repo=repo, download_dir=download_dir)
    unwrap_or_exit(ensure_gh_available(), ctx)

    files = unwrap_or_exit(
        fetch_artifacts(
            workdir=ctx.workdir,
            repo=ctx.repo,
            run_id=run_id,
            dest=ctx.workdir / ctx.config.download_dir,
            console=ctx.console,
        ),
        ctx,
    )
    for f in files:
        ctx.console.print(str(f.path))
    ctx.console.success(f"{len(files)} file(s) from run {run_id}")


def upload(
    tag: str = typer.Argument(..., help="Release tag"),
    files: list[Path] | None = typer.Argument(
        None, help="Files to upload (default: everything in --dir)"
    ),
    repo: str | None = _REPO,
    download_dir: str | None = _DIR,
    config: Path | None = _CONFIG,
) -> None:
    """Upload files to a release, skipping the ones that fail."""
    ctx = build_context(config_path=config, repo=repo, download_dir=download_dir)
    unwrap_or_exit(ensure_gh_available(), ctx)

    if files:
        selected = [ArtifactFile(root=p.parent, relpath=p.name) for p in files]
    else:
        root = ctx.workdir / ctx.config.download_dir
        if not root.is_dir():
            fail(PublishError(kind="io_error", message=f"not a directory: {root}"), ctx)
        selected = list_files(root)

    # Run id is not known here; the report only needs the tag.
    target = ResolvedTarget(run_id="", tag=tag)
    report = publish_assets(
        workdir=ctx.workdir, repo=ctx.repo, target=target, files=selected, console=ctx.console
    )
    _summarize(ctx, report)
