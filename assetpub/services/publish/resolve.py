"""Pick the CI run whose artifacts belong to a release."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from assetpub.core.result import Err, Ok, Result
from assetpub.services.publish.errors import PublishError
from assetpub.services.publish.gh import list_workflow_runs
from assetpub.services.publish.model import (
    ManualTrigger,
    NoCompletedRun,
    Resolution,
    ResolvedTarget,
    RunRecord,
    Trigger,
)


def select_run(runs: Iterable[RunRecord], head_sha: str) -> RunRecord | None:
    """First completed run built from ``head_sha``, in the order given.

    The order is whatever the API returned; GitHub lists newest first.
    """
    for run in runs:
        if run.head_sha == head_sha and run.completed:
            return run
    return None


def resolve_target(
    *,
    workdir: Path,
    repo: str,
    workflow: str,
    trigger: Trigger,
    per_page: int,
) -> Result[Resolution, PublishError]:
    """Turn a trigger into the (run, tag) pair to publish.

    Manual triggers are taken verbatim without touching the API. Release
    triggers query ``workflow`` runs; a missing match is ``NoCompletedRun``,
    only a failing query is an error.
    """
    if isinstance(trigger, ManualTrigger):
        return Ok(ResolvedTarget(run_id=trigger.action_id, tag=trigger.tag))

    runs = list_workflow_runs(
        workdir=workdir,
        repo=repo,
        workflow=workflow,
        head_sha=trigger.head_sha,
        per_page=per_page,
    )
    if isinstance(runs, Err):
        return runs

    match = select_run(runs.value, trigger.head_sha)
    if match is None:
        return Ok(NoCompletedRun(head_sha=trigger.head_sha))
    return Ok(ResolvedTarget(run_id=match.id, tag=trigger.tag))
