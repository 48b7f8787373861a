from __future__ import annotations

import json
import shutil
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote

from assetpub.core.result import Err, Ok, Result
from assetpub.core.structured import as_str_dict, get_id, get_int, get_list, get_str
from assetpub.platform.process import ProcessError
from assetpub.platform.process import run as run_process
from assetpub.services.publish.errors import PublishError, PublishErrorKind
from assetpub.services.publish.model import RunRecord
from assetpub.services.publish.timeouts import (
    GH_DOWNLOAD_TIMEOUT_SECONDS,
    GH_TIMEOUT_SECONDS,
    GH_UPLOAD_TIMEOUT_SECONDS,
)

# Upper bound GitHub accepts for per_page.
_ARTIFACTS_PER_PAGE = 100


@dataclass(frozen=True, slots=True)
class RunArtifact:
    name: str
    expired: bool


def _gh_error(
    error: ProcessError, *, kind: PublishErrorKind, message: str, hint: str | None = None
) -> Err[PublishError]:
    return Err(PublishError(kind=kind, message=message, hint=error.stderr.strip() or hint))


def ensure_gh_available() -> Result[None, PublishError]:
    if shutil.which("gh") is None:
        return Err(
            PublishError(
                kind="gh_missing",
                message="gh: missing",
                hint="Install GitHub CLI: https://cli.github.com/",
            )
        )
    return Ok(None)


def gh_api_json(*, workdir: Path, endpoint: str) -> Result[object, PublishError]:
    result = run_process(["gh", "api", endpoint], cwd=workdir, timeout=GH_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return _gh_error(
            result.error, kind="query_failed", message=f"gh api failed: {endpoint}", hint=endpoint
        )

    try:
        obj: object = json.loads(result.value)
    except json.JSONDecodeError as e:
        return Err(
            PublishError(
                kind="query_failed",
                message=f"gh api returned invalid JSON: {e}",
                hint=endpoint,
            )
        )

    return Ok(obj)


def list_workflow_runs(
    *,
    workdir: Path,
    repo: str,
    workflow: str,
    head_sha: str,
    per_page: int,
) -> Result[list[RunRecord], PublishError]:
    """Runs of ``workflow`` for ``head_sha``, in the order the API returns them."""
    # workflow may contain slashes; GitHub requires it URL-encoded.
    wf = quote(workflow, safe="")
    endpoint = (
        f"repos/{repo}/actions/workflows/{wf}/runs"
        f"?head_sha={quote(head_sha, safe='')}&per_page={per_page}"
    )

    obj = gh_api_json(workdir=workdir, endpoint=endpoint)
    if isinstance(obj, Err):
        return obj

    data = as_str_dict(obj.value)
    runs = None if data is None else get_list(data, "workflow_runs")
    if runs is None:
        return Err(
            PublishError(
                kind="query_failed",
                message=f"unexpected workflow runs payload: {repo}",
                hint=endpoint,
            )
        )

    out: list[RunRecord] = []
    for run_obj in runs:
        run = as_str_dict(run_obj)
        if run is None:
            continue
        run_id = get_id(run, "id")
        sha = get_str(run, "head_sha")
        status = get_str(run, "status")
        if run_id is None or sha is None or status is None:
            continue
        out.append(RunRecord(id=run_id, head_sha=sha, status=status))

    return Ok(out)


def _artifacts_page(
    *, workdir: Path, repo: str, run_id: str, page: int
) -> Result[tuple[int, list[object]], PublishError]:
    endpoint = (
        f"repos/{repo}/actions/runs/{quote(run_id, safe='')}/artifacts"
        f"?per_page={_ARTIFACTS_PER_PAGE}&page={page}"
    )
    obj = gh_api_json(workdir=workdir, endpoint=endpoint)
    if isinstance(obj, Err):
        return Err(
            PublishError(
                kind="download_failed",
                message=f"failed to list artifacts of run {run_id}",
                hint=obj.error.hint,
            )
        )

    data = as_str_dict(obj.value)
    items = None if data is None else get_list(data, "artifacts")
    total = None if data is None else get_int(data, "total_count")
    if items is None or total is None:
        return Err(
            PublishError(
                kind="download_failed",
                message=f"unexpected artifacts payload for run {run_id}",
                hint=endpoint,
            )
        )
    return Ok((total, items))


def list_run_artifacts(
    *, workdir: Path, repo: str, run_id: str
) -> Result[list[RunArtifact], PublishError]:
    """Every artifact of ``run_id``, following pages until ``total_count``."""
    items: list[object] = []
    page = 1
    while True:
        result = _artifacts_page(workdir=workdir, repo=repo, run_id=run_id, page=page)
        if isinstance(result, Err):
            return result
        total, page_items = result.value
        items.extend(page_items)
        if not page_items or len(items) >= total:
            break
        page += 1

    if len(items) < total:
        return Err(
            PublishError(
                kind="download_failed",
                message=f"run {run_id} lists {total} artifacts but only {len(items)} were returned",
            )
        )

    out: list[RunArtifact] = []
    for item in items:
        d = as_str_dict(item)
        if d is None:
            continue
        name = get_str(d, "name")
        if name is None:
            continue
        out.append(RunArtifact(name=name, expired=d.get("expired") is True))
    return Ok(out)


def download_artifact(
    *, workdir: Path, repo: str, run_id: str, name: str, dest: Path
) -> Result[None, PublishError]:
    """Extract artifact ``name`` of ``run_id`` into ``dest``."""
    cmd = ["gh", "run", "download", run_id, "--repo", repo, "--name", name, "--dir", str(dest)]
    result = run_process(cmd, cwd=workdir, timeout=GH_DOWNLOAD_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return _gh_error(
            result.error,
            kind="download_failed",
            message=f"failed to download artifact '{name}' of run {run_id}",
        )
    return Ok(None)


def upload_release_asset(
    *, workdir: Path, repo: str, tag: str, path: Path
) -> Result[None, PublishError]:
    """Attach ``path`` to release ``tag``, replacing an asset of the same name."""
    cmd = ["gh", "release", "upload", tag, str(path), "--clobber", "--repo", repo]
    result = run_process(cmd, cwd=workdir, timeout=GH_UPLOAD_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return Err(
            PublishError(
                kind="upload_failed",
                message=f"failed to upload {path.name} to {tag}",
                hint=result.error.detail,
            )
        )
    return Ok(None)
