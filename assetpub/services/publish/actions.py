"""GitHub Actions runtime context.

Reads the trigger from the variables the runner exports and writes step
outputs so later workflow steps can branch on the resolved run.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path

from assetpub.core.result import Err, Ok, Result
from assetpub.core.structured import as_str_dict, get_table
from assetpub.services.publish.errors import PublishError
from assetpub.services.publish.model import (
    NO_RUN_CI_ID,
    ManualTrigger,
    NoCompletedRun,
    ReleaseTrigger,
    Resolution,
    Trigger,
)

DISPATCH_EVENT = "workflow_dispatch"
RELEASE_EVENT = "release"


def input_value(value: object) -> str | None:
    """Operator input kept verbatim; None when missing, blank or multi-line.

    Values end up as ``key=value`` lines in ``$GITHUB_OUTPUT``, so a line
    break would inject extra outputs.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    if not isinstance(value, str) or not value.strip():
        return None
    if "\n" in value or "\r" in value:
        return None
    return value


def _load_event(env: Mapping[str, str]) -> Result[dict[str, object], PublishError]:
    raw_path = env.get("GITHUB_EVENT_PATH", "").strip()
    if not raw_path:
        return Err(
            PublishError(
                kind="invalid_input",
                message="GITHUB_EVENT_PATH is not set",
                hint="Outside Actions pass --tag/--action-id or --sha/--release-tag",
            )
        )

    path = Path(raw_path)
    try:
        obj: object = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        return Err(PublishError(kind="io_error", message=f"cannot read event payload: {e}"))
    except json.JSONDecodeError as e:
        return Err(
            PublishError(kind="invalid_input", message=f"invalid event payload: {e}", hint=raw_path)
        )

    data = as_str_dict(obj)
    if data is None:
        return Err(PublishError(kind="invalid_input", message="event payload is not an object"))
    return Ok(data)


def trigger_from_env(env: Mapping[str, str]) -> Result[Trigger, PublishError]:
    """Build the trigger for the current workflow run."""
    event_name = env.get("GITHUB_EVENT_NAME", "").strip()
    if event_name not in (DISPATCH_EVENT, RELEASE_EVENT):
        return Err(
            PublishError(
                kind="invalid_input",
                message=f"unsupported event: {event_name or '<unset>'}",
                hint=f"expected {DISPATCH_EVENT} or {RELEASE_EVENT}",
            )
        )

    event = _load_event(env)
    if isinstance(event, Err):
        return event

    if event_name == DISPATCH_EVENT:
        inputs = get_table(event.value, "inputs") or {}
        tag = input_value(inputs.get("tag"))
        action_id = input_value(inputs.get("action_id"))
        if tag is None or action_id is None:
            return Err(
                PublishError(
                    kind="invalid_input",
                    message="workflow_dispatch requires single-line inputs 'tag' and 'action_id'",
                )
            )
        return Ok(ManualTrigger(tag=tag, action_id=action_id))

    release = get_table(event.value, "release") or {}
    tag = input_value(release.get("tag_name"))
    sha = env.get("GITHUB_SHA", "").strip()
    if tag is None or not sha:
        return Err(
            PublishError(
                kind="invalid_input",
                message="release event without release.tag_name or GITHUB_SHA",
            )
        )
    return Ok(ReleaseTrigger(head_sha=sha, tag=tag))


def step_outputs(resolution: Resolution) -> dict[str, str]:
    if isinstance(resolution, NoCompletedRun):
        return {"ci_id": NO_RUN_CI_ID}
    return {"ci_id": resolution.run_id, "tag": resolution.tag}


def write_step_outputs(
    env: Mapping[str, str], resolution: Resolution
) -> Result[bool, PublishError]:
    """Append ``ci_id``/``tag`` to ``$GITHUB_OUTPUT``.

    Returns Ok(False) when not running under Actions.
    """
    raw_path = env.get("GITHUB_OUTPUT", "").strip()
    if not raw_path:
        return Ok(False)

    outputs = step_outputs(resolution)
    bad = sorted(k for k, v in outputs.items() if input_value(v) != v)
    if bad:
        return Err(
            PublishError(
                kind="invalid_input",
                message=f"refusing to write multi-line step outputs: {', '.join(bad)}",
            )
        )

    lines = "".join(f"{k}={v}\n" for k, v in outputs.items())
    try:
        with Path(raw_path).open("a", encoding="utf-8") as fh:
            fh.write(lines)
    except OSError as e:
        return Err(PublishError(kind="io_error", message=f"cannot write step outputs: {e}"))
    return Ok(True)
