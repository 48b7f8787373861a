from __future__ import annotations

from pathlib import Path

import pytest

from assetpub.core.config import PublishConfig
from assetpub.core.result import Err, Ok, Result
from assetpub.output.console import MockConsole
from assetpub.services.publish import service as service_mod
from assetpub.services.publish.errors import PublishError
from assetpub.services.publish.model import (
    ArtifactFile,
    ManualTrigger,
    NoCompletedRun,
    PublishReport,
    ReleaseTrigger,
    Resolution,
    ResolvedTarget,
    Trigger,
    UploadOutcome,
)


class _Pipeline:
    def __init__(
        self,
        resolution: Result[Resolution, PublishError],
        fetched: Result[list[ArtifactFile], PublishError] | None = None,
        failing: frozenset[str] = frozenset(),
    ) -> None:
        self.resolution = resolution
        self.fetched = fetched if fetched is not None else Ok([])
        self.failing = failing
        self.fetch_calls: list[str] = []
        self.upload_calls: list[str] = []

    def resolve_target(self, *, trigger: Trigger, **_: object) -> Result[Resolution, PublishError]:
        del trigger
        return self.resolution

    def fetch_artifacts(
        self, *, run_id: str, dest: Path, **_: object
    ) -> Result[list[ArtifactFile], PublishError]:
        del dest
        self.fetch_calls.append(run_id)
        return self.fetched

    def publish_assets(
        self, *, target: ResolvedTarget, files: list[ArtifactFile], **_: object
    ) -> PublishReport:
        outcomes = []
        for f in files:
            self.upload_calls.append(f.relpath)
            outcomes.append(UploadOutcome(file=f, ok=f.relpath not in self.failing))
        return PublishReport(target=target, outcomes=tuple(outcomes))

    def install(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(service_mod, "resolve_target", self.resolve_target)
        monkeypatch.setattr(service_mod, "fetch_artifacts", self.fetch_artifacts)
        monkeypatch.setattr(service_mod, "publish_assets", self.publish_assets)


def _run(tmp_path: Path, trigger: Trigger, console: MockConsole, seen: list[Resolution]):
    return service_mod.run_publish(
        workdir=tmp_path,
        repo="acme/tool",
        config=PublishConfig(),
        trigger=trigger,
        console=console,
        on_resolved=seen.append,
    )


def test_no_completed_run_is_a_noop(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    pipeline = _Pipeline(Ok(NoCompletedRun(head_sha="abc123")))
    pipeline.install(monkeypatch)
    console = MockConsole()
    seen: list[Resolution] = []

    result = _run(tmp_path, ReleaseTrigger(head_sha="abc123", tag="v1.2.0"), console, seen)

    assert result == Ok(NoCompletedRun(head_sha="abc123"))
    assert seen == [NoCompletedRun(head_sha="abc123")]
    assert pipeline.fetch_calls == []
    assert pipeline.upload_calls == []
    assert console.find("No completed runs found")


def test_resolve_failure_stops_pipeline(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    error = PublishError(kind="query_failed", message="gh api failed")
    pipeline = _Pipeline(Err(error))
    pipeline.install(monkeypatch)
    seen: list[Resolution] = []

    result = _run(tmp_path, ReleaseTrigger(head_sha="abc123", tag="v1.2.0"), MockConsole(), seen)

    assert result == Err(error)
    assert seen == []
    assert pipeline.fetch_calls == []


def test_fetch_failure_stops_pipeline(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    error = PublishError(kind="download_failed", message="download failed")
    pipeline = _Pipeline(Ok(ResolvedTarget(run_id="42", tag="v1.2.0")), fetched=Err(error))
    pipeline.install(monkeypatch)

    result = _run(tmp_path, ManualTrigger(tag="v1.2.0", action_id="42"), MockConsole(), [])

    assert result == Err(error)
    assert pipeline.fetch_calls == ["42"]
    assert pipeline.upload_calls == []


def test_partial_upload_failure_is_still_ok(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    files = [
        ArtifactFile(root=tmp_path / "artifacts", relpath="a.bin"),
        ArtifactFile(root=tmp_path / "artifacts", relpath="b.bin"),
    ]
    pipeline = _Pipeline(
        Ok(ResolvedTarget(run_id="42", tag="v1.2.0")),
        fetched=Ok(files),
        failing=frozenset({"a.bin"}),
    )
    pipeline.install(monkeypatch)

    result = _run(tmp_path, ManualTrigger(tag="v1.2.0", action_id="42"), MockConsole(), [])

    assert isinstance(result, Ok)
    report = result.value
    assert isinstance(report, PublishReport)
    assert pipeline.upload_calls == ["a.bin", "b.bin"]
    assert [f.relpath for f in report.uploaded] == ["b.bin"]
    assert report.target == ResolvedTarget(run_id="42", tag="v1.2.0")
