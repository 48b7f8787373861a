from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

# Step-output value standing for "no completed run".
NO_RUN_CI_ID = "0"


@dataclass(frozen=True, slots=True)
class ManualTrigger:
    """Operator dispatch naming the release tag and the CI run directly."""

    tag: str
    action_id: str


@dataclass(frozen=True, slots=True)
class ReleaseTrigger:
    """A release was published for ``tag`` at commit ``head_sha``."""

    head_sha: str
    tag: str


type Trigger = ManualTrigger | ReleaseTrigger


@dataclass(frozen=True, slots=True)
class RunRecord:
    id: str
    head_sha: str
    status: str

    @property
    def completed(self) -> bool:
        return self.status == "completed"


@dataclass(frozen=True, slots=True)
class ResolvedTarget:
    run_id: str
    tag: str


@dataclass(frozen=True, slots=True)
class NoCompletedRun:
    """No completed build run exists for ``head_sha``; nothing to publish."""

    head_sha: str


type Resolution = ResolvedTarget | NoCompletedRun


@dataclass(frozen=True, slots=True)
class ArtifactFile:
    """A downloaded file, located relative to the download directory."""

    root: Path
    relpath: str

    @property
    def path(self) -> Path:
        return self.root / self.relpath

    @property
    def asset_name(self) -> str:
        # Release assets are flat: gh uploads under the base name.
        return self.path.name


@dataclass(frozen=True, slots=True)
class UploadOutcome:
    file: ArtifactFile
    ok: bool
    detail: str | None = None


@dataclass(frozen=True, slots=True)
class PublishReport:
    target: ResolvedTarget
    outcomes: tuple[UploadOutcome, ...]

    @property
    def attempted(self) -> int:
        return len(self.outcomes)

    @property
    def uploaded(self) -> tuple[ArtifactFile, ...]:
        return tuple(o.file for o in self.outcomes if o.ok)

    @property
    def failed(self) -> tuple[UploadOutcome, ...]:
        return tuple(o for o in self.outcomes if not o.ok)
