"""Publish a CI run's artifacts as release assets."""

from .errors import PublishError
from .model import (
    ArtifactFile,
    ManualTrigger,
    NoCompletedRun,
    PublishReport,
    ReleaseTrigger,
    ResolvedTarget,
    RunRecord,
    UploadOutcome,
)

__all__ = [
    "ArtifactFile",
    "ManualTrigger",
    "NoCompletedRun",
    "PublishError",
    "PublishReport",
    "ReleaseTrigger",
    "ResolvedTarget",
    "RunRecord",
    "UploadOutcome",
]
