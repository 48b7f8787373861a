"""Error types for the publish pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

PublishErrorKind = Literal[
    "gh_missing",
    "repo_unknown",
    "invalid_input",
    "query_failed",
    "download_failed",
    "upload_failed",
    "io_error",
]


@dataclass(frozen=True, slots=True)
class PublishError:
    """Canonical error payload rendered by the CLI.

    ``query_failed`` and ``download_failed`` abort the run; ``upload_failed``
    only ever marks a single asset.
    """

    kind: PublishErrorKind
    message: str
    hint: str | None = None
