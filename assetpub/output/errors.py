"""Error presentation and exit code mapping."""

from __future__ import annotations

from typing import TYPE_CHECKING

from assetpub.core.errors import ErrorCode
from assetpub.output.console import Style
from assetpub.services.publish.errors import PublishError

if TYPE_CHECKING:
    from assetpub.output.console import ConsoleProtocol

__all__ = ["print_publish_error", "publish_error_exit_code"]


def print_publish_error(error: PublishError, console: ConsoleProtocol) -> None:
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def publish_error_exit_code(error: PublishError) -> int:
    match error.kind:
        case "invalid_input":
            return int(ErrorCode.USER_ERROR)
        case "gh_missing" | "repo_unknown":
            return int(ErrorCode.ENV_ERROR)
        case "query_failed" | "download_failed" | "upload_failed":
            return int(ErrorCode.NETWORK_ERROR)
        case "io_error":
            return int(ErrorCode.IO_ERROR)
