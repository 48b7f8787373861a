"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn, TypeVar

import typer

from assetpub.core.result import Err, Result
from assetpub.output.errors import print_publish_error, publish_error_exit_code
from assetpub.services.publish.errors import PublishError

if TYPE_CHECKING:
    from assetpub.cli.context import CLIContext


T = TypeVar("T")


def fail(error: PublishError, ctx: CLIContext) -> NoReturn:
    print_publish_error(error, ctx.console)
    ctx.close()
    raise typer.Exit(code=publish_error_exit_code(error))


def unwrap_or_exit[T](result: Result[T, PublishError], ctx: CLIContext) -> T:
    """Return the Ok value, or report the error and exit with its code."""
    if isinstance(result, Err):
        fail(result.error, ctx)
    return result.value
