from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import typer

from assetpub.core.config import CONFIG_FILENAME, PublishConfig, load_config
from assetpub.core.errors import ErrorCode
from assetpub.core.result import Err
from assetpub.output.console import ActionsConsole, ConsoleProtocol, console_for_env


@dataclass(frozen=True, slots=True)
class CLIContext:
    workdir: Path
    repo: str
    config: PublishConfig
    console: ConsoleProtocol
    env: Mapping[str, str]

    def close(self) -> None:
        if isinstance(self.console, ActionsConsole):
            self.console.close()


def _load_file_config(config_path: Path | None, workdir: Path) -> PublishConfig | None:
    path = config_path if config_path is not None else workdir / CONFIG_FILENAME
    if config_path is None and not path.exists():
        return None

    result = load_config(path)
    if isinstance(result, Err):
        typer.echo(f"error: {result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))
    return result.value


def build_context(
    *,
    config_path: Path | None = None,
    repo: str | None = None,
    workflow: str | None = None,
    download_dir: str | None = None,
) -> CLIContext:
    env = dict(os.environ)
    workdir = Path.cwd()

    config = PublishConfig.from_env(env)
    file_config = _load_file_config(config_path, workdir)
    if file_config is not None:
        config = file_config.merged_over(config)
    config = config.with_overrides(repo=repo, workflow=workflow, download_dir=download_dir)

    if config.repo is None:
        typer.echo("error: repository unknown", err=True)
        typer.echo("hint: pass --repo OWNER/NAME or set GITHUB_REPOSITORY", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    return CLIContext(
        workdir=workdir,
        repo=config.repo,
        config=config,
        console=console_for_env(env),
        env=env,
    )
