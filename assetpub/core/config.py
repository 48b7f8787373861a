"""Typed configuration loading.

Settings come from three layers, later ones winning:
environment (``GITHUB_REPOSITORY``), an optional ``assetpub.toml`` file with a
``[publish]`` table, and explicit CLI options.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_int, get_str, get_table

__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_DOWNLOAD_DIR",
    "DEFAULT_RUNS_PER_PAGE",
    "DEFAULT_WORKFLOW",
    "ConfigError",
    "PublishConfig",
    "load_config",
]

CONFIG_FILENAME = "assetpub.toml"

# Build workflow whose runs carry the artifacts.
DEFAULT_WORKFLOW = "ci.yml"
DEFAULT_DOWNLOAD_DIR = "artifacts"
# GitHub's own page size for the workflow runs endpoint.
DEFAULT_RUNS_PER_PAGE = 30


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class PublishConfig:
    """Where to look for runs and where to put their artifacts."""

    repo: str | None = None
    workflow: str = DEFAULT_WORKFLOW
    download_dir: str = DEFAULT_DOWNLOAD_DIR
    runs_per_page: int = DEFAULT_RUNS_PER_PAGE

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> PublishConfig:
        """Create config from a parsed TOML document."""
        publish: StrDict = get_table(data, "publish") or {}

        per_page = get_int(publish, "runs_per_page")
        if per_page is not None and not 1 <= per_page <= 100:
            raise ValueError(f"runs_per_page must be within 1..100, got {per_page}")

        return cls(
            repo=get_str(publish, "repo"),
            workflow=get_str(publish, "workflow") or DEFAULT_WORKFLOW,
            download_dir=get_str(publish, "download_dir") or DEFAULT_DOWNLOAD_DIR,
            runs_per_page=per_page or DEFAULT_RUNS_PER_PAGE,
        )

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> PublishConfig:
        repo = env.get("GITHUB_REPOSITORY", "").strip()
        return cls(repo=repo or None)

    def merged_over(self, base: PublishConfig) -> PublishConfig:
        """Fill this config's unset repo from ``base``."""
        if self.repo is None and base.repo is not None:
            return replace(self, repo=base.repo)
        return self

    def with_overrides(
        self,
        *,
        repo: str | None = None,
        workflow: str | None = None,
        download_dir: str | None = None,
    ) -> PublishConfig:
        return replace(
            self,
            repo=repo or self.repo,
            workflow=workflow or self.workflow,
            download_dir=download_dir or self.download_dir,
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[PublishConfig, ConfigError]:
    """Load and validate ``path``.

    Returns:
        Ok(PublishConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(PublishConfig.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))
