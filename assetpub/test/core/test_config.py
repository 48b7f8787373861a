"""Tests for assetpub.core.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from assetpub.core.config import (
    DEFAULT_DOWNLOAD_DIR,
    DEFAULT_RUNS_PER_PAGE,
    DEFAULT_WORKFLOW,
    PublishConfig,
    load_config,
)
from assetpub.core.result import Err, Ok


class TestPublishConfig:
    def test_defaults(self) -> None:
        config = PublishConfig()
        assert config.repo is None
        assert config.workflow == DEFAULT_WORKFLOW == "ci.yml"
        assert config.download_dir == DEFAULT_DOWNLOAD_DIR
        assert config.runs_per_page == DEFAULT_RUNS_PER_PAGE

    def test_frozen(self) -> None:
        config = PublishConfig()
        with pytest.raises(AttributeError):
            config.workflow = "build.yml"  # type: ignore[misc]

    def test_from_env_reads_repository(self) -> None:
        assert PublishConfig.from_env({"GITHUB_REPOSITORY": "acme/tool"}).repo == "acme/tool"
        assert PublishConfig.from_env({"GITHUB_REPOSITORY": "  "}).repo is None
        assert PublishConfig.from_env({}).repo is None

    def test_file_repo_wins_over_env(self) -> None:
        env = PublishConfig.from_env({"GITHUB_REPOSITORY": "acme/tool"})
        file_config = PublishConfig(repo="acme/fork")
        assert file_config.merged_over(env).repo == "acme/fork"

    def test_env_fills_missing_repo(self) -> None:
        env = PublishConfig.from_env({"GITHUB_REPOSITORY": "acme/tool"})
        merged = PublishConfig(workflow="build.yml").merged_over(env)
        assert merged.repo == "acme/tool"
        assert merged.workflow == "build.yml"

    def test_overrides_only_replace_given_values(self) -> None:
        config = PublishConfig(repo="acme/tool", workflow="build.yml")
        out = config.with_overrides(download_dir="out")
        assert out.repo == "acme/tool"
        assert out.workflow == "build.yml"
        assert out.download_dir == "out"


class TestLoadConfig:
    def test_full_file(self, tmp_path: Path) -> None:
        path = tmp_path / "assetpub.toml"
        path.write_text(
            '[publish]\nrepo = "acme/tool"\nworkflow = "build.yml"\n'
            'download_dir = "dist"\nruns_per_page = 50\n',
            encoding="utf-8",
        )

        result = load_config(path)

        assert isinstance(result, Ok)
        assert result.value == PublishConfig(
            repo="acme/tool", workflow="build.yml", download_dir="dist", runs_per_page=50
        )

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "assetpub.toml"
        path.write_text("", encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Ok)
        assert result.value == PublishConfig()

    def test_missing_file(self, tmp_path: Path) -> None:
        result = load_config(tmp_path / "nope.toml")

        assert isinstance(result, Err)
        assert "not found" in result.error.message

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "assetpub.toml"
        path.write_text("[publish\n", encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Err)
        assert "Invalid TOML" in result.error.message

    def test_runs_per_page_out_of_range(self, tmp_path: Path) -> None:
        path = tmp_path / "assetpub.toml"
        path.write_text("[publish]\nruns_per_page = 500\n", encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Err)
        assert "runs_per_page" in result.error.message
