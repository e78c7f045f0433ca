"""Tests for the click CLI."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from modcheck import __version__
from modcheck.cli import verify as verify_module
from modcheck.cli.main import cli

WIDGET_URL = "https://github.com/acme/widget/archive/refs/tags/v1.0.0.zip"


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def project(tmp_path, widget_digest):
    project_dir = tmp_path / "project"
    project_dir.mkdir()
    (project_dir / "go.sum").write_text(
        f"github.com/acme/widget v1.0.0 {widget_digest}\n"
        "github.com/acme/widget v1.0.0/go.mod h1:gomod=\n"
    )
    return project_dir


@pytest.fixture
def serve(monkeypatch, make_fetcher):
    """Make the verify command fetch from ``routes`` instead of the network."""

    def _serve(routes: dict) -> None:
        monkeypatch.setattr(verify_module, "ArchiveFetcher", lambda **kwargs: make_fetcher(routes))

    return _serve


class TestVerifyCommand:
    def test_all_verified_exits_zero(self, runner, project, serve, widget_zip) -> None:
        serve({WIDGET_URL: widget_zip})
        result = runner.invoke(cli, ["verify", str(project)])
        assert result.exit_code == 0, result.output
        assert "Checking github.com/acme/widget@v1.0.0..." in result.output
        assert "Verified" in result.output
        assert "github.com/acme/widget@v1.0.0" in result.output

    def test_mismatch_exits_one(self, runner, tmp_path, serve, widget_zip) -> None:
        project_dir = tmp_path / "p"
        project_dir.mkdir()
        (project_dir / "go.sum").write_text("github.com/acme/widget v1.0.0 h1:BBBB=\n")
        serve({WIDGET_URL: widget_zip})
        result = runner.invoke(cli, ["verify", str(project_dir)])
        assert result.exit_code == 1
        assert "WARNING" in result.output
        assert "h1:BBBB=" in result.output

    def test_fetch_error_exits_one(self, runner, project, serve) -> None:
        serve({})
        result = runner.invoke(cli, ["verify", str(project)])
        assert result.exit_code == 1
        assert "HTTP 404" in result.output

    def test_missing_go_sum_exits_two(self, runner, tmp_path) -> None:
        result = runner.invoke(cli, ["verify", str(tmp_path)])
        assert result.exit_code == 2
        assert "go.sum" in result.output

    def test_missing_project_exits_two(self, runner, tmp_path) -> None:
        result = runner.invoke(cli, ["verify", str(tmp_path / "nope")])
        assert result.exit_code == 2

    def test_json_output(self, runner, project, serve, widget_zip) -> None:
        serve({WIDGET_URL: widget_zip})
        result = runner.invoke(cli, ["verify", str(project), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["results"] == {"github.com/acme/widget@v1.0.0": "verified"}
        assert data["skipped"] == ["github.com/acme/widget@v1.0.0"]


class TestOtherCommands:
    def test_version(self, runner) -> None:
        result = runner.invoke(cli, ["--version"])
        assert __version__ in result.output

    def test_hash(self, runner, tmp_path) -> None:
        tree = tmp_path / "tree"
        tree.mkdir()
        result = runner.invoke(cli, ["hash", str(tree), "--prefix", "example.com/pkg@v1.0.0"])
        assert result.exit_code == 0
        assert result.output.strip() == "h1:47DEQpj8HBSa+/TImW+5JCeuQeRkm5NMpJWZG3hSuFU="

    def test_url(self, runner) -> None:
        result = runner.invoke(cli, ["url", "github.com/acme/widget", "v1.0.0"])
        assert result.exit_code == 0
        assert "github" in result.output
        assert "refs/tags/v1.0.0.zip" in result.output

    def test_url_invalid(self, runner) -> None:
        result = runner.invoke(cli, ["url", "github.com/acme", "v1.0.0"])
        assert result.exit_code == 1

    def test_config_set_and_show(self, runner, isolated_config) -> None:
        result = runner.invoke(cli, ["config", "set", "workers", "2"])
        assert result.exit_code == 0
        assert isolated_config.workers == 2
        assert isolated_config.settings_file.exists()

        result = runner.invoke(cli, ["config", "show"])
        assert "Workers:" in result.output

    def test_config_set_unknown_key(self, runner) -> None:
        result = runner.invoke(cli, ["config", "set", "nope", "1"])
        assert result.exit_code == 1
        assert "Invalid key" in result.output
