"""CLI tests with the configuration and GitHub replaced by fixtures."""

import pytest
from typer.testing import CliRunner

import cli.commands.common
import cli.commands.devops
import pipeline.cli
from pipeline import __version__
from pipeline.config import Config
from remediation import DeploymentMonitor, RemediationDispatcher, RepositoryFixer
from scaffolding.templates import package_json, railway_json, server_js

runner = CliRunner()


@pytest.fixture
def use_config(monkeypatch):
    def install(config: Config) -> Config:
        for module in (pipeline.cli, cli.commands.common, cli.commands.devops):
            monkeypatch.setattr(module, "get_config", lambda: config)
        return config

    return install


@pytest.fixture
def fake_monitor(monkeypatch, fake_github):
    def create(config, github=None):
        return DeploymentMonitor(RemediationDispatcher(fake_github, config.monitor.target_repo))

    monkeypatch.setattr(cli.commands.devops, "create_monitor", create)
    return fake_github


def test_version():
    result = runner.invoke(pipeline.cli.app, ["--version"])

    assert result.exit_code == 0
    assert f"v{__version__}" in result.output


def test_config_show_masks_secrets(use_config, config):
    use_config(config)

    result = runner.invoke(pipeline.cli.app, ["config-show"])

    assert result.exit_code == 0
    assert "test-token" not in result.output
    assert "****" in result.output


def test_build_without_credentials_exits_1(use_config, tmp_path):
    config = use_config(Config())
    config.pipeline.runs_dir = str(tmp_path / "runs")

    result = runner.invoke(pipeline.cli.app, ["build", "A todo app"])

    assert result.exit_code == 1


def test_analyze_error(use_config, config):
    use_config(config)

    result = runner.invoke(pipeline.cli.app, ["devops", "analyze-error", "Cannot find module 'server.js'"])

    assert result.exit_code == 0
    assert "CREATE_MISSING_FILES" in result.output


class TestFix:
    def test_known_error_is_fixed(self, use_config, config, fake_monitor):
        use_config(config)

        result = runner.invoke(pipeline.cli.app, ["devops", "fix", "Port already in use", "--repo", "octo/shop-api"])

        assert result.exit_code == 0
        assert "FIXED" in result.output
        assert fake_monitor.writes[0]["repo"] == "octo/shop-api"

    def test_unknown_error_escalates(self, use_config, config, fake_monitor):
        use_config(config)

        result = runner.invoke(pipeline.cli.app, ["devops", "fix", "Something odd", "--repo", "octo/shop-api"])

        assert result.exit_code == 1
        assert "ESCALATED_DIRECT" in result.output
        assert fake_monitor.writes == []


def test_design_system_needs_no_credentials(use_config, tmp_path):
    config = use_config(Config())
    config.shared_context.directory = str(tmp_path / "ctx")

    result = runner.invoke(pipeline.cli.app, ["design", "system", "ecommerce"])

    assert result.exit_code == 0
    assert "#6366F1" in result.output


def test_monitor_needs_no_credentials(use_config, tmp_path):
    config = use_config(Config())
    config.shared_context.directory = str(tmp_path / "ctx")

    result = runner.invoke(pipeline.cli.app, ["monitor"])

    assert result.exit_code == 0
    assert "Team Status" in result.output
    assert not (tmp_path / "ctx").exists()


class TestScanRepos:
    @pytest.fixture
    def fake_fixer(self, monkeypatch, fake_github):
        def create(config, github=None):
            return RepositoryFixer(fake_github, repositories=["octo/default"], auto_merge=config.monitor.auto_merge_fixes)

        monkeypatch.setattr(cli.commands.devops, "create_repository_fixer", create)
        return fake_github

    def test_opens_fix_pull_request(self, use_config, config, fake_fixer):
        use_config(config)
        fake_fixer.files[("octo/shop-api", "server.js")] = server_js()

        result = runner.invoke(pipeline.cli.app, ["devops", "scan-repos", "--repo", "octo/shop-api", "--auto-merge"])

        assert result.exit_code == 0
        assert "Fix Pull Requests" in result.output
        assert "**RAILWAY_CONFIG**" in fake_fixer.pull_requests["octo/shop-api"][0]["body"]
        assert fake_fixer.merged == [("octo/shop-api", 1)]

    def test_healthy_repositories(self, use_config, config, fake_fixer):
        use_config(config)
        for path, content in (("server.js", server_js()), ("package.json", package_json()), ("railway.json", railway_json())):
            fake_fixer.files[("octo/default", path)] = content

        result = runner.invoke(pipeline.cli.app, ["devops", "scan-repos"])

        assert result.exit_code == 0
        assert "No fix pull requests needed" in result.output
        assert fake_fixer.pull_requests == {}

    def test_requires_github_token(self, use_config):
        use_config(Config())

        result = runner.invoke(pipeline.cli.app, ["devops", "scan-repos"])

        assert result.exit_code == 1
