"""Tests for auto-fix dispatch and the fix routines."""

import json

import pytest

from remediation.classifier import ERROR_PATTERNS, ErrorClassifier
from remediation.strategies import RemediationDispatcher, missing_packages
from schemas.remediation import ErrorAnalysis, FixStrategy

REPO = "octo/shop-api"


@pytest.fixture
def dispatcher(fake_github) -> RemediationDispatcher:
    return RemediationDispatcher(fake_github, REPO)


class TestDispatch:
    def test_every_pattern_strategy_has_a_routine(self, dispatcher):
        strategies = {pattern.strategy for pattern in ERROR_PATTERNS.values()}

        assert strategies <= dispatcher.strategies

    def test_every_strategy_has_a_routine(self, dispatcher):
        assert dispatcher.strategies == set(FixStrategy)

    def test_routine_exception_becomes_failed_result(self, dispatcher, fake_github):
        def broken_read(*args, **kwargs):
            raise RuntimeError("contents API unavailable")

        fake_github.read_file = broken_read
        analysis = ErrorAnalysis(can_auto_fix=True, strategy=FixStrategy.INSTALL_DEPENDENCIES, error="x")

        result = dispatcher.execute(analysis)

        assert not result.success
        assert result.strategy == FixStrategy.INSTALL_DEPENDENCIES
        assert result.error == "contents API unavailable"

    def test_missing_strategy_runs_experimental_fix(self, dispatcher, fake_github):
        result = dispatcher.execute(ErrorAnalysis(can_auto_fix=True))

        assert not result.success
        assert result.strategy == FixStrategy.EXPERIMENTAL_FIX
        assert fake_github.writes == []


class TestMissingFiles:
    """'Cannot find module' end to end: classify, dispatch, write three files."""

    def test_all_files_written(self, dispatcher, fake_github):
        analysis = ErrorClassifier().analyze("Cannot find module 'server.js'")
        assert analysis.strategy == FixStrategy.CREATE_MISSING_FILES

        result = dispatcher.execute(analysis)

        assert result.success
        assert result.files_created == 3
        assert result.total_files == 3
        assert [w["path"] for w in fake_github.writes] == ["server.js", "package.json", "railway.json"]
        json.loads(fake_github.files[(REPO, "package.json")])
        json.loads(fake_github.files[(REPO, "railway.json")])
        assert "process.env.PORT" in fake_github.files[(REPO, "server.js")]

    def test_one_failed_write(self, dispatcher, fake_github):
        fake_github.fail_paths = {"package.json"}
        analysis = ErrorClassifier().analyze("Cannot find module 'server.js'")

        result = dispatcher.execute(analysis)

        assert not result.success
        assert result.files_created == 2
        assert result.total_files == 3
        assert "package.json" in result.error
        assert result.files == ["server.js", "railway.json"]


class TestRoutines:
    def test_fix_database_connection(self, dispatcher, fake_github):
        result = dispatcher.execute(ErrorClassifier().analyze("connect ECONNREFUSED 127.0.0.1:27017"))

        assert result.success
        assert result.files == ["server.js"]
        assert fake_github.writes[0]["message"].startswith("DevOps AI:")

    def test_fix_port(self, dispatcher, fake_github):
        result = dispatcher.execute(ErrorClassifier().analyze("Port already in use"))

        assert result.success
        assert "process.env.PORT" in fake_github.files[(REPO, "server.js")]

    def test_install_dependencies_adds_only_new_packages(self, dispatcher, fake_github):
        fake_github.files[(REPO, "package.json")] = json.dumps(
            {"name": "shop-api", "dependencies": {"express": "^4.18.2"}}
        )
        analysis = ErrorAnalysis(
            can_auto_fix=True,
            strategy=FixStrategy.INSTALL_DEPENDENCIES,
            error="ModuleNotFoundError: Cannot find module 'express' and Cannot find module 'dotenv/config'",
        )

        result = dispatcher.execute(analysis)

        manifest = json.loads(fake_github.files[(REPO, "package.json")])
        assert result.details["added"] == ["dotenv"]
        assert manifest["dependencies"] == {"express": "^4.18.2", "dotenv": "latest"}

    def test_fix_build_process(self, dispatcher, fake_github):
        result = dispatcher.execute(ErrorClassifier().analyze("Build failed"))

        manifest = json.loads(fake_github.files[(REPO, "package.json")])
        assert result.success
        assert "build" in manifest["scripts"]
        assert "npm run build" in fake_github.files[(REPO, "railway.json")]

    def test_writes_go_to_configured_branch(self, fake_github):
        dispatcher = RemediationDispatcher(fake_github, REPO, branch="hotfix")

        dispatcher.execute(ErrorClassifier().analyze("Port already in use"))

        assert fake_github.writes[0]["branch"] == "hotfix"


@pytest.mark.parametrize(
    "error, expected",
    [
        ("Cannot find module 'express'", ["express"]),
        ("Cannot find module '@prisma/client/runtime'", ["@prisma/client"]),
        ("Cannot find module './routes/api'", []),
        ("Cannot find module '/app/server.js'", []),
        ("", []),
    ],
)
def test_missing_packages(error, expected):
    assert missing_packages(error) == expected
