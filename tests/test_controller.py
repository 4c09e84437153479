"""End-to-end tests for the team controller over fake LLM and GitHub."""

import io
import json
import re
from pathlib import Path

import pytest
from rich.console import Console

from orchestrator import TeamController
from pipeline.config import Config, ConfigurationError
from schemas.pipeline_state import Stage
from shared_context import InMemoryContextStore, SharedContext

DESCRIPTION = "A fitness tracking app with workout logging"
PROJECT = "fitness-tracking-with-app"


@pytest.fixture
def controller(config, fake_llm, fake_github, shared_context) -> TeamController:
    config.deploy.deploy_wait = 0
    return TeamController(
        config,
        llm=fake_llm,
        github=fake_github,
        shared_context=shared_context,
        console=Console(file=io.StringIO()),
    )


def load_state(config: Config, run_id: str) -> dict:
    return json.loads((Path(config.pipeline.runs_dir) / run_id / "state.json").read_text())


class TestSuccessfulBuild:
    def test_all_stages_complete(self, controller, config, fake_github):
        result = controller.build_application(DESCRIPTION)

        assert result.success
        assert result.error is None
        assert result.project_name == PROJECT
        assert result.repositories == {
            "backend": f"https://github.com/octo/{PROJECT}",
            "frontend": f"https://github.com/octo/{PROJECT}-frontend",
        }
        assert set(result.phases) == {s.value for s in Stage if s != Stage.INIT}

        state = load_state(config, result.run_id)
        assert state["status"] == "completed"
        assert all(stage["status"] == "completed" for stage in state["stages"].values())

    def test_both_pull_requests_are_merged(self, controller, fake_github):
        result = controller.build_application(DESCRIPTION)

        assert sorted(fake_github.merged) == [(PROJECT, 1), (f"{PROJECT}-frontend", 1)]
        assert result.phases["deployed"]["backend"]["merge_sha"] == f"merge-{PROJECT}-1"

    def test_backend_endpoints_reach_frontend_prompt(self, controller, fake_llm):
        controller.build_application(DESCRIPTION)

        frontend_call = fake_llm.calls[-1]["messages"][-1]["content"]
        assert "Backend API endpoints:" in frontend_call
        assert "POST /api/auth/login" in frontend_call

    def test_team_is_released_and_logged(self, controller, shared_context):
        controller.build_application(DESCRIPTION)

        context = shared_context.get_project_context()
        assert all(member.status == "available" for member in context.team_status.values())
        assert context.project_state.repositories_created
        message_types = [m.message_type for m in shared_context.get_communication_log().messages]
        assert message_types[1] == "build_started"
        assert message_types[-1] == "build_completed"

    def test_monitor_team(self, controller):
        controller.build_application(DESCRIPTION)

        progress = controller.monitor_team()

        assert progress["project_phase"] == "summary"
        assert progress["blockers"] == []

    def test_progress_is_reported(self, controller):
        controller.build_application(DESCRIPTION)

        assert "Progress: 10/10 stages" in controller.console.file.getvalue()


class TestAbortedBuild:
    def test_llm_failure_stops_later_stages(self, controller, config, fake_llm, fake_github, shared_context):
        fake_llm.responses = ["Plan", "Requirements", RuntimeError("Anthropic API error: 529 overloaded")]

        result = controller.build_application(DESCRIPTION)

        assert not result.success
        assert result.error == "Anthropic API error: 529 overloaded"
        assert result.failed_phase == "tech_selection"
        assert set(result.phases) == {"planning", "requirements"}
        assert len(fake_llm.calls) == 3
        assert fake_github.repositories == {}

        state = load_state(config, result.run_id)
        assert state["status"] == "aborted"
        assert state["last_error"] == "Anthropic API error: 529 overloaded"
        assert "repo_created" not in state["stages"]

        blockers = shared_context.get_project_context().open_blockers()
        assert blockers[0].affected_roles == ["frontend_dev"]
        assert "(3/10 stages done)" in controller.console.file.getvalue()

    def test_deployment_failure_aborts(self, controller, fake_github):
        fake_github.conflicted_prs.add(PROJECT)

        result = controller.build_application(DESCRIPTION)

        assert not result.success
        assert result.failed_phase == "deployed"
        assert result.error == "PR #1 has merge conflicts"
        assert result.phases["deployed"]["backend"]["success"] is False
        assert fake_github.merged == []


def test_missing_credentials(fake_github, tmp_path):
    config = Config()
    config.pipeline.runs_dir = str(tmp_path / "runs")
    controller = TeamController(config, github=fake_github, console=Console(file=io.StringIO()))

    with pytest.raises(ConfigurationError, match="GITHUB_TOKEN"):
        controller.build_application(DESCRIPTION)


class TestRuns:
    def test_run_ids_are_unique(self, controller):
        first = controller.create_run(DESCRIPTION)
        second = controller.create_run(DESCRIPTION)

        assert first.run_id != second.run_id
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}-\d{6}-\d{3}-[0-9a-f]{6}", first.run_id)
        assert Path(first.run_dir).is_dir()


def test_monitor_team_without_credentials():
    context = SharedContext(InMemoryContextStore())
    context.initialize()
    context.assign_task("backend_dev", "Build the REST API")

    progress = TeamController(Config(), shared_context=context, console=Console(file=io.StringIO())).monitor_team()

    assert progress["team_status"]["backend_dev"]["current_task"] == "Build the REST API"
    assert progress["blockers"] == []
