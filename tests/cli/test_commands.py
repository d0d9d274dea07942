"""Integration tests for CLI commands via typer.testing.CliRunner."""

import json

import pytest
from typer.testing import CliRunner

from memx.cli.main import app
from memx.core.index import JsonIndexStore
from memx.core.schema import today
from memx.sync.git_sync import GitError, GitRunner

runner = CliRunner()


@pytest.fixture
def local_task(project_dir):
    """Project with `mem init` already run (local .mem, task/demo)."""
    result = runner.invoke(app, ["init", "demo", "Ship", "the", "demo"])
    assert result.exit_code == 0, result.output
    return project_dir


@pytest.fixture
def central_task(project_dir):
    """Project mapped to a central-store task."""
    result = runner.invoke(app, ["new", "Fix the login bug"])
    assert result.exit_code == 0, result.output
    return project_dir


def _json(args):
    result = runner.invoke(app, [*args, "--format", "json"])
    assert result.exit_code == 0, result.output
    return json.loads(result.output)


class TestInit:
    def test_init_creates_local_store(self, project_dir):
        result = runner.invoke(app, ["init", "demo", "Ship the demo"])
        assert result.exit_code == 0
        assert "task/demo" in result.output
        assert (project_dir / ".mem" / "goal.md").exists()

    def test_init_existing_task_fails(self, local_task):
        result = runner.invoke(app, ["init", "demo"])
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_init_second_task_in_same_store(self, local_task):
        result = runner.invoke(app, ["init", "second"])
        assert result.exit_code == 0
        assert _json(["status"])["branch"] == "task/second"

    def test_init_json(self, project_dir):
        data = _json(["init", "demo"])
        assert data["branch"] == "task/demo"

    def test_init_can_be_retried_after_git_failure(self, project_dir, monkeypatch):
        def no_identity(self, message):
            raise GitError("Please tell me who you are.")

        commit = GitRunner.commit
        monkeypatch.setattr(GitRunner, "commit", no_identity)
        result = runner.invoke(app, ["init", "demo", "Build X"])
        assert result.exit_code == 1
        assert "Please tell me who you are" in result.output
        assert not (project_dir / ".mem").exists()

        monkeypatch.setattr(GitRunner, "commit", commit)
        result = runner.invoke(app, ["init", "demo", "Build X"])
        assert result.exit_code == 0, result.output
        assert _json(["status"])["goal"] == "Build X"


class TestNew:
    def test_new_maps_cwd(self, central_task, central_dir):
        index = JsonIndexStore(central_dir / "index.json").load()
        assert index == {str(central_task): "task/fix-the-login"}
        assert _json(["status"])["branch"] == "task/fix-the-login"

    def test_new_with_dir(self, project_dir, central_dir, tmp_path):
        other = tmp_path / "other"
        other.mkdir()
        result = runner.invoke(app, ["new", "Other work", "--dir", str(other)])
        assert result.exit_code == 0
        assert JsonIndexStore(central_dir / "index.json").load() == {str(other): "task/other-work"}

    def test_new_records_provider(self, project_dir):
        runner.invoke(app, ["new", "Provider test", "--provider", "gemini"])
        assert _json(["get", "provider"])["value"] == "gemini"

    def test_new_records_default_provider(self, central_task):
        assert _json(["get", "provider"])["value"] == "claude"

    def test_init_inside_central_adds_task(self, central_task):
        runner.invoke(app, ["init", "local"])
        assert _json(["status"])["branch"] == "task/local"


class TestNoStore:
    def test_command_without_store(self, project_dir):
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 1
        assert "No memory store found" in result.output

    def test_root_without_store_is_non_interactive(self, project_dir):
        result = runner.invoke(app, [])
        assert result.exit_code == 0
        assert "mem new" in result.output

    def test_root_shows_status(self, local_task):
        result = runner.invoke(app, [])
        assert result.exit_code == 0
        assert "Ship the demo" in result.output


class TestStatus:
    def test_status(self, local_task):
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 0
        assert "task/demo" in result.output
        assert "Ship the demo" in result.output

    def test_status_json(self, local_task):
        data = _json(["status"])
        assert data["status"] == "active"
        assert data["next"] == "Define approach"

    def test_checkpoint_markers_render(self, local_task):
        runner.invoke(app, ["checkpoint", "Wrote", "parser"])
        result = runner.invoke(app, ["status"])
        assert f"[x] {today()}: Wrote parser" in result.output


class TestGoalCommands:
    def test_goal_show_and_set(self, local_task):
        result = runner.invoke(app, ["goal"])
        assert "Ship the demo" in result.output
        runner.invoke(app, ["goal", "New", "goal"])
        assert _json(["goal"])["goal"] == "New goal"

    def test_next(self, local_task):
        runner.invoke(app, ["next", "Write", "tests"])
        result = runner.invoke(app, ["next"])
        assert "Write tests" in result.output

    def test_cp_alias(self, local_task):
        result = runner.invoke(app, ["cp", "quick"])
        assert result.exit_code == 0
        assert _json(["status"])["checkpoints"][-1].endswith("quick")

    def test_checkpoint_requires_message(self, local_task):
        result = runner.invoke(app, ["checkpoint"])
        assert result.exit_code != 0

    def test_stuck_and_clear(self, local_task):
        runner.invoke(app, ["stuck", "Waiting", "on", "review"])
        assert _json(["status"])["status"] == "blocked"
        assert "Waiting on review" in runner.invoke(app, ["stuck"]).output
        runner.invoke(app, ["stuck", "clear"])
        assert _json(["status"])["blocker"] is None

    def test_criteria_flow(self, local_task):
        runner.invoke(app, ["criteria", "add", "Parser", "works"])
        runner.invoke(app, ["criteria", "add", "Tests", "pass"])
        result = runner.invoke(app, ["criteria", "1"])
        assert result.exit_code == 0
        assert "Checked: Tests pass" in result.output
        assert "50%" in result.output
        result = runner.invoke(app, ["criteria", "check", "1"])
        assert "100%" in result.output
        assert _json(["progress"])["percent"] == 100

    def test_criteria_list_numbers_open_items(self, local_task):
        runner.invoke(app, ["criteria", "add", "a"])
        runner.invoke(app, ["criteria", "add", "b"])
        runner.invoke(app, ["criteria", "1"])
        result = runner.invoke(app, ["criteria"])
        assert "[x] b" in result.output
        assert "1. [ ] a" in result.output

    def test_criteria_out_of_range(self, local_task):
        result = runner.invoke(app, ["criteria", "3"])
        assert result.exit_code == 1
        assert "Criterion #3 not found" in result.output

    def test_progress_without_criteria(self, local_task):
        result = runner.invoke(app, ["progress"])
        assert "No criteria defined" in result.output

    def test_constraints(self, local_task):
        runner.invoke(app, ["constraint", "add", "No", "new", "deps"])
        runner.invoke(app, ["constraint", "add", "Stay", "fast"])
        assert _json(["constraints"]) == ["No new deps", "Stay fast"]
        runner.invoke(app, ["constraint", "rm", "1"])
        assert _json(["constraint", "list"]) == ["Stay fast"]

    def test_constraint_remove_missing(self, local_task):
        result = runner.invoke(app, ["constraint", "remove", "9"])
        assert result.exit_code == 1


class TestLearnCommands:
    def test_learn_and_list(self, local_task):
        runner.invoke(app, ["learn", "Use", "rebase"])
        data = _json(["learnings"])
        assert data[0]["text"] == "Use rebase"

    def test_learn_global_and_playbook(self, local_task):
        runner.invoke(app, ["learn", "-g", "Always", "test"])
        result = runner.invoke(app, ["playbook"])
        assert "Always test" in result.output

    def test_promote(self, local_task):
        runner.invoke(app, ["learn", "Small", "commits"])
        result = runner.invoke(app, ["promote", "1"])
        assert result.exit_code == 0
        assert "Small commits" in runner.invoke(app, ["playbook"]).output

    def test_promote_invalid(self, local_task):
        result = runner.invoke(app, ["promote", "4"])
        assert result.exit_code == 1
        assert "Invalid number" in result.output


class TestTaskCommands:
    def test_tasks(self, local_task):
        runner.invoke(app, ["init", "second"])
        data = _json(["tasks"])
        assert [(t["name"], t["current"]) for t in data] == [("demo", False), ("second", True)]

    def test_switch(self, local_task):
        runner.invoke(app, ["init", "second"])
        result = runner.invoke(app, ["switch", "demo"])
        assert result.exit_code == 0
        assert _json(["status"])["branch"] == "task/demo"

    def test_switch_missing(self, local_task):
        result = runner.invoke(app, ["switch", "nope"])
        assert result.exit_code == 1
        assert "Branch not found" in result.output

    def test_switch_remaps_central(self, central_task, central_dir):
        runner.invoke(app, ["new", "Another", "task", "--dir", str(central_dir.parent)])
        runner.invoke(app, ["switch", "another-task"])
        index = JsonIndexStore(central_dir / "index.json").load()
        assert index[str(central_task)] == "task/another-task"
        assert _json(["status"])["branch"] == "task/another-task"

    def test_central_branch_guard_follows_cwd(self, central_task, central_dir, tmp_path):
        other = tmp_path / "other"
        other.mkdir()
        runner.invoke(app, ["new", "Other", "thing", "--dir", str(other)])
        # The store is now on task/other-thing, but cwd maps to fix-the-login
        assert _json(["status"])["branch"] == "task/fix-the-login"

    def test_branch_list_and_create(self, local_task):
        data = _json(["branch"])
        assert {"branch": "task/demo", "current": True} in data
        result = runner.invoke(app, ["branch", "spike"])
        assert "Created task/spike" in result.output
        result = runner.invoke(app, ["branch", "task/demo"])
        assert "Switched to task/demo" in result.output

    def test_commit(self, local_task):
        result = runner.invoke(app, ["commit"])
        assert "No changes to commit" in result.output
        (local_task / ".mem" / "notes.md").write_text("x\n")
        result = runner.invoke(app, ["commit", "add", "notes"])
        assert "Committed: add notes" in result.output

    def test_sync_without_remote(self, local_task):
        assert _json(["sync"]) == {"status": "no_remote"}

    def test_log_and_history(self, local_task):
        runner.invoke(app, ["checkpoint", "one"])
        assert "checkpoint: one" in runner.invoke(app, ["log"]).output
        assert "init: demo" in runner.invoke(app, ["history"]).output

    def test_context(self, local_task):
        runner.invoke(app, ["learn", "Insight"])
        result = runner.invoke(app, ["context"])
        assert "# Context" in result.output
        assert "## Task Learnings" in result.output

    def test_query(self, local_task):
        runner.invoke(app, ["learn", "Rebase", "often"])
        data = _json(["query", "rebase"])
        assert data[0]["file"] == "memory.md"


class TestStateCommands:
    def test_set_get(self, local_task):
        runner.invoke(app, ["set", "owner", "alice"])
        result = runner.invoke(app, ["get", "owner"])
        assert result.output.strip() == "alice"

    def test_get_missing(self, local_task):
        assert "(not set)" in runner.invoke(app, ["get", "nothing"]).output

    def test_append(self, local_task):
        result = runner.invoke(app, ["append", "learnings", "Appended", "item"])
        assert result.exit_code == 0
        assert _json(["learnings"])[-1]["text"] == "Appended item"

    def test_append_unknown(self, local_task):
        result = runner.invoke(app, ["append", "todos", "x"])
        assert result.exit_code == 1
        assert "Unknown list" in result.output


class TestWakeCommands:
    def test_wake_and_export(self, local_task):
        result = runner.invoke(app, ["wake", "every", "15m"])
        assert result.exit_code == 0
        assert "*/15 * * * *" in result.output
        result = runner.invoke(app, ["cron", "export"])
        assert result.output.strip() == f"*/15 * * * * cd {local_task} && mem context"

    def test_wake_run_command(self, local_task):
        runner.invoke(app, ["wake", "8am", "daily", "--run", "mem status"])
        assert _json(["cron", "export"])["cron"] == "0 8 * * * mem status"

    def test_wake_clear(self, local_task):
        runner.invoke(app, ["wake", "every", "2h"])
        runner.invoke(app, ["wake", "clear"])
        assert _json(["wake"]) == {"wake": None}

    def test_wake_invalid(self, local_task):
        result = runner.invoke(app, ["wake", "whenever"])
        assert result.exit_code == 1

    def test_export_without_wake(self, local_task):
        result = runner.invoke(app, ["cron", "export"])
        assert result.exit_code == 1
        assert "No wake set" in result.output


class TestDone:
    def test_done_merges(self, local_task):
        runner.invoke(app, ["learn", "Keep", "it", "small"])
        result = runner.invoke(app, ["done", "--promote", "1", "--keep"])
        assert result.exit_code == 0, result.output
        assert "Merged task/demo into main" in result.output
        assert "Keep it small" in runner.invoke(app, ["playbook"]).output

    def test_done_on_default_branch(self, local_task):
        runner.invoke(app, ["switch", "main"])
        result = runner.invoke(app, ["done", "--promote", "none", "--keep"])
        assert result.exit_code == 1
        assert "Already on main" in result.output

    def test_done_delete_unmaps_central(self, central_task, central_dir):
        result = runner.invoke(app, ["done", "--promote", "none", "--delete"])
        assert result.exit_code == 0, result.output
        assert JsonIndexStore(central_dir / "index.json").load() == {}

    def test_done_bad_promote(self, local_task):
        result = runner.invoke(app, ["done", "--promote", "x"])
        assert result.exit_code == 1


class TestConfig:
    def test_defaults(self, project_dir):
        assert _json(["config", "get", "default_branch"])["value"] == "main"

    def test_set_and_use_default_branch(self, project_dir):
        runner.invoke(app, ["config", "set", "default_branch", "trunk"])
        runner.invoke(app, ["init", "demo"])
        assert [b["branch"] for b in _json(["branch"])] == ["task/demo", "trunk"]

    def test_unknown_key(self, project_dir):
        assert runner.invoke(app, ["config", "get", "nope"]).exit_code == 1

    def test_list(self, project_dir):
        assert _json(["config", "list"]) == {"default_branch": "main", "provider": "claude"}


class TestSkillAndMcp:
    def test_skill_view(self, project_dir):
        result = runner.invoke(app, ["skill"])
        assert "name: mem" in result.output

    def test_skill_install(self, project_dir, isolated_env):
        result = runner.invoke(app, ["skill", "install", "claude"])
        assert result.exit_code == 0
        assert (isolated_env / ".claude" / "skills" / "mem" / "SKILL.md").exists()
        assert not (isolated_env / ".gemini" / "skills" / "mem" / "SKILL.md").exists()

    def test_skill_install_unknown_target(self, project_dir):
        assert runner.invoke(app, ["skill", "install", "vim"]).exit_code == 1

    def test_mcp_config(self, project_dir):
        result = runner.invoke(app, ["mcp", "config"])
        data = json.loads(result.output)
        assert data["mcpServers"]["mem"]["args"] == ["mcp", "serve", "--dir", str(project_dir)]
