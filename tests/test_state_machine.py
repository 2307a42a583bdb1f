"""Tests for agileflow.workflow.state_machine module."""

import pytest

from agileflow.issues.models import Stage
from agileflow.issues.store import create_issue, get_issue, load_issue
from agileflow.lib.errors import InvalidTransition, ValidationFailed
from agileflow.workflow.state_machine import allowed_targets, can_transition, move

FILLED_TASK = """---
title: Fix login
type: task
owner: unassigned
created: 2025-03-14
---

# Fix login

## Description

Login fails for SSO users after the redirect.

## Definition of Done

- [ ] Work completed
"""


class TestQueries:

    def test_allowed_targets(self):
        assert allowed_targets(Stage.BACKLOG) == [Stage.TODO]
        assert set(allowed_targets(Stage.REVIEW)) == {Stage.IN_PROGRESS, Stage.DONE}

    def test_can_transition(self, agile_root, clock):
        issue = create_issue(agile_root, "task", "fix-login")
        assert can_transition(issue, Stage.BACKLOG)
        assert can_transition(issue, Stage.TODO)
        assert not can_transition(issue, Stage.IN_PROGRESS)


class TestMove:

    def test_same_stage_is_noop(self, agile_root, clock):
        issue = create_issue(agile_root, "task", "fix-login")
        result = move(issue, Stage.BACKLOG)
        assert not result.moved
        assert result.issue.path == issue.path

    def test_non_adjacent_rejected(self, agile_root, clock):
        issue = create_issue(agile_root, "task", "fix-login")
        with pytest.raises(InvalidTransition) as exc:
            move(issue, Stage.REVIEW)
        assert exc.value.allowed == ["2-todo"]
        assert exc.value.details() == ["Allowed from 1-backlog: 2-todo"]
        assert get_issue(agile_root, "fix-login").stage == Stage.BACKLOG

    def test_failed_gate_leaves_issue_in_place(self, agile_root, clock):
        issue = create_issue(agile_root, "task", "fix-login")
        with pytest.raises(ValidationFailed) as exc:
            move(issue, Stage.TODO)
        assert exc.value.missing == ["Description is empty"]
        assert get_issue(agile_root, "fix-login").stage == Stage.BACKLOG

    def test_forward_move_with_passing_gate(self, agile_root, write_issue):
        write_issue("fix-login", FILLED_TASK, issue_type="task")
        result = move(get_issue(agile_root, "fix-login"), Stage.TODO)
        assert result.moved
        assert result.from_stage == Stage.BACKLOG
        assert result.to_stage == Stage.TODO
        assert result.issue.path == agile_root / "2-todo" / "fix-login"
        assert result.issue.stage == Stage.TODO

    def test_backward_move_skips_gate(self, agile_root, write_issue):
        # Nothing here would pass the in-progress gate
        write_issue("fix-login", "# Fix login\n", stage="3-in-progress", issue_type="task")
        result = move(get_issue(agile_root, "fix-login"), Stage.TODO)
        assert result.moved
        assert get_issue(agile_root, "fix-login").stage == Stage.TODO

    def test_gate_options_forwarded(self, agile_root, write_issue):
        write_issue("fix-login", FILLED_TASK.replace("owner: unassigned", "owner: sam"),
                    stage="2-todo", issue_type="task")
        (agile_root / "2-todo" / "fix-login" / "technical-guidance.md").write_text(
            "---\nlast-updated: 2025-03-14T09:00:00\nstatus: draft\n---\n"
        )
        with pytest.raises(ValidationFailed) as exc:
            move(get_issue(agile_root, "fix-login"), Stage.IN_PROGRESS, owner_placeholders=["sam"])
        assert any("No owner" in m for m in exc.value.missing)

        result = move(get_issue(agile_root, "fix-login"), Stage.IN_PROGRESS)
        assert result.issue.stage == Stage.IN_PROGRESS


class TestStageProperties:

    @pytest.mark.parametrize("stage", list(Stage))
    def test_same_stage_noop_everywhere(self, write_issue, stage):
        issue_dir = write_issue("fix-login", "# Fix login\n", stage=stage.value, issue_type="task")
        before = (issue_dir / "task.md").read_text()
        result = move(load_issue(issue_dir), stage)
        assert not result.moved
        assert issue_dir.exists()
        assert (issue_dir / "task.md").read_text() == before

    @pytest.mark.parametrize("source,target", [
        (a, b) for a in Stage for b in Stage if abs(a.index - b.index) > 1
    ])
    def test_non_adjacent_rejected_everywhere(self, write_issue, source, target):
        issue_dir = write_issue("fix-login", FILLED_TASK, stage=source.value, issue_type="task")
        with pytest.raises(InvalidTransition):
            move(load_issue(issue_dir), target)
        assert issue_dir.exists()
