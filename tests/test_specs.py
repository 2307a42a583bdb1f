"""Tests for agileflow.issues.specs module."""

import logging

import pytest

from agileflow.issues import specs
from agileflow.issues.store import create_issue
from agileflow.lib.errors import AlreadyExists, MalformedInput, SpecNotFound


@pytest.fixture
def issue_dir(agile_root, clock):
    return create_issue(agile_root, "task", "fix-login").path


class TestAddSpec:

    def test_creates_pending_spec(self, issue_dir):
        spec = specs.add_spec(issue_dir, "parser", title="Parse tokens")
        assert spec.path == issue_dir / "parser.spec.md"
        assert spec.status == "pending"
        assert spec.created == "2025-03-14"
        assert spec.completed is None
        assert spec.title == "Parse tokens"
        assert spec.dependencies == []

    def test_dependencies_recorded(self, issue_dir):
        specs.add_spec(issue_dir, "parser")
        spec = specs.add_spec(issue_dir, "storage", dependencies=["parser"])
        assert spec.dependencies == ["parser"]

    def test_missing_dependency_warns(self, issue_dir, caplog):
        with caplog.at_level(logging.WARNING):
            spec = specs.add_spec(issue_dir, "storage", dependencies=["parser"])
        assert spec.dependencies == ["parser"]
        assert "dependency 'parser' does not exist" in caplog.text

    def test_duplicate_rejected(self, issue_dir):
        specs.add_spec(issue_dir, "parser")
        with pytest.raises(AlreadyExists):
            specs.add_spec(issue_dir, "parser")

    @pytest.mark.parametrize("name", ["Parser", "-parser", "parser_v2", "a/b", ""])
    def test_invalid_name_rejected(self, issue_dir, name):
        with pytest.raises(MalformedInput):
            specs.add_spec(issue_dir, name)


class TestUpdateStatus:

    def test_completed_sets_timestamp(self, issue_dir):
        spec = specs.add_spec(issue_dir, "parser")
        spec = specs.update_status(spec, "completed")
        assert spec.status == "completed"
        assert spec.completed == "2025-03-14T09:01:00"

    def test_leaving_completed_clears_timestamp(self, issue_dir):
        spec = specs.update_status(specs.add_spec(issue_dir, "parser"), "completed")
        spec = specs.update_status(spec, "in-progress")
        assert spec.status == "in-progress"
        assert spec.completed is None

    def test_recompletion_gets_fresh_stamp(self, issue_dir):
        spec = specs.update_status(specs.add_spec(issue_dir, "parser"), "completed")
        first = spec.completed
        spec = specs.update_status(specs.update_status(spec, "in-review"), "completed")
        assert spec.completed > first

    def test_non_completed_status_never_has_timestamp(self, issue_dir):
        spec = specs.add_spec(issue_dir, "parser")
        for status in ("in-progress", "in-review", "pending"):
            spec = specs.update_status(spec, status)
            assert spec.completed is None

    def test_invalid_status(self, issue_dir):
        spec = specs.add_spec(issue_dir, "parser")
        with pytest.raises(MalformedInput) as exc:
            specs.update_status(spec, "done")
        assert "completed" in exc.value.accepted


class TestQueries:

    def test_list_orders_by_status_then_name(self, issue_dir):
        for name in ("a", "b", "c", "d"):
            specs.add_spec(issue_dir, name)
        specs.update_status(specs.get_spec(issue_dir, "a"), "completed")
        specs.update_status(specs.get_spec(issue_dir, "d"), "in-progress")
        assert [s.name for s in specs.list_specs(issue_dir)] == ["d", "b", "c", "a"]

    def test_get_spec_suggests(self, issue_dir):
        specs.add_spec(issue_dir, "parser")
        with pytest.raises(SpecNotFound) as exc:
            specs.get_spec(issue_dir, "parsr")
        assert exc.value.details() == ["Did you mean 'parser'?"]

    def test_delete(self, issue_dir):
        specs.add_spec(issue_dir, "parser")
        specs.delete_spec(issue_dir, "parser")
        assert specs.list_specs(issue_dir) == []
        with pytest.raises(SpecNotFound):
            specs.delete_spec(issue_dir, "parser")


class TestCompletionStatus:

    def test_empty_is_not_completed(self):
        status = specs.get_completion_status([])
        assert status.total == 0
        assert not status.all_completed

    def test_in_review_counts_as_finished(self, issue_dir):
        specs.update_status(specs.add_spec(issue_dir, "a"), "completed")
        specs.update_status(specs.add_spec(issue_dir, "b"), "in-review")
        status = specs.get_completion_status(specs.list_specs(issue_dir))
        assert status.completed == 1
        assert status.in_review == 1
        assert status.all_completed

    def test_pending_blocks(self, issue_dir):
        specs.update_status(specs.add_spec(issue_dir, "a"), "completed")
        specs.add_spec(issue_dir, "b")
        status = specs.get_completion_status(specs.list_specs(issue_dir))
        assert status.pending == 1
        assert not status.all_completed

    def test_idempotent(self, issue_dir):
        specs.update_status(specs.add_spec(issue_dir, "a"), "completed")
        specs.add_spec(issue_dir, "b")
        first = specs.get_completion_status(specs.list_specs(issue_dir))
        assert specs.get_completion_status(specs.list_specs(issue_dir)) == first


class TestSuggestNext:

    def test_in_progress_first(self, issue_dir):
        specs.add_spec(issue_dir, "a")
        specs.update_status(specs.add_spec(issue_dir, "b"), "in-progress")
        assert specs.suggest_next_spec(specs.list_specs(issue_dir)).name == "b"

    def test_pending_with_done_dependencies(self, issue_dir):
        specs.add_spec(issue_dir, "a")
        specs.add_spec(issue_dir, "b", dependencies=["a"])
        assert specs.suggest_next_spec(specs.list_specs(issue_dir)).name == "a"

        specs.update_status(specs.get_spec(issue_dir, "a"), "completed")
        assert specs.suggest_next_spec(specs.list_specs(issue_dir)).name == "b"

    def test_blocked_dependencies(self, issue_dir):
        specs.add_spec(issue_dir, "b", dependencies=["a"])
        assert specs.suggest_next_spec(specs.list_specs(issue_dir)) is None
