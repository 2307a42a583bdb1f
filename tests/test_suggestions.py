"""Tests for agileflow.lib.suggest module."""

from agileflow.lib.suggest import find_similar, suggest_issue, suggest_spec


class TestFindSimilar:

    def test_typo(self):
        assert find_similar("fix-logn", ["fix-login", "export-reports"]) == "fix-login"

    def test_case_insensitive(self):
        assert find_similar("FIX-LOGIN", ["fix-login"]) == "fix-login"

    def test_nothing_close(self):
        assert find_similar("zzz", ["fix-login", "export-reports"]) is None

    def test_no_candidates(self):
        assert find_similar("anything", []) is None


class TestSuggestions:

    def test_issue_across_stages(self, agile_root):
        (agile_root / "1-backlog" / "export-reports").mkdir(parents=True)
        (agile_root / "4-review" / "fix-login").mkdir(parents=True)
        (agile_root / "4-review" / ".fix-logins").mkdir()
        stage_dirs = [agile_root / s for s in ("1-backlog", "2-todo", "4-review")]
        assert suggest_issue("fix-logim", stage_dirs) == "fix-login"
        assert suggest_issue("export-report", stage_dirs) == "export-reports"

    def test_spec(self, tmp_path):
        (tmp_path / "parser.spec.md").write_text("")
        (tmp_path / "notes.md").write_text("")
        assert suggest_spec("parsers", tmp_path) == "parser"
        assert suggest_spec("note", tmp_path) is None
