"""Tests for agileflow.lib.config module."""

import logging

import pytest

from agileflow.lib.config import AgileConfig, ConfigError, find_agile_root, load_config
from agileflow.workflow.bdd import DEFAULT_MIN_SCENARIOS


class TestFindAgileRoot:

    def test_from_project_root(self, agile_root):
        assert find_agile_root(agile_root.parent) == agile_root.resolve()

    def test_from_nested_directory(self, agile_root):
        nested = agile_root.parent / "src" / "pkg"
        nested.mkdir(parents=True)
        assert find_agile_root(nested) == agile_root.resolve()

    def test_from_inside_agile(self, agile_root):
        issue_dir = agile_root / "2-todo" / "fix-login"
        issue_dir.mkdir(parents=True)
        assert find_agile_root(issue_dir) == agile_root.resolve()

    def test_missing(self, tmp_path):
        with pytest.raises(ConfigError) as exc:
            find_agile_root(tmp_path)
        assert exc.value.exit_code == 2


class TestLoadConfig:

    def test_defaults_without_file(self, agile_root):
        config = load_config(agile_root)
        assert config == AgileConfig(root=agile_root)
        assert config.lock_timeout == 10
        assert config.min_scenarios == 2 == DEFAULT_MIN_SCENARIOS
        assert "unassigned" in config.owner_placeholders

    def test_values(self, agile_root):
        (agile_root / "config.yaml").write_text(
            "lock_timeout: 3\nmin_scenarios: 1\nowner_placeholders: [Nobody, TBD]\n"
        )
        config = load_config(agile_root)
        assert config.lock_timeout == 3
        assert config.min_scenarios == 1
        assert config.owner_placeholders == ["nobody", "tbd"]

    def test_empty_file(self, agile_root):
        (agile_root / "config.yaml").write_text("# nothing yet\n")
        assert load_config(agile_root) == AgileConfig(root=agile_root)

    def test_invalid_yaml_falls_back(self, agile_root, caplog):
        (agile_root / "config.yaml").write_text("lock_timeout: [unclosed\n")
        with caplog.at_level(logging.WARNING):
            config = load_config(agile_root)
        assert config.lock_timeout == 10
        assert "Failed to parse" in caplog.text

    @pytest.mark.parametrize("content", [
        "min_scenarios: 0\n",
        "lock_timeout: soon\n",
        "colour: blue\n",
        "- just\n- a list\n",
    ])
    def test_schema_violations(self, agile_root, content):
        (agile_root / "config.yaml").write_text(content)
        with pytest.raises(ConfigError) as exc:
            load_config(agile_root)
        assert "[config]" in str(exc.value)
