"""Shared fixtures: a temporary agile/ tree and a controllable clock."""

from datetime import datetime, timedelta
from unittest.mock import patch

import pytest

VALID_FEATURE = """---
title: Export reports
type: feature
owner: alice
created: 2025-03-01
discovery_phase: not_started
---

# Export reports

## Description

Let analysts export any report as CSV.

## Discovery

### User Persona

Analysts who share numbers with finance every week.

### Problem Statement

Copying tables out of the browser by hand is slow and error prone.

### BDD Scenarios

```gherkin
Feature: Export reports

  Scenario: Export a populated report
    Given a report with 3 rows
    When the analyst exports it as CSV
    Then a file with 3 data rows is downloaded
    And the header row names every column

  Scenario: Export an empty report
    Given a report with no rows
    When the analyst exports it as CSV
    Then a file with only the header row is downloaded
```

### Out of Scope

- PDF export

### Assumptions

- Reports fit in memory

## Definition of Done

- [ ] All specs completed
- [ ] Tests passing
"""


class FakeClock:
    """Advances one minute on every now_iso() call so stamps strictly increase."""

    def __init__(self, start: datetime):
        self.current = start

    def now_iso(self) -> str:
        self.current += timedelta(minutes=1)
        return self.current.isoformat(timespec="seconds")

    def today_iso(self) -> str:
        return self.current.date().isoformat()


@pytest.fixture
def agile_root(tmp_path):
    root = tmp_path / "agile"
    root.mkdir()
    return root


@pytest.fixture
def clock():
    fake = FakeClock(datetime(2025, 3, 14, 9, 0, 0))
    with patch("agileflow.lib.timeutil.now_iso", fake.now_iso), \
            patch("agileflow.lib.timeutil.today_iso", fake.today_iso):
        yield fake


@pytest.fixture
def feature_text():
    return VALID_FEATURE


@pytest.fixture
def write_issue(agile_root):
    """Write a raw issue document into a stage directory and return its folder."""
    def _write(name, text, stage="1-backlog", issue_type="feature"):
        issue_dir = agile_root / stage / name
        issue_dir.mkdir(parents=True)
        (issue_dir / f"{issue_type}.md").write_text(text)
        return issue_dir
    return _write
