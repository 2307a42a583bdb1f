"""Shared constants for agileflow."""

import re

# Issue / spec name validation
NAME_PATTERN = re.compile(r'^[a-z0-9][a-z0-9-]*$')
MAX_NAME_LEN = 64

AGILE_DIR = "agile"
ARCHIVE_DIR = "archive"
LOCKS_DIR = ".locks"
CONFIG_FILE = "config.yaml"

ISSUE_TYPES = ("feature", "bug", "task")

GUIDANCE_FILE = "technical-guidance.md"
SPEC_SUFFIX = ".spec.md"

SPEC_STATUSES = ("pending", "in-progress", "in-review", "completed")
GUIDANCE_STATUSES = ("draft", "active", "finalized")

# Owner values that count as "nobody"
DEFAULT_OWNER_PLACEHOLDERS = ("", "unassigned", "[unassigned]", "tbd", "none", "@owner", "<owner>")
