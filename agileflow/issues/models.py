"""
Data models for issues, specs and guidance documents.

Nothing here is cached between invocations: every model is decoded from disk
on demand and the folder path stays the source of truth.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from agileflow.lib import frontmatter


class Stage(Enum):
    """Workflow stages, in order. Values are the stage directory names."""

    BACKLOG = "1-backlog"
    TODO = "2-todo"
    IN_PROGRESS = "3-in-progress"
    REVIEW = "4-review"
    DONE = "5-done"

    @property
    def index(self) -> int:
        return STAGE_ORDER.index(self)

    @property
    def short_name(self) -> str:
        return self.value.split("-", 1)[1]


STAGE_ORDER = list(Stage)


def parse_stage(value: str | None) -> Stage | None:
    """Parse "2-todo", "todo" or "2" into a Stage. Returns None if unknown."""
    if value is None:
        return None
    value = value.strip().lower()
    for stage in Stage:
        if value in (stage.value, stage.short_name, stage.value.split("-", 1)[0]):
            return stage
    return None


@dataclass
class Issue:
    """An issue folder: agile/<stage>/<name>/<type>.md"""
    name: str
    type: str  # feature, bug, task
    stage: Stage
    path: Path
    title: str
    owner: str
    created: str
    discovery_phase: Optional[str] = None  # features only

    @property
    def doc_path(self) -> Path:
        return self.path / f"{self.type}.md"

    def read_doc(self) -> str:
        return frontmatter.read_document(self.doc_path)

    def to_dict(self) -> dict:
        data = {
            "name": self.name,
            "type": self.type,
            "stage": self.stage.value,
            "title": self.title,
            "owner": self.owner,
            "created": self.created,
            "path": str(self.path),
        }
        if self.type == "feature":
            data["discovery_phase"] = self.discovery_phase
        return data


@dataclass
class Spec:
    """A <name>.spec.md file inside an issue folder."""
    name: str
    path: Path
    title: str
    status: str  # pending, in-progress, in-review, completed
    created: str
    completed: Optional[str] = None  # set iff status == completed
    dependencies: list[str] = field(default_factory=list)


@dataclass
class GuidanceDoc:
    """technical-guidance.md for an issue."""
    path: Path
    last_updated: str
    status: str  # draft, active, finalized
    has_investigation_log: bool
    open_questions: int


@dataclass
class CompletionStatus:
    total: int
    pending: int
    in_progress: int
    in_review: int
    completed: int
    all_completed: bool


@dataclass
class ValidationResult:
    """Outcome of a readiness gate. missing lists every failed condition."""
    valid: bool
    missing: list[str] = field(default_factory=list)

    @classmethod
    def from_missing(cls, missing: list[str]) -> "ValidationResult":
        return cls(valid=not missing, missing=list(missing))
