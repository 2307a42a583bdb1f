"""
Spec tracker.

Specs are the small, independently completable units of an issue, stored as
<name>.spec.md next to the issue document. Status and completion date live in
frontmatter and are only changed together through update_status().
"""

import logging
from pathlib import Path
from typing import Optional

from agileflow.issues import templates
from agileflow.issues.models import CompletionStatus, Spec
from agileflow.issues.store import validate_name
from agileflow.lib import frontmatter, mdparse, timeutil
from agileflow.lib.constants import SPEC_STATUSES, SPEC_SUFFIX
from agileflow.lib.errors import AlreadyExists, MalformedInput, SpecNotFound
from agileflow.lib.frontmatter import Field
from agileflow.lib.suggest import suggest_spec

logger = logging.getLogger(__name__)

SPEC_FIELDS = [
    Field("status", kind="enum", default="pending", choices=SPEC_STATUSES),
    Field("created", kind="date", default=timeutil.today_iso),
    Field("completed", kind="date", default=None),
    Field("dependencies", kind="list", default=()),
]

# Actionable work first
STATUS_ORDER = {
    "in-progress": 0,
    "pending": 1,
    "in-review": 2,
    "completed": 3,
}


def spec_path(issue_dir: Path, name: str) -> Path:
    return issue_dir / f"{name}{SPEC_SUFFIX}"


def _spec_title(text: str, name: str) -> str:
    for heading in mdparse.headings(frontmatter.strip_frontmatter(text)):
        if heading.level == 1:
            return heading.title
    return name


def load_spec(path: Path) -> Spec:
    text = path.read_text()
    fields = frontmatter.read_fields(SPEC_FIELDS, text)
    name = path.name[:-len(SPEC_SUFFIX)]
    return Spec(
        name=name,
        path=path,
        title=_spec_title(text, name),
        status=fields["status"],
        created=fields["created"],
        completed=fields["completed"],
        dependencies=fields["dependencies"],
    )


def list_specs(issue_dir: Path) -> list[Spec]:
    """All specs of an issue: in-progress, pending, in-review, completed, then by name."""
    specs = [load_spec(p) for p in issue_dir.glob(f"*{SPEC_SUFFIX}") if p.is_file()]
    return sorted(specs, key=lambda s: (STATUS_ORDER.get(s.status, len(STATUS_ORDER)), s.name))


def get_spec(issue_dir: Path, name: str) -> Spec:
    path = spec_path(issue_dir, name)
    if not path.exists():
        raise SpecNotFound(issue_dir.name, name, suggest_spec(name, issue_dir))
    return load_spec(path)


def parse_status(value: str) -> str:
    status = value.strip().lower()
    if status not in SPEC_STATUSES:
        raise MalformedInput(f"Invalid spec status '{value}'", SPEC_STATUSES)
    return status


def add_spec(
    issue_dir: Path,
    name: str,
    title: Optional[str] = None,
    dependencies: Optional[list[str]] = None,
) -> Spec:
    """Create <name>.spec.md with status pending."""
    validate_name(name, what="spec")
    path = spec_path(issue_dir, name)
    if path.exists():
        raise AlreadyExists(f"Spec '{name}' already exists in issue '{issue_dir.name}'")

    dependencies = dependencies or []
    for dep in dependencies:
        if not spec_path(issue_dir, dep).exists():
            # Advisory only
            logger.warning(f"[SPEC] {issue_dir.name}/{name}: dependency '{dep}' does not exist yet")

    path.write_text(templates.render_spec(
        title=title or name.replace("-", " ").capitalize(),
        created=timeutil.today_iso(),
        dependencies=dependencies,
    ))
    logger.info(f"[SPEC] {issue_dir.name}: added '{name}'")
    return load_spec(path)


def update_status(spec: Spec, new_status: str) -> Spec:
    """Set a spec's status, keeping `completed` in sync.

    Entering completed stamps `completed` with the current time (a re-completion
    gets a fresh stamp); any other status clears it.
    """
    new_status = parse_status(new_status)
    completed = timeutil.now_iso() if new_status == "completed" else None

    frontmatter.update_document(spec.path, {"status": new_status, "completed": completed})

    logger.info(f"[SPEC] {spec.path.parent.name}/{spec.name}: {spec.status} -> {new_status}")
    return load_spec(spec.path)


def delete_spec(issue_dir: Path, name: str) -> Spec:
    spec = get_spec(issue_dir, name)
    spec.path.unlink()
    logger.info(f"[SPEC] {issue_dir.name}: deleted '{name}'")
    return spec


def get_completion_status(specs: list[Spec]) -> CompletionStatus:
    """Aggregate counts. all_completed needs at least one spec and none pending or in progress."""
    counts = {status: 0 for status in SPEC_STATUSES}
    for spec in specs:
        counts[spec.status] = counts.get(spec.status, 0) + 1

    # in-review specs are finished work awaiting sign-off in the review stage
    unfinished = counts["pending"] + counts["in-progress"]
    return CompletionStatus(
        total=len(specs),
        pending=counts["pending"],
        in_progress=counts["in-progress"],
        in_review=counts["in-review"],
        completed=counts["completed"],
        all_completed=len(specs) > 0 and unfinished == 0,
    )


def suggest_next_spec(specs: list[Spec]) -> Optional[Spec]:
    """What to work on next: an in-progress spec, else a pending one whose dependencies are done."""
    for spec in specs:
        if spec.status == "in-progress":
            return spec

    done = {s.name for s in specs if s.status == "completed"}
    for spec in specs:
        if spec.status == "pending" and all(dep in done for dep in spec.dependencies):
            return spec
    return None
