"""
Issue folders on disk.

Layout:
  agile/<stage>/<name>/<type>.md
  agile/<stage>/<name>/technical-guidance.md
  agile/<stage>/<name>/<spec>.spec.md
  agile/archive/<name>-<date>/

The stage directory an issue sits in is its stage; there is no index.
"""

import errno
import logging
import os
import shutil
from pathlib import Path

from agileflow.issues import templates
from agileflow.issues.models import Issue, Stage, STAGE_ORDER
from agileflow.lib import frontmatter, timeutil
from agileflow.lib.constants import (
    ARCHIVE_DIR,
    ISSUE_TYPES,
    MAX_NAME_LEN,
    NAME_PATTERN,
)
from agileflow.lib.errors import AlreadyExists, IssueNotFound, MalformedInput, NotFound
from agileflow.lib.frontmatter import Field
from agileflow.lib.suggest import suggest_issue

logger = logging.getLogger(__name__)

ISSUE_FIELDS = [
    Field("title", default=""),
    Field("owner", default=""),
    Field("created", kind="date", default=timeutil.today_iso),
    Field("discovery_phase"),
]


def validate_name(name: str, what: str = "issue") -> None:
    """Raise MalformedInput unless name is a lowercase slug."""
    if not NAME_PATTERN.match(name) or len(name) > MAX_NAME_LEN:
        raise MalformedInput(
            f"Invalid {what} name '{name}': use lowercase letters, digits and hyphens "
            f"(max {MAX_NAME_LEN} chars)"
        )


def stage_dir(agile_root: Path, stage: Stage) -> Path:
    return agile_root / stage.value


def detect_type(issue_dir: Path) -> str | None:
    """Issue type from whichever main document exists."""
    for issue_type in ISSUE_TYPES:
        if (issue_dir / f"{issue_type}.md").exists():
            return issue_type
    return None


def load_issue(issue_dir: Path) -> Issue:
    """Decode an issue folder. The stage comes from the parent directory name."""
    stage = None
    for candidate in Stage:
        if issue_dir.parent.name == candidate.value:
            stage = candidate
            break
    if stage is None:
        raise NotFound(f"{issue_dir} is not inside a stage directory")

    issue_type = detect_type(issue_dir)
    if issue_type is None:
        raise NotFound(f"Issue '{issue_dir.name}' has no feature.md, bug.md or task.md")

    text = (issue_dir / f"{issue_type}.md").read_text()
    fields = frontmatter.read_fields(ISSUE_FIELDS, text)

    discovery_phase = None
    if issue_type == "feature":
        discovery_phase = fields["discovery_phase"] or "not_started"

    return Issue(
        name=issue_dir.name,
        type=issue_type,
        stage=stage,
        path=issue_dir,
        title=fields["title"] or issue_dir.name,
        owner=fields["owner"],
        created=fields["created"],
        discovery_phase=discovery_phase,
    )


def find_issue_dir(agile_root: Path, name: str) -> Path:
    """Locate an issue folder in any stage.

    Raises:
        IssueNotFound: With a "did you mean" suggestion when one is close.
    """
    for stage in STAGE_ORDER:
        candidate = stage_dir(agile_root, stage) / name
        if candidate.is_dir():
            return candidate

    stage_dirs = [stage_dir(agile_root, s) for s in STAGE_ORDER]
    raise IssueNotFound(name, suggest_issue(name, stage_dirs))


def get_issue(agile_root: Path, name: str) -> Issue:
    return load_issue(find_issue_dir(agile_root, name))


def list_issues(agile_root: Path, stage: Stage | None = None) -> list[Issue]:
    """All issues, ordered by stage then name.

    Unreadable folders and folders whose name is not a valid slug are skipped.
    """
    stages = [stage] if stage else STAGE_ORDER
    issues = []
    for s in stages:
        directory = stage_dir(agile_root, s)
        if not directory.exists():
            continue
        for d in sorted(directory.iterdir()):
            if not d.is_dir() or d.name.startswith("."):
                continue
            if not NAME_PATTERN.match(d.name) or len(d.name) > MAX_NAME_LEN:
                logger.warning(f"[STORE] Skipping {d}: '{d.name}' is not a valid issue name")
                continue
            try:
                issues.append(load_issue(d))
            except (NotFound, OSError) as e:
                logger.warning(f"[STORE] Skipping {d}: {e}")
    return issues


def create_issue(
    agile_root: Path,
    issue_type: str,
    name: str,
    title: str | None = None,
    owner: str = "unassigned",
) -> Issue:
    """Create a new issue in 1-backlog from the type's template."""
    if issue_type not in ISSUE_TYPES:
        raise MalformedInput(f"Invalid issue type '{issue_type}'", ISSUE_TYPES)
    validate_name(name)

    try:
        existing = find_issue_dir(agile_root, name)
    except IssueNotFound:
        existing = None
    if existing is not None:
        raise AlreadyExists(f"Issue '{name}' already exists in {existing.parent.name}")

    issue_dir = stage_dir(agile_root, Stage.BACKLOG) / name
    issue_dir.mkdir(parents=True)

    content = templates.render_issue(
        issue_type,
        title=title or name.replace("-", " ").capitalize(),
        owner=owner,
        created=timeutil.today_iso(),
    )
    (issue_dir / f"{issue_type}.md").write_text(content)

    logger.info(f"[STORE] Created {issue_type} '{name}' in {Stage.BACKLOG.value}")
    return load_issue(issue_dir)


def update_issue_fields(issue: Issue, updates: dict) -> Issue:
    """Rewrite frontmatter keys of the issue's main document."""
    frontmatter.update_document(issue.doc_path, updates)
    return load_issue(issue.path)


def set_owner(issue: Issue, owner: str) -> Issue:
    owner = owner.strip()
    if not owner:
        raise MalformedInput("Owner must not be empty")
    return update_issue_fields(issue, {"owner": owner})


def _same_tree(src: Path, dest: Path) -> bool:
    src_files = sorted(p.relative_to(src) for p in src.rglob("*") if p.is_file())
    dest_files = sorted(p.relative_to(dest) for p in dest.rglob("*") if p.is_file())
    if src_files != dest_files:
        return False
    return all((src / rel).stat().st_size == (dest / rel).stat().st_size for rel in src_files)


def relocate(src: Path, dest_parent: Path, new_name: str | None = None) -> Path:
    """Move an issue folder into dest_parent.

    The destination directory is created first so a failure never leaves the
    issue unreachable. os.rename is atomic on one filesystem; across devices
    (EXDEV) the folder is copied, verified and only then removed.
    """
    dest_parent.mkdir(parents=True, exist_ok=True)
    dest = dest_parent / (new_name or src.name)
    if dest.exists():
        raise AlreadyExists(f"Destination already exists: {dest}")

    try:
        os.rename(src, dest)
        return dest
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise

    logger.warning(f"[STORE] {src} and {dest_parent} are on different devices, copying")
    shutil.copytree(src, dest)
    if not _same_tree(src, dest):
        shutil.rmtree(dest)
        raise OSError(f"Copy of {src} to {dest} could not be verified; source left in place")
    shutil.rmtree(src)
    return dest


def archive_issue(agile_root: Path, name: str) -> Path:
    """Move an issue to agile/archive/<name>-<date>/."""
    issue_dir = find_issue_dir(agile_root, name)
    archive_name = f"{name}-{timeutil.today_iso()}"
    dest = relocate(issue_dir, agile_root / ARCHIVE_DIR, archive_name)
    logger.info(f"[STORE] Archived '{name}' to {dest}")
    return dest


def delete_issue(agile_root: Path, name: str) -> Path:
    """Permanently remove an issue folder."""
    issue_dir = find_issue_dir(agile_root, name)
    shutil.rmtree(issue_dir)
    logger.info(f"[STORE] Deleted '{name}' from {issue_dir.parent.name}")
    return issue_dir
