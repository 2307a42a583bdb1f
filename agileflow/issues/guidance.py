"""
Technical guidance document and staleness detection.

Each issue may carry one technical-guidance.md. Whenever a spec is completed
after the guidance was last touched, the guidance is considered stale: the
issue cannot enter review until someone records what was learned.

The check is temporal only. It detects that an update happened, not that the
update is relevant.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from agileflow.issues import templates
from agileflow.issues.models import GuidanceDoc, Spec
from agileflow.lib import frontmatter, mdparse, timeutil
from agileflow.lib.constants import GUIDANCE_FILE, GUIDANCE_STATUSES
from agileflow.lib.errors import AlreadyExists, GuidanceNotFound, MalformedInput
from agileflow.lib.frontmatter import Field

logger = logging.getLogger(__name__)

GUIDANCE_FIELDS = [
    Field("last-updated", kind="date", default=""),
    Field("status", kind="enum", default="draft", choices=GUIDANCE_STATUSES),
]

LOG_SECTION = "Investigation Log"
QUESTIONS_SECTION = "Open Questions"


@dataclass
class CompletionCheck:
    """Whether a spec may be marked completed."""
    valid: bool
    message: str


def guidance_path(issue_dir: Path) -> Path:
    return issue_dir / GUIDANCE_FILE


def _count_open_questions(section: Optional[str]) -> int:
    if section is None:
        return 0
    count = 0
    for item in mdparse.list_items(section):
        # Answered: checked off or struck through
        if item[:3].lower() == "[x]" or item.startswith("~~"):
            continue
        if item.startswith("[ ]"):
            item = item[3:]
        if mdparse.has_content(item):
            count += 1
    return count


def load_guidance(issue_dir: Path) -> Optional[GuidanceDoc]:
    """Decode technical-guidance.md, or None if the issue has none."""
    path = guidance_path(issue_dir)
    if not path.exists():
        return None

    text = path.read_text()
    fields = frontmatter.read_fields(GUIDANCE_FIELDS, text)
    body = frontmatter.strip_frontmatter(text)

    return GuidanceDoc(
        path=path,
        last_updated=fields["last-updated"],
        status=fields["status"],
        has_investigation_log=mdparse.has_content(mdparse.get_section(body, LOG_SECTION)),
        open_questions=_count_open_questions(mdparse.get_section(body, QUESTIONS_SECTION)),
    )


def require_guidance(issue_dir: Path) -> GuidanceDoc:
    guidance = load_guidance(issue_dir)
    if guidance is None:
        raise GuidanceNotFound(issue_dir.name)
    return guidance


def create_guidance(issue_dir: Path, title: str) -> GuidanceDoc:
    """Write a fresh guidance document stamped with the current time."""
    path = guidance_path(issue_dir)
    if path.exists():
        raise AlreadyExists(f"Issue '{issue_dir.name}' already has {GUIDANCE_FILE}")

    path.write_text(templates.render_guidance(title=title, last_updated=timeutil.now_iso()))
    logger.info(f"[GUIDANCE] {issue_dir.name}: created")
    return require_guidance(issue_dir)


def _append_log_entry(text: str, entry: str) -> str:
    """Append a list entry at the end of the Investigation Log section."""
    lines = text.splitlines()
    newline = frontmatter.detect_newline(text)
    all_headings = mdparse.headings(text)

    for idx, heading in enumerate(all_headings):
        if heading.title.strip().lower() != LOG_SECTION.lower():
            continue
        end = len(lines)
        for later in all_headings[idx + 1:]:
            if later.level <= heading.level:
                end = later.line_index
                break
        # Insert after the last non-blank line of the section
        insert_at = end
        while insert_at > heading.line_index + 1 and not lines[insert_at - 1].strip():
            insert_at -= 1
        new_lines = [entry]
        if insert_at == heading.line_index + 1:
            new_lines = ["", entry]
        if insert_at < len(lines) and lines[insert_at].strip():
            new_lines.append("")
        lines[insert_at:insert_at] = new_lines
        return newline.join(lines) + newline

    tail = ["", "", f"## {LOG_SECTION}", "", entry, ""]
    return text.rstrip("\r\n") + newline.join(tail)


def mark_updated(issue_dir: Path, note: Optional[str] = None) -> GuidanceDoc:
    """Bump last-updated to now, optionally logging a note."""
    guidance = require_guidance(issue_dir)
    now = timeutil.now_iso()

    text = frontmatter.read_document(guidance.path)
    if note:
        text = _append_log_entry(text, f"- **{now}** {note.strip()}")
    text = frontmatter.write_field(text, "last-updated", now)
    frontmatter.write_document(guidance.path, text)

    logger.info(f"[GUIDANCE] {issue_dir.name}: last-updated -> {now}")
    return require_guidance(issue_dir)


def set_guidance_status(issue_dir: Path, status: str) -> GuidanceDoc:
    status = status.strip().lower()
    if status not in GUIDANCE_STATUSES:
        raise MalformedInput(f"Invalid guidance status '{status}'", GUIDANCE_STATUSES)

    guidance = require_guidance(issue_dir)
    frontmatter.update_document(guidance.path, {"status": status})
    logger.info(f"[GUIDANCE] {issue_dir.name}: status {guidance.status} -> {status}")
    return require_guidance(issue_dir)


def stale_specs(guidance: Optional[GuidanceDoc], specs: list[Spec]) -> list[Spec]:
    """Completed specs whose completion is newer than the guidance."""
    completed = [s for s in specs if s.status == "completed" and s.completed]
    if guidance is None:
        return completed
    return [s for s in completed if s.completed > guidance.last_updated]


def needs_update(issue_dir: Path, specs: list[Spec]) -> bool:
    """True if there is no guidance, or any spec was completed after it was last updated."""
    guidance = load_guidance(issue_dir)
    if guidance is None:
        return True
    return bool(stale_specs(guidance, specs))


def validate_for_spec_completion(issue_dir: Path, spec: Spec) -> CompletionCheck:
    """A spec may only be completed once the guidance was touched after the spec was created."""
    guidance = load_guidance(issue_dir)
    if guidance is None:
        return CompletionCheck(
            valid=False,
            message=f"Issue '{issue_dir.name}' has no {GUIDANCE_FILE}; create it before completing specs",
        )

    if guidance.last_updated >= spec.created:
        return CompletionCheck(valid=True, message="Technical guidance is up to date")

    return CompletionCheck(
        valid=False,
        message=(
            f"Technical guidance last updated {guidance.last_updated or 'never'}, before spec "
            f"'{spec.name}' was created ({spec.created}). Record what you learned with "
            f"'agile guidance update {issue_dir.name}' first"
        ),
    )
