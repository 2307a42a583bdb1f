"""
agile spec - Manage the specs of an issue.

Subcommands: list, add, status, delete, suggest.
"""

import logging

from agileflow.issues import guidance, specs
from agileflow.issues.store import get_issue
from agileflow.lib.config import AgileConfig
from agileflow.lib.errors import ValidationFailed
from agileflow.lib.locking import issue_lock

logger = logging.getLogger(__name__)

STATUS_ICONS = {
    "pending": "[ ]",
    "in-progress": "[~]",
    "in-review": "[?]",
    "completed": "[x]",
}


def _parse_dependencies(value: str | None) -> list[str]:
    if not value:
        return []
    return [dep.strip() for dep in value.split(",") if dep.strip()]


def cmd_spec_list(args, config: AgileConfig) -> int:
    """List specs with a completion summary."""
    issue = get_issue(config.root, args.issue)
    all_specs = specs.list_specs(issue.path)

    if not all_specs:
        print(f"No specs in '{issue.name}'")
        print(f"  agile spec add {issue.name} <name>")
        return 0

    for spec in all_specs:
        icon = STATUS_ICONS.get(spec.status, "[ ]")
        deps = f"  (after: {', '.join(spec.dependencies)})" if spec.dependencies else ""
        print(f"  {icon} {spec.name:<28} {spec.status:<12} {spec.title}{deps}")

    completion = specs.get_completion_status(all_specs)
    print()
    print(f"{completion.completed}/{completion.total} completed"
          f" ({completion.in_progress} in progress, {completion.pending} pending,"
          f" {completion.in_review} in review)")
    return 0


def cmd_spec_add(args, config: AgileConfig) -> int:
    """Add a pending spec to an issue."""
    with issue_lock(config.root, args.issue, config.lock_timeout):
        issue = get_issue(config.root, args.issue)
        spec = specs.add_spec(
            issue.path,
            args.name,
            title=args.title,
            dependencies=_parse_dependencies(args.depends_on),
        )

    print(f"Added spec '{spec.name}' to '{issue.name}'")
    print(f"  File: {spec.path}")
    return 0


def cmd_spec_status(args, config: AgileConfig) -> int:
    """Change a spec's status.

    Completing a spec requires the guidance document to have been touched
    since the spec was created; --force skips that check.
    """
    new_status = specs.parse_status(args.status)

    with issue_lock(config.root, args.issue, config.lock_timeout):
        issue = get_issue(config.root, args.issue)
        spec = specs.get_spec(issue.path, args.spec)

        if new_status == "completed":
            check = guidance.validate_for_spec_completion(issue.path, spec)
            if not check.valid:
                if not args.force:
                    raise ValidationFailed(
                        f"Cannot complete spec '{spec.name}'", [check.message]
                    )
                logger.warning(f"[SPEC] {issue.name}/{spec.name}: completing with --force: {check.message}")

        old_status = spec.status
        spec = specs.update_status(spec, new_status)

    print(f"Spec '{spec.name}': {old_status} -> {spec.status}")
    if spec.status == "completed":
        print(f"  Record what you learned: agile guidance update {issue.name} --note \"...\"")
    return 0


def cmd_spec_delete(args, config: AgileConfig) -> int:
    with issue_lock(config.root, args.issue, config.lock_timeout):
        issue = get_issue(config.root, args.issue)
        spec = specs.delete_spec(issue.path, args.spec)

    print(f"Deleted spec '{spec.name}' from '{issue.name}'")
    return 0


def cmd_spec_suggest(args, config: AgileConfig) -> int:
    """Print the spec to work on next."""
    issue = get_issue(config.root, args.issue)
    all_specs = specs.list_specs(issue.path)
    spec = specs.suggest_next_spec(all_specs)

    if spec is None:
        if specs.get_completion_status(all_specs).all_completed:
            print(f"All specs in '{issue.name}' are finished")
        else:
            print(f"No spec in '{issue.name}' is ready to start")
        return 0

    print(f"Next: {spec.name} ({spec.status})")
    print(f"  {spec.title}")
    if spec.status == "pending":
        print(f"  agile spec status {issue.name} {spec.name} in-progress")
    return 0
