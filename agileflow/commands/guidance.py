"""
agile guidance - Manage an issue's technical-guidance.md.

Subcommands:
    show      Print the guidance summary and stale specs
    update    Bump last-updated (creates the document if missing)
    validate  Check guidance freshness, optionally against one spec
    status    Set draft/active/finalized
"""

from agileflow.issues import guidance, specs
from agileflow.issues.store import get_issue
from agileflow.lib.config import AgileConfig
from agileflow.lib.errors import ValidationFailed
from agileflow.lib.locking import issue_lock


def cmd_guidance_show(args, config: AgileConfig) -> int:
    issue = get_issue(config.root, args.issue)
    doc = guidance.require_guidance(issue.path)
    stale = guidance.stale_specs(doc, specs.list_specs(issue.path))

    print(f"Guidance: {doc.path}")
    print(f"  Status:         {doc.status}")
    print(f"  Last updated:   {doc.last_updated or 'never'}")
    print(f"  Investigation:  {'yes' if doc.has_investigation_log else 'empty'}")
    print(f"  Open questions: {doc.open_questions}")
    if stale:
        print()
        print("Completed since last update:")
        for spec in stale:
            print(f"  - {spec.name} ({spec.completed})")
    return 0


def cmd_guidance_update(args, config: AgileConfig) -> int:
    with issue_lock(config.root, args.issue, config.lock_timeout):
        issue = get_issue(config.root, args.issue)
        if guidance.load_guidance(issue.path) is None:
            doc = guidance.create_guidance(issue.path, issue.title)
            print(f"Created {doc.path}")
            if args.note:
                doc = guidance.mark_updated(issue.path, args.note)
        else:
            doc = guidance.mark_updated(issue.path, args.note)

    print(f"Guidance for '{issue.name}' updated at {doc.last_updated}")
    return 0


def cmd_guidance_validate(args, config: AgileConfig) -> int:
    """Fail if the guidance is stale, or too old to complete the given spec."""
    issue = get_issue(config.root, args.issue)

    if args.spec:
        spec = specs.get_spec(issue.path, args.spec)
        check = guidance.validate_for_spec_completion(issue.path, spec)
        if not check.valid:
            raise ValidationFailed(f"Spec '{spec.name}' cannot be completed yet", [check.message])
        print(check.message)
        return 0

    doc = guidance.require_guidance(issue.path)
    stale = guidance.stale_specs(doc, specs.list_specs(issue.path))
    if stale:
        raise ValidationFailed(
            f"Technical guidance for '{issue.name}' is stale",
            [f"spec '{s.name}' completed {s.completed}, after last update {doc.last_updated}" for s in stale],
        )
    print("Technical guidance is up to date")
    return 0


def cmd_guidance_status(args, config: AgileConfig) -> int:
    with issue_lock(config.root, args.issue, config.lock_timeout):
        issue = get_issue(config.root, args.issue)
        doc = guidance.set_guidance_status(issue.path, args.status)

    print(f"Guidance for '{issue.name}' is now {doc.status}")
    return 0
