"""
agile create - Create a new issue in 1-backlog.

Creates agile/1-backlog/<name>/<type>.md from the type's template.
"""

from agileflow.issues.store import create_issue
from agileflow.lib.config import AgileConfig


def cmd_create(args, config: AgileConfig) -> int:
    """Create a new issue."""
    issue = create_issue(
        config.root,
        args.type,
        args.name,
        title=args.title,
        owner=args.owner or "unassigned",
    )

    print(f"Created {issue.type} '{issue.name}' in {issue.stage.value}")
    print(f"  Document: {issue.doc_path}")
    if issue.type == "feature":
        print()
        print("Next: work through discovery before moving to 2-todo")
        print(f"  agile discover {issue.name} advance")
    return 0
