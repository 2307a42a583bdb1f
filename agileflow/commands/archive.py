"""
agile archive - Move an issue to agile/archive/.
agile delete - Permanently delete an issue.
"""

from agileflow.issues.store import archive_issue, delete_issue
from agileflow.lib.config import AgileConfig
from agileflow.lib.errors import MalformedInput
from agileflow.lib.locking import issue_lock


def cmd_archive(args, config: AgileConfig) -> int:
    """Archive an issue from any stage."""
    with issue_lock(config.root, args.name, config.lock_timeout):
        dest = archive_issue(config.root, args.name)

    print(f"Archived '{args.name}' to {dest}")
    return 0


def cmd_delete(args, config: AgileConfig) -> int:
    """Permanently delete an issue."""
    if not args.confirm:
        raise MalformedInput("--confirm required for permanent deletion")

    with issue_lock(config.root, args.name, config.lock_timeout):
        path = delete_issue(config.root, args.name)

    print(f"Issue '{args.name}' permanently deleted ({path})")
    return 0
