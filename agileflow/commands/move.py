"""
agile move - Move an issue to an adjacent stage.
agile owner - Assign an issue's owner.
"""

from agileflow.issues.models import STAGE_ORDER, parse_stage
from agileflow.issues.store import get_issue, set_owner
from agileflow.lib.config import AgileConfig
from agileflow.lib.errors import MalformedInput
from agileflow.lib.locking import issue_lock
from agileflow.workflow.state_machine import move


def cmd_move(args, config: AgileConfig) -> int:
    """Move an issue, enforcing adjacency and the target stage's gate."""
    target = parse_stage(args.stage)
    if target is None:
        raise MalformedInput(f"Unknown stage '{args.stage}'", [s.value for s in STAGE_ORDER])

    with issue_lock(config.root, args.name, config.lock_timeout):
        issue = get_issue(config.root, args.name)
        result = move(
            issue,
            target,
            min_scenarios=config.min_scenarios,
            owner_placeholders=config.owner_placeholders,
        )

    if not result.moved:
        print(f"'{issue.name}' is already in {target.value}")
    else:
        print(f"Moved '{issue.name}': {result.from_stage.value} -> {result.to_stage.value}")
    return 0


def cmd_owner(args, config: AgileConfig) -> int:
    """Set the owner field of an issue."""
    with issue_lock(config.root, args.name, config.lock_timeout):
        issue = set_owner(get_issue(config.root, args.name), args.owner)

    print(f"Owner of '{issue.name}' set to {issue.owner}")
    return 0
