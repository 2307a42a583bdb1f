"""
agile discover - Walk a feature through discovery.

    agile discover <name> advance   One phase forward (synthesize -> complete validates BDD)
    agile discover <name> status    Current phase and what to write next
    agile discover <name> validate  Run the BDD validator without changing phase
    agile discover <name> reset     Back to not_started, content untouched
"""

from agileflow.issues.store import get_issue
from agileflow.lib.config import AgileConfig
from agileflow.lib.errors import ValidationFailed
from agileflow.lib.locking import issue_lock
from agileflow.workflow import discovery


def cmd_discover_advance(args, config: AgileConfig) -> int:
    with issue_lock(config.root, args.name, config.lock_timeout):
        issue = get_issue(config.root, args.name)
        result = discovery.advance(issue, config.min_scenarios)

    if result.errors:
        raise ValidationFailed(
            f"Discovery for '{issue.name}' cannot complete: BDD section is not ready",
            result.errors,
        )
    if not result.advanced:
        print(f"Discovery for '{issue.name}' is already complete")
        return 0

    print(f"Discovery: {result.from_phase} -> {result.to_phase}")
    print(f"  {discovery.PHASE_PROMPTS[result.to_phase]}")
    return 0


def cmd_discover_status(args, config: AgileConfig) -> int:
    issue = get_issue(config.root, args.name)
    status = discovery.get_status(issue)

    print(f"Discovery for '{issue.name}': {status.phase} ({status.step}/{status.total})")
    if status.next_phase:
        print(f"  Next phase: {status.next_phase}")
    print(f"  {status.prompt}")
    return 0


def cmd_discover_validate(args, config: AgileConfig) -> int:
    issue = get_issue(config.root, args.name)
    result = discovery.validate(issue, config.min_scenarios)

    if not result.valid:
        raise ValidationFailed(f"BDD section of '{issue.name}' is not ready", result.errors)

    print(f"BDD section valid: {result.scenario_count} scenario(s)")
    return 0


def cmd_discover_reset(args, config: AgileConfig) -> int:
    with issue_lock(config.root, args.name, config.lock_timeout):
        issue = discovery.reset(get_issue(config.root, args.name))

    print(f"Discovery for '{issue.name}' reset to {issue.discovery_phase}")
    return 0
