"""Stage moves with adjacency checks and readiness gates.

Thin wrapper around the FSM in fsm.py. This module provides:
- move(): destination-based API that maps to FSM triggers and runs the gate
- allowed_targets() / can_transition() for queries

Usage:
    from agileflow.workflow.state_machine import move
    from agileflow.issues.models import Stage

    result = move(issue, Stage.TODO)
"""

import logging
from dataclasses import dataclass
from typing import Optional

from agileflow.issues.models import Issue, Stage, parse_stage
from agileflow.issues.store import load_issue
from agileflow.lib.errors import InvalidTransition, ValidationFailed
from agileflow.workflow.fsm import FORWARD_TRIGGERS, TRIGGER_FOR, IssueFSM, neighbors
from agileflow.workflow.gates import IssueAnalysis, analyze_issue, check_gate

logger = logging.getLogger(__name__)


@dataclass
class MoveResult:
    issue: Issue
    from_stage: Stage
    to_stage: Stage
    moved: bool  # False for a same-stage no-op


def allowed_targets(stage: Stage) -> list[Stage]:
    return [parse_stage(value) for value in neighbors(stage.value)]


def can_transition(issue: Issue, target: Stage) -> bool:
    """True if target is the current stage or adjacent to it. Gates are not consulted."""
    if issue.stage == target:
        return True
    return (issue.stage.value, target.value) in TRIGGER_FOR


def move(
    issue: Issue,
    target: Stage,
    analysis: Optional[IssueAnalysis] = None,
    **analysis_options,
) -> MoveResult:
    """Move an issue to an adjacent stage.

    Forward moves must pass the target stage's gate; backward moves never
    need to. Moving to the current stage is a no-op.

    Raises:
        InvalidTransition: If target is not adjacent to the current stage
        ValidationFailed: If the gate for a forward move fails
    """
    current = issue.stage

    if current == target:
        logger.debug(f"[STAGE] {issue.name}: already in {target.value}, no-op")
        return MoveResult(issue=issue, from_stage=current, to_stage=target, moved=False)

    trigger = TRIGGER_FOR.get((current.value, target.value))
    if trigger is None:
        raise InvalidTransition(
            current.value,
            target.value,
            [s.value for s in allowed_targets(current)],
            issue.name,
        )

    if trigger in FORWARD_TRIGGERS:
        if analysis is None:
            analysis = analyze_issue(issue, **analysis_options)
        result = check_gate(issue, target, analysis)
        if not result.valid:
            logger.info(f"[STAGE] {issue.name}: gate for {target.value} failed ({len(result.missing)} reason(s))")
            raise ValidationFailed(
                f"Cannot move '{issue.name}' to {target.value}",
                result.missing,
            )

    fsm = IssueFSM(issue.path)
    getattr(fsm, trigger)()

    return MoveResult(
        issue=load_issue(fsm.issue_dir),
        from_stage=current,
        to_stage=target,
        moved=True,
    )
