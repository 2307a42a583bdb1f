"""Stage and discovery state machines, readiness gates and the BDD validator."""

from agileflow.workflow.state_machine import move, allowed_targets, can_transition
from agileflow.workflow.gates import GATES, analyze_issue, check_gate
from agileflow.workflow.bdd import validate_bdd
from agileflow.workflow import discovery

__all__ = [
    "move",
    "allowed_targets",
    "can_transition",
    "GATES",
    "analyze_issue",
    "check_gate",
    "validate_bdd",
    "discovery",
]
