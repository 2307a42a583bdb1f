"""Discovery phase state machine for feature issues.

Features walk a fixed sequence before they may leave the backlog:

    not_started -> persona -> paths -> scope -> synthesize -> complete

Each advance moves exactly one phase forward. The final edge is guarded by
the BDD validator. reset returns to not_started from anywhere and leaves the
authored content alone. The current phase lives in the feature document's
frontmatter as discovery_phase.

Usage:
    from agileflow.workflow.discovery import advance, reset

    result = advance(issue)
    if not result.advanced:
        print(result.errors)
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from transitions import Machine

from agileflow.issues.models import Issue
from agileflow.issues.store import load_issue
from agileflow.lib import frontmatter
from agileflow.lib.errors import MalformedInput
from agileflow.workflow.bdd import BDDValidationResult, DEFAULT_MIN_SCENARIOS, validate_bdd

logger = logging.getLogger(__name__)

PHASES = [
    "not_started",
    "persona",
    "paths",
    "scope",
    "synthesize",
    "complete",
]

TRANSITIONS = [
    {"trigger": "advance", "source": "not_started", "dest": "persona"},
    {"trigger": "advance", "source": "persona", "dest": "paths"},
    {"trigger": "advance", "source": "paths", "dest": "scope"},
    {"trigger": "advance", "source": "scope", "dest": "synthesize"},
    {"trigger": "advance", "source": "synthesize", "dest": "complete", "conditions": "bdd_passes"},

    {"trigger": "reset", "source": "*", "dest": "not_started"},
]

# What the author should be working on while in each phase
PHASE_PROMPTS = {
    "not_started": "Run 'advance' to begin discovery.",
    "persona": "Fill in User Persona and Problem Statement: who is this for and what hurts today?",
    "paths": "Write BDD scenarios in the ```gherkin block: the happy path and the important alternatives.",
    "scope": "List what is Out of Scope and the Assumptions the scenarios rely on.",
    "synthesize": "Review everything and remove placeholders. Advancing validates the BDD section.",
    "complete": "Discovery complete. The feature can move to 2-todo once its description is filled in.",
}


class DiscoveryFSM:
    """Discovery phase for one feature issue.

    Loads the phase from the feature document and writes it back after every
    transition.
    """

    def __init__(self, issue: Issue, min_scenarios: int = DEFAULT_MIN_SCENARIOS):
        self.issue = issue
        self.min_scenarios = min_scenarios
        self.last_bdd: Optional[BDDValidationResult] = None

        initial = issue.discovery_phase or "not_started"
        if initial not in PHASES:
            logger.warning(
                f"[DISCOVERY] {issue.name}: Unknown phase '{initial}', defaulting to 'not_started'"
            )
            initial = "not_started"

        self.machine = Machine(
            model=self,
            states=PHASES,
            transitions=TRANSITIONS,
            initial=initial,
            auto_transitions=False,
            send_event=True,
            after_state_change="on_state_change",
        )

    def bdd_passes(self, event) -> bool:
        """Guard for synthesize -> complete. Re-reads the document every time."""
        self.last_bdd = validate_bdd(self.issue.read_doc(), self.min_scenarios)
        return self.last_bdd.valid

    def _save_phase(self) -> None:
        frontmatter.update_document(self.issue.doc_path, {"discovery_phase": self.state})

    def on_state_change(self, event) -> None:
        from_phase = event.transition.source
        to_phase = event.transition.dest
        logger.info(f"[DISCOVERY] {self.issue.name}: {from_phase} -> {to_phase} ({event.event.name})")
        self._save_phase()


@dataclass
class AdvanceResult:
    advanced: bool
    from_phase: str
    to_phase: str
    errors: list[str] = field(default_factory=list)
    bdd: Optional[BDDValidationResult] = None


@dataclass
class DiscoveryStatus:
    phase: str
    step: int  # 0-based position in PHASES
    total: int
    next_phase: Optional[str]
    prompt: str


def require_feature(issue: Issue) -> None:
    if issue.type != "feature":
        raise MalformedInput(
            f"Discovery applies to features only; '{issue.name}' is a {issue.type}",
            ["feature"],
        )


def _next_phase(phase: str) -> Optional[str]:
    idx = PHASES.index(phase)
    return PHASES[idx + 1] if idx + 1 < len(PHASES) else None


def advance(issue: Issue, min_scenarios: int = DEFAULT_MIN_SCENARIOS) -> AdvanceResult:
    """Move one phase forward. No-op once complete; blocked at synthesize until the BDD section is valid."""
    require_feature(issue)
    fsm = DiscoveryFSM(issue, min_scenarios)
    current = fsm.state

    if current == "complete":
        logger.debug(f"[DISCOVERY] {issue.name}: already complete, no-op")
        return AdvanceResult(advanced=False, from_phase=current, to_phase=current)

    if fsm.advance():
        return AdvanceResult(advanced=True, from_phase=current, to_phase=fsm.state, bdd=fsm.last_bdd)

    errors = fsm.last_bdd.errors if fsm.last_bdd else []
    logger.info(f"[DISCOVERY] {issue.name}: blocked at {current} ({len(errors)} BDD error(s))")
    return AdvanceResult(
        advanced=False,
        from_phase=current,
        to_phase=current,
        errors=errors,
        bdd=fsm.last_bdd,
    )


def reset(issue: Issue) -> Issue:
    """Return to not_started. Authored content is left untouched."""
    require_feature(issue)
    fsm = DiscoveryFSM(issue)
    fsm.reset()
    return load_issue(issue.path)


def get_status(issue: Issue) -> DiscoveryStatus:
    require_feature(issue)
    phase = issue.discovery_phase if issue.discovery_phase in PHASES else "not_started"
    return DiscoveryStatus(
        phase=phase,
        step=PHASES.index(phase),
        total=len(PHASES) - 1,
        next_phase=_next_phase(phase),
        prompt=PHASE_PROMPTS[phase],
    )


def validate(issue: Issue, min_scenarios: int = DEFAULT_MIN_SCENARIOS) -> BDDValidationResult:
    """Run the BDD validator without changing the phase."""
    require_feature(issue)
    return validate_bdd(issue.read_doc(), min_scenarios)
