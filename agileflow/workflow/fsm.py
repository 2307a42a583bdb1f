"""Issue stage state machine using transitions library.

Stages form a line and an issue may only step to a neighbor:

    1-backlog <-> 2-todo <-> 3-in-progress <-> 4-review <-> 5-done

The current state is read from the name of the directory holding the issue
folder, and a transition is persisted by moving the folder into the target
stage directory. There is no other record of the stage.

Usage:
    from agileflow.workflow.fsm import IssueFSM

    fsm = IssueFSM(issue_dir)
    fsm.plan()     # 1-backlog -> 2-todo
    fsm.start()    # 2-todo -> 3-in-progress
"""

import logging
from pathlib import Path
from typing import Callable

from transitions import Machine

from agileflow.issues.models import STAGE_ORDER
from agileflow.issues.store import relocate
from agileflow.lib.errors import NotFound

logger = logging.getLogger(__name__)


STATES = [stage.value for stage in STAGE_ORDER]

# Forward edges are gated by agileflow.workflow.gates; backward edges never are.
TRANSITIONS = [
    {"trigger": "plan", "source": "1-backlog", "dest": "2-todo"},
    {"trigger": "start", "source": "2-todo", "dest": "3-in-progress"},
    {"trigger": "submit", "source": "3-in-progress", "dest": "4-review"},
    {"trigger": "finish", "source": "4-review", "dest": "5-done"},

    {"trigger": "unplan", "source": "2-todo", "dest": "1-backlog"},
    {"trigger": "pause", "source": "3-in-progress", "dest": "2-todo"},
    {"trigger": "rework", "source": "4-review", "dest": "3-in-progress"},
    {"trigger": "reopen", "source": "5-done", "dest": "4-review"},
]

FORWARD_TRIGGERS = {"plan", "start", "submit", "finish"}


def _build_trigger_lookup() -> dict[tuple[str, str], str]:
    """Build lookup from (source, dest) -> trigger name."""
    lookup: dict[tuple[str, str], str] = {}
    for t in TRANSITIONS:
        key = (t["source"], t["dest"])
        if key not in lookup:
            lookup[key] = t["trigger"]
    return lookup


TRIGGER_FOR = _build_trigger_lookup()


def neighbors(stage_value: str) -> list[str]:
    """Stages reachable in one step from stage_value."""
    return [dest for (source, dest) in TRIGGER_FOR if source == stage_value]


class IssueFSM:
    """State machine for one issue folder.

    Wraps the transitions library with issue-specific logic:
    - Loads initial state from the parent directory name
    - Persists state changes by relocating the folder
    - Logs all transitions
    """

    def __init__(self, issue_dir: Path, on_transition: Callable[[str, str, str], None] | None = None):
        """Initialize FSM for an issue.

        Args:
            issue_dir: Path to the issue folder (agile/<stage>/<name>)
            on_transition: Optional callback(from_state, to_state, trigger) called after transitions
        """
        self.issue_dir = issue_dir
        self.issue_name = issue_dir.name
        self.agile_root = issue_dir.parent.parent
        self.on_transition = on_transition

        initial = issue_dir.parent.name
        if initial not in STATES:
            raise NotFound(f"{issue_dir} is not inside a stage directory")

        self.machine = Machine(
            model=self,
            states=STATES,
            transitions=TRANSITIONS,
            initial=initial,
            auto_transitions=False,
            send_event=True,
            after_state_change="on_state_change",
        )

    def _save_state(self) -> None:
        """Move the folder under the directory of the current state."""
        self.issue_dir = relocate(self.issue_dir, self.agile_root / self.state)

    def on_state_change(self, event) -> None:
        """Callback after any state transition.

        Persists state to disk and logs the transition.
        """
        from_state = event.transition.source
        to_state = event.transition.dest
        trigger = event.event.name

        self._save_state()
        logger.info(f"[STAGE] {self.issue_name}: {from_state} -> {to_state} ({trigger})")

        if self.on_transition:
            self.on_transition(from_state, to_state, trigger)

    def can(self, trigger: str) -> bool:
        """Check if a trigger can be executed in current state."""
        return trigger in self.machine.get_triggers(self.state)

    def get_available_triggers(self) -> list[str]:
        """Get list of triggers available in current state."""
        return self.machine.get_triggers(self.state)
