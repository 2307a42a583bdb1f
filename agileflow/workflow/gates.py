"""
Stage readiness gates.

One gate per destination stage, looked up in GATES. Each gate is a pure
function of the issue and an IssueAnalysis gathered once per move, and
reports every unmet condition rather than stopping at the first.

    2-todo         description filled in; features: discovery complete and BDD valid
    3-in-progress  owner assigned; technical guidance exists
    4-review       all specs completed; guidance not stale
    5-done         every Definition of Done item checked
"""

from dataclasses import dataclass, field
from typing import Callable, Optional

from agileflow.issues import guidance as guidance_mod
from agileflow.issues import specs as specs_mod
from agileflow.issues.models import (
    CompletionStatus,
    GuidanceDoc,
    Issue,
    Spec,
    Stage,
    ValidationResult,
)
from agileflow.lib import frontmatter, mdparse
from agileflow.lib.constants import DEFAULT_OWNER_PLACEHOLDERS, GUIDANCE_FILE
from agileflow.workflow.bdd import DEFAULT_MIN_SCENARIOS, validate_bdd

DESCRIPTION_TITLES = ("Description",)
DOD_TITLES = ("Definition of Done", "DoD")


@dataclass
class IssueAnalysis:
    """Everything the gates look at, read from disk once."""
    text: str
    body: str
    specs: list[Spec]
    completion: CompletionStatus
    guidance: Optional[GuidanceDoc]
    needs_update: bool
    stale_specs: list[Spec]
    min_scenarios: int = DEFAULT_MIN_SCENARIOS
    owner_placeholders: list[str] = field(default_factory=lambda: list(DEFAULT_OWNER_PLACEHOLDERS))


def analyze_issue(
    issue: Issue,
    min_scenarios: int = DEFAULT_MIN_SCENARIOS,
    owner_placeholders: Optional[list[str]] = None,
) -> IssueAnalysis:
    text = issue.read_doc()
    specs = specs_mod.list_specs(issue.path)
    guidance = guidance_mod.load_guidance(issue.path)
    stale = guidance_mod.stale_specs(guidance, specs)

    return IssueAnalysis(
        text=text,
        body=frontmatter.strip_frontmatter(text),
        specs=specs,
        completion=specs_mod.get_completion_status(specs),
        guidance=guidance,
        needs_update=guidance is None or bool(stale),
        stale_specs=stale,
        min_scenarios=min_scenarios,
        owner_placeholders=list(owner_placeholders) if owner_placeholders is not None
        else list(DEFAULT_OWNER_PLACEHOLDERS),
    )


def is_placeholder_owner(owner: str, placeholders: list[str]) -> bool:
    value = owner.strip()
    if not value:
        return True
    if value.lower() in {p.lower() for p in placeholders}:
        return True
    # "[your name]" style template leftovers
    return mdparse.find_placeholders(value) == [value]


def gate_todo(issue: Issue, analysis: IssueAnalysis) -> ValidationResult:
    missing = []

    description = mdparse.get_section(analysis.body, *DESCRIPTION_TITLES)
    if description is None:
        missing.append("Description section is missing (add a '## Description' heading)")
    elif not mdparse.has_content(description):
        missing.append("Description is empty")
    else:
        placeholders = mdparse.find_placeholders(description, skip_fences=True)
        if placeholders:
            missing.append(f"Description has unfilled placeholders: {', '.join(placeholders)}")

    if issue.type == "feature":
        phase = issue.discovery_phase or "not_started"
        if phase != "complete":
            missing.append(
                f"Discovery phase is '{phase}', must be 'complete' "
                f"(run 'agile discover {issue.name} advance')"
            )
        # Content may have changed after discovery completed
        bdd = validate_bdd(analysis.text, analysis.min_scenarios)
        for error in bdd.errors:
            missing.append(f"BDD: {error}")

    return ValidationResult.from_missing(missing)


def gate_in_progress(issue: Issue, analysis: IssueAnalysis) -> ValidationResult:
    missing = []

    if is_placeholder_owner(issue.owner, analysis.owner_placeholders):
        missing.append(f"No owner assigned (run 'agile owner {issue.name} <name>')")

    if analysis.guidance is None:
        missing.append(
            f"No {GUIDANCE_FILE} (run 'agile guidance update {issue.name}' to create one)"
        )

    return ValidationResult.from_missing(missing)


def gate_review(issue: Issue, analysis: IssueAnalysis) -> ValidationResult:
    missing = []
    completion = analysis.completion

    if completion.total == 0:
        missing.append(f"No specs defined (run 'agile spec add {issue.name} <spec>')")
    elif not completion.all_completed:
        unfinished = [
            f"{s.name} ({s.status})" for s in analysis.specs
            if s.status in ("pending", "in-progress")
        ]
        missing.append(
            f"{len(unfinished)} of {completion.total} spec(s) not completed: {', '.join(unfinished)}"
        )

    if analysis.guidance is None:
        missing.append(f"No {GUIDANCE_FILE}")
    elif analysis.needs_update:
        names = ", ".join(s.name for s in analysis.stale_specs)
        missing.append(
            f"Technical guidance is stale: last updated {analysis.guidance.last_updated or 'never'}, "
            f"but spec(s) completed since: {names} (run 'agile guidance update {issue.name}')"
        )

    return ValidationResult.from_missing(missing)


def gate_done(issue: Issue, analysis: IssueAnalysis) -> ValidationResult:
    missing = []

    dod = mdparse.get_section(analysis.body, *DOD_TITLES)
    if dod is None:
        missing.append("Definition of Done section is missing")
    else:
        items = mdparse.checklist(dod)
        if not items:
            missing.append("Definition of Done has no checklist items")
        for checked, label in items:
            if not checked:
                missing.append(f"Definition of Done item unchecked: {label}")

    return ValidationResult.from_missing(missing)


Gate = Callable[[Issue, IssueAnalysis], ValidationResult]

# Destination stage -> gate. 1-backlog is only ever entered backward.
GATES: dict[Stage, Gate] = {
    Stage.TODO: gate_todo,
    Stage.IN_PROGRESS: gate_in_progress,
    Stage.REVIEW: gate_review,
    Stage.DONE: gate_done,
}


def check_gate(issue: Issue, target: Stage, analysis: Optional[IssueAnalysis] = None) -> ValidationResult:
    """Run the gate guarding entry into target."""
    gate = GATES.get(target)
    if gate is None:
        return ValidationResult(valid=True)
    if analysis is None:
        analysis = analyze_issue(issue)
    return gate(issue, analysis)
