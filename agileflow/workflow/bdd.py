"""
BDD section validator for feature issues.

A feature leaves discovery only when its document carries:

    ### User Persona        who the feature is for
    ### Problem Statement   what hurts today
    ```gherkin             at least two scenarios, each with Given/When/Then steps
    ### Out of Scope        a list
    ### Assumptions         a list

Format errors mean the structure is wrong (missing section, a scenario with
no steps, template placeholders left in). Completeness errors mean the
structure is there but the content is not (empty persona, too few scenarios).
Pure text analysis: nothing here touches the filesystem.
"""

import re
from dataclasses import dataclass, field

from agileflow.lib import frontmatter, mdparse

DEFAULT_MIN_SCENARIOS = 2

GHERKIN_INFO = ("gherkin", "feature", "cucumber")

PERSONA_TITLES = ("User Persona", "Persona")
PROBLEM_TITLES = ("Problem Statement", "Problem")
OUT_OF_SCOPE_TITLES = ("Out of Scope", "Out-of-Scope", "Non-goals")
ASSUMPTIONS_TITLES = ("Assumptions",)

SCENARIO_RE = re.compile(r'^(Scenario Outline|Scenario Template|Scenario|Example):\s*(.*)$')
PRIMARY_STEP_RE = re.compile(r'^(Given|When|Then)\b')
CONJUNCTION_STEP_RE = re.compile(r'^(And|But|\*)(\s|$)')
BLOCK_END_RE = re.compile(r'^(Feature|Background|Rule|Examples|Scenarios):')
DOCSTRING_RE = re.compile(r'^("""|```)')


@dataclass
class Scenario:
    title: str
    steps: int
    line: int  # 1-based line within the gherkin block


@dataclass
class BDDValidationResult:
    valid: bool
    format_errors: list[str] = field(default_factory=list)
    completeness_errors: list[str] = field(default_factory=list)
    has_persona: bool = False
    has_problem: bool = False
    has_scenarios: bool = False
    has_out_of_scope: bool = False
    has_assumptions: bool = False
    scenario_count: int = 0

    @property
    def errors(self) -> list[str]:
        return self.format_errors + self.completeness_errors


def parse_scenarios(gherkin: str) -> list[Scenario]:
    """Scenarios and their step counts from the body of a gherkin block.

    And/But/* only count once the scenario has a Given, When or Then.
    """
    scenarios: list[Scenario] = []
    current = None
    in_docstring = False

    for lineno, raw in enumerate(gherkin.splitlines(), 1):
        line = raw.strip()

        if DOCSTRING_RE.match(line):
            in_docstring = not in_docstring
            continue
        if in_docstring or not line or line.startswith(("#", "@", "|")):
            continue

        m = SCENARIO_RE.match(line)
        if m:
            current = Scenario(title=m.group(2).strip() or f"line {lineno}", steps=0, line=lineno)
            scenarios.append(current)
            continue

        if BLOCK_END_RE.match(line):
            current = None
            continue

        if current is None:
            continue

        if PRIMARY_STEP_RE.match(line):
            current.steps += 1
        elif CONJUNCTION_STEP_RE.match(line) and current.steps > 0:
            current.steps += 1

    return scenarios


def _gherkin_blocks(body: str) -> list[str]:
    return [
        block.content for block in mdparse.fenced_blocks(body)
        if block.info.split()[:1] and block.info.split()[0].lower() in GHERKIN_INFO
    ]


def _has_list_content(section: str | None) -> bool:
    if section is None:
        return False
    return any(mdparse.has_content(item) for item in mdparse.list_items(section))


def validate_bdd(text: str, min_scenarios: int = DEFAULT_MIN_SCENARIOS) -> BDDValidationResult:
    """Validate the discovery/BDD sections of a feature document."""
    body = frontmatter.strip_frontmatter(text)
    format_errors: list[str] = []
    completeness_errors: list[str] = []

    persona = mdparse.get_section(body, *PERSONA_TITLES)
    problem = mdparse.get_section(body, *PROBLEM_TITLES)
    out_of_scope = mdparse.get_section(body, *OUT_OF_SCOPE_TITLES)
    assumptions = mdparse.get_section(body, *ASSUMPTIONS_TITLES)
    gherkin_blocks = _gherkin_blocks(body)

    # Structure
    for title, section in (
        ("User Persona", persona),
        ("Problem Statement", problem),
        ("Out of Scope", out_of_scope),
        ("Assumptions", assumptions),
    ):
        if section is None:
            format_errors.append(f"Missing required section: {title}")

    if not gherkin_blocks:
        format_errors.append("Missing BDD scenarios: add a ```gherkin block with Scenario: entries")

    scenarios = [s for block in gherkin_blocks for s in parse_scenarios(block)]
    if gherkin_blocks and not scenarios:
        format_errors.append("Gherkin block has no Scenario: entries")
    for scenario in scenarios:
        if scenario.steps == 0:
            format_errors.append(f"Scenario '{scenario.title}' has no Given/When/Then steps")

    region = [(s, False) for s in (persona, problem, out_of_scope, assumptions) if s is not None]
    region.extend((block, True) for block in gherkin_blocks)
    placeholders = []
    for part, in_gherkin in region:
        for token in mdparse.find_placeholders(part, allow_step_data=in_gherkin):
            if token not in placeholders:
                placeholders.append(token)
    if placeholders:
        format_errors.append(f"Unfilled placeholders in BDD section: {', '.join(placeholders)}")

    # Content
    has_persona = mdparse.has_content(persona)
    has_problem = mdparse.has_content(problem)
    has_out_of_scope = _has_list_content(out_of_scope)
    has_assumptions = _has_list_content(assumptions)

    if persona is not None and not has_persona:
        completeness_errors.append("User Persona is empty: describe who this feature is for")
    if problem is not None and not has_problem:
        completeness_errors.append("Problem Statement is empty: describe the problem being solved")
    if out_of_scope is not None and not has_out_of_scope:
        completeness_errors.append("Out of Scope needs at least one list item")
    if assumptions is not None and not has_assumptions:
        completeness_errors.append("Assumptions needs at least one list item")
    if len(scenarios) < min_scenarios:
        completeness_errors.append(
            f"At least {min_scenarios} BDD scenarios required (found {len(scenarios)})"
        )

    return BDDValidationResult(
        valid=not format_errors and not completeness_errors,
        format_errors=format_errors,
        completeness_errors=completeness_errors,
        has_persona=has_persona,
        has_problem=has_problem,
        has_scenarios=bool(scenarios),
        has_out_of_scope=has_out_of_scope,
        has_assumptions=has_assumptions,
        scenario_count=len(scenarios),
    )
