"""
Markdown templates for new issues, specs and guidance documents.

Bracketed text is a placeholder: the readiness gates refuse to move an issue
while any remain in the sections they inspect.
"""

FEATURE_TEMPLATE = """---
title: {title}
type: feature
owner: {owner}
created: {created}
discovery_phase: not_started
---

# {title}

## Description

[Describe the feature and why it matters]

## Discovery

### User Persona

[Who is the primary user and what are they trying to achieve?]

### Problem Statement

[What problem does this solve for them?]

### BDD Scenarios

```gherkin
Feature: {title}

  Scenario: [Happy path]
    Given [a precondition]
    When [an action]
    Then [an observable outcome]
```

### Out of Scope

- [Behavior this feature explicitly does not cover]

### Assumptions

- [Something the scenarios take for granted]

## Definition of Done

- [ ] All specs completed
- [ ] Technical guidance finalized
- [ ] Tests passing
"""

BUG_TEMPLATE = """---
title: {title}
type: bug
owner: {owner}
created: {created}
---

# {title}

## Description

[What is broken? Include steps to reproduce]

## Expected Behavior

[What should happen instead?]

## Definition of Done

- [ ] Root cause identified
- [ ] Regression test added
- [ ] Fix verified
"""

TASK_TEMPLATE = """---
title: {title}
type: task
owner: {owner}
created: {created}
---

# {title}

## Description

[What needs to be done and why?]

## Definition of Done

- [ ] Work completed
- [ ] Reviewed
"""

SPEC_TEMPLATE = """---
status: pending
created: {created}
completed:
dependencies: [{dependencies}]
---

# {title}

## Goal

[What this spec delivers]

## Acceptance

- [ ] [Observable result]
"""

GUIDANCE_TEMPLATE = """---
last-updated: {last_updated}
status: draft
---

# Technical Guidance: {title}

## Approach

[Architecture notes and decisions]

## Investigation Log

## Open Questions
"""

ISSUE_TEMPLATES = {
    "feature": FEATURE_TEMPLATE,
    "bug": BUG_TEMPLATE,
    "task": TASK_TEMPLATE,
}


def render_issue(issue_type: str, title: str, owner: str, created: str) -> str:
    return ISSUE_TEMPLATES[issue_type].format(title=title, owner=owner, created=created)


def render_spec(title: str, created: str, dependencies: list[str]) -> str:
    return SPEC_TEMPLATE.format(title=title, created=created, dependencies=", ".join(dependencies))


def render_guidance(title: str, last_updated: str) -> str:
    return GUIDANCE_TEMPLATE.format(title=title, last_updated=last_updated)
