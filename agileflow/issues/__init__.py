"""
Issue folders, specs and technical guidance.

Everything here reads from and writes to the agile/ tree directly; no state
is kept between calls.
"""

from agileflow.issues.models import (
    Issue,
    Spec,
    GuidanceDoc,
    Stage,
    STAGE_ORDER,
    parse_stage,
)
from agileflow.issues.store import (
    get_issue,
    list_issues,
    create_issue,
    archive_issue,
    delete_issue,
)
from agileflow.issues.specs import (
    list_specs,
    update_status,
    get_completion_status,
)
from agileflow.issues.guidance import (
    load_guidance,
    needs_update,
    validate_for_spec_completion,
)

__all__ = [
    "Issue",
    "Spec",
    "GuidanceDoc",
    "Stage",
    "STAGE_ORDER",
    "parse_stage",
    "get_issue",
    "list_issues",
    "create_issue",
    "archive_issue",
    "delete_issue",
    "list_specs",
    "update_status",
    "get_completion_status",
    "load_guidance",
    "needs_update",
    "validate_for_spec_completion",
]
