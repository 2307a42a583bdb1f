"""
agile list - List issues by stage.
"""

import json

from agileflow.issues.models import STAGE_ORDER, parse_stage
from agileflow.issues.specs import get_completion_status, list_specs
from agileflow.issues.store import list_issues
from agileflow.lib import validate
from agileflow.lib.config import AgileConfig
from agileflow.lib.errors import MalformedInput, ValidationFailed

FORMATS = ("table", "json")


def _issue_records(config: AgileConfig, stage) -> list[dict]:
    records = []
    for issue in list_issues(config.root, stage):
        completion = get_completion_status(list_specs(issue.path))
        record = issue.to_dict()
        record["specs"] = {"total": completion.total, "completed": completion.completed}
        records.append(record)
    return records


def cmd_list(args, config: AgileConfig) -> int:
    """List issues, optionally filtered to one stage."""
    stage = None
    if args.stage:
        stage = parse_stage(args.stage)
        if stage is None:
            raise MalformedInput(f"Unknown stage '{args.stage}'", [s.value for s in STAGE_ORDER])

    fmt = (args.format or "table").lower()
    if fmt not in FORMATS:
        raise MalformedInput(f"Unknown format '{args.format}'", FORMATS)

    records = _issue_records(config, stage)

    if fmt == "json":
        try:
            validate.validate(records, "issue_list")
        except validate.SchemaError as e:
            raise ValidationFailed("Issue list could not be rendered as JSON", [str(e)]) from None
        print(json.dumps(records, indent=2))
        return 0

    if not records:
        print("No issues" + (f" in {stage.value}" if stage else ""))
        print()
        print("Get started:")
        print("  agile create feature <name>")
        return 0

    current_stage = None
    for record in records:
        if record["stage"] != current_stage:
            if current_stage is not None:
                print()
            current_stage = record["stage"]
            print(current_stage)
            print("-" * 72)
        title = record["title"][:32] + "..." if len(record["title"]) > 32 else record["title"]
        specs = f"{record['specs']['completed']}/{record['specs']['total']}"
        print(f"  {record['name']:<24} {record['type']:<8} {specs:<6} {record['owner']:<14} {title}")

    print()
    print(f"{len(records)} issue(s)")
    return 0
