#!/usr/bin/env python3
"""agile CLI entrypoint."""

import sys
import logging
import argparse
from pathlib import Path

from agileflow.lib.config import find_agile_root, load_config
from agileflow.lib.constants import GUIDANCE_STATUSES, ISSUE_TYPES, SPEC_STATUSES
from agileflow.lib.errors import AgileError
from agileflow.commands import create as cmd_create_module
from agileflow.commands import move as cmd_move_module
from agileflow.commands import list as cmd_list_module
from agileflow.commands import archive as cmd_archive_module
from agileflow.commands import spec as cmd_spec_module
from agileflow.commands import guidance as cmd_guidance_module
from agileflow.commands import discover as cmd_discover_module


def get_config(args):
    """Locate agile/ (from --root or the working directory) and load its config."""
    start = Path(args.root) if args.root else None
    return load_config(find_agile_root(start))


def cmd_create(args):
    return cmd_create_module.cmd_create(args, get_config(args))


def cmd_move(args):
    return cmd_move_module.cmd_move(args, get_config(args))


def cmd_owner(args):
    return cmd_move_module.cmd_owner(args, get_config(args))


def cmd_list(args):
    return cmd_list_module.cmd_list(args, get_config(args))


def cmd_archive(args):
    return cmd_archive_module.cmd_archive(args, get_config(args))


def cmd_delete(args):
    return cmd_archive_module.cmd_delete(args, get_config(args))


def cmd_spec_list(args):
    return cmd_spec_module.cmd_spec_list(args, get_config(args))


def cmd_spec_add(args):
    return cmd_spec_module.cmd_spec_add(args, get_config(args))


def cmd_spec_status(args):
    return cmd_spec_module.cmd_spec_status(args, get_config(args))


def cmd_spec_delete(args):
    return cmd_spec_module.cmd_spec_delete(args, get_config(args))


def cmd_spec_suggest(args):
    return cmd_spec_module.cmd_spec_suggest(args, get_config(args))


def cmd_guidance_show(args):
    return cmd_guidance_module.cmd_guidance_show(args, get_config(args))


def cmd_guidance_update(args):
    return cmd_guidance_module.cmd_guidance_update(args, get_config(args))


def cmd_guidance_validate(args):
    return cmd_guidance_module.cmd_guidance_validate(args, get_config(args))


def cmd_guidance_status(args):
    return cmd_guidance_module.cmd_guidance_status(args, get_config(args))


def cmd_discover_advance(args):
    return cmd_discover_module.cmd_discover_advance(args, get_config(args))


def cmd_discover_status(args):
    return cmd_discover_module.cmd_discover_status(args, get_config(args))


def cmd_discover_validate(args):
    return cmd_discover_module.cmd_discover_validate(args, get_config(args))


def cmd_discover_reset(args):
    return cmd_discover_module.cmd_discover_reset(args, get_config(args))


def report_error(err: AgileError) -> int:
    print(f"ERROR: {err}", file=sys.stderr)
    for line in err.details():
        print(f"  {line}", file=sys.stderr)
    return err.exit_code


def main(argv=None):
    parser = argparse.ArgumentParser(prog='agile', description='Folder-based agile workflow')
    parser.add_argument('--root', help='Path to the agile/ directory (default: search upward)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    # agile create
    p_create = subparsers.add_parser('create', help='Create an issue in 1-backlog')
    p_create.add_argument('type', choices=ISSUE_TYPES, help='Issue type')
    p_create.add_argument('name', help='Issue name (lowercase letters, digits, hyphens)')
    p_create.add_argument('--title', '-t', help='Title (defaults to the name)')
    p_create.add_argument('--owner', '-o', help='Owner (defaults to unassigned)')
    p_create.set_defaults(func=cmd_create)

    # agile move
    p_move = subparsers.add_parser('move', help='Move an issue to an adjacent stage')
    p_move.add_argument('name', help='Issue name')
    p_move.add_argument('stage', help='Target stage (e.g. 2-todo, todo or 2)')
    p_move.set_defaults(func=cmd_move)

    # agile list
    p_list = subparsers.add_parser('list', help='List issues')
    p_list.add_argument('--stage', '-s', help='Only this stage')
    p_list.add_argument('--format', '-f', default='table', help='table or json')
    p_list.set_defaults(func=cmd_list)

    # agile archive
    p_archive = subparsers.add_parser('archive', help='Move an issue to agile/archive/')
    p_archive.add_argument('name', help='Issue name')
    p_archive.set_defaults(func=cmd_archive)

    # agile delete
    p_delete = subparsers.add_parser('delete', help='Permanently delete an issue')
    p_delete.add_argument('name', help='Issue name')
    p_delete.add_argument('--confirm', action='store_true', help='Confirm deletion')
    p_delete.set_defaults(func=cmd_delete)

    # agile owner
    p_owner = subparsers.add_parser('owner', help='Assign an owner')
    p_owner.add_argument('name', help='Issue name')
    p_owner.add_argument('owner', help='New owner')
    p_owner.set_defaults(func=cmd_owner)

    # agile spec
    p_spec = subparsers.add_parser('spec', help='Manage specs of an issue')
    spec_sub = p_spec.add_subparsers(dest='spec_cmd', required=True)

    p_spec_list = spec_sub.add_parser('list', help='List specs')
    p_spec_list.add_argument('issue', help='Issue name')
    p_spec_list.set_defaults(func=cmd_spec_list)

    p_spec_add = spec_sub.add_parser('add', help='Add a pending spec')
    p_spec_add.add_argument('issue', help='Issue name')
    p_spec_add.add_argument('name', help='Spec name')
    p_spec_add.add_argument('--title', '-t', help='Spec title')
    p_spec_add.add_argument('--depends-on', '-d', help='Comma-separated spec names')
    p_spec_add.set_defaults(func=cmd_spec_add)

    p_spec_status = spec_sub.add_parser('status', help='Change spec status')
    p_spec_status.add_argument('issue', help='Issue name')
    p_spec_status.add_argument('spec', help='Spec name')
    p_spec_status.add_argument('status', help=f"One of: {', '.join(SPEC_STATUSES)}")
    p_spec_status.add_argument('--force', action='store_true', help='Complete even if guidance is out of date')
    p_spec_status.set_defaults(func=cmd_spec_status)

    p_spec_delete = spec_sub.add_parser('delete', help='Delete a spec')
    p_spec_delete.add_argument('issue', help='Issue name')
    p_spec_delete.add_argument('spec', help='Spec name')
    p_spec_delete.set_defaults(func=cmd_spec_delete)

    p_spec_suggest = spec_sub.add_parser('suggest', help='Which spec to work on next')
    p_spec_suggest.add_argument('issue', help='Issue name')
    p_spec_suggest.set_defaults(func=cmd_spec_suggest)

    # agile guidance
    p_guidance = subparsers.add_parser('guidance', help='Manage technical guidance')
    guidance_sub = p_guidance.add_subparsers(dest='guidance_cmd', required=True)

    p_guidance_show = guidance_sub.add_parser('show', help='Show guidance summary')
    p_guidance_show.add_argument('issue', help='Issue name')
    p_guidance_show.set_defaults(func=cmd_guidance_show)

    p_guidance_update = guidance_sub.add_parser('update', help='Mark guidance updated (creates it if missing)')
    p_guidance_update.add_argument('issue', help='Issue name')
    p_guidance_update.add_argument('--note', '-n', help='Investigation log entry')
    p_guidance_update.set_defaults(func=cmd_guidance_update)

    p_guidance_validate = guidance_sub.add_parser('validate', help='Check guidance freshness')
    p_guidance_validate.add_argument('issue', help='Issue name')
    p_guidance_validate.add_argument('spec', nargs='?', help='Check against this spec only')
    p_guidance_validate.set_defaults(func=cmd_guidance_validate)

    p_guidance_status = guidance_sub.add_parser('status', help='Set guidance status')
    p_guidance_status.add_argument('issue', help='Issue name')
    p_guidance_status.add_argument('status', help=f"One of: {', '.join(GUIDANCE_STATUSES)}")
    p_guidance_status.set_defaults(func=cmd_guidance_status)

    # agile discover
    p_discover = subparsers.add_parser('discover', help='Feature discovery phases')
    p_discover.add_argument('name', help='Feature name')
    discover_sub = p_discover.add_subparsers(dest='discover_cmd', required=True)

    discover_sub.add_parser('advance', help='Advance one phase').set_defaults(func=cmd_discover_advance)
    discover_sub.add_parser('status', help='Show current phase').set_defaults(func=cmd_discover_status)
    discover_sub.add_parser('validate', help='Validate BDD section').set_defaults(func=cmd_discover_validate)
    discover_sub.add_parser('reset', help='Back to not_started').set_defaults(func=cmd_discover_reset)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    try:
        return args.func(args)
    except AgileError as e:
        return report_error(e)


if __name__ == '__main__':
    sys.exit(main())
