"""CLI commands for managing placements and context values (Studio)."""

import argparse
import json
import logging
import sys
from pathlib import Path

from ..config.runtime import get_settings
from ..domain.context import ContextAssignment
from ..services.context_widget import ContextValueError, to_storage
from ..wiring import build_context_widget, build_placement_service, build_placement_store
from .validation import validate_form_values, validate_placement_payload


def _read_json(path: Path):
    """Load a JSON file. Exits on missing file or invalid JSON."""
    if not path.exists():
        print(f"Error: file not found: {path}", file=sys.stderr)
        sys.exit(1)
    with open(path, encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            print(f"Error: invalid JSON in {path}: {e}", file=sys.stderr)
            sys.exit(1)


def _read_values(path: Path) -> list:
    raw = _read_json(path)
    if not isinstance(raw, list):
        print("Error: JSON file must contain a list of context values.", file=sys.stderr)
        sys.exit(1)
    return raw


def seed_placements(svc, file_path: Path) -> int:
    """Load placements from a JSON list of {id, label[, status]} and save them."""
    raw = _read_json(file_path)
    if not isinstance(raw, list):
        print("Error: JSON file must contain a list of placement objects.", file=sys.stderr)
        sys.exit(1)
    placements = []
    for i, item in enumerate(raw):
        result, placement = validate_placement_payload(item)
        if placement is None:
            print(f"Error: invalid placement at index {i}: {'; '.join(result.errors)}", file=sys.stderr)
            sys.exit(1)
        placements.append(placement)
    for placement in placements:
        svc.save(placement)
    return len(placements)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage advertising entities and context values")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    placements = subparsers.add_parser("placements", help="List, add or delete placements")
    placement_cmds = placements.add_subparsers(dest="action")
    placement_cmds.add_parser("list", help="List placements ordered by label")
    add_parser = placement_cmds.add_parser("add", help="Create a placement")
    add_parser.add_argument("id", help="Machine name (lowercase letters, numbers, underscores)")
    add_parser.add_argument("label", help="Display label")
    delete_parser = placement_cmds.add_parser("delete", help="Delete a placement")
    delete_parser.add_argument("id", help="Machine name")

    seed_parser = subparsers.add_parser("seed", help="Load placements from a JSON file")
    seed_parser.add_argument("--file", type=Path, required=True, help="JSON list of {id, label}")

    subparsers.add_parser("rule-types", help="List registered context rule types")

    form_parser = subparsers.add_parser("form", help="Print the context form tree as JSON")
    form_parser.add_argument("--value-file", type=Path, default=None, help="Current context value (JSON object)")

    massage_parser = subparsers.add_parser("massage", help="Normalize submitted context values")
    massage_parser.add_argument("--file", type=Path, required=True, help="JSON list of submitted values")

    validate_parser = subparsers.add_parser("validate", help="Report every error in submitted values")
    validate_parser.add_argument("--file", type=Path, required=True, help="JSON list of submitted values")
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)

    if args.command is None:
        parser.print_help()
        return

    store = build_placement_store(settings)
    svc = build_placement_service(settings, store=store)

    if args.command == "placements":
        if args.action == "add":
            try:
                placement = svc.create(args.id, args.label)
            except ValueError as e:
                print(f"Error: {e}", file=sys.stderr)
                sys.exit(1)
            print(f"Created placement: {placement.id} ({placement.label})")
        elif args.action == "delete":
            if svc.delete(args.id):
                print(f"Deleted placement: {args.id}")
            else:
                print(f"Error: placement {args.id!r} not found", file=sys.stderr)
                sys.exit(1)
        else:
            for placement in svc.list_all():
                state = "enabled" if placement.status else "disabled"
                print(f"{placement.id}\t{placement.label}\t{state}")
    elif args.command == "seed":
        count = seed_placements(svc, args.file)
        print(f"Saved {count} placements from {args.file}.")
    elif args.command == "rule-types":
        widget = build_context_widget(settings, store=store)
        for definition in widget.registry.list_definitions():
            print(f"{definition.id}\t{definition.label}")
    elif args.command == "form":
        widget = build_context_widget(settings, store=store)
        assignment = None
        if args.value_file is not None:
            try:
                assignment = ContextAssignment.model_validate(_read_json(args.value_file))
            except ValueError as e:
                print(f"Error: invalid context value: {e}", file=sys.stderr)
                sys.exit(1)
        print(json.dumps(widget.form_element(assignment).model_dump(mode="json"), indent=2))
    elif args.command == "massage":
        widget = build_context_widget(settings, store=store)
        try:
            saved = widget.massage_form_values(_read_values(args.file))
        except ContextValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        print(json.dumps(to_storage(saved), indent=2))
    elif args.command == "validate":
        widget = build_context_widget(settings, store=store)
        result, _ = validate_form_values(widget, _read_values(args.file))
        print(json.dumps(result.to_dict(), indent=2))
        if not result.is_valid:
            sys.exit(1)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
