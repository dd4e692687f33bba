"""Rule management commands.

Rules live in ~/.config/tidyctl/rules.toml. Their order is their
priority: for every entry the first matching enabled rule wins.
"""

import json
import re
from dataclasses import replace
from datetime import UTC, datetime
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from tidyctl.cli.types import require_rules
from tidyctl.core.rules import RulesError, find_rule, rule_to_dict, save_rules
from tidyctl.models.rule import (
    CopyTo,
    CreatedBefore,
    Delete,
    ExtensionEquals,
    IsDirectory,
    ModifiedBefore,
    MoveTo,
    NameContains,
    Rename,
    Rule,
    RuleCondition,
    RuleOutcome,
    SizeGreaterThan,
    Skip,
)
from tidyctl.utils.formatting import console, format_size, print_error, print_info, print_success

app = typer.Typer(
    help="Manage organizing rules.",
    no_args_is_help=True,
)

_SIZE_UNITS = {"": 1, "B": 1, "K": 1024, "M": 1024**2, "G": 1024**3, "T": 1024**4}
_SIZE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([KMGT]?)(?:I?B)?\s*$", re.IGNORECASE)


def parse_size(value: str) -> int:
    """Parse a size such as ``500``, ``10KB`` or ``1.5G`` into bytes.

    Raises:
        typer.BadParameter: If the value is not a size.
    """
    match = _SIZE_PATTERN.match(value)
    if match is None:
        msg = f"Invalid size: {value!r} (examples: 500, 10KB, 1.5G)"
        raise typer.BadParameter(msg)
    number, unit = match.groups()
    return int(float(number) * _SIZE_UNITS[unit.upper()])


def parse_date(value: str) -> datetime:
    """Parse an ISO date or datetime, assuming UTC when no zone is given.

    Raises:
        typer.BadParameter: If the value is not an ISO date.
    """
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        msg = f"Invalid date: {value!r} (use YYYY-MM-DD)"
        raise typer.BadParameter(msg) from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def describe_condition(condition: RuleCondition) -> str:
    """Describe a condition in a few words."""
    if isinstance(condition, ExtensionEquals):
        return f"extension is .{condition.extension}"
    if isinstance(condition, NameContains):
        return f"name contains {condition.substring!r}"
    if isinstance(condition, SizeGreaterThan):
        return f"larger than {format_size(condition.size_bytes)}"
    if isinstance(condition, CreatedBefore):
        return f"created before {condition.timestamp.date().isoformat()}"
    if isinstance(condition, ModifiedBefore):
        return f"modified before {condition.timestamp.date().isoformat()}"
    return "is a directory"


def describe_outcome(outcome: RuleOutcome) -> str:
    """Describe an outcome in a few words."""
    if isinstance(outcome, MoveTo):
        return f"move to {outcome.destination}"
    if isinstance(outcome, CopyTo):
        return f"copy to {outcome.destination}"
    if isinstance(outcome, Delete):
        return "move to trash"
    if isinstance(outcome, Rename):
        return f"rename to {outcome.prefix}<name>{outcome.suffix}"
    return f"skip ({outcome.reason})" if outcome.reason else "skip"


def _save(rules: list[Rule]) -> None:
    try:
        save_rules(rules)
    except RulesError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def _require_rule(rules: list[Rule], key: str) -> Rule:
    rule = find_rule(rules, key)
    if rule is None:
        print_error(f"No rule found matching: {key}")
        raise typer.Exit(code=1)
    return rule


@app.command("list")
def list_rules(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON."),
    ] = False,
) -> None:
    """List rules in priority order."""
    rules = require_rules()

    if json_output:
        console.print_json(json.dumps([rule_to_dict(rule) for rule in rules], default=str))
        return

    if not rules:
        print_info("No rules defined. Add one with 'tidyctl rules add'.")
        return

    table = Table(
        title="Rules",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("#", justify="right", style="muted")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("When")
    table.add_column("Then")
    table.add_column("Enabled", justify="center")

    for position, rule in enumerate(rules, start=1):
        when = " and ".join(escape(describe_condition(c)) for c in rule.conditions)
        when = when or "[warning]always[/]"
        table.add_row(
            str(position),
            rule.id[:8],
            escape(rule.name),
            when,
            escape(describe_outcome(rule.outcome)),
            "[success]yes[/]" if rule.enabled else "[muted]no[/]",
        )

    console.print(table)


@app.command("add")
def add_rule(
    name: Annotated[str, typer.Argument(help="Rule name, shown as the plan reason.")],
    extension: Annotated[
        str | None,
        typer.Option("--ext", "-e", help="Match entries with this extension."),
    ] = None,
    name_contains: Annotated[
        str | None,
        typer.Option("--name-contains", help="Match names containing this text."),
    ] = None,
    larger_than: Annotated[
        str | None,
        typer.Option("--larger-than", help="Match files larger than this (e.g. 10MB)."),
    ] = None,
    created_before: Annotated[
        str | None,
        typer.Option("--created-before", help="Match entries created before YYYY-MM-DD."),
    ] = None,
    modified_before: Annotated[
        str | None,
        typer.Option("--modified-before", help="Match entries modified before YYYY-MM-DD."),
    ] = None,
    directory: Annotated[
        bool,
        typer.Option("--directory", help="Match directories only."),
    ] = False,
    move_to: Annotated[
        str | None,
        typer.Option("--move", help="Move matches into this directory."),
    ] = None,
    copy_to: Annotated[
        str | None,
        typer.Option("--copy", help="Copy matches into this directory."),
    ] = None,
    delete: Annotated[
        bool,
        typer.Option("--delete", help="Move matches to the trash."),
    ] = False,
    prefix: Annotated[
        str | None,
        typer.Option("--prefix", help="Rename matches by adding this prefix."),
    ] = None,
    suffix: Annotated[
        str | None,
        typer.Option("--suffix", help="Rename matches by adding this suffix before the extension."),
    ] = None,
    skip: Annotated[
        str | None,
        typer.Option("--skip", help="Leave matches alone, with this reason."),
    ] = None,
    description: Annotated[
        str,
        typer.Option("--description", "-d", help="Longer description."),
    ] = "",
    disabled: Annotated[
        bool,
        typer.Option("--disabled", help="Add the rule disabled."),
    ] = False,
    position: Annotated[
        int | None,
        typer.Option("--position", "-p", min=1, help="Priority position (1 = first)."),
    ] = None,
) -> None:
    """Add a rule.

    Give any number of conditions (all must hold) and exactly one action.

    Examples:
        tidyctl rules add "PDFs" --ext pdf --move ~/Documents/PDF
        tidyctl rules add "Big videos" --ext mp4 --larger-than 1G --move ~/Videos
        tidyctl rules add "Old installers" --ext dmg --modified-before 2025-01-01 --delete
        tidyctl rules add "Tag drafts" --name-contains draft --prefix "DRAFT-"
    """
    conditions: list[RuleCondition] = []
    try:
        if extension is not None:
            conditions.append(ExtensionEquals(extension))
        if name_contains is not None:
            conditions.append(NameContains(name_contains))
        if larger_than is not None:
            conditions.append(SizeGreaterThan(parse_size(larger_than)))
        if created_before is not None:
            conditions.append(CreatedBefore(parse_date(created_before)))
        if modified_before is not None:
            conditions.append(ModifiedBefore(parse_date(modified_before)))
        if directory:
            conditions.append(IsDirectory())

        outcomes: list[RuleOutcome] = []
        if move_to is not None:
            outcomes.append(MoveTo(move_to))
        if copy_to is not None:
            outcomes.append(CopyTo(copy_to))
        if delete:
            outcomes.append(Delete())
        if prefix is not None or suffix is not None:
            outcomes.append(Rename(prefix=prefix or "", suffix=suffix or ""))
        if skip is not None:
            outcomes.append(Skip(reason=skip))

        if len(outcomes) != 1:
            print_error("Give exactly one of --move, --copy, --delete, --prefix/--suffix, --skip.")
            raise typer.Exit(code=1)

        rule = Rule(
            name=name,
            outcome=outcomes[0],
            conditions=tuple(conditions),
            description=description,
            enabled=not disabled,
        )
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    rules = require_rules()
    index = len(rules) if position is None else min(position - 1, len(rules))
    rules.insert(index, rule)
    _save(rules)

    print_success(f"Added rule '{rule.name}' ({rule.id[:8]}) at position {index + 1}.")
    if rule.matches_all:
        print_info("This rule has no conditions and matches every entry.")


@app.command("remove")
def remove_rule(
    key: Annotated[str, typer.Argument(help="Rule ID, ID prefix or name.")],
) -> None:
    """Remove a rule."""
    rules = require_rules()
    rule = _require_rule(rules, key)
    _save([r for r in rules if r.id != rule.id])
    print_success(f"Removed rule '{rule.name}'.")


def _set_enabled(key: str, enabled: bool) -> None:
    rules = require_rules()
    rule = _require_rule(rules, key)
    updated = [replace(r, enabled=enabled) if r.id == rule.id else r for r in rules]
    _save(updated)
    state = "Enabled" if enabled else "Disabled"
    print_success(f"{state} rule '{rule.name}'.")


@app.command("enable")
def enable_rule(
    key: Annotated[str, typer.Argument(help="Rule ID, ID prefix or name.")],
) -> None:
    """Enable a rule."""
    _set_enabled(key, True)


@app.command("disable")
def disable_rule(
    key: Annotated[str, typer.Argument(help="Rule ID, ID prefix or name.")],
) -> None:
    """Disable a rule without removing it."""
    _set_enabled(key, False)


@app.command("move")
def move_rule(
    key: Annotated[str, typer.Argument(help="Rule ID, ID prefix or name.")],
    position: Annotated[int, typer.Argument(min=1, help="New priority position (1 = first).")],
) -> None:
    """Change the priority of a rule."""
    rules = require_rules()
    rule = _require_rule(rules, key)
    rules.remove(rule)
    index = min(position - 1, len(rules))
    rules.insert(index, rule)
    _save(rules)
    print_success(f"Moved rule '{rule.name}' to position {index + 1}.")
