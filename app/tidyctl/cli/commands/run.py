"""Run command implementation.

Scans a directory, plans it against the rules and, after confirmation,
executes the plan and records the result in the history.
"""

from typing import Annotated

import typer

from tidyctl.cli.display import (
    create_log_table,
    create_plan_table,
    print_log_summary,
    print_plan_summary,
)
from tidyctl.cli.types import (
    RootArgument,
    create_session,
    remember_scan,
    require_rules,
    require_settings,
    warn_if_no_rules,
)
from tidyctl.core.errors import TidyError
from tidyctl.core.state import StateManager
from tidyctl.utils.formatting import console, print_error, print_info, print_success, print_warning


def run_directory(
    root: RootArgument,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            "-n",
            help="Show what would be done without changing anything.",
        ),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option(
            "--yes",
            "-y",
            help="Skip confirmation prompt.",
        ),
    ] = False,
    show_all: Annotated[
        bool,
        typer.Option(
            "--all",
            "-a",
            help="Also list skipped entries.",
        ),
    ] = False,
) -> None:
    """Organize a directory according to the rules.

    Shows the plan first and asks for confirmation. Answering no
    discards the plan without touching the filesystem. Every executed
    run can be reversed with 'tidyctl undo'.

    Examples:
        tidyctl run ~/Downloads              # Plan, confirm, execute
        tidyctl run ~/Downloads --dry-run    # Simulate only
        tidyctl run ~/Downloads -y           # No confirmation
    """
    settings = require_settings()
    rules = require_rules()
    warn_if_no_rules(rules)

    try:
        with create_session(settings, rules, dry_run=dry_run) as session:
            remember_scan(session.scan(root))
            plan = session.create_plan()

            if not plan.has_changes:
                print_success(f"Nothing to do: no rule changes any of {len(plan)} entries.")
                return

            console.print(create_plan_table(plan, changes_only=not show_all, dry_run=dry_run))
            print_plan_summary(plan)

            if not dry_run and not yes:
                if not typer.confirm("\nExecute these actions?"):
                    session.discard_plan()
                    print_info("Cancelled. Nothing was changed.")
                    return

            log = session.execute()
    except TidyError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    console.print()
    console.print(create_log_table(log, changes_only=not show_all))
    print_log_summary(log)

    if dry_run:
        print_info("Dry run: no changes made.")
    else:
        try:
            StateManager().record_log(log)
            print_info(f"Recorded as {log.id[:8]}. Reverse with 'tidyctl undo'.")
        except (OSError, RuntimeError) as e:
            print_warning(f"Failed to record history: {e}")

    if log.has_failures:
        raise typer.Exit(code=1)
