"""Plan command implementation.

Previews what the rules would do to a directory without touching it.
"""

import json
from typing import Annotated

import typer

from tidyctl.cli.display import create_plan_table, print_plan_summary
from tidyctl.cli.types import (
    OutputFormat,
    RootArgument,
    create_session,
    remember_scan,
    require_rules,
    require_settings,
    warn_if_no_rules,
)
from tidyctl.core.errors import TidyError
from tidyctl.utils.formatting import console, print_error, print_success


def plan_directory(
    root: RootArgument,
    changes_only: Annotated[
        bool,
        typer.Option(
            "--changes-only",
            "-c",
            help="Hide entries that would be skipped.",
        ),
    ] = False,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format: table or json.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
) -> None:
    """Show the actions the rules would take for a directory.

    Nothing is changed on disk. Use 'tidyctl run' to execute the plan.

    Examples:
        tidyctl plan ~/Downloads                  # Full plan
        tidyctl plan ~/Downloads --changes-only   # Hide skips
        tidyctl plan ~/Downloads --format json    # For scripting
    """
    settings = require_settings()
    rules = require_rules()

    try:
        with create_session(settings, rules) as session:
            result = session.scan(root)
            plan = session.create_plan()
    except TidyError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    remember_scan(result)

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(plan.to_dict()))
        return

    warn_if_no_rules(rules)

    if not plan.has_changes:
        print_success(f"Nothing to do: no rule changes any of {len(plan)} entries.")
        return

    console.print(create_plan_table(plan, changes_only=changes_only))
    print_plan_summary(plan)
