"""Edit permission rules."""

import typer

from settings_sync.cli.session import console, open_session, run
from settings_sync.core.error_handler import safe_entrypoint
from settings_sync.core.exceptions import CLIError

app = typer.Typer(name="permissions", help="Edit permission rules")


def _check_kind(kind: str) -> str:
    kind = kind.lower()
    if kind not in ("allow", "deny"):
        raise CLIError(f"Unknown permission list {kind!r}; use 'allow' or 'deny'")
    return kind


@app.command("add")
@safe_entrypoint("cli.permissions.add")
def add_rule(
    kind: str = typer.Argument(..., help="Which list: allow or deny"),
    rule: str = typer.Argument(..., help="Rule, e.g. 'Bash(npm run test:*)'"),
) -> None:
    """Append a permission rule."""
    kind = _check_kind(kind)

    async def _add() -> None:
        async with open_session(save=True) as aggregator:
            rules = aggregator.rules(kind)
            if rules.find_by_value(rule) is None:
                rules.add(rule)

    run(_add())
    console.print(f"Added {kind} rule: {rule}")


@app.command("remove")
@safe_entrypoint("cli.permissions.remove")
def remove_rule(
    kind: str = typer.Argument(..., help="Which list: allow or deny"),
    rule: str = typer.Argument(..., help="Exact rule text to remove"),
) -> None:
    """Remove a permission rule."""
    kind = _check_kind(kind)

    async def _remove() -> bool:
        async with open_session(save=True) as aggregator:
            rules = aggregator.rules(kind)
            entry = rules.find_by_value(rule)
            return entry is not None and rules.remove(entry.id)

    if not run(_remove()):
        typer.echo(f"No {kind} rule matching {rule!r}", err=True)
        raise typer.Exit(code=1)
    console.print(f"Removed {kind} rule: {rule}")
