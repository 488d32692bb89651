"""Edit environment variables."""

import typer

from settings_sync.cli.session import console, open_session, run
from settings_sync.core.error_handler import safe_entrypoint

app = typer.Typer(name="env", help="Edit environment variables")


@app.command("set")
@safe_entrypoint("cli.env.set")
def set_var(
    key: str = typer.Argument(..., help="Variable name"),
    value: str = typer.Argument(..., help="Variable value"),
) -> None:
    """Set an environment variable."""

    async def _set() -> None:
        async with open_session(save=True) as aggregator:
            aggregator.env_vars.upsert(key, value)

    run(_set())
    console.print(f"Set {key}")


@app.command("unset")
@safe_entrypoint("cli.env.unset")
def unset_var(key: str = typer.Argument(..., help="Variable name")) -> None:
    """Remove an environment variable."""

    async def _unset() -> int:
        async with open_session(save=True) as aggregator:
            return aggregator.env_vars.discard_key(key)

    if not run(_unset()):
        typer.echo(f"No environment variable named {key}", err=True)
        raise typer.Exit(code=1)
    console.print(f"Removed {key}")
