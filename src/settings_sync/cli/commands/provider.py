"""
Local model provider commands for the CLI.

Every command loads the stored preferences first, so ``--url`` only
overrides the base URL for the one-off checks (``models``, ``test``,
``status``); use ``set-url`` or ``enable --url`` to change it for good.
"""

import typer
from rich.table import Table

from settings_sync.cli.session import console, open_session, run
from settings_sync.core.error_handler import safe_entrypoint
from settings_sync.providers.client import ProviderHealth
from settings_sync.providers.controller import ProviderStatus
from settings_sync.providers.exceptions import ProviderError

app = typer.Typer(name="provider", help="Manage the local model provider")


@app.command("enable")
@safe_entrypoint("cli.provider.enable")
def enable(
    url: str | None = typer.Option(None, "--url", help="Base URL of the server"),
) -> None:
    """Route inference to the local provider and discover its models."""

    async def _enable() -> ProviderStatus:
        async with open_session(save=True) as aggregator:
            if url:
                await aggregator.provider.change_base_url(url)
            await aggregator.provider.toggle_enabled(True)
            return aggregator.provider.status

    status = run(_enable())
    console.print(f"Local provider enabled ({status.value})")
    if status is ProviderStatus.ERROR:
        raise typer.Exit(code=1)


@app.command("disable")
@safe_entrypoint("cli.provider.disable")
def disable() -> None:
    """Stop routing inference to the local provider."""

    async def _disable() -> None:
        async with open_session(save=True) as aggregator:
            await aggregator.provider.toggle_enabled(False)

    run(_disable())
    console.print("Local provider disabled")


@app.command("select")
@safe_entrypoint("cli.provider.select")
def select(model: str = typer.Argument(..., help="Model identifier")) -> None:
    """Select the model inference is routed to."""

    async def _select() -> bool:
        async with open_session(save=True) as aggregator:
            return await aggregator.provider.select_model(model)

    if not run(_select()):
        raise typer.Exit(code=1)
    console.print(f"Selected model: {model}")


@app.command("set-url")
@safe_entrypoint("cli.provider.set_url")
def set_url(url: str = typer.Argument(..., help="Base URL of the server")) -> None:
    """Change the provider base URL."""

    async def _set_url() -> None:
        async with open_session(save=True) as aggregator:
            await aggregator.provider.change_base_url(url)

    run(_set_url())
    console.print(f"Base URL set to {url}")


@app.command("models")
@safe_entrypoint("cli.provider.models")
def list_models(
    url: str | None = typer.Option(None, "--url", help="Base URL to query"),
) -> None:
    """List the models the server advertises."""

    async def _models() -> tuple[list[str], str]:
        async with open_session(save=False) as aggregator:
            state = aggregator.provider.state
            base_url = url or state.base_url
            models = await aggregator.provider.client.fetch_models(base_url)
            return models, state.selected_model

    try:
        models, selected = run(_models())
    except ProviderError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1) from e

    if not models:
        typer.echo("No models found. Make sure a model is loaded.")
        return
    for model in models:
        marker = "*" if model == selected else " "
        typer.echo(f"{marker} {model}")


@app.command("test")
@safe_entrypoint("cli.provider.test")
def test_connection(
    url: str | None = typer.Option(None, "--url", help="Base URL to check"),
) -> None:
    """Check that the server answers the model-listing endpoint."""

    async def _test() -> tuple[bool, str]:
        async with open_session(save=False) as aggregator:
            base_url = url or aggregator.provider.state.base_url
            return await aggregator.provider.client.test_connection(base_url), base_url

    connected, base_url = run(_test())
    if not connected:
        typer.echo(f"Failed to connect to {base_url}", err=True)
        raise typer.Exit(code=1)
    console.print(f"[green]Connected to {base_url}[/green]")


@app.command("status")
@safe_entrypoint("cli.provider.status")
def status(
    url: str | None = typer.Option(None, "--url", help="Base URL to inspect"),
) -> None:
    """Show diagnostics for the provider endpoint."""

    async def _status() -> ProviderHealth:
        async with open_session(save=False) as aggregator:
            return await aggregator.provider.check_status(url)

    health = run(_status())

    table = Table(show_header=True, header_style="bold")
    table.add_column("Check")
    table.add_column("Result")
    table.add_row("URL", health.url)
    table.add_row("Reachable", "yes" if health.reachable else "no")
    table.add_row("Status", str(health.status_code or "-"))
    table.add_row(
        "Response time",
        f"{health.response_time_ms} ms" if health.response_time_ms is not None else "-",
    )
    table.add_row("API object", health.api_object or "-")
    table.add_row("Models available", str(health.model_count))
    table.add_row("Content type", health.content_type or "-")
    if health.error:
        table.add_row("Error", health.error)
    console.print(table)

    if not health.reachable:
        raise typer.Exit(code=1)
