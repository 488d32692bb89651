"""Read-only view of the settings working copy."""

import typer
from rich.table import Table

from settings_sync.cli.session import console, open_session, run
from settings_sync.core.error_handler import safe_entrypoint
from settings_sync.settings.aggregator import SettingsAggregator


def _render(aggregator: SettingsAggregator) -> None:
    typed = aggregator.typed_settings

    general = Table(title="General", show_header=True, header_style="bold")
    general.add_column("Setting")
    general.add_column("Value")
    general.add_row("includeCoAuthoredBy", str(typed.include_co_authored_by))
    general.add_row("verbose", str(typed.verbose))
    general.add_row("cleanupPeriodDays", str(typed.cleanup_period_days or "-"))
    general.add_row("apiKeyHelper", typed.api_key_helper or "-")
    general.add_row("startup intro", str(aggregator.startup_intro_enabled))
    console.print(general)

    rules = Table(title="Permissions", show_header=True, header_style="bold")
    rules.add_column("List")
    rules.add_column("Rule")
    for kind in ("allow", "deny"):
        for rule in aggregator.rules(kind):
            rules.add_row(kind, rule.value)
    console.print(rules)

    env = Table(title="Environment", show_header=True, header_style="bold")
    env.add_column("Key")
    env.add_column("Value")
    for variable in aggregator.env_vars:
        env.add_row(variable.key, variable.value)
    console.print(env)

    state = aggregator.provider.state
    provider = Table(title="Local provider", show_header=True, header_style="bold")
    provider.add_column("Field")
    provider.add_column("Value")
    provider.add_row("status", state.status.value)
    provider.add_row("base URL", state.base_url)
    provider.add_row("selected model", state.selected_model or "-")
    provider.add_row("available models", ", ".join(state.available_models) or "-")
    console.print(provider)


@safe_entrypoint("cli.show")
def show(
    log_level: str = typer.Option(
        "WARNING", "--log-level", help="Logging level (e.g., DEBUG, INFO, WARNING)"
    ),
) -> None:
    """Show the current settings."""

    async def _show() -> None:
        async with open_session(save=False, log_level=log_level) as aggregator:
            _render(aggregator)

    run(_show())
