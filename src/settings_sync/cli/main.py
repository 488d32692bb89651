import typer

from .commands import env, permissions, provider, settings

app = typer.Typer(help="Manage local settings and the local model provider")

# Include sub-commands
app.command("show", help="Show the current settings")(settings.show)
app.add_typer(permissions.app, name="permissions", help="Edit permission rules")
app.add_typer(env.app, name="env", help="Edit environment variables")
app.add_typer(provider.app, name="provider", help="Manage the local model provider")


def main():
    app()


if __name__ == "__main__":
    main()
