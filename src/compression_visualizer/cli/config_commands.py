from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from compression_visualizer.config import Config, DEFAULT_CONFIG, USER_CONFIG_PATH

config_app = typer.Typer(
    help="Manage Compression Visualizer configuration settings."
)

@config_app.command(
    "set",
    help="Sets a configuration key to a new value in the user's global config file.\n\nUsage Examples:\n  compression-visualizer config set analysis_provider openai\n  compression-visualizer config set analysis_timeout 10",
)
def set_config_command(
    ctx: typer.Context,
    key: str = typer.Argument(
        ...,
        help=f"The configuration key to set. Valid keys: {', '.join(DEFAULT_CONFIG.keys())}.",
    ),
    value: str = typer.Argument(..., help="The new value for the configuration key."),
) -> None:
    config: Config = ctx.obj["config"]
    if config.set(key, value):
        typer.secho(
            f"Successfully set '{key}' to '{value}' in the user global configuration: {USER_CONFIG_PATH}",
            fg=typer.colors.GREEN,
        )
        typer.echo(
            "Note: Environment variables or a local '.cvconfig.yaml' may override this global setting."
        )
    else:
        # Config.set has already reported the problem on stderr
        raise typer.Exit(code=1)


@config_app.command(
    "show",
    help="Displays current configuration values, their effective settings, and their sources.\n\nUsage Examples:\n  compression-visualizer config show\n  compression-visualizer config show --key analysis_model",
)
def show_config_command(
    ctx: typer.Context,
    key: Optional[str] = typer.Option(
        None,
        "--key",
        "-k",
        help=f"Specific configuration key to display. Valid keys: {', '.join(DEFAULT_CONFIG.keys())}.",
    ),
) -> None:
    config: Config = ctx.obj["config"]
    console = Console(width=200)
    table = Table(title="Compression Visualizer Configuration")
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Effective Value", style="magenta", overflow="fold")
    table.add_column("Source", style="green", no_wrap=True, overflow="fold")

    if key:
        if key not in config.get_all_keys():
            typer.secho(f"Error: Configuration key '{key}' is not a recognized key.", fg=typer.colors.RED, err=True)
            typer.echo("Known configuration keys are:", err=True)
            for known_key in sorted(config.get_all_keys()):
                typer.echo(f"- {known_key}", err=True)
            raise typer.Exit(code=1)
        value, source_info = config.get_with_source(key)
        table.add_row(key, str(value) if value is not None else "Not Set", source_info)
    else:
        for k_val, (value, source_info) in sorted(config.get_all_with_sources().items()):
            table.add_row(k_val, str(value) if value is not None else "Not Set", source_info)

    console.print(table)
