import logging
from pathlib import Path
from typing import Optional

import typer

from compression_visualizer import __version__
from compression_visualizer.config import Config
from compression_visualizer.logging_utils import configure_logging

from .catalog_commands import catalog_app
from .config_commands import config_app
from .simulate_commands import simulate_app

app = typer.Typer(
    help="Compression Visualizer: explore how pruning, quantization, PCA and sampling would shrink a model or dataset."
)

app.add_typer(catalog_app, name="catalog")
app.add_typer(simulate_app, name="simulate")
app.add_typer(config_app, name="config")


def version_callback(value: bool):
    if value:
        typer.echo(f"Compression Visualizer version: {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Path to write debug logs. If not set, logs are not written to file.",
        resolve_path=True,
        show_default=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable verbose (DEBUG level) logging to console and log file (if specified).",
    ),
    provider: Optional[str] = typer.Option(
        None,
        "--provider",
        help="Analysis provider for this invocation (gemini, openai or mock).",
        show_default=False,
    ),
    model: Optional[str] = typer.Option(
        None,
        "--model",
        help="Model name passed to the analysis provider.",
        show_default=False,
    ),
    llm_config: Optional[str] = typer.Option(
        None,
        "--llm-config",
        help="Named configuration from llm_models_config.yaml. Takes precedence over --provider and --model.",
        show_default=False,
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for the analysis before using fallback values.",
        show_default=False,
    ),
    version: Optional[bool] = typer.Option(
        None,
        "-v",
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show the application version and exit.",
    ),
):
    """
    Compression Visualizer CLI main entry point.
    Resolves configuration and logging, then hands over to the subcommand.
    """
    if ctx.obj is None:
        ctx.obj = {}

    config = Config()
    config.update_from_cli("analysis_provider", provider)
    config.update_from_cli("analysis_model", model)
    config.update_from_cli("analysis_timeout", timeout)

    resolved_log_file = (
        log_file
        if log_file
        else Path(config.get("log_file")) if config.get("log_file") else None
    )
    resolved_verbose = verbose or bool(config.get("verbose", False))

    if resolved_log_file:
        level = logging.DEBUG if resolved_verbose else logging.INFO
        configure_logging(resolved_log_file.expanduser().resolve(), level)
    elif resolved_verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s: %(message)s")
    else:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    ctx.obj["config"] = config
    ctx.obj["verbose"] = resolved_verbose
    ctx.obj["log_file"] = str(resolved_log_file) if resolved_log_file else None
    ctx.obj["llm_config"] = llm_config

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command(
    "wizard",
    help="Launch the interactive step-by-step wizard in the terminal.",
)
def wizard_command(
    ctx: typer.Context,
    offline: bool = typer.Option(
        False, "--offline", help="Skip the analysis service and use fallback values."
    ),
) -> None:
    from compression_visualizer.analysis import build_analysis_service
    from compression_visualizer.exceptions import ConfigurationError
    from compression_visualizer.tui import run_tui

    config = ctx.obj["config"]
    try:
        service = build_analysis_service(
            config, config_name=ctx.obj.get("llm_config"), offline=offline
        )
    except ConfigurationError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    try:
        run_tui(service=service, app_config=config)
    except RuntimeError as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
