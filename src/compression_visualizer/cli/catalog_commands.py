from typing import Optional

import typer
from rich.console import Console

from compression_visualizer.catalog import DATASETS, MODELS, techniques_for
from compression_visualizer.display import datasets_table, models_table, techniques_table
from compression_visualizer.models import Mode

catalog_app = typer.Typer(
    help="Browse the predefined models, datasets and compression techniques."
)
console = Console()


@catalog_app.command("models", help="Lists the predefined models.")
def list_models_command() -> None:
    console.print(models_table(MODELS, title="Predefined Models"))


@catalog_app.command("datasets", help="Lists the predefined datasets.")
def list_datasets_command() -> None:
    console.print(datasets_table(DATASETS, title="Predefined Datasets"))


@catalog_app.command(
    "techniques",
    help="Lists compression techniques and their parameters.\n\nUsage Examples:\n  compression-visualizer catalog techniques\n  compression-visualizer catalog techniques --mode data",
)
def list_techniques_command(
    mode: Optional[Mode] = typer.Option(
        None, "--mode", help="Only show techniques for this workflow (model or data)."
    ),
) -> None:
    modes = [mode] if mode else [Mode.MODEL, Mode.DATA]
    techniques = [t for m in modes for t in techniques_for(m)]
    console.print(techniques_table(techniques, title="Compression Techniques"))
