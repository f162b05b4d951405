import json
import logging
from typing import Dict, List, Optional

import typer
from rich.console import Console
from rich.panel import Panel

from compression_visualizer.analysis import build_analysis_service
from compression_visualizer.catalog import get_asset, get_technique
from compression_visualizer.display import comparison_table
from compression_visualizer.estimator import run_estimate_sync
from compression_visualizer.exceptions import (
    CatalogError,
    ConfigurationError,
    SelectionError,
)
from compression_visualizer.models import AnyResult, Mode, SimulationResult, Source
from compression_visualizer.upload import validate_upload
from compression_visualizer.wizard import Step, WizardController

logger = logging.getLogger(__name__)

simulate_app = typer.Typer(
    help="Run a one-shot compression simulation without the interactive wizard."
)
console = Console()

UPLOAD_ID = "upload"


def _parse_settings(settings: List[str]) -> Dict[str, str]:
    parsed: Dict[str, str] = {}
    for item in settings:
        if "=" not in item:
            typer.secho(
                f"Error: --set expects key=value, got '{item}'.", fg=typer.colors.RED, err=True
            )
            raise typer.Exit(code=1)
        key, value = item.split("=", 1)
        parsed[key.strip()] = value.strip()
    return parsed


def _fail(message: str) -> None:
    typer.secho(f"Error: {message}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _result_payload(result: AnyResult) -> Dict[str, object]:
    payload = result.model_dump(mode="json")
    payload["size_reduction"] = round(result.size_reduction, 4)
    if isinstance(result, SimulationResult):
        payload["params_reduction"] = round(result.params_reduction, 4)
        payload["accuracy_change"] = round(result.accuracy_change, 4)
    else:
        payload["features_reduction"] = round(result.features_reduction, 4)
    return payload


def run_simulation(
    ctx: typer.Context,
    mode: Mode,
    asset_id: str,
    technique_id: str,
    settings: List[str],
    upload_fields: Dict[str, Optional[str]],
    offline: bool,
    json_output: bool,
) -> None:
    """Walk the wizard with the given choices and print the result."""
    obj = ctx.obj or {}
    config = obj["config"]

    controller = WizardController()
    controller.advance()
    controller.select_mode(mode)
    source = Source.UPLOAD if asset_id == UPLOAD_ID else Source.PREDEFINED
    controller.select_source(source)

    if source is Source.UPLOAD:
        fields = {k: (v or "") for k, v in upload_fields.items()}
        if not controller.submit_upload(fields):
            _fail("invalid upload details: " + "; ".join(validate_upload(mode, fields)))
    else:
        try:
            controller.set_subject(get_asset(mode, asset_id))
        except CatalogError as e:
            _fail(str(e))
        controller.advance()

    try:
        controller.set_technique(get_technique(mode, technique_id))
        controller.advance()
        controller.set_config(_parse_settings(settings))
    except (CatalogError, SelectionError) as e:
        _fail(str(e))
    controller.advance()
    if controller.step is not Step.RESULTS:
        _fail(f"could not reach the results step (stopped at {controller.step.value})")

    try:
        service = build_analysis_service(
            config,
            config_name=obj.get("llm_config"),
            offline=offline,
        )
    except ConfigurationError as e:
        _fail(str(e))

    selection = controller.selection
    ticket = controller.begin_results()
    result = run_estimate_sync(
        selection.subject,
        selection.technique,
        controller.effective_config(),
        service,
        timeout=config.get("analysis_timeout"),
    )
    controller.deliver_result(ticket, result)
    logger.debug(
        "Simulated %s on %s (analysis: %s)",
        selection.technique.id,
        selection.subject.id,
        result.analysis_source.value,
    )

    if json_output:
        typer.echo(json.dumps(_result_payload(result), indent=2))
        return

    subject = selection.subject
    console.print(
        f"[bold]{subject.name}[/] with [bold]{selection.technique.name}[/] "
        + ", ".join(f"{k}={v}" for k, v in controller.effective_config().items())
    )
    console.print(comparison_table(result))
    title = "Model Analysis" if mode is Mode.MODEL else "Dataset Analysis"
    console.print(Panel(result.summary, title=title, border_style="cyan"))


_SETTINGS_HELP = "Technique parameter as key=value, e.g. --set sparsity=50. Repeatable."
_ASSET_HELP = "Catalog id (see 'catalog {}'), or 'upload' to describe your own."


@simulate_app.command(
    "model",
    help="Simulate compressing a model.\n\nUsage Examples:\n  compression-visualizer simulate model mobilenet_v2 -t pruning --set sparsity=50\n  compression-visualizer simulate model upload -t quantization --set bits=4 --name MyNet --description 'Tiny CNN' --size-mb 20 --params 5 --accuracy 91",
)
def simulate_model_command(
    ctx: typer.Context,
    model_id: str = typer.Argument(..., help=_ASSET_HELP.format("models")),
    technique: str = typer.Option(..., "--technique", "-t", help="pruning or quantization."),
    settings: List[str] = typer.Option([], "--set", "-s", help=_SETTINGS_HELP),
    name: Optional[str] = typer.Option(None, "--name", help="Upload: model name."),
    description: Optional[str] = typer.Option(None, "--description", help="Upload: model description."),
    size_mb: Optional[str] = typer.Option(None, "--size-mb", help="Upload: size in MB."),
    parameters_million: Optional[str] = typer.Option(None, "--params", help="Upload: parameters in millions."),
    accuracy: Optional[str] = typer.Option(None, "--accuracy", help="Upload: accuracy in percent."),
    offline: bool = typer.Option(False, "--offline", help="Skip the analysis service and use fallback values."),
    json_output: bool = typer.Option(False, "--json", help="Print the result as JSON."),
) -> None:
    run_simulation(
        ctx,
        Mode.MODEL,
        model_id,
        technique,
        settings,
        {
            "name": name,
            "description": description,
            "size_mb": size_mb,
            "parameters_million": parameters_million,
            "accuracy": accuracy,
        },
        offline,
        json_output,
    )


@simulate_app.command(
    "data",
    help="Simulate compressing a dataset.\n\nUsage Examples:\n  compression-visualizer simulate data iris_dataset -t sampling --set sampling_ratio=50\n  compression-visualizer simulate data mnist_digits -t pca --set variance_to_keep=90 --json",
)
def simulate_data_command(
    ctx: typer.Context,
    dataset_id: str = typer.Argument(..., help=_ASSET_HELP.format("datasets")),
    technique: str = typer.Option(..., "--technique", "-t", help="pca or sampling."),
    settings: List[str] = typer.Option([], "--set", "-s", help=_SETTINGS_HELP),
    name: Optional[str] = typer.Option(None, "--name", help="Upload: dataset name."),
    description: Optional[str] = typer.Option(None, "--description", help="Upload: dataset description."),
    size_mb: Optional[str] = typer.Option(None, "--size-mb", help="Upload: size in MB."),
    features: Optional[str] = typer.Option(None, "--features", help="Upload: number of features."),
    samples: Optional[str] = typer.Option(None, "--samples", help="Upload: number of samples."),
    offline: bool = typer.Option(False, "--offline", help="Skip the analysis service and use fallback values."),
    json_output: bool = typer.Option(False, "--json", help="Print the result as JSON."),
) -> None:
    run_simulation(
        ctx,
        Mode.DATA,
        dataset_id,
        technique,
        settings,
        {
            "name": name,
            "description": description,
            "size_mb": size_mb,
            "features": features,
            "samples": samples,
        },
        offline,
        json_output,
    )
