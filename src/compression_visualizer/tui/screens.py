from __future__ import annotations

from typing import Dict, Optional

from rich.console import Group
from rich.panel import Panel
from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import VerticalScroll
from textual.screen import Screen
from textual.widgets import DataTable, Footer, Header, Input, Static

from ..analysis import AnalysisService
from ..catalog import assets_for, get_asset, get_technique, techniques_for
from ..charts import simulate_correlation_matrix, simulate_pca_projection
from ..display import comparison_table, heatmap_text, scatter_text, step_indicator
from ..estimator import run_estimate
from ..exceptions import SelectionError
from ..models import DatasetAsset, DataSimulationResult, Mode, ModelAsset, Source
from ..upload import upload_fields, validate_upload
from ..wizard import Step, WizardController


class WizardScreen(Screen):
    """Base for the step screens: step indicator on top, status bar below."""

    BINDINGS = [("escape", "app.back", "Back")]

    @property
    def controller(self) -> WizardController:
        return self.app.controller  # type: ignore[attr-defined]

    def compose_header(self) -> ComposeResult:
        yield Header()
        yield Static(step_indicator(self.controller), id="steps")

    def compose_footer(self) -> ComposeResult:
        yield Static("", id="status")
        yield Footer()

    def set_status(self, message: str, *, error: bool = False) -> None:
        bar = self.query_one("#status", Static)
        if error:
            bar.update(Text(message, style="red"))
        else:
            bar.update(message)

    def show_next(self) -> None:
        self.app.show_step()  # type: ignore[attr-defined]


class WelcomeScreen(WizardScreen):
    BINDINGS = [("enter", "start", "Start")]

    def compose(self) -> ComposeResult:  # type: ignore[override]
        yield from self.compose_header()
        text = (
            "Welcome to the Compression Visualizer\n\n"
            "Pick a model or dataset, choose a compression technique and see\n"
            "a simulated before/after comparison with an AI-written analysis.\n\n"
            "Press Enter to begin. Escape goes back, R starts over, Q quits."
        )
        yield Static(text, id="welcome")
        yield from self.compose_footer()

    def action_start(self) -> None:
        self.controller.advance()
        self.show_next()


class ModeScreen(WizardScreen):
    BINDINGS = [("m", "pick('model')", "Model"), ("d", "pick('data')", "Data")]

    def compose(self) -> ComposeResult:  # type: ignore[override]
        yield from self.compose_header()
        yield Static(
            "What do you want to compress?\n\n"
            "[M] A machine-learning model (pruning, quantization)\n"
            "[D] A dataset (PCA, sampling)",
            id="mode",
            markup=False,
        )
        yield from self.compose_footer()

    def action_pick(self, mode: str) -> None:
        if self.controller.select_mode(Mode(mode)):
            self.show_next()


class SourceScreen(WizardScreen):
    BINDINGS = [
        ("p", "pick('predefined')", "Catalog"),
        ("u", "pick('upload')", "Upload"),
    ]

    def compose(self) -> ComposeResult:  # type: ignore[override]
        noun = "model" if self.controller.mode is Mode.MODEL else "dataset"
        yield from self.compose_header()
        yield Static(
            f"Where does the {noun} come from?\n\n"
            f"[P] Pick a predefined {noun}\n"
            f"[U] Describe your own {noun}",
            id="source",
            markup=False,
        )
        yield from self.compose_footer()

    def action_pick(self, source: str) -> None:
        if self.controller.select_source(Source(source)):
            self.show_next()


class CatalogScreen(WizardScreen):
    def compose(self) -> ComposeResult:  # type: ignore[override]
        table = DataTable(id="catalog", cursor_type="row")
        if self.controller.mode is Mode.MODEL:
            table.add_columns("name", "size (MB)", "params (M)", "accuracy (%)", "description")
        else:
            table.add_columns("name", "size (MB)", "features", "samples", "description")
        yield from self.compose_header()
        yield Static("Select one and press Enter", id="hint")
        yield table
        yield from self.compose_footer()

    def on_mount(self) -> None:
        table = self.query_one("#catalog", DataTable)
        for asset in assets_for(self.controller.mode):
            if isinstance(asset, ModelAsset):
                cells = (f"{asset.parameters_million:g}", f"{asset.accuracy:g}")
            else:
                cells = (str(asset.features), str(asset.samples))
            table.add_row(asset.name, f"{asset.size_mb:g}", *cells, asset.description, key=asset.id)
        table.focus()

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        asset = get_asset(self.controller.mode, str(event.row_key.value))
        self.controller.set_subject(asset)
        if self.controller.advance():
            self.show_next()


class UploadScreen(WizardScreen):
    def compose(self) -> ComposeResult:  # type: ignore[override]
        yield from self.compose_header()
        yield Static("Describe it and press Enter on any field to continue", id="hint")
        for field_id, label in upload_fields(self.controller.mode):
            yield Static(label, classes="label")
            yield Input(id=f"field-{field_id}", placeholder=label)
        yield Static("", id="problems")
        yield from self.compose_footer()

    def on_mount(self) -> None:
        self.query(Input).first().focus()
        self._show_problems()

    def _fields(self) -> Dict[str, str]:
        return {
            field_id: self.query_one(f"#field-{field_id}", Input).value
            for field_id, _ in upload_fields(self.controller.mode)
        }

    def _show_problems(self) -> None:
        problems = validate_upload(self.controller.mode, self._fields())
        self.query_one("#problems", Static).update(
            Text("\n".join(problems), style="yellow") if problems else Text("Ready.", style="green")
        )

    def on_input_changed(self, event: Input.Changed) -> None:
        self._show_problems()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if self.controller.submit_upload(self._fields()):
            self.show_next()
        else:
            self.set_status("Please fix the problems listed above.", error=True)


class TechniqueScreen(WizardScreen):
    def compose(self) -> ComposeResult:  # type: ignore[override]
        table = DataTable(id="techniques", cursor_type="row")
        table.add_columns("technique", "description")
        yield from self.compose_header()
        yield Static(f"Compressing {self.controller.selection.subject.name}", id="hint")
        yield table
        yield from self.compose_footer()

    def on_mount(self) -> None:
        table = self.query_one("#techniques", DataTable)
        for technique in techniques_for(self.controller.mode):
            table.add_row(technique.name, technique.description, key=technique.id)
        table.focus()

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        technique = get_technique(self.controller.mode, str(event.row_key.value))
        self.controller.set_technique(technique)
        if self.controller.advance():
            self.show_next()


class ConfigureScreen(WizardScreen):
    def compose(self) -> ComposeResult:  # type: ignore[override]
        technique = self.controller.selection.technique
        config = self.controller.effective_config()
        yield from self.compose_header()
        yield Static(f"{technique.name}: {technique.description}", id="hint")
        for param in technique.parameters:
            if param.options:
                allowed = ", ".join(f"{o.value} ({o.label})" for o in param.options)
            else:
                allowed = f"{param.min:g}-{param.max:g}{param.unit}, step {param.step:g}"
            yield Static(f"{param.name} [{allowed}]", classes="label", markup=False)
            value = config[param.id]
            if isinstance(value, float) and value.is_integer():
                value = int(value)
            yield Input(value=str(value), id=f"param-{param.id}")
        yield Static("Press Enter to run the simulation", id="run-hint")
        yield from self.compose_footer()

    def on_mount(self) -> None:
        self.query(Input).first().focus()

    def _param_id(self, event: Input.Changed | Input.Submitted) -> str:
        return (event.input.id or "")[len("param-") :]

    def on_input_changed(self, event: Input.Changed) -> None:
        try:
            self.controller.set_config({self._param_id(event): event.value})
        except SelectionError as exc:
            self.set_status(str(exc), error=True)
        else:
            self.set_status("")

    def on_input_submitted(self, event: Input.Submitted) -> None:
        values = {
            (inp.id or "")[len("param-") :]: inp.value for inp in self.query(Input)
        }
        try:
            self.controller.set_config(values)
        except SelectionError as exc:
            self.set_status(str(exc), error=True)
            return
        if self.controller.advance():
            self.show_next()


class ResultsScreen(WizardScreen):
    def compose(self) -> ComposeResult:  # type: ignore[override]
        selection = self.controller.selection
        yield from self.compose_header()
        yield Static(
            f"{selection.subject.name} with {selection.technique.name}", id="hint"
        )
        yield VerticalScroll(
            Static("", id="comparison"),
            Static("", id="summary"),
            Static("", id="charts"),
        )
        yield from self.compose_footer()

    def on_mount(self) -> None:
        ticket = self.controller.begin_results()
        self.set_status("Analyzing...")
        self.run_worker(self._estimate(ticket), exclusive=True, group="estimate")

    async def _estimate(self, ticket: int) -> None:
        app = self.app
        selection = self.controller.selection
        result = await run_estimate(
            selection.subject,
            selection.technique,
            self.controller.effective_config(),
            app.service,  # type: ignore[attr-defined]
            timeout=app.timeout,  # type: ignore[attr-defined]
        )
        if self.controller.deliver_result(ticket, result):
            self._render_result()

    def _render_result(self) -> None:
        result = self.controller.result
        subject = self.controller.selection.subject
        self.query_one("#comparison", Static).update(comparison_table(result))
        title = "Model Analysis" if isinstance(subject, ModelAsset) else "Dataset Analysis"
        self.query_one("#summary", Static).update(
            Panel(result.summary, title=title, border_style="cyan")
        )
        if isinstance(subject, DatasetAsset) and isinstance(result, DataSimulationResult):
            clusters = simulate_pca_projection(
                subject.id, result.original_features, result.compressed_features
            )
            self.query_one("#charts", Static).update(
                Group(
                    Panel(heatmap_text(simulate_correlation_matrix(subject)), title="Feature Correlation (simulated)"),
                    Panel(scatter_text(clusters), title="PCA Projection (simulated)"),
                )
            )
        self.set_status("Done. Press R to start over.")


STEP_SCREENS = {
    Step.WELCOME: WelcomeScreen,
    Step.MODE_SELECT: ModeScreen,
    Step.SOURCE_SELECT: SourceScreen,
    Step.SUBJECT_PREDEFINED: CatalogScreen,
    Step.SUBJECT_UPLOAD: UploadScreen,
    Step.TECHNIQUE_SELECT: TechniqueScreen,
    Step.CONFIGURE: ConfigureScreen,
    Step.RESULTS: ResultsScreen,
}


class WizardApp(App):
    CSS_PATH = None
    TITLE = "Compression Visualizer"
    BINDINGS = [
        ("r", "restart", "Start over"),
        ("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        controller: WizardController,
        service: AnalysisService,
        timeout: Optional[float] = None,
    ) -> None:
        super().__init__()
        self.controller = controller
        self.service = service
        self.timeout = timeout

    def on_mount(self) -> None:
        self.push_screen(STEP_SCREENS[self.controller.step]())

    def show_step(self) -> None:
        """Replace the current screen with the one for the controller's step."""
        self.switch_screen(STEP_SCREENS[self.controller.step]())

    def action_back(self) -> None:
        if self.controller.go_back():
            self.show_step()

    def action_restart(self) -> None:
        self.controller.start_over()
        self.show_step()


__all__ = [
    "WizardApp",
    "WizardScreen",
    "WelcomeScreen",
    "ModeScreen",
    "SourceScreen",
    "CatalogScreen",
    "UploadScreen",
    "TechniqueScreen",
    "ConfigureScreen",
    "ResultsScreen",
    "STEP_SCREENS",
]
