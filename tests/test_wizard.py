import pytest

from compression_visualizer.catalog import get_dataset, get_model, get_technique
from compression_visualizer.exceptions import SelectionError
from compression_visualizer.models import AnalysisSource, Mode, SimulationResult, Source
from compression_visualizer.wizard import Step, WizardController


def _result() -> SimulationResult:
    return SimulationResult(
        original_size=14,
        compressed_size=7.7,
        original_params=3.5,
        compressed_params=1.75,
        original_accuracy=94.2,
        compressed_accuracy=89.49,
        summary="placeholder",
        analysis_source=AnalysisSource.FALLBACK,
    )


def _at_configure(technique: str = "pruning") -> WizardController:
    c = WizardController()
    c.advance()
    c.select_mode(Mode.MODEL)
    c.select_source(Source.PREDEFINED)
    c.set_subject(get_model("mobilenet_v2"))
    c.advance()
    c.set_technique(get_technique(Mode.MODEL, technique))
    c.advance()
    return c


def test_happy_path_model_predefined():
    c = WizardController()
    assert c.step is Step.WELCOME
    assert c.advance()
    assert c.step is Step.MODE_SELECT
    assert not c.can_advance()

    assert c.select_mode(Mode.MODEL)
    assert c.step is Step.SOURCE_SELECT
    assert c.select_source(Source.PREDEFINED)
    assert c.step is Step.SUBJECT_PREDEFINED

    assert not c.advance()
    c.set_subject(get_model("resnet50"))
    assert c.advance()
    assert c.step is Step.TECHNIQUE_SELECT

    assert not c.advance()
    c.set_technique(get_technique(Mode.MODEL, "pruning"))
    assert c.advance()
    assert c.step is Step.CONFIGURE
    assert c.effective_config() == {"sparsity": 50}

    c.set_config({"sparsity": "70"})
    assert c.effective_config() == {"sparsity": 70.0}
    assert c.advance()
    assert c.step is Step.RESULTS
    assert not c.can_advance()
    assert not c.advance()


def test_path_depends_on_source():
    c = WizardController()
    c.advance()
    c.select_mode("data")
    c.select_source("upload")
    path = c.path()
    assert Step.SUBJECT_UPLOAD in path
    assert Step.SUBJECT_PREDEFINED not in path
    assert c.progress() == (4, 7)


def test_go_back_follows_path():
    c = WizardController()
    assert not c.go_back()
    c.advance()
    c.select_mode(Mode.DATA)
    c.select_source(Source.UPLOAD)
    assert c.go_back()
    assert c.step is Step.SOURCE_SELECT
    assert c.go_back()
    assert c.step is Step.MODE_SELECT
    assert c.selection.mode is Mode.DATA


def test_select_only_on_matching_step():
    c = WizardController()
    assert not c.select_mode(Mode.MODEL)
    assert c.selection.mode is None
    c.advance()
    assert not c.select_source(Source.UPLOAD)


def test_changing_mode_resets_selection():
    c = _at_configure()
    c.go_back()
    c.go_back()
    c.go_back()
    c.go_back()
    assert c.step is Step.MODE_SELECT
    c.select_mode(Mode.MODEL)
    assert c.selection.subject is not None
    c.go_back()
    c.select_mode(Mode.DATA)
    assert c.selection.subject is None
    assert c.selection.technique is None
    assert c.selection.config == {}


def test_changing_source_clears_subject():
    c = _at_configure()
    while c.step is not Step.SOURCE_SELECT:
        c.go_back()
    c.select_source(Source.UPLOAD)
    assert c.selection.subject is None
    assert c.step is Step.SUBJECT_UPLOAD


def test_mode_mismatch_is_rejected():
    c = WizardController()
    c.advance()
    c.select_mode(Mode.MODEL)
    c.select_source(Source.PREDEFINED)
    with pytest.raises(SelectionError):
        c.set_subject(get_dataset("iris_dataset"))
    with pytest.raises(SelectionError):
        c.set_technique(get_technique(Mode.DATA, "pca"))
    assert c.selection.subject is None


def test_set_config_rejects_bad_values_atomically():
    c = _at_configure()
    c.set_config({"sparsity": 30})
    with pytest.raises(SelectionError):
        c.set_config({"sparsity": 99})
    with pytest.raises(SelectionError):
        c.set_config({"bits": 8})
    assert c.selection.config == {"sparsity": 30.0}


def test_set_config_requires_technique():
    c = WizardController()
    with pytest.raises(SelectionError):
        c.set_config({"sparsity": 50})


def test_switching_technique_clears_config():
    c = _at_configure()
    c.set_config({"sparsity": 80})
    c.go_back()
    c.set_technique(get_technique(Mode.MODEL, "pruning"))
    assert c.selection.config == {"sparsity": 80.0}
    c.set_technique(get_technique(Mode.MODEL, "quantization"))
    assert c.selection.config == {}
    assert c.effective_config() == {"bits": 8}


def test_start_over():
    c = _at_configure()
    c.advance()
    c.start_over()
    assert c.step is Step.MODE_SELECT
    assert c.selection.mode is None
    assert c.selection.subject is None
    assert c.result is None


def test_submit_upload():
    c = WizardController()
    c.advance()
    c.select_mode(Mode.MODEL)
    c.select_source(Source.UPLOAD)
    assert not c.submit_upload({"name": "x"})
    assert c.step is Step.SUBJECT_UPLOAD
    assert c.selection.subject is None

    ok = c.submit_upload(
        {
            "name": "TinyNet",
            "description": "Small",
            "size_mb": "20",
            "parameters_million": "5",
            "accuracy": "90",
        }
    )
    assert ok
    assert c.step is Step.TECHNIQUE_SELECT
    assert c.selection.subject.id.startswith("custom-")


def test_results_ticket_guard():
    c = _at_configure()
    with pytest.raises(SelectionError):
        c.begin_results()
    c.advance()
    ticket = c.begin_results()
    assert c.deliver_result(ticket, _result())
    assert c.result is not None


def test_stale_result_is_discarded_after_leaving():
    c = _at_configure()
    c.advance()
    ticket = c.begin_results()
    c.go_back()
    assert not c.deliver_result(ticket, _result())
    assert c.result is None

    c.advance()
    assert not c.deliver_result(ticket, _result())
    assert c.result is None


def test_newer_ticket_wins():
    c = _at_configure()
    c.advance()
    first = c.begin_results()
    second = c.begin_results()
    assert not c.deliver_result(first, _result())
    assert c.deliver_result(second, _result())


def test_advance_with_no_next_step_raises(monkeypatch):
    c = _at_configure()
    c.advance()
    assert c.step is Step.RESULTS
    monkeypatch.setattr(c, "can_advance", lambda: True)
    with pytest.raises(SelectionError, match="no step follows"):
        c.advance()
    assert c.step is Step.RESULTS
