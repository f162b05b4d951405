import pytest

from compression_visualizer.catalog import (
    DATASETS,
    MODELS,
    assets_for,
    get_asset,
    get_dataset,
    get_model,
    get_technique,
    techniques_for,
)
from compression_visualizer.exceptions import CatalogError, SelectionError
from compression_visualizer.models import Mode, ParameterKind


def test_catalog_contents():
    assert [m.id for m in MODELS] == ["mobilenet_v2", "resnet50", "bert_base"]
    assert [d.id for d in DATASETS] == ["iris_dataset", "wine_quality", "mnist_digits"]
    assert assets_for(Mode.MODEL) is MODELS
    assert assets_for("data") is DATASETS


def test_known_values():
    mobilenet = get_model("mobilenet_v2")
    assert (mobilenet.size_mb, mobilenet.parameters_million, mobilenet.accuracy) == (14, 3.5, 94.2)
    mnist = get_dataset("mnist_digits")
    assert (mnist.features, mnist.samples) == (784, 60000)
    assert mnist.intrinsic_dimensionality is None


def test_techniques_per_mode():
    assert [t.id for t in techniques_for(Mode.MODEL)] == ["pruning", "quantization"]
    assert [t.id for t in techniques_for(Mode.DATA)] == ["pca", "sampling"]
    for mode in Mode:
        assert all(t.mode is mode for t in techniques_for(mode))


def test_unknown_ids_raise():
    with pytest.raises(CatalogError, match="Unknown model"):
        get_model("vgg16")
    with pytest.raises(CatalogError):
        get_asset(Mode.DATA, "mobilenet_v2")
    with pytest.raises(CatalogError, match="Unknown data technique"):
        get_technique(Mode.DATA, "pruning")


def test_parameter_defaults_and_bounds():
    sparsity = get_technique(Mode.MODEL, "pruning").parameter("sparsity")
    assert sparsity.kind is ParameterKind.SLIDER
    assert (sparsity.min, sparsity.max, sparsity.step, sparsity.default_value) == (10, 95, 5, 50)

    bits = get_technique(Mode.MODEL, "quantization").parameter("bits")
    assert bits.kind is ParameterKind.CHOICE
    assert [o.value for o in bits.options] == [16, 8, 4]
    assert bits.default_value == 8

    assert get_technique(Mode.DATA, "pca").parameter("variance_to_keep").default_value == 95
    assert get_technique(Mode.DATA, "sampling").parameter("sampling_ratio").default_value == 50


def test_parameter_coerce():
    pruning = get_technique(Mode.MODEL, "pruning")
    assert pruning.parameter("sparsity").coerce("70") == 70.0
    with pytest.raises(SelectionError):
        pruning.parameter("sparsity").coerce(5)
    with pytest.raises(SelectionError):
        pruning.parameter("sparsity").coerce("lots")
    with pytest.raises(SelectionError):
        pruning.parameter("missing")

    bits = get_technique(Mode.MODEL, "quantization").parameter("bits")
    assert bits.coerce("4") == 4
    with pytest.raises(SelectionError, match="not a valid choice"):
        bits.coerce(2)


def test_effective_config_fills_defaults():
    pca = get_technique(Mode.DATA, "pca")
    assert pca.effective_config({}) == {"variance_to_keep": 95}
    assert pca.effective_config({"variance_to_keep": 90.0, "other": 1}) == {"variance_to_keep": 90.0}
    assert pca.parameter("variance_to_keep").format_value(90.0) == "90%"
