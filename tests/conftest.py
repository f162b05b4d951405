import sys
from pathlib import Path
from typing import Any

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from compression_visualizer import config as cfg
from compression_visualizer.analysis import LLMAnalysisService
from compression_visualizer.llm_providers import MockLLMProvider


def patch_config_paths(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    user_dir = tmp_path / "user"
    local_file = tmp_path / ".cvconfig.yaml"
    llm_models_config_file = tmp_path / "llm_models_config.yaml"

    monkeypatch.setattr(cfg, "USER_CONFIG_DIR", user_dir)
    monkeypatch.setattr(cfg, "USER_CONFIG_PATH", user_dir / "config.yaml")
    monkeypatch.setattr(cfg, "LOCAL_CONFIG_PATH", local_file)
    monkeypatch.setattr(cfg, "LLM_MODELS_CONFIG_PATH", llm_models_config_file)

    monkeypatch.setattr(
        cfg,
        "SOURCE_USER_CONFIG",
        f"user global config file ({user_dir / 'config.yaml'})",
        raising=False,
    )
    monkeypatch.setattr(
        cfg,
        "SOURCE_LOCAL_CONFIG",
        f"local project config file ({local_file})",
        raising=False,
    )

    for key in cfg.DEFAULT_CONFIG:
        monkeypatch.delenv(cfg.ENV_VAR_PREFIX + key.upper(), raising=False)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Keep every test away from the real user and project config files."""
    patch_config_paths(monkeypatch, tmp_path)
    return tmp_path


@pytest.fixture
def mock_provider() -> MockLLMProvider:
    return MockLLMProvider(
        default_response="85.0\nPruning half of the weights costs some accuracy but halves latency on CPU."
    )


@pytest.fixture
def mock_service(mock_provider: MockLLMProvider) -> Any:
    return LLMAnalysisService(mock_provider, "mock-model")
