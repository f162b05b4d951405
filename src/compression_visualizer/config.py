import os
import pathlib
import sys
import yaml
from typing import Any, Dict, Optional, Tuple

# Default configuration values
DEFAULT_CONFIG: Dict[str, Any] = {
    "analysis_provider": "gemini", # Provider used for the narrative analysis: gemini, openai or mock.
    "analysis_model": "gemini-2.5-flash", # Model name passed to the provider.
    "analysis_timeout": 30.0, # Seconds to wait for the analysis before falling back.
    "analysis_max_tokens": 512, # Upper bound on the analysis reply length.
    "verbose": False, # Default verbosity.
    "log_file": None, # Default log file path (None means no file logging by default).
}

# Configuration file paths
USER_CONFIG_DIR = pathlib.Path("~/.config/compression_visualizer").expanduser()
USER_CONFIG_PATH = USER_CONFIG_DIR / "config.yaml"
LOCAL_CONFIG_PATH = pathlib.Path(".cvconfig.yaml") # Project-level general config
LLM_MODELS_CONFIG_PATH = pathlib.Path("llm_models_config.yaml") # Project-level LLM models config

# Source descriptions
SOURCE_DEFAULT = "application default"
SOURCE_USER_CONFIG = f"user global config file ({USER_CONFIG_PATH})"
SOURCE_LOCAL_CONFIG = f"local project config file ({LOCAL_CONFIG_PATH})"
SOURCE_LLM_MODELS_CONFIG = f"llm models config file ({LLM_MODELS_CONFIG_PATH})"
SOURCE_ENV_VAR = "environment variable"
SOURCE_OVERRIDE = "runtime override"
SOURCE_CLI = "command-line argument"

# Environment variable prefixes
ENV_VAR_PREFIX = "COMPRESSION_VISUALIZER_"

# Keys whose value must be strictly positive
POSITIVE_KEYS = ("analysis_timeout", "analysis_max_tokens")


def _coerce(value: str, target: type) -> Any:
    if target is bool:
        return value.lower() in ("true", "1", "yes", "on")
    if target is int:
        return int(value)
    if target is float:
        return float(value)
    return value


def _out_of_range(key: str, value: Any) -> bool:
    return key in POSITIVE_KEYS and isinstance(value, (int, float)) and value <= 0


class Config:
    def __init__(self):
        self._config: Dict[str, Any] = {}
        self._sources: Dict[str, str] = {}
        self.llm_configs: Dict[str, Any] = {} # Named provider configurations

        self._load_defaults()
        self._load_file(USER_CONFIG_PATH, SOURCE_USER_CONFIG)
        self._load_file(LOCAL_CONFIG_PATH, SOURCE_LOCAL_CONFIG)
        self._load_env_vars()
        self._load_llm_models_config()
        # CLI overrides are applied by the CLI through update_from_cli

    def _load_defaults(self):
        for key, value in DEFAULT_CONFIG.items():
            self._config[key] = value
            self._sources[key] = SOURCE_DEFAULT

    def _load_file(self, path: pathlib.Path, source: str):
        if not path.exists():
            return
        try:
            with open(path, "r") as f:
                loaded = yaml.safe_load(f)
        except Exception as e:
            print(f"Error loading config '{path}': {e}", file=sys.stderr)
            return
        if loaded and isinstance(loaded, dict):
            for key, value in loaded.items():
                if key in DEFAULT_CONFIG:
                    self._config[key] = value
                    self._sources[key] = source

    def _load_llm_models_config(self):
        """Loads named provider configurations from LLM_MODELS_CONFIG_PATH."""
        if LLM_MODELS_CONFIG_PATH.exists():
            try:
                with open(LLM_MODELS_CONFIG_PATH, "r") as f:
                    loaded_llm_configs = yaml.safe_load(f)
                    if loaded_llm_configs and isinstance(loaded_llm_configs, dict):
                        self.llm_configs = loaded_llm_configs
                    elif loaded_llm_configs is not None: # File exists but is not a dict
                         print(f"Warning: LLM models config file '{LLM_MODELS_CONFIG_PATH}' does not contain a valid dictionary.", file=sys.stderr)
            except yaml.YAMLError as e:
                print(f"Error parsing LLM models config file '{LLM_MODELS_CONFIG_PATH}': {e}", file=sys.stderr)
            except Exception as e:
                print(f"Error loading LLM models config file '{LLM_MODELS_CONFIG_PATH}': {e}", file=sys.stderr)

    def _load_env_vars(self):
        for key in DEFAULT_CONFIG.keys():
            env_var_name = ENV_VAR_PREFIX + key.upper()
            env_var_value_str = os.getenv(env_var_name)
            if env_var_value_str is None:
                continue
            default_value = DEFAULT_CONFIG[key]
            try:
                actual_value = _coerce(env_var_value_str, type(default_value))
            except ValueError:
                print(
                    f"Warning: Could not cast env var {env_var_name} value '{env_var_value_str}' to type {type(default_value)}. Using string value.", file=sys.stderr
                )
                actual_value = env_var_value_str
            self._config[key] = actual_value
            self._sources[key] = f"{SOURCE_ENV_VAR} ({env_var_name})"

    def get(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def get_default(self, key: str) -> Any:
        return DEFAULT_CONFIG.get(key)

    def get_all_keys(self):
        return list(DEFAULT_CONFIG.keys())

    def set(self, key: str, value: Any, source: str = SOURCE_OVERRIDE) -> bool:
        if key not in DEFAULT_CONFIG:
            print(
                f"Error: Configuration key '{key}' is not a recognized setting. Allowed keys are: {', '.join(DEFAULT_CONFIG.keys())}",
                file=sys.stderr,
            )
            return False

        default_value = DEFAULT_CONFIG[key]
        original_type = type(default_value)

        if isinstance(value, str):
            try:
                value = _coerce(value, original_type)
            except ValueError:
                print(
                    f"Error: Invalid value format for '{key}'. Cannot convert '{value}' to {original_type}.",
                    file=sys.stderr,
                )
                return False
        elif default_value is not None and not isinstance(value, original_type):
            print(
                f"Error: Invalid type for '{key}'. Expected {original_type}, got {type(value)}.",
                file=sys.stderr,
            )
            return False

        if _out_of_range(key, value):
            print(
                f"Error: '{key}' must be greater than 0, got {value}.",
                file=sys.stderr,
            )
            return False

        self._config[key] = value
        self._sources[key] = source

        user_config_data = {}
        if USER_CONFIG_PATH.exists():
            try:
                with open(USER_CONFIG_PATH, "r") as f:
                    loaded_config = yaml.safe_load(f)
                    if isinstance(loaded_config, dict):
                        user_config_data = loaded_config
            except Exception as e:
                print(f"Error reading user config before set: {e}", file=sys.stderr)

        user_config_data[key] = value

        try:
            USER_CONFIG_DIR.mkdir(parents=True, exist_ok=True)
            with open(USER_CONFIG_PATH, "w") as f:
                yaml.dump(user_config_data, f)
            return True
        except Exception as e:
            print(f"Error writing to user config: {e}", file=sys.stderr)
            return False

    def get_with_source(self, key: str) -> Optional[Tuple[Any, str]]:
        if key in self._config:
            return self._config[key], self._sources.get(key, "Unknown")
        elif key in DEFAULT_CONFIG:
            return DEFAULT_CONFIG[key], SOURCE_DEFAULT
        return None

    def get_all_with_sources(self) -> Dict[str, Tuple[Any, str]]:
        all_data = {}
        for key in DEFAULT_CONFIG.keys():
            all_data[key] = (
                self._config.get(key, DEFAULT_CONFIG[key]),
                self._sources.get(key, SOURCE_DEFAULT),
            )
        return all_data

    def update_from_cli(self, key: str, value: Any):
        if value is None:
            return
        if key in DEFAULT_CONFIG:
            original_type = type(DEFAULT_CONFIG[key])
            if DEFAULT_CONFIG[key] is not None and not isinstance(value, original_type):
                try:
                    value = _coerce(str(value), original_type)
                except ValueError:
                    print(
                        f"Warning: CLI value for '{key}' ('{value}') could not be cast to {original_type}. Using as is.",
                        file=sys.stderr,
                    )
            if _out_of_range(key, value):
                print(
                    f"Warning: CLI value for '{key}' must be greater than 0, got {value}. Ignoring it.",
                    file=sys.stderr,
                )
                return

        self._config[key] = value
        self._sources[key] = SOURCE_CLI

    # --- LLM Model Config Methods ---
    def get_llm_config(self, name: str) -> Optional[Dict[str, Any]]:
        """
        Returns a named provider configuration, e.g. ``fast-gemini`` mapping to
        ``{"provider": "gemini", "model_name": "gemini-2.5-flash"}``.
        """
        return self.llm_configs.get(name)

    def get_all_llm_configs(self) -> Dict[str, Any]:
        """
        Returns the entire dictionary of loaded LLM configurations.
        """
        return self.llm_configs
