from typing import Optional, Any, Dict, Tuple

from compression_visualizer.config import Config
from compression_visualizer.exceptions import ConfigurationError
from compression_visualizer.llm_providers_abc import LLMProvider

KNOWN_PROVIDERS = ("gemini", "openai", "mock")


def resolve_provider_settings(
    config_name: Optional[str] = None,
    provider_type: Optional[str] = None,
    model_name: Optional[str] = None,
    app_config: Optional[Config] = None,
) -> Tuple[str, str, Dict[str, Any]]:
    """
    Returns ``(provider_type, model_name, extra)`` for the analysis provider.

    A named configuration from ``llm_models_config.yaml`` wins over the direct
    arguments, which in turn win over the ``analysis_provider`` and
    ``analysis_model`` settings. ``extra`` carries ``api_key``/``base_url``
    from a named configuration.
    """
    if not app_config:
        app_config = Config()

    extra: Dict[str, Any] = {}
    if config_name:
        llm_config_data = app_config.get_llm_config(config_name)
        if not llm_config_data:
            available_configs = list(app_config.get_all_llm_configs().keys())
            raise ConfigurationError(
                f"LLM configuration '{config_name}' not found in llm_models_config.yaml. "
                f"Available configurations: {available_configs}"
            )
        provider_type = llm_config_data.get("provider", provider_type)
        model_name = llm_config_data.get("model_name", model_name)
        for key in ("api_key", "base_url"):
            if llm_config_data.get(key):
                extra[key] = llm_config_data[key]

    provider_type = provider_type or app_config.get("analysis_provider")
    model_name = model_name or app_config.get("analysis_model")
    if not provider_type:
        raise ConfigurationError("An analysis provider must be configured.")
    return provider_type.lower(), model_name, extra


def create_llm_provider(
    config_name: Optional[str] = None,
    provider_type: Optional[str] = None,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    app_config: Optional[Config] = None,
) -> LLMProvider:
    """
    Creates an LLM provider instance based on configuration name or direct parameters.
    """
    provider_type, _, extra = resolve_provider_settings(
        config_name=config_name, provider_type=provider_type, app_config=app_config
    )
    api_key = extra.get("api_key", api_key)
    base_url = extra.get("base_url", base_url)

    # Imported here so a broken optional SDK only affects the provider using it
    from compression_visualizer.llm_providers import (
        GeminiProvider,
        MockLLMProvider,
        OpenAIProvider,
    )

    if provider_type == "openai":
        return OpenAIProvider(api_key=api_key, base_url=base_url)
    elif provider_type == "gemini":
        return GeminiProvider(api_key=api_key)
    elif provider_type == "mock":
        return MockLLMProvider()
    raise ConfigurationError(
        f"Unsupported LLM provider type: '{provider_type}'. "
        f"Supported types: {', '.join(KNOWN_PROVIDERS)}."
    )
