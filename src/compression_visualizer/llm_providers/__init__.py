"""LLM provider implementations.

The Gemini provider imports ``google-generativeai`` lazily inside its methods
so a missing SDK only matters when Gemini is actually called.
"""

from compression_visualizer.llm_providers_abc import LLMProvider
from .openai_provider import OpenAIProvider
from .gemini_provider import GeminiProvider
from .mock_provider import MockLLMProvider
from .factory import create_llm_provider, KNOWN_PROVIDERS

__all__ = [
    "LLMProvider",
    "OpenAIProvider",
    "GeminiProvider",
    "MockLLMProvider",
    "create_llm_provider",
    "KNOWN_PROVIDERS",
]
