from __future__ import annotations

"""Abstract base class for Large Language Model providers."""

from abc import ABC, abstractmethod


class LLMProvider(ABC):
    """Interface for LLM provider implementations."""

    @abstractmethod
    def generate_response(
        self,
        prompt: str,
        model_name: str,
        max_new_tokens: int,
        **llm_kwargs,
    ) -> str:
        """Generate a text completion from ``prompt``."""
