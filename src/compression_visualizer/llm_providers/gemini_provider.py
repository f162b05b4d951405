from __future__ import annotations

from typing import Any
import os


from ..llm_providers_abc import LLMProvider


class GeminiProvider(LLMProvider):
    """LLMProvider implementation for Google Gemini."""

    def __init__(self, api_key: str | None = None) -> None:
        self.api_key = api_key

    def generate_response(
        self,
        prompt: str,
        model_name: str,
        max_new_tokens: int,
        **llm_kwargs: Any,
    ) -> str:
        api_key = (
            llm_kwargs.pop("api_key", None)
            or self.api_key
            or os.getenv("GEMINI_API_KEY")
            or os.getenv("GOOGLE_API_KEY")
        )
        try:
            import google.generativeai as genai
        except Exception as exc:  # pragma: no cover - optional dependency
            raise ImportError(
                "google-generativeai is required for GeminiProvider"
            ) from exc
        if api_key:
            genai.configure(api_key=api_key)
        model = genai.GenerativeModel(model_name)
        resp = model.generate_content(
            prompt, generation_config={"max_output_tokens": max_new_tokens}
        )
        return resp.text.strip()
