from __future__ import annotations

from typing import Any
import os

import openai

from ..llm_providers_abc import LLMProvider


class OpenAIProvider(LLMProvider):
    """LLMProvider implementation for the OpenAI API and compatible servers."""

    def __init__(self, api_key: str | None = None, base_url: str | None = None) -> None:
        self.api_key = api_key
        self.base_url = base_url

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
            or os.getenv("OPENAI_API_KEY")
        )
        base_url = (
            llm_kwargs.pop("base_url", None)
            or self.base_url
            or os.getenv("OPENAI_BASE_URL")
        )

        client_kwargs = {}
        if api_key:
            client_kwargs["api_key"] = api_key
        if base_url:
            client_kwargs["base_url"] = base_url

        client = openai.OpenAI(**client_kwargs)

        messages = [{"role": "user", "content": prompt}]
        resp = client.chat.completions.create(
            model=model_name,
            messages=messages,
            max_tokens=max_new_tokens,
            **llm_kwargs,
        )
        return (resp.choices[0].message.content or "").strip()
