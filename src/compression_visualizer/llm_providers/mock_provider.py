from typing import Any, Callable, Dict, List, Optional

from compression_visualizer.llm_providers_abc import LLMProvider


class MockLLMProvider(LLMProvider):
    """
    A mock LLM provider for tests and offline runs.
    It can return canned replies, compute a reply from the prompt, or raise a
    fixed exception to simulate an unreachable service.
    """

    def __init__(
        self,
        responses: Optional[Dict[str, str]] = None,
        default_response: str = "Mocked response",
        response_fn: Optional[Callable[[str], str]] = None,
        error: Optional[BaseException] = None,
    ):
        """
        Initializes the MockLLMProvider.

        Args:
            responses: A dictionary mapping prompt strings to predefined responses.
            default_response: The response to return if a prompt is not found in `responses`.
            response_fn: Optional callable building a reply from the prompt.
                         Takes precedence over `default_response`.
            error: If set, every call raises this exception.
        """
        self.responses: Dict[str, str] = responses if responses is not None else {}
        self.default_response: str = default_response
        self.response_fn = response_fn
        self.error = error
        self.prompts: List[str] = []

    def generate_response(
        self,
        prompt: str,
        model_name: str,
        max_new_tokens: int,
        **llm_kwargs: Any
    ) -> str:
        """
        Returns a predefined response if the prompt is in `self.responses`,
        otherwise the `response_fn` result or `self.default_response`.
        Every prompt is recorded in `self.prompts`.
        """
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        if prompt in self.responses:
            return self.responses[prompt]
        if self.response_fn is not None:
            return self.response_fn(prompt)
        return self.default_response

    def add_response(self, prompt: str, response: str) -> None:
        """
        Adds a new predefined response for a specific prompt.
        """
        self.responses[prompt] = response

    def set_default_response(self, response: str) -> None:
        """
        Updates the default response.
        """
        self.default_response = response
