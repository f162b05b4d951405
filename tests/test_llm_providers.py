import sys
import types
import unittest
from unittest import mock

from compression_visualizer.llm_providers.gemini_provider import GeminiProvider
from compression_visualizer.llm_providers.mock_provider import MockLLMProvider
from compression_visualizer.llm_providers.openai_provider import OpenAIProvider


class TestMockLLMProvider(unittest.TestCase):

    def test_instantiation_default(self):
        provider = MockLLMProvider()
        self.assertEqual(provider.default_response, "Mocked response")
        self.assertEqual(provider.responses, {})
        self.assertEqual(provider.prompts, [])

    def test_generate_response_predefined(self):
        provider = MockLLMProvider(responses={"test_prompt": "test_response"})
        response = provider.generate_response("test_prompt", "test_model", max_new_tokens=50)
        self.assertEqual(response, "test_response")
        self.assertEqual(provider.prompts, ["test_prompt"])

    def test_generate_response_default(self):
        provider = MockLLMProvider(default_response="Default answer")
        response = provider.generate_response("unknown_prompt", "test_model", max_new_tokens=50)
        self.assertEqual(response, "Default answer")

    def test_response_fn_takes_precedence_over_default(self):
        provider = MockLLMProvider(response_fn=lambda p: f"{len(p)}\nlength")
        self.assertEqual(provider.generate_response("abc", "m", 10), "3\nlength")

    def test_error_is_raised(self):
        provider = MockLLMProvider(error=TimeoutError("slow"))
        with self.assertRaises(TimeoutError):
            provider.generate_response("p", "m", 10)
        self.assertEqual(provider.prompts, ["p"])

    def test_add_and_set_default(self):
        provider = MockLLMProvider()
        provider.add_response("new_prompt", "new_response")
        provider.set_default_response("Updated default")
        self.assertEqual(provider.generate_response("new_prompt", "m", 5), "new_response")
        self.assertEqual(provider.generate_response("other", "m", 5), "Updated default")


class TestOpenAIProvider(unittest.TestCase):

    @mock.patch("compression_visualizer.llm_providers.openai_provider.openai.OpenAI")
    def test_generate_response(self, mock_client_cls):
        message = mock.Mock(content="  91.0\nLooks good.  ")
        mock_client = mock_client_cls.return_value
        mock_client.chat.completions.create.return_value = mock.Mock(
            choices=[mock.Mock(message=message)]
        )
        provider = OpenAIProvider(api_key="sk-test", base_url="http://localhost:8000/v1")
        reply = provider.generate_response("prompt", "gpt-4o-mini", max_new_tokens=64)

        self.assertEqual(reply, "91.0\nLooks good.")
        mock_client_cls.assert_called_once_with(
            api_key="sk-test", base_url="http://localhost:8000/v1"
        )
        mock_client.chat.completions.create.assert_called_once_with(
            model="gpt-4o-mini",
            messages=[{"role": "user", "content": "prompt"}],
            max_tokens=64,
        )

    @mock.patch.dict("os.environ", {"OPENAI_API_KEY": "env-key"}, clear=False)
    @mock.patch("compression_visualizer.llm_providers.openai_provider.openai.OpenAI")
    def test_api_key_from_environment(self, mock_client_cls):
        mock_client_cls.return_value.chat.completions.create.return_value = mock.Mock(
            choices=[mock.Mock(message=mock.Mock(content=None))]
        )
        reply = OpenAIProvider().generate_response("p", "m", 8)
        self.assertEqual(reply, "")
        self.assertEqual(mock_client_cls.call_args.kwargs["api_key"], "env-key")


class TestGeminiProvider(unittest.TestCase):

    def _fake_genai(self, text):
        genai = types.ModuleType("google.generativeai")
        genai.configure = mock.Mock()
        model = mock.Mock()
        model.generate_content.return_value = mock.Mock(text=text)
        genai.GenerativeModel = mock.Mock(return_value=model)
        google = types.ModuleType("google")
        google.generativeai = genai
        return google, genai, model

    def test_generate_response(self):
        google, genai, model = self._fake_genai(" 7.5\nSome loss. ")
        with mock.patch.dict(sys.modules, {"google": google, "google.generativeai": genai}):
            reply = GeminiProvider(api_key="g-key").generate_response(
                "prompt", "gemini-2.5-flash", max_new_tokens=256
            )
        self.assertEqual(reply, "7.5\nSome loss.")
        genai.configure.assert_called_once_with(api_key="g-key")
        genai.GenerativeModel.assert_called_once_with("gemini-2.5-flash")
        model.generate_content.assert_called_once_with(
            "prompt", generation_config={"max_output_tokens": 256}
        )


if __name__ == "__main__":
    unittest.main()
