import os
from types import SimpleNamespace
from unittest import mock

import anthropic
import httpx
import openai
import pytest

from src.journal_assistant.errors import NetworkError, UpstreamError
from src.journal_assistant.llm_client import ClaudeClient, FakeLLMClient, OpenAIClient, create_llm_client

OPENAI_URL = "https://api.openai.com/v1/chat/completions"
ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"


def openai_reply(text):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])


class TestOpenAIClient:
    def test_invoke_sends_system_and_prompt(self):
        sdk = mock.MagicMock()
        sdk.chat.completions.create.return_value = openai_reply("<log>ok</log>")
        client = OpenAIClient(chat_model="gpt-test", client=sdk)

        assert client.invoke("hello", 256, system="be brief") == "<log>ok</log>"

        kwargs = sdk.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-test"
        assert kwargs["max_tokens"] == 256
        assert kwargs["messages"] == [
            {"role": "system", "content": "be brief"},
            {"role": "user", "content": "hello"},
        ]

    def test_connection_error_maps_to_network_error(self):
        sdk = mock.MagicMock()
        sdk.chat.completions.create.side_effect = openai.APIConnectionError(
            request=httpx.Request("POST", OPENAI_URL)
        )
        with pytest.raises(NetworkError):
            OpenAIClient(client=sdk).invoke("hello", 10)

    def test_status_error_maps_to_upstream_error(self):
        sdk = mock.MagicMock()
        response = httpx.Response(500, request=httpx.Request("POST", OPENAI_URL))
        sdk.chat.completions.create.side_effect = openai.APIStatusError("boom", response=response, body=None)
        with pytest.raises(UpstreamError) as exc_info:
            OpenAIClient(client=sdk).invoke("hello", 10)
        assert "500" in str(exc_info.value)

    def test_empty_choices_is_upstream_error(self):
        sdk = mock.MagicMock()
        sdk.chat.completions.create.return_value = SimpleNamespace(choices=[])
        with pytest.raises(UpstreamError):
            OpenAIClient(client=sdk).invoke("hello", 10)


class TestClaudeClient:
    def test_invoke_reads_first_text_block(self):
        sdk = mock.MagicMock()
        sdk.messages.create.return_value = SimpleNamespace(content=[SimpleNamespace(text="<date>Friday</date>")])
        client = ClaudeClient(chat_model="claude-test", client=sdk)

        assert client.invoke("scan", 1024) == "<date>Friday</date>"

        kwargs = sdk.messages.create.call_args.kwargs
        assert kwargs["model"] == "claude-test"
        assert kwargs["max_tokens"] == 1024
        assert kwargs["messages"] == [{"role": "user", "content": "scan"}]
        assert "system" not in kwargs

    def test_system_prompt_passed_when_given(self):
        sdk = mock.MagicMock()
        sdk.messages.create.return_value = SimpleNamespace(content=[])
        assert ClaudeClient(client=sdk).invoke("hi", 10, system="ctx") == ""
        assert sdk.messages.create.call_args.kwargs["system"] == "ctx"

    def test_connection_error_maps_to_network_error(self):
        sdk = mock.MagicMock()
        sdk.messages.create.side_effect = anthropic.APIConnectionError(request=httpx.Request("POST", ANTHROPIC_URL))
        with pytest.raises(NetworkError):
            ClaudeClient(client=sdk).invoke("hi", 10)

    def test_status_error_maps_to_upstream_error(self):
        sdk = mock.MagicMock()
        response = httpx.Response(529, request=httpx.Request("POST", ANTHROPIC_URL))
        sdk.messages.create.side_effect = anthropic.APIStatusError("overloaded", response=response, body=None)
        with pytest.raises(UpstreamError):
            ClaudeClient(client=sdk).invoke("hi", 10)


class TestFakeAndFactory:
    def test_fake_consumes_script_then_default(self):
        fake = FakeLLMClient(replies=["one", NetworkError("down")], default="fallback")
        assert fake.invoke("a", 1) == "one"
        with pytest.raises(NetworkError):
            fake.invoke("b", 1)
        assert fake.invoke("c", 1) == "fallback"
        assert [c["prompt"] for c in fake.calls] == ["a", "b", "c"]

    def test_fake_responder(self):
        fake = FakeLLMClient(responder=lambda prompt: prompt.upper())
        assert fake.invoke("abc", 1) == "ABC"

    def test_factory_selects_provider(self):
        assert isinstance(create_llm_client("fake"), FakeLLMClient)
        with mock.patch.dict(os.environ, {"LLM_PROVIDER": "fake"}):
            assert isinstance(create_llm_client(), FakeLLMClient)
        with pytest.raises(ValueError):
            create_llm_client("gemini")
