"""
Text-completion clients for OpenAI and Anthropic Claude.

Every client exposes ``invoke(prompt, max_tokens, system=None) -> str`` and
raises only ``NetworkError`` (connection failures, timeouts) or
``UpstreamError`` (error statuses, empty or unreadable bodies).
"""

import os
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Literal, Optional, Sequence, Union

import anthropic
import openai

from src.journal_assistant.errors import NetworkError, UpstreamError
from src.journal_assistant.logging_setup import get_logger

log = get_logger(__name__)


def _timeout_kwargs(timeout: Optional[float]) -> Dict[str, Any]:
    # the SDKs read an explicit None as "never time out"
    return {"timeout": timeout} if timeout is not None else {}


class LLMClient(ABC):
    """Abstract base class for LLM clients."""

    @abstractmethod
    def invoke(self, prompt: str, max_tokens: int, system: Optional[str] = None) -> str:
        """Send a single prompt and return the response text."""
        pass


class OpenAIClient(LLMClient):
    """OpenAI chat completions (GPT-4o etc.)."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        chat_model: Optional[str] = None,
        timeout: Optional[float] = None,
        temperature: float = 0.0,
        client: Any = None,
    ):
        self.client = client or openai.OpenAI(
            api_key=api_key or os.getenv("OPENAI_API_KEY"),
            **_timeout_kwargs(timeout),
        )
        self.chat_model = chat_model or os.getenv("OPENAI_CHAT_MODEL", "gpt-4o")
        self.temperature = temperature

    def invoke(self, prompt: str, max_tokens: int, system: Optional[str] = None) -> str:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        try:
            response = self.client.chat.completions.create(
                model=self.chat_model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=self.temperature,
            )
        except openai.APIConnectionError as exc:
            log.warning("llm_network_error", provider="openai", error=str(exc))
            raise NetworkError(f"OpenAI request failed: {exc}") from exc
        except openai.OpenAIError as exc:
            meta = {}
            err_data = getattr(exc, "response", None)
            if err_data is not None:
                meta["status"] = getattr(err_data, "status_code", None)
            log.warning("llm_upstream_error", provider="openai", error=str(exc), **meta)
            raise UpstreamError(f"OpenAI chat failed: {exc} meta={meta}") from exc
        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError) as exc:
            raise UpstreamError(f"OpenAI response had no message: {exc}") from exc
        return content or ""


class ClaudeClient(LLMClient):
    """Anthropic Claude messages API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        chat_model: Optional[str] = None,
        timeout: Optional[float] = None,
        temperature: float = 0.0,
        client: Any = None,
    ):
        self.client = client or anthropic.Anthropic(
            api_key=api_key or os.getenv("ANTHROPIC_API_KEY"),
            **_timeout_kwargs(timeout),
        )
        self.chat_model = chat_model or os.getenv("ANTHROPIC_CHAT_MODEL", "claude-sonnet-4-5")
        self.temperature = temperature

    def invoke(self, prompt: str, max_tokens: int, system: Optional[str] = None) -> str:
        kwargs: Dict[str, Any] = {
            "model": self.chat_model,
            "max_tokens": max_tokens,
            "temperature": self.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            kwargs["system"] = system
        try:
            response = self.client.messages.create(**kwargs)
        except anthropic.APIConnectionError as exc:
            log.warning("llm_network_error", provider="claude", error=str(exc))
            raise NetworkError(f"Claude request failed: {exc}") from exc
        except anthropic.AnthropicError as exc:
            log.warning("llm_upstream_error", provider="claude", error=str(exc))
            raise UpstreamError(f"Claude chat failed: {exc}") from exc

        # Only the first block is read; it is a text block for plain prompts
        if response.content and len(response.content) > 0:
            return getattr(response.content[0], "text", "") or ""
        return ""


ScriptedReply = Union[str, Exception]


class FakeLLMClient(LLMClient):
    """
    Scripted client for tests and offline runs. Replies are consumed in order;
    when the script runs out ``default`` is returned. An Exception in the
    script is raised instead of returned. ``responder`` overrides the script.
    """

    def __init__(
        self,
        replies: Optional[Sequence[ScriptedReply]] = None,
        default: str = "",
        responder: Optional[Callable[[str], str]] = None,
    ):
        self.replies: List[ScriptedReply] = list(replies or [])
        self.default = default
        self.responder = responder
        self.calls: List[Dict[str, Any]] = []

    def invoke(self, prompt: str, max_tokens: int, system: Optional[str] = None) -> str:
        self.calls.append({"prompt": prompt, "max_tokens": max_tokens, "system": system})
        if self.responder is not None:
            return self.responder(prompt)
        if not self.replies:
            return self.default
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    @property
    def last_prompt(self) -> Optional[str]:
        return self.calls[-1]["prompt"] if self.calls else None


def create_llm_client(
    provider: Optional[Literal["openai", "claude", "fake"]] = None,
    api_key: Optional[str] = None,
    chat_model: Optional[str] = None,
    timeout: Optional[float] = None,
) -> LLMClient:
    """
    Factory function to create an LLM client based on provider.

    Args:
        provider: "openai", "claude" or "fake". If None, uses LLM_PROVIDER env var.
        api_key: API key (overrides env var)
        chat_model: Chat model name (overrides env var)
        timeout: request timeout in seconds, passed to the SDK client
    """
    if provider is None:
        provider = os.getenv("LLM_PROVIDER", "claude").lower()

    if provider == "openai":
        return OpenAIClient(api_key=api_key, chat_model=chat_model, timeout=timeout)
    elif provider == "claude":
        return ClaudeClient(api_key=api_key, chat_model=chat_model, timeout=timeout)
    elif provider == "fake":
        return FakeLLMClient()
    else:
        raise ValueError(f"Unknown provider: {provider}. Use 'openai', 'claude' or 'fake'")
