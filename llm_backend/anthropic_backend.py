"""Anthropic backend for the Claude models behind every role agent."""

import os
from typing import Any

from anthropic import Anthropic, APIConnectionError, APIError, APITimeoutError

from .base import LLMBackend


class AnthropicBackend(LLMBackend):
    """Anthropic Messages API client.

    Requires ANTHROPIC_API_KEY (or an explicit ``api_key``).
    """

    def __init__(
        self,
        model: str = "claude-sonnet-4-20250514",
        api_key: str | None = None,
        timeout: int = 120,
        max_tokens: int = 4096,
        client: Any | None = None,
    ) -> None:
        """Initialize Anthropic backend.

        Args:
            model: Default model identifier
            api_key: API key (defaults to ANTHROPIC_API_KEY env var)
            timeout: Request timeout in seconds
            max_tokens: Default max tokens for responses
            client: Pre-built ``Anthropic`` client (mainly for tests)
        """
        self.model = model
        self.timeout = timeout
        self.default_max_tokens = max_tokens

        if client is not None:
            self._client = client
            return

        api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        if not api_key:
            raise ValueError(
                "Anthropic API key not found. Set ANTHROPIC_API_KEY environment variable "
                "or pass api_key parameter."
            )
        self._client = Anthropic(api_key=api_key, timeout=timeout)

    def chat(
        self,
        messages: list[dict[str, str]],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any,
    ) -> str:
        """Send a chat completion request to Anthropic.

        System messages are lifted into the ``system`` parameter; the
        text blocks of the reply are joined with newlines.

        Raises:
            ConnectionError: If unable to connect to Anthropic
            TimeoutError: If the request times out
            RuntimeError: If Anthropic returns an error or no text
        """
        system_parts = [m["content"] for m in messages if m["role"] == "system"]
        chat_messages = [
            {"role": m["role"], "content": m["content"]}
            for m in messages
            if m["role"] != "system"
        ]

        request_kwargs: dict[str, Any] = {
            "model": model or self.model,
            "messages": chat_messages,
            "max_tokens": max_tokens or self.default_max_tokens,
            "temperature": temperature,
        }
        if system_parts:
            request_kwargs["system"] = "\n\n".join(system_parts)

        for key in ("top_p", "stop_sequences"):
            if key in kwargs:
                request_kwargs[key] = kwargs[key]

        # APITimeoutError subclasses APIConnectionError, so it goes first
        try:
            response = self._client.messages.create(**request_kwargs)
        except APITimeoutError as e:
            raise TimeoutError(f"Anthropic request timed out: {e}") from e
        except APIConnectionError as e:
            raise ConnectionError(f"Failed to connect to Anthropic API: {e}") from e
        except APIError as e:
            raise RuntimeError(f"Anthropic API error: {e}") from e

        text_content = [block.text for block in response.content if hasattr(block, "text")]
        if not text_content:
            raise RuntimeError("Anthropic returned no text content")

        return "\n".join(text_content)

    def __repr__(self) -> str:
        return f"AnthropicBackend(model={self.model!r})"
