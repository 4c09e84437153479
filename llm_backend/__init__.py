"""LLM Backend abstraction layer.

Every role agent talks to Claude through the ``LLMBackend`` interface, so
tests can swap in a scripted backend without touching the network.
"""

import logging
import os

from .base import LLMBackend

logger = logging.getLogger(__name__)

__all__ = [
    "LLMBackend",
    "AnthropicBackend",
    "get_backend",
    "detect_backend",
]


def _get_anthropic_backend():
    """Lazy import Anthropic backend."""
    from .anthropic_backend import AnthropicBackend
    return AnthropicBackend


def AnthropicBackend(*args, **kwargs):
    """Get Anthropic backend (lazy loaded)."""
    cls = _get_anthropic_backend()
    return cls(*args, **kwargs)


def detect_backend() -> str:
    """Auto-detect the backend based on available API keys.

    Returns:
        Backend name ("anthropic")

    Raises:
        ValueError: If no supported API key is configured
    """
    if os.environ.get("ANTHROPIC_API_KEY"):
        logger.info("Auto-detected: Anthropic API key found")
        return "anthropic"

    raise ValueError("No LLM backend available. Set ANTHROPIC_API_KEY.")


def get_backend(kind: str, **kwargs) -> LLMBackend:
    """Factory function to get an LLM backend instance.

    Args:
        kind: Backend type ("auto" or "anthropic")
        **kwargs: Backend-specific configuration

    Returns:
        LLMBackend instance

    Raises:
        ValueError: If backend type is unknown
    """
    if kind == "auto":
        kind = detect_backend()
        logger.info(f"Auto-selected backend: {kind}")

    if kind == "anthropic":
        cls = _get_anthropic_backend()
        return cls(**kwargs)

    raise ValueError(f"Unknown LLM backend: {kind}. Available: auto, anthropic")
