"""LLM provider abstractions for multi-provider support."""

from .base import (
    BaseLLMProvider,
    ProviderConfig,
    ModelResponse,
    normalize_role,
    to_chat_messages,
)
from .anthropic import AnthropicProvider
from .gemini import GeminiProvider
from .ollama import OllamaProvider
from .openrouter import OpenRouterProvider
from .zeus import ZeusProvider
from .registry import ProviderRegistry

__all__ = [
    "BaseLLMProvider",
    "ProviderConfig",
    "ModelResponse",
    "normalize_role",
    "to_chat_messages",
    "AnthropicProvider",
    "GeminiProvider",
    "OllamaProvider",
    "OpenRouterProvider",
    "ZeusProvider",
    "ProviderRegistry",
]
