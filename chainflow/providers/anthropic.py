"""Anthropic direct API provider implementation."""

import logging
from typing import Dict, List, Optional

import anthropic
from anthropic import AsyncAnthropic

from ..errors import ConfigError, EmptyResponseError, ProviderError
from .base import BaseLLMProvider, ProviderConfig, ModelResponse

logger = logging.getLogger(__name__)


class AnthropicProvider(BaseLLMProvider):
    """Anthropic direct API provider."""

    def __init__(self, config: ProviderConfig):
        super().__init__(config)
        self.client: Optional[AsyncAnthropic] = None
        # the SDK refuses to build a client without a key
        if config.api_key:
            self.client = AsyncAnthropic(
                api_key=config.api_key,
                base_url=config.base_url,
                timeout=config.timeout,
                max_retries=config.max_retries,
            )

    @staticmethod
    def split_system(messages: List[Dict[str, str]]) -> tuple[str, List[Dict[str, str]]]:
        """Anthropic takes system text separately from the turn list."""
        system = "\n\n".join(m["content"] for m in messages if m["role"] == "system")
        turns = [m for m in messages if m["role"] != "system"]
        return system, turns

    async def query(
        self,
        messages: List[Dict[str, str]],
        model: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs,
    ) -> ModelResponse:
        """
        Query Anthropic model via direct API.

        Args:
            messages: List of message dicts with 'role' and 'content'
            model: Model identifier (e.g., "claude-sonnet-4-5")
            temperature: Sampling temperature (0-1)
            max_tokens: Maximum tokens to generate
            **kwargs: Additional parameters (e.g., top_k, top_p)

        Returns:
            ModelResponse with content and metadata
        """
        if self.client is None:
            raise ConfigError("Anthropic provider requires an API key")

        system, turns = self.split_system(messages)
        if system:
            kwargs["system"] = system
        if temperature is not None:
            kwargs["temperature"] = temperature

        try:
            response = await self.client.messages.create(
                model=model,
                messages=turns,
                max_tokens=max_tokens if max_tokens is not None else 4096,
                **kwargs,
            )
        except anthropic.APIStatusError as e:
            logger.warning("anthropic request failed with HTTP %s", e.status_code)
            raise ProviderError(self.provider_id, e.message, status_code=e.status_code) from e
        except anthropic.APIError as e:
            logger.warning("anthropic request failed: %s", e)
            raise ProviderError(self.provider_id, f"query failed: {e}") from e

        text = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )
        if not text:
            raise EmptyResponseError(self.provider_id)

        return ModelResponse(
            content=text,
            model=response.model,
            prompt_tokens=response.usage.input_tokens,
            completion_tokens=response.usage.output_tokens,
            total_tokens=response.usage.input_tokens + response.usage.output_tokens,
        )

    def get_models(self) -> List[str]:
        """
        Get list of available Anthropic models.

        Returns:
            List of model identifiers
        """
        return [
            "claude-sonnet-4-5",
            "claude-opus-4-1",
            "claude-haiku-4-5",
        ]
