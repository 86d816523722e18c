"""OpenRouter (and OpenAI-compatible) chat-completions provider."""

from typing import Any, Dict, List, Optional

from ..errors import EmptyResponseError
from .base import BaseLLMProvider, ProviderConfig, ModelResponse

OPENROUTER_API_URL = "https://openrouter.ai/api/v1/chat/completions"


class OpenRouterProvider(BaseLLMProvider):
    """OpenRouter API provider for multi-model access.

    Speaks the OpenAI chat-completions format, so it also serves any
    compatible endpoint configured through ``base_url``.
    """

    def __init__(self, config: ProviderConfig):
        super().__init__(config)
        self.api_url = config.base_url or OPENROUTER_API_URL

    @staticmethod
    def completion_request(
        messages: List[Dict[str, str]],
        model: str,
        temperature: Optional[float],
        max_tokens: Optional[int],
        extra: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Chat-completions body; unset sampling fields are left out."""
        sampling = {"temperature": temperature, "max_tokens": max_tokens}
        return {
            "model": model,
            "messages": messages,
            **{k: v for k, v in sampling.items() if v is not None},
            **extra,
        }

    async def query(
        self,
        messages: List[Dict[str, str]],
        model: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs,
    ) -> ModelResponse:
        """
        Send one chat-completions request.

        Args:
            messages: Chat turns ({'role', 'content'})
            model: Model id as the endpoint knows it (e.g., "openai/gpt-4o")
            temperature: Sampling temperature, omitted when None
            max_tokens: Completion cap, omitted when None
            **kwargs: Extra body fields (e.g., top_p, reasoning_effort)

        Raises:
            ProviderError: HTTP or transport failure
            EmptyResponseError: no choice or empty content
        """
        body = self.completion_request(messages, model, temperature, max_tokens, kwargs)
        data = await self._post_json(
            self.api_url,
            body,
            headers={"Authorization": f"Bearer {self.config.api_key}"},
        )

        choices = data.get("choices") or []
        if not choices:
            raise EmptyResponseError(self.provider_id)
        message = choices[0].get("message") or {}
        usage = data.get("usage") or {}

        return ModelResponse(
            content=self._require_content(message.get("content")),
            reasoning_details=message.get("reasoning_details"),
            model=data.get("model", model),
            prompt_tokens=usage.get("prompt_tokens"),
            completion_tokens=usage.get("completion_tokens"),
            total_tokens=usage.get("total_tokens"),
        )
