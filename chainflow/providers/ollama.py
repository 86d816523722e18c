"""Ollama /api/chat provider for models served on a local machine."""

from typing import Dict, List, Optional

from ..errors import EmptyResponseError
from .base import BaseLLMProvider, ProviderConfig, ModelResponse


class OllamaProvider(BaseLLMProvider):
    """Non-streaming chat against an Ollama server (default localhost:11434)."""

    def __init__(self, config: ProviderConfig):
        super().__init__(config)
        self.base_url = (config.base_url or "http://localhost:11434").rstrip("/")

    async def query(
        self,
        messages: List[Dict[str, str]],
        model: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs,
    ) -> ModelResponse:
        """
        One non-streaming /api/chat call.

        Sampling settings and any extra kwargs travel in Ollama's
        ``options`` object; ``max_tokens`` becomes ``num_predict``.
        """
        options = dict(kwargs)
        if temperature is not None:
            options["temperature"] = temperature
        if max_tokens is not None:
            options["num_predict"] = max_tokens

        payload = {
            "model": model,
            "messages": messages,
            "stream": False,
        }
        if options:
            payload["options"] = options

        data = await self._post_json(f"{self.base_url}/api/chat", payload)

        content = (data.get("message") or {}).get("content")
        if not content:
            raise EmptyResponseError(self.provider_id)

        prompt_tokens = data.get("prompt_eval_count")
        completion_tokens = data.get("eval_count")
        return ModelResponse(
            content=content,
            model=data.get("model", model),
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=(prompt_tokens or 0) + (completion_tokens or 0),
        )

    def validate_key(self) -> bool:
        # Local server, no key needed
        return True
