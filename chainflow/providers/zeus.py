"""Zeus LLM gateway provider."""

from typing import Dict, List, Optional

from ..errors import ConfigError, EmptyResponseError
from .base import BaseLLMProvider, ProviderConfig, ModelResponse

ZEUS_API_URL = "https://api.zeusllm.com/v1"


class ZeusProvider(BaseLLMProvider):
    """Zeus routes every request through a server-side pipeline id.

    The model is chosen by the Zeus pipeline, so ``model`` is only echoed
    back in the response metadata.
    """

    def __init__(self, config: ProviderConfig):
        super().__init__(config)
        self.base_url = (config.base_url or ZEUS_API_URL).rstrip("/")
        self.pipeline_id = (config.extra or {}).get("pipeline_id")

    async def query(
        self,
        messages: List[Dict[str, str]],
        model: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs,
    ) -> ModelResponse:
        """
        Query the configured Zeus pipeline.

        Args:
            messages: List of message dicts with 'role' and 'content'
            model: Model label, informational only
            temperature: Ignored by Zeus
            max_tokens: Ignored by Zeus
            **kwargs: Extra payload fields

        Returns:
            ModelResponse with content and metadata
        """
        if not self.pipeline_id:
            raise ConfigError("Zeus provider requires a pipeline_id")

        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }
        payload = {"messages": messages, "pipeline_id": self.pipeline_id, **kwargs}

        data = await self._post_json(f"{self.base_url}/ai", payload, headers=headers)

        choices = data.get("choices") or []
        if not choices:
            raise EmptyResponseError(self.provider_id)
        content = (choices[0].get("message") or {}).get("content")
        usage = data.get("usage") or {}

        return ModelResponse(
            content=self._require_content(content),
            model=data.get("model") or model,
            prompt_tokens=usage.get("prompt_tokens"),
            completion_tokens=usage.get("completion_tokens"),
            total_tokens=usage.get("total_tokens"),
        )

    def validate_key(self) -> bool:
        return super().validate_key() and bool(self.pipeline_id)
