"""Gemini provider over the Generative Language REST API."""

from typing import Dict, List, Optional

from ..errors import EmptyResponseError
from .base import BaseLLMProvider, ProviderConfig, ModelResponse

GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta"


class GeminiProvider(BaseLLMProvider):
    """Google Gemini via ``models/{model}:generateContent``."""

    def __init__(self, config: ProviderConfig):
        super().__init__(config)
        self.base_url = (config.base_url or GEMINI_API_URL).rstrip("/")

    @staticmethod
    def to_contents(messages: List[Dict[str, str]]) -> tuple[Optional[dict], List[dict]]:
        """Split chat dicts into Gemini's systemInstruction and contents."""
        system = [m["content"] for m in messages if m["role"] == "system"]
        contents = [
            {
                "role": "model" if m["role"] == "assistant" else "user",
                "parts": [{"text": m["content"]}],
            }
            for m in messages
            if m["role"] != "system"
        ]
        instruction = {"parts": [{"text": "\n\n".join(system)}]} if system else None
        return instruction, contents

    async def query(
        self,
        messages: List[Dict[str, str]],
        model: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs,
    ) -> ModelResponse:
        """
        Query a Gemini model.

        Args:
            messages: List of message dicts with 'role' and 'content'
            model: Model identifier (e.g., "gemini-2.0-flash")
            temperature: Sampling temperature (0-2)
            max_tokens: Maximum tokens to generate
            **kwargs: Extra generationConfig fields (e.g., topP)

        Returns:
            ModelResponse with content and metadata
        """
        instruction, contents = self.to_contents(messages)

        generation_config = dict(kwargs)
        if temperature is not None:
            generation_config["temperature"] = temperature
        if max_tokens is not None:
            generation_config["maxOutputTokens"] = max_tokens

        payload: Dict = {"contents": contents}
        if instruction:
            payload["systemInstruction"] = instruction
        if generation_config:
            payload["generationConfig"] = generation_config

        url = f"{self.base_url}/models/{model}:generateContent"
        data = await self._post_json(
            url, payload, headers={"x-goog-api-key": self.config.api_key or ""}
        )

        candidates = data.get("candidates") or []
        if not candidates:
            raise EmptyResponseError(self.provider_id)
        parts = (candidates[0].get("content") or {}).get("parts") or []
        text = "".join(p.get("text", "") for p in parts)
        if not text:
            raise EmptyResponseError(self.provider_id)

        usage = data.get("usageMetadata") or {}
        return ModelResponse(
            content=text,
            model=data.get("modelVersion", model),
            prompt_tokens=usage.get("promptTokenCount"),
            completion_tokens=usage.get("candidatesTokenCount"),
            total_tokens=usage.get("totalTokenCount"),
        )

    def get_models(self) -> List[str]:
        return ["gemini-2.0-flash", "gemini-2.5-flash", "gemini-2.5-pro"]
