"""Base abstract class for LLM providers."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

import httpx

from ..errors import EmptyResponseError, ProviderError
from ..messages import DataPart, FilePart, Message, Role, TextPart

logger = logging.getLogger(__name__)


@dataclass
class ProviderConfig:
    """Configuration for a provider."""

    provider_id: str
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    timeout: float = 120.0
    max_retries: int = 3
    enabled: bool = True
    extra: Optional[Dict[str, Any]] = None


@dataclass
class ModelResponse:
    """Response from an LLM model."""

    content: str
    reasoning_details: Optional[str] = None
    model: Optional[str] = None
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None

    def usage(self) -> Dict[str, int]:
        """Token counts that the provider reported."""
        counts = {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }
        return {k: v for k, v in counts.items() if v is not None}


_ROLES = {r.value for r in Role}


def normalize_role(role: Any) -> str:
    """Map a role onto system/user/assistant; anything else becomes user."""
    value = role.value if isinstance(role, Role) else str(role)
    return value if value in _ROLES else Role.USER.value


def part_text(part: Any) -> str:
    if isinstance(part, TextPart):
        return part.text
    if isinstance(part, FilePart):
        return f"File: {part.uri}"
    if isinstance(part, DataPart):
        return "Data: " + part.data.decode("utf-8", errors="replace")
    return ""


def to_chat_messages(messages: Iterable[Message]) -> List[Dict[str, str]]:
    """
    Flatten messages into chat-completion dicts.

    Args:
        messages: Messages in conversation order

    Returns:
        List of {"role", "content"} dicts, messages without content dropped
    """
    chat = []
    for message in messages:
        content = "".join(part_text(p) for p in message.parts)
        if content:
            chat.append({"role": normalize_role(message.role), "content": content})
    return chat


class BaseLLMProvider(ABC):
    """Abstract base class for LLM providers."""

    def __init__(self, config: ProviderConfig):
        self.config = config

    @property
    def provider_id(self) -> str:
        return self.config.provider_id

    @abstractmethod
    async def query(
        self,
        messages: List[Dict[str, str]],
        model: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs,
    ) -> ModelResponse:
        """
        Query an LLM model.

        Args:
            messages: List of message dicts with 'role' and 'content'
            model: Model identifier
            temperature: Sampling temperature (0-2)
            max_tokens: Maximum tokens to generate
            **kwargs: Additional provider-specific parameters

        Returns:
            ModelResponse with content and metadata

        Raises:
            ProviderError: transport or HTTP failure
            EmptyResponseError: the model returned nothing
        """
        pass

    def get_models(self) -> List[str]:
        """
        Get list of known models for this provider.

        Returns:
            List of model identifiers
        """
        return []

    def validate_key(self) -> bool:
        """
        Validate that the API key is configured.

        Returns:
            True if valid, False otherwise
        """
        return self.config.api_key is not None and len(self.config.api_key) > 0

    async def _post_json(
        self,
        url: str,
        payload: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """POST a JSON payload and decode the JSON answer, mapping failures to ProviderError."""
        try:
            async with httpx.AsyncClient(timeout=self.config.timeout) as client:
                response = await client.post(url, headers=headers, json=payload)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "%s request failed with HTTP %s", self.provider_id, e.response.status_code
            )
            raise ProviderError(
                self.provider_id, e.response.text, status_code=e.response.status_code
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("%s request failed: %s", self.provider_id, e)
            raise ProviderError(self.provider_id, f"query failed: {e}") from e

    def _require_content(self, content: Optional[str]) -> str:
        if not content:
            raise EmptyResponseError(self.provider_id)
        return content
