"""Provider registry for dynamic provider loading."""

import logging
import os
from typing import Dict, Optional, Type

import yaml

from .. import config as settings
from ..errors import ConfigError
from .anthropic import AnthropicProvider
from .base import BaseLLMProvider, ModelResponse, ProviderConfig
from .gemini import GeminiProvider
from .ollama import OllamaProvider
from .openrouter import OpenRouterProvider
from .zeus import ZeusProvider

logger = logging.getLogger(__name__)

PROVIDER_CLASSES: Dict[str, Type[BaseLLMProvider]] = {
    "openrouter": OpenRouterProvider,
    "anthropic": AnthropicProvider,
    "ollama": OllamaProvider,
    "gemini": GeminiProvider,
    "zeus": ZeusProvider,
}

_KNOWN_KEYS = {
    "type",
    "api_key_env",
    "base_url",
    "base_url_env",
    "timeout",
    "max_retries",
    "enabled",
}


def _provider_config(provider_id: str, data: dict) -> ProviderConfig:
    base_url = data.get("base_url")
    if data.get("base_url_env"):
        base_url = os.getenv(data["base_url_env"]) or base_url

    # other *_env keys resolve into provider-specific extras (e.g. pipeline_id_env)
    extra = {}
    for key, value in data.items():
        if key in _KNOWN_KEYS:
            continue
        if key.endswith("_env"):
            extra[key[: -len("_env")]] = os.getenv(value)
        else:
            extra[key] = value

    return ProviderConfig(
        provider_id=provider_id,
        api_key=os.getenv(data.get("api_key_env", "")) if data.get("api_key_env") else None,
        base_url=base_url,
        timeout=float(data.get("timeout", settings.HTTP_TIMEOUT)),
        max_retries=int(data.get("max_retries", 3)),
        enabled=bool(data.get("enabled", True)),
        extra=extra,
    )


class ProviderRegistry:
    """Registry for managing LLM providers."""

    def __init__(self, default_provider: Optional[str] = None):
        self.default_provider = default_provider or settings.DEFAULT_PROVIDER
        self._providers: Dict[str, BaseLLMProvider] = {}
        self._provider_configs: Dict[str, ProviderConfig] = {}

    def load_providers(self, config_path: Optional[str] = None) -> None:
        """
        Load provider configurations from YAML file.

        Providers whose key is missing are skipped with a warning.

        Args:
            config_path: Path to providers.yaml (defaults to CHAINFLOW_PROVIDERS_CONFIG)

        Raises:
            ConfigError: unreadable file, bad structure or unknown provider type
        """
        config_path = config_path or settings.PROVIDERS_CONFIG
        try:
            with open(config_path, "r") as f:
                configs = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read providers file {config_path}: {e}") from e

        if not isinstance(configs, dict):
            raise ConfigError(f"{config_path} must map provider ids to settings")

        for provider_id, config_data in configs.items():
            config_data = config_data or {}
            config = _provider_config(provider_id, config_data)
            self._provider_configs[provider_id] = config

            if not config.enabled:
                logger.info("Provider %s disabled", provider_id)
                continue

            provider = self._create_provider(config_data.get("type", provider_id), config)
            if provider.validate_key():
                self._providers[provider_id] = provider
                logger.info("Loaded provider: %s", provider_id)
            else:
                logger.warning("Provider %s failed validation (skipping)", provider_id)

    def _create_provider(
        self, provider_type: str, config: ProviderConfig
    ) -> BaseLLMProvider:
        """
        Create provider instance from config.

        Args:
            provider_type: Key into PROVIDER_CLASSES
            config: Provider configuration

        Returns:
            Provider instance
        """
        provider_class = PROVIDER_CLASSES.get(provider_type)
        if not provider_class:
            raise ConfigError(f"Unknown provider: {provider_type}")

        return provider_class(config)

    def register(self, provider: BaseLLMProvider) -> None:
        """Add (or replace) a provider under its config id."""
        self._providers[provider.provider_id] = provider
        self._provider_configs[provider.provider_id] = provider.config

    def get_provider(self, provider_id: str) -> Optional[BaseLLMProvider]:
        """
        Get provider instance by ID.

        Args:
            provider_id: Provider identifier

        Returns:
            Provider instance or None if not found
        """
        return self._providers.get(provider_id)

    def get_all_providers(self) -> Dict[str, BaseLLMProvider]:
        """Get all loaded providers."""
        return self._providers.copy()

    def parse_model_id(self, model_id: str) -> tuple[str, str]:
        """
        Parse prefixed model ID into (provider_id, model_name).

        Args:
            model_id: Model ID with prefix (e.g., "openrouter:openai/gpt-4o")

        Returns:
            Tuple of (provider_id, model_name)

        Raises:
            ValueError if model ID is invalid
        """
        if ":" not in model_id:
            return self.default_provider, model_id

        provider_id, model_name = model_id.split(":", 1)
        if not provider_id or not model_name:
            raise ValueError(f"Invalid model ID format: {model_id}")

        return provider_id, model_name

    def resolve(self, model_id: str) -> tuple[BaseLLMProvider, str]:
        """Provider instance and bare model name for a prefixed model id."""
        provider_id, model_name = self.parse_model_id(model_id)
        provider = self.get_provider(provider_id)

        if not provider:
            raise ConfigError(f"Provider not loaded: {provider_id}")

        return provider, model_name

    async def query_model(
        self,
        model_id: str,
        messages: list[dict],
        temperature: Optional[float] = None,
        **kwargs,
    ) -> ModelResponse:
        """
        Query a model by ID (auto-route to correct provider).

        Args:
            model_id: Model ID with provider prefix
            messages: List of message dicts
            temperature: Sampling temperature
            **kwargs: Additional parameters

        Returns:
            ModelResponse
        """
        provider, model_name = self.resolve(model_id)
        return await provider.query(
            messages=messages, model=model_name, temperature=temperature, **kwargs
        )

    def __contains__(self, provider_id: str) -> bool:
        return provider_id in self._providers
