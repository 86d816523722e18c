"""Unit tests for provider adapters (chainflow/providers).

HTTP is mocked at httpx.AsyncClient.post; the Anthropic SDK client is
replaced with an AsyncMock.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import httpx
import pytest

from chainflow.errors import ConfigError, EmptyResponseError, ProviderError
from chainflow.messages import DataPart, FilePart, Message, Role, TextPart, assistant_message, user_message
from chainflow.providers import (
    AnthropicProvider,
    GeminiProvider,
    OllamaProvider,
    OpenRouterProvider,
    ProviderConfig,
    ZeusProvider,
    normalize_role,
    to_chat_messages,
)

CHAT = [
    {"role": "system", "content": "Be terse."},
    {"role": "user", "content": "Hello"},
]


def json_response(payload, status_code=200, url="https://example.test"):
    return httpx.Response(status_code, json=payload, request=httpx.Request("POST", url))


@pytest.fixture
def mock_post():
    with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as post:
        yield post


# ==================== Message translation ====================


@pytest.mark.unit
class TestChatTranslation:

    def test_normalize_role(self):
        assert normalize_role(Role.ASSISTANT) == "assistant"
        assert normalize_role("system") == "system"
        assert normalize_role("tool") == "user"
        assert normalize_role("") == "user"

    def test_parts_flattened(self):
        message = Message(
            Role.USER,
            (TextPart("see "), FilePart("gs://docs/a.pdf"), TextPart(" and "), DataPart(b"raw bytes")),
        )

        assert to_chat_messages([message]) == [
            {"role": "user", "content": "see File: gs://docs/a.pdf and Data: raw bytes"}
        ]

    def test_messages_without_content_dropped(self):
        messages = [user_message("keep"), Message(Role.ASSISTANT, ()), assistant_message("")]

        assert to_chat_messages(messages) == [{"role": "user", "content": "keep"}]

    def test_unknown_role_becomes_user(self):
        odd = Message("critic", (TextPart("hmm"),))

        assert to_chat_messages([odd]) == [{"role": "user", "content": "hmm"}]


# ==================== OpenRouter ====================


class TestOpenRouterProvider:

    @pytest.mark.asyncio
    async def test_query_success(self, mock_post):
        mock_post.return_value = json_response(
            {
                "model": "openai/gpt-4o",
                "choices": [{"message": {"content": "Hi."}}],
                "usage": {"prompt_tokens": 9, "completion_tokens": 2, "total_tokens": 11},
            }
        )
        provider = OpenRouterProvider(ProviderConfig(provider_id="openrouter", api_key="k"))

        response = await provider.query(CHAT, "openai/gpt-4o", temperature=0.3, max_tokens=50, top_p=0.9)

        assert response.content == "Hi."
        assert response.total_tokens == 11
        payload = mock_post.call_args.kwargs["json"]
        assert payload == {
            "model": "openai/gpt-4o",
            "messages": CHAT,
            "temperature": 0.3,
            "max_tokens": 50,
            "top_p": 0.9,
        }
        assert mock_post.call_args.kwargs["headers"]["Authorization"] == "Bearer k"
        assert mock_post.call_args.args[0] == "https://openrouter.ai/api/v1/chat/completions"

    @pytest.mark.asyncio
    async def test_http_error(self, mock_post):
        mock_post.return_value = httpx.Response(
            429, text="rate limited", request=httpx.Request("POST", "https://openrouter.ai")
        )
        provider = OpenRouterProvider(ProviderConfig(provider_id="openrouter", api_key="k"))

        with pytest.raises(ProviderError) as exc_info:
            await provider.query(CHAT, "m")

        assert exc_info.value.status_code == 429
        assert "rate limited" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_transport_error(self, mock_post):
        mock_post.side_effect = httpx.ConnectError("connection refused")
        provider = OpenRouterProvider(ProviderConfig(provider_id="openrouter", api_key="k"))

        with pytest.raises(ProviderError) as exc_info:
            await provider.query(CHAT, "m")

        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_no_choices(self, mock_post):
        mock_post.return_value = json_response({"choices": []})
        provider = OpenRouterProvider(ProviderConfig(provider_id="openrouter", api_key="k"))

        with pytest.raises(EmptyResponseError):
            await provider.query(CHAT, "m")

    def test_custom_base_url(self):
        provider = OpenRouterProvider(
            ProviderConfig(provider_id="local", api_key="k", base_url="http://localhost:8000/v1/chat/completions")
        )

        assert provider.api_url == "http://localhost:8000/v1/chat/completions"


# ==================== Anthropic ====================


class TestAnthropicProvider:

    def _provider(self, create):
        provider = AnthropicProvider(ProviderConfig(provider_id="anthropic", api_key="k"))
        provider.client = MagicMock()
        provider.client.messages.create = create
        return provider

    @pytest.mark.asyncio
    async def test_system_lifted_out_of_turns(self):
        create = AsyncMock(
            return_value=SimpleNamespace(
                content=[SimpleNamespace(type="text", text="Hi")],
                model="claude-sonnet-4-5",
                usage=SimpleNamespace(input_tokens=4, output_tokens=1),
            )
        )
        provider = self._provider(create)

        response = await provider.query(CHAT, "claude-sonnet-4-5", temperature=0.5)

        kwargs = create.call_args.kwargs
        assert kwargs["system"] == "Be terse."
        assert kwargs["messages"] == [{"role": "user", "content": "Hello"}]
        assert kwargs["temperature"] == 0.5
        assert kwargs["max_tokens"] == 4096
        assert response.content == "Hi"
        assert response.total_tokens == 5

    @pytest.mark.asyncio
    async def test_status_error_mapped(self):
        error = anthropic.APIStatusError(
            "overloaded",
            response=httpx.Response(529, request=httpx.Request("POST", "https://api.anthropic.com")),
            body=None,
        )
        provider = self._provider(AsyncMock(side_effect=error))

        with pytest.raises(ProviderError) as exc_info:
            await provider.query(CHAT, "claude-sonnet-4-5")

        assert exc_info.value.status_code == 529
        assert exc_info.value.__cause__ is error

    @pytest.mark.asyncio
    async def test_empty_content(self):
        create = AsyncMock(
            return_value=SimpleNamespace(
                content=[], model="m", usage=SimpleNamespace(input_tokens=1, output_tokens=0)
            )
        )

        with pytest.raises(EmptyResponseError):
            await self._provider(create).query(CHAT, "m")


# ==================== Ollama ====================


class TestOllamaProvider:

    @pytest.mark.asyncio
    async def test_options_payload(self, mock_post):
        mock_post.return_value = json_response(
            {"message": {"content": "local"}, "prompt_eval_count": 3, "eval_count": 4}
        )
        provider = OllamaProvider(ProviderConfig(provider_id="ollama"))

        response = await provider.query(CHAT, "llama3", temperature=0.1, max_tokens=20, top_k=5)

        assert mock_post.call_args.args[0] == "http://localhost:11434/api/chat"
        assert mock_post.call_args.kwargs["json"]["options"] == {
            "top_k": 5,
            "temperature": 0.1,
            "num_predict": 20,
        }
        assert mock_post.call_args.kwargs["json"]["stream"] is False
        assert response.content == "local"
        assert response.total_tokens == 7

    def test_no_key_needed(self):
        assert OllamaProvider(ProviderConfig(provider_id="ollama")).validate_key()


# ==================== Gemini ====================


class TestGeminiProvider:

    @pytest.mark.asyncio
    async def test_request_and_response(self, mock_post):
        mock_post.return_value = json_response(
            {
                "candidates": [{"content": {"parts": [{"text": "Bon"}, {"text": "jour"}]}}],
                "usageMetadata": {"promptTokenCount": 6, "candidatesTokenCount": 2, "totalTokenCount": 8},
            }
        )
        provider = GeminiProvider(ProviderConfig(provider_id="gemini", api_key="g-key"))
        chat = CHAT + [{"role": "assistant", "content": "Hi"}]

        response = await provider.query(chat, "gemini-2.0-flash", max_tokens=64)

        url = mock_post.call_args.args[0]
        payload = mock_post.call_args.kwargs["json"]
        assert url.endswith("/models/gemini-2.0-flash:generateContent")
        assert mock_post.call_args.kwargs["headers"] == {"x-goog-api-key": "g-key"}
        assert payload["systemInstruction"] == {"parts": [{"text": "Be terse."}]}
        assert [c["role"] for c in payload["contents"]] == ["user", "model"]
        assert payload["generationConfig"] == {"maxOutputTokens": 64}
        assert response.content == "Bonjour"
        assert response.total_tokens == 8

    @pytest.mark.asyncio
    async def test_no_candidates(self, mock_post):
        mock_post.return_value = json_response({"candidates": []})
        provider = GeminiProvider(ProviderConfig(provider_id="gemini", api_key="g-key"))

        with pytest.raises(EmptyResponseError):
            await provider.query(CHAT, "gemini-2.0-flash")


# ==================== Zeus ====================


class TestZeusProvider:

    def _provider(self, pipeline_id="pipe-1"):
        return ZeusProvider(
            ProviderConfig(provider_id="zeus", api_key="z", extra={"pipeline_id": pipeline_id})
        )

    @pytest.mark.asyncio
    async def test_posts_pipeline_id(self, mock_post):
        mock_post.return_value = json_response(
            {"model": "llama-3.3-70b", "choices": [{"message": {"content": "Paris"}}]}
        )

        response = await self._provider().query(CHAT, "llama-3.3-70b")

        assert mock_post.call_args.args[0] == "https://api.zeusllm.com/v1/ai"
        assert mock_post.call_args.kwargs["json"] == {"messages": CHAT, "pipeline_id": "pipe-1"}
        assert response.content == "Paris"
        assert response.model == "llama-3.3-70b"

    @pytest.mark.asyncio
    async def test_missing_pipeline_id(self, mock_post):
        with pytest.raises(ConfigError):
            await self._provider(pipeline_id=None).query(CHAT, "m")

        mock_post.assert_not_called()

    def test_validate_requires_pipeline_id(self):
        assert self._provider().validate_key()
        assert not self._provider(pipeline_id=None).validate_key()
