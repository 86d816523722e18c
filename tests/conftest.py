"""Pytest configuration and shared fixtures for chainflow tests.

This module provides:
- Custom markers
- Environment isolation between tests
- Scripted steps that record every invocation
- A fake provider that answers without network access
"""

import asyncio
import os
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from chainflow.messages import ConversationState, Generation, assistant_message  # noqa: E402
from chainflow.pipeline.base import Step  # noqa: E402
from chainflow.providers.base import (  # noqa: E402
    BaseLLMProvider,
    ModelResponse,
    ProviderConfig,
)


# ==================== Pytest Configuration ====================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test (fast, isolated)")
    config.addinivalue_line(
        "markers",
        "integration: mark test as an integration test (multiple components)",
    )


# ==================== Environment Fixtures ====================

@pytest.fixture(scope="function", autouse=True)
def isolate_environment():
    """Restore environment variables after every test."""
    original_env = os.environ.copy()

    yield

    os.environ.clear()
    os.environ.update(original_env)


# ==================== Step Fixtures ====================

class ScriptedStep(Step):
    """Step that transforms the input text and records each call."""

    def __init__(
        self,
        transform: Callable[[str], str] = lambda text: text,
        name: str = "",
        instructions: str = "",
        fail_with: Optional[BaseException] = None,
        on_run: Optional[Callable[[], None]] = None,
        delay: float = 0.0,
    ):
        self.transform = transform
        self.name = name
        self.instructions = instructions
        self.fail_with = fail_with
        self.on_run = on_run
        self.delay = delay
        self.calls = 0
        self.inputs: List[ConversationState] = []
        self.options: List[Dict] = []

    async def run(self, state: ConversationState, **options) -> Generation:
        self.calls += 1
        self.inputs.append(state)
        self.options.append(options)
        if self.on_run:
            self.on_run()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_with is not None:
            raise self.fail_with
        return Generation((assistant_message(self.transform(str(state))),))


@pytest.fixture
def make_step():
    """Factory for ScriptedStep instances."""
    return ScriptedStep


@pytest.fixture
def upper_step():
    return ScriptedStep(str.upper, name="upper", instructions="Uppercase the input")


@pytest.fixture
def exclaim_step():
    return ScriptedStep(lambda text: text + "!", name="exclaim")


# ==================== Provider Fixtures ====================

class FakeProvider(BaseLLMProvider):
    """Provider that echoes a scripted reply and records requests."""

    def __init__(self, provider_id: str = "fake", reply: str = "ok", error: Optional[Exception] = None):
        super().__init__(ProviderConfig(provider_id=provider_id, api_key="test-key"))
        self.reply = reply
        self.error = error
        self.requests: List[Dict] = []

    async def query(self, messages, model, temperature=None, max_tokens=None, **kwargs):
        self.requests.append(
            {
                "messages": messages,
                "model": model,
                "temperature": temperature,
                "max_tokens": max_tokens,
                "kwargs": kwargs,
            }
        )
        if self.error is not None:
            raise self.error
        return ModelResponse(
            content=self.reply,
            model=model,
            prompt_tokens=5,
            completion_tokens=2,
            total_tokens=7,
        )

    def get_models(self):
        return ["fake-small", "fake-large"]


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def make_provider():
    """Factory for FakeProvider instances."""
    return FakeProvider
