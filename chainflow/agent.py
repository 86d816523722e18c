"""Agent: a pipeline step backed by one model call."""

import logging
from typing import Any, Dict, List, Optional, Union

from .messages import ConversationState, Generation, Role, assistant_message
from .pipeline.base import Step
from .providers.base import BaseLLMProvider, to_chat_messages
from .providers.registry import ProviderRegistry

logger = logging.getLogger(__name__)


class Agent(Step):
    """
    Named, instructed single-call step.

    The request is the instructions (as a system message) followed by the
    incoming conversation. A trailing assistant message is the previous
    step's output and is sent as user input. ``model``, ``temperature``
    and ``max_tokens`` options override the agent's defaults; any other
    option goes to the provider untouched. ``options`` holds extra provider
    parameters sent on every call unless a run overrides them.
    """

    def __init__(
        self,
        name: str,
        model: str,
        provider: Union[BaseLLMProvider, ProviderRegistry],
        instructions: str = "",
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ):
        self.name = name
        self.model = model
        self.provider = provider
        self.instructions = instructions
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.options = dict(options or {})

    def build_messages(self, state: ConversationState) -> List[Dict[str, str]]:
        messages = to_chat_messages(state)
        if messages and messages[-1]["role"] == Role.ASSISTANT.value:
            messages[-1] = {"role": Role.USER.value, "content": messages[-1]["content"]}
        if self.instructions:
            messages.insert(0, {"role": Role.SYSTEM.value, "content": self.instructions})
        return messages

    async def run(self, state: ConversationState, **options: Any) -> Generation:
        options = {**self.options, **options}
        model = options.pop("model", None) or self.model
        temperature = options.pop("temperature", self.temperature)
        max_tokens = options.pop("max_tokens", self.max_tokens)

        if isinstance(self.provider, ProviderRegistry):
            provider, model = self.provider.resolve(model)
        else:
            provider = self.provider

        logger.debug("%s querying %s:%s", self.name, provider.provider_id, model)
        response = await provider.query(
            messages=self.build_messages(state),
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            **options,
        )
        return Generation(
            (assistant_message(response.content),),
            model=response.model or model,
            usage=response.usage(),
        )

    def __repr__(self) -> str:
        return f"Agent(name={self.name!r}, model={self.model!r})"
