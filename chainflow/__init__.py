"""chainflow: sequential LLM step pipelines with blocking and streaming execution."""

from .agent import Agent
from .errors import (
    ChainflowError,
    ConfigError,
    EmptyResponseError,
    PipelineCancelledError,
    ProviderError,
)
from .messages import (
    ConversationState,
    DataPart,
    FilePart,
    Generation,
    Message,
    Role,
    TextPart,
    assistant_message,
    system_message,
    user_message,
)
from .pipeline import (
    FunctionStep,
    LoggingObserver,
    Pipeline,
    PipelineObserver,
    Step,
    Streamer,
    describe_step,
)

__all__ = [
    "Agent",
    "ChainflowError",
    "ConfigError",
    "EmptyResponseError",
    "PipelineCancelledError",
    "ProviderError",
    "ConversationState",
    "DataPart",
    "FilePart",
    "Generation",
    "Message",
    "Role",
    "TextPart",
    "assistant_message",
    "system_message",
    "user_message",
    "FunctionStep",
    "LoggingObserver",
    "Pipeline",
    "PipelineObserver",
    "Step",
    "Streamer",
    "describe_step",
]
