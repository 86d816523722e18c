"""Pipeline core for chaining text-generation steps.

This module provides a pipeline abstraction where:
- Each Step turns a ConversationState into a Generation
- Steps are chained so each one sees only its predecessor's messages
- Pipelines run to completion (run) or stream per-step results (run_stream)
- Pipelines are Steps themselves and nest freely
"""

from .base import Step, FunctionStep, Pipeline, describe_step
from .observer import PipelineObserver, LoggingObserver
from .stream import Streamer

__all__ = [
    "Step",
    "FunctionStep",
    "Pipeline",
    "describe_step",
    "PipelineObserver",
    "LoggingObserver",
    "Streamer",
]
