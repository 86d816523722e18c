"""Load pipeline definitions from YAML."""

import os
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .agent import Agent
from .errors import ConfigError
from .pipeline.base import Pipeline
from .pipeline.observer import PipelineObserver
from .providers.registry import ProviderRegistry


class StepDefinition(BaseModel):
    """One agent in a pipeline definition."""

    name: str = Field(description="Step label shown while running")
    model: str = Field(description="Model id, optionally prefixed with 'provider:'")
    instructions: str = Field(default="", description="System instructions for the step")
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(default=None, gt=0)

    @field_validator("name", "model")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class PipelineDefinition(BaseModel):
    """A YAML-defined chain of agents."""

    name: str = ""
    verbose: bool = False
    default_options: Dict[str, Any] = Field(default_factory=dict)
    steps: List[StepDefinition] = Field(default_factory=list)


def load_definition(path: str) -> PipelineDefinition:
    """
    Read and validate a pipeline definition.

    Args:
        path: YAML file path

    Returns:
        Validated PipelineDefinition

    Raises:
        ConfigError: missing file, invalid YAML or schema violation
    """
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read pipeline definition {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping")

    data.setdefault("name", os.path.splitext(os.path.basename(path))[0])
    try:
        return PipelineDefinition.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid pipeline definition {path}: {e}") from e


def build_pipeline(
    definition: PipelineDefinition,
    registry: ProviderRegistry,
    observer: Optional[PipelineObserver] = None,
    verbose: Optional[bool] = None,
) -> Pipeline:
    """
    Turn a definition into a Pipeline of Agents routed through ``registry``.

    Every step's provider must already be loaded, so a misconfigured model
    is reported before anything runs. ``default_options`` fill in
    ``temperature`` and ``max_tokens`` for steps that leave them unset; any
    other key is passed to every step's provider. Step values always win.
    """
    defaults = dict(definition.default_options)
    default_temperature = defaults.pop("temperature", None)
    default_max_tokens = defaults.pop("max_tokens", None)
    # every step names its own model
    defaults.pop("model", None)

    steps = []
    for step in definition.steps:
        try:
            provider_id, _ = registry.parse_model_id(step.model)
        except ValueError as e:
            raise ConfigError(f"Step {step.name!r}: {e}") from e
        if provider_id not in registry:
            raise ConfigError(f"Step {step.name!r} needs provider {provider_id!r}, which is not loaded")
        steps.append(
            Agent(
                name=step.name,
                model=step.model,
                provider=registry,
                instructions=step.instructions,
                temperature=default_temperature if step.temperature is None else step.temperature,
                max_tokens=default_max_tokens if step.max_tokens is None else step.max_tokens,
                options=defaults,
            )
        )

    return Pipeline(
        steps,
        name=definition.name,
        verbose=definition.verbose if verbose is None else verbose,
        observer=observer,
    )
