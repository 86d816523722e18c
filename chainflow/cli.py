#!/usr/bin/env python
"""CLI entry point for chainflow."""

import asyncio
from typing import Optional

import click

from . import config
from .console import ConsoleObserver
from .errors import ChainflowError
from .loader import build_pipeline, load_definition
from .messages import ConversationState
from .providers.registry import ProviderRegistry


@click.group()
@click.option("--log-level", default=None, help="Logging level (default: CHAINFLOW_LOG_LEVEL)")
def cli(log_level: Optional[str]):
    """chainflow - run chains of LLM steps where each output feeds the next."""
    config.configure_logging(log_level)


def _load_registry(providers: Optional[str]) -> ProviderRegistry:
    registry = ProviderRegistry()
    registry.load_providers(providers)
    return registry


@cli.command()
@click.argument("definition", type=click.Path(exists=True, dir_okay=False))
@click.argument("prompt")
@click.option("--stream", is_flag=True, help="Print each step's output as it completes")
@click.option("--quiet", is_flag=True, help="Only print the final result")
@click.option("--providers", type=click.Path(dir_okay=False), default=None, help="Providers YAML")
@click.option("--model", default=None, help="Override the model of every step")
@click.option("--temperature", type=float, default=None, help="Override sampling temperature")
def run(
    definition: str,
    prompt: str,
    stream: bool,
    quiet: bool,
    providers: Optional[str],
    model: Optional[str],
    temperature: Optional[float],
):
    """Run the pipeline in DEFINITION on PROMPT."""
    try:
        registry = _load_registry(providers)
        pipeline_def = load_definition(definition)
        show_progress = not quiet and not stream
        pipeline = build_pipeline(
            pipeline_def,
            registry,
            observer=ConsoleObserver() if show_progress else None,
            verbose=show_progress,
        )
    except ChainflowError as e:
        raise click.ClickException(str(e))

    options = {}
    if model:
        options["model"] = model
    if temperature is not None:
        options["temperature"] = temperature

    state = ConversationState.from_text(prompt)

    async def run_blocking():
        result = await pipeline.run(state, **options)
        if quiet:
            click.echo(result.text)

    async def run_streaming():
        async with pipeline.run_stream(state, **options) as generations:
            position = 0
            async for generation in generations:
                position += 1
                if not quiet:
                    click.secho(f"--- step {position}/{len(pipeline)} ---", fg="yellow")
                click.echo(generation.text)

    try:
        asyncio.run(run_streaming() if stream else run_blocking())
    except (ChainflowError, ValueError) as e:
        raise click.ClickException(str(e))


@cli.command("providers")
@click.option("--providers", type=click.Path(dir_okay=False), default=None, help="Providers YAML")
def list_providers(providers: Optional[str]):
    """List providers that loaded successfully."""
    try:
        registry = _load_registry(providers)
    except ChainflowError as e:
        raise click.ClickException(str(e))

    loaded = registry.get_all_providers()
    if not loaded:
        click.echo("No providers loaded")
        return
    for provider_id, provider in sorted(loaded.items()):
        models = ", ".join(provider.get_models()) or "-"
        click.echo(f"{provider_id}: {models}")


def main():
    cli()


if __name__ == "__main__":
    main()
