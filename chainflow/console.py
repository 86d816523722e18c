"""Colored terminal transcript of a pipeline run."""

import time
from typing import Optional

import click

from .messages import ConversationState, Generation
from .pipeline.observer import PipelineObserver

WIDTH = 80
BAR_WIDTH = 50


class ConsoleObserver(PipelineObserver):
    """Prints each step's header, input and output as the pipeline runs."""

    def __init__(self, show_input: bool = True, err: bool = False):
        self.show_input = show_input
        self.err = err
        self._total = 0
        self._started = 0.0

    def _echo(self, text: str = "", **style) -> None:
        click.echo(click.style(text, **style) if style else text, err=self.err)

    def _text(self, text: str, fg: str) -> None:
        for line in text.split("\n"):
            if line.strip():
                self._echo(line, fg=fg)
            else:
                self._echo()

    def on_pipeline_start(self, total_steps: int, prompt: ConversationState) -> None:
        self._total = total_steps
        self._started = time.perf_counter()
        self._echo("═" * WIDTH, fg="blue", bold=True)
        self._echo(f" CHAIN EXECUTION STARTED │ Steps: {total_steps}", fg="blue", bold=True)
        self._echo("═" * WIDTH, fg="blue", bold=True)
        self._echo()
        self._echo("INITIAL PROMPT", fg="cyan", bold=True)
        self._text(str(prompt), "cyan")

    def on_step_start(self, position, total_steps, name, instructions, state):
        filled = int(position / total_steps * BAR_WIDTH)
        bar = "█" * filled + "░" * (BAR_WIDTH - filled)
        self._echo()
        self._echo(
            f"[{bar}] {int(position / total_steps * 100)}% ({position}/{total_steps})",
            fg="yellow",
        )
        self._echo(f"┌─ STEP {position}: {name.upper()} ", fg="green", bold=True)
        self._echo(f"│ Instructions: {instructions}", fg="green")
        self._echo("└" + "─" * (WIDTH - 1), fg="green", bold=True)
        if self.show_input:
            self._echo("INPUT:", fg="blue", bold=True)
            self._text(str(state), "blue")

    def on_step_end(self, position: int, generation: Generation, duration: float) -> None:
        self._echo(f"OUTPUT: ({duration:.2f}s)", fg="green", bold=True)
        self._text(generation.text, "green")
        if position < self._total:
            self._echo("─" * WIDTH, fg="magenta", bold=True)

    def on_error(self, position: int, error: BaseException) -> None:
        self._echo(f"ERROR in step {position}: {error}", fg="red", bold=True)

    def on_pipeline_end(self, generation: Optional[Generation]) -> None:
        elapsed = time.perf_counter() - self._started
        self._echo()
        self._echo("═" * WIDTH, fg="green", bold=True)
        self._echo(f" CHAIN EXECUTION COMPLETE ({elapsed:.2f}s)", fg="green", bold=True)
        self._echo("═" * WIDTH, fg="green", bold=True)
        if generation is not None:
            self._echo("FINAL RESULT:", fg="cyan", bold=True)
            self._text(generation.text, "cyan")
