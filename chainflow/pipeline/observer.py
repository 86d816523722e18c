"""Pluggable observers for pipeline progress."""

import logging
from typing import Optional

from ..errors import PipelineCancelledError
from ..messages import ConversationState, Generation

logger = logging.getLogger(__name__)


class PipelineObserver:
    """Receives pipeline progress. Every hook is a no-op by default.

    Observers only watch: they get the same objects the pipeline works with
    and must not change them. Positions are 1-based. ``on_error`` also
    receives the PipelineCancelledError of a cancelled run.
    """

    def on_pipeline_start(self, total_steps: int, prompt: ConversationState) -> None:
        pass

    def on_step_start(
        self,
        position: int,
        total_steps: int,
        name: str,
        instructions: str,
        state: ConversationState,
    ) -> None:
        pass

    def on_step_end(
        self, position: int, generation: Generation, duration: float
    ) -> None:
        pass

    def on_error(self, position: int, error: BaseException) -> None:
        pass

    def on_pipeline_end(self, generation: Optional[Generation]) -> None:
        pass


class LoggingObserver(PipelineObserver):
    """Reports progress through the standard logging module."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logger

    def on_pipeline_start(self, total_steps, prompt):
        self.log.info("Pipeline started (%d steps)", total_steps)

    def on_step_start(self, position, total_steps, name, instructions, state):
        self.log.info("[%d/%d] %s: %s", position, total_steps, name, instructions)

    def on_step_end(self, position, generation, duration):
        self.log.info(
            "Step %d finished in %.2fs (%d chars)",
            position,
            duration,
            len(generation.text),
        )

    def on_error(self, position, error):
        if isinstance(error, PipelineCancelledError):
            self.log.info("Pipeline cancelled before step %d", position)
            return
        self.log.error("Step %d failed: %s", position, error)

    def on_pipeline_end(self, generation):
        self.log.info("Pipeline complete")


def notify(observer: Optional[PipelineObserver], hook: str, *args) -> None:
    """Call an observer hook; a failing observer never stops the pipeline."""
    if observer is None:
        return
    try:
        getattr(observer, hook)(*args)
    except Exception:
        logger.warning("Observer %s.%s failed", type(observer).__name__, hook, exc_info=True)
