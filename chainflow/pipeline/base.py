import asyncio
import inspect
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Optional, Tuple, Union

from .. import config
from ..errors import PipelineCancelledError
from ..messages import ConversationState, Generation, Message, assistant_message
from .observer import LoggingObserver, PipelineObserver, notify
from .stream import Handoff, Streamer

logger = logging.getLogger(__name__)

DEFAULT_INSTRUCTIONS = "Executing task..."

Prompt = Union[ConversationState, str]


class Step(ABC):
    """A unit that runs a conversation forward. Must be async and never mutate its input.

    ``name`` and ``instructions`` are optional labels for display only.
    Implementations must be safe to call from concurrent pipeline runs.
    """

    name: str = ""
    instructions: str = ""

    @abstractmethod
    async def run(self, state: ConversationState, **options: Any) -> Generation:
        """
        Produce a new generation from ``state``.

        Options (model, temperature, ...) are forwarded verbatim by the
        pipeline; raise to abort the pipeline.
        """
        pass


class FunctionStep(Step):
    """Adapts a plain callable to the Step contract.

    ``fn(state, **options)`` may be sync or async and may return a
    Generation, a Message or a str (sent back as one assistant message).
    """

    def __init__(self, fn: Callable[..., Any], name: str = "", instructions: str = ""):
        self.fn = fn
        self.name = name or getattr(fn, "__name__", "")
        self.instructions = instructions

    async def run(self, state: ConversationState, **options: Any) -> Generation:
        result = self.fn(state, **options)
        if inspect.isawaitable(result):
            result = await result
        if isinstance(result, Generation):
            return result
        if isinstance(result, Message):
            return Generation((result,))
        if isinstance(result, str):
            return Generation((assistant_message(result),))
        raise TypeError(
            f"{self.name or 'step'} returned {type(result).__name__}, "
            "expected Generation, Message or str"
        )

    def __repr__(self) -> str:
        return f"FunctionStep({self.name!r})"


def describe_step(step: Any, position: int) -> Tuple[str, str]:
    """Display label for a step: (name, instructions) with positional fallbacks."""
    name = getattr(step, "name", "") or ""
    instructions = getattr(step, "instructions", "") or ""
    return name or f"Step {position}", instructions or DEFAULT_INSTRUCTIONS


def _as_state(prompt: Prompt) -> ConversationState:
    if isinstance(prompt, str):
        prompt = ConversationState.from_text(prompt)
    if not prompt.has_content:
        raise ValueError("Pipeline prompt must contain at least one non-empty message")
    return prompt


class Pipeline(Step):
    """Chain of steps with sequential async execution. Immutable - with_step() returns new pipeline.

    Each step sees only the previous step's messages. A pipeline is itself a
    Step, so pipelines nest. An empty pipeline returns the prompt unchanged.
    """

    def __init__(
        self,
        steps: Optional[Iterable[Any]] = None,
        *,
        name: str = "",
        instructions: str = "",
        verbose: bool = False,
        observer: Optional[PipelineObserver] = None,
    ):
        self.steps = tuple(steps or ())
        self.name = name
        self.instructions = instructions
        self.verbose = verbose
        self.observer = observer

    def _active_observer(self) -> Optional[PipelineObserver]:
        if not self.verbose:
            return None
        return self.observer or LoggingObserver()

    async def run(
        self,
        state: Prompt,
        *,
        cancel_event: Optional[asyncio.Event] = None,
        **options: Any,
    ) -> Generation:
        """
        Run every step in order and return the last generation.

        Raises whatever a failing step raised, unchanged, or
        PipelineCancelledError when ``cancel_event`` is set between steps.
        """
        return await self._execute(_as_state(state), options, cancel_event)

    def run_stream(
        self,
        state: Prompt,
        *,
        cancel_event: Optional[asyncio.Event] = None,
        **options: Any,
    ) -> Streamer:
        """
        Start the pipeline in the background and return a Streamer yielding
        one generation per completed step. Needs a running event loop.
        """
        prompt = _as_state(state)

        async def produce(handoff: Handoff, cancel: asyncio.Event) -> Generation:
            return await self._execute(prompt, options, cancel, handoff)

        return Streamer(produce, cancel_event=cancel_event, buffer=config.STREAM_BUFFER)

    async def _execute(
        self,
        prompt: ConversationState,
        options: dict,
        cancel_event: Optional[asyncio.Event],
        handoff: Optional[Handoff] = None,
    ) -> Generation:
        observer = self._active_observer()
        total = len(self.steps)
        notify(observer, "on_pipeline_start", total, prompt)

        state = prompt
        last: Optional[Generation] = None
        for position, step in enumerate(self.steps, start=1):
            if cancel_event is not None and cancel_event.is_set():
                cancelled = PipelineCancelledError(position)
                notify(observer, "on_error", position, cancelled)
                raise cancelled

            name, instructions = describe_step(step, position)
            notify(observer, "on_step_start", position, total, name, instructions, state)
            logger.debug("Running step %d/%d (%s)", position, total, name)

            started = time.perf_counter()
            try:
                last = await step.run(state, **options)
            except Exception as e:
                notify(observer, "on_error", position, e)
                raise
            duration = time.perf_counter() - started
            logger.debug("Step %d/%d finished in %.3fs", position, total, duration)
            notify(observer, "on_step_end", position, last, duration)

            if handoff is not None:
                await handoff(last)
            state = last.to_state()

        if last is None:
            last = Generation(prompt.messages)
        notify(observer, "on_pipeline_end", last)
        return last

    def with_step(self, step: Any) -> "Pipeline":
        """
        Return new pipeline with step appended.

        Creates a new pipeline, leaves the original unchanged.
        """
        return Pipeline(
            self.steps + (step,),
            name=self.name,
            instructions=self.instructions,
            verbose=self.verbose,
            observer=self.observer,
        )

    def __len__(self) -> int:
        return len(self.steps)

    def __repr__(self) -> str:
        step_names = [describe_step(s, i)[0] for i, s in enumerate(self.steps, start=1)]
        return f"Pipeline(steps={step_names})"
