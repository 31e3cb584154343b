"""
Single-consumer event loop in front of a VelocityPipeline.

Transports may deliver frames from callbacks on the loop thread or from
their own threads. Every delivery becomes an event on one asyncio queue and
``PipelineActor.run`` applies them to the pipeline strictly in order.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass

from .models import CycleResult
from .pipeline import InvalidSampleError, VelocityPipeline

logger = logging.getLogger(__name__)


class StreamEventKind(str, enum.Enum):
    SAMPLE = "sample"
    RESET = "reset"
    STOP = "stop"


@dataclass(frozen=True)
class StreamEvent:
    kind: StreamEventKind
    value: object = None


_RESET_EVENT = StreamEvent(StreamEventKind.RESET)
_STOP_EVENT = StreamEvent(StreamEventKind.STOP)


class PipelineActor:
    """Serializes samples and resets onto one pipeline."""

    def __init__(
        self,
        pipeline: VelocityPipeline,
        on_cycle: Callable[[CycleResult], None] | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.pipeline = pipeline
        self.on_cycle = on_cycle
        self._loop = loop
        self._queue: asyncio.Queue[StreamEvent] | None = None
        self.rejected_samples = 0
        self.callback_errors = 0

    def _ensure_queue(self) -> asyncio.Queue[StreamEvent]:
        if self._queue is None:
            if self._loop is None:
                self._loop = asyncio.get_running_loop()
            self._queue = asyncio.Queue()
        return self._queue

    # Loop-thread producers

    def submit_sample(self, value: object) -> None:
        self._ensure_queue().put_nowait(StreamEvent(StreamEventKind.SAMPLE, value))

    def submit_reset(self) -> None:
        self._ensure_queue().put_nowait(_RESET_EVENT)

    def stop(self) -> None:
        self._ensure_queue().put_nowait(_STOP_EVENT)

    # Foreign-thread producers

    def submit_sample_threadsafe(self, value: object) -> None:
        self._call_threadsafe(self.submit_sample, value)

    def submit_reset_threadsafe(self) -> None:
        self._call_threadsafe(self.submit_reset)

    def stop_threadsafe(self) -> None:
        self._call_threadsafe(self.stop)

    def _call_threadsafe(self, callback: Callable[..., None], *args: object) -> None:
        if self._loop is None:
            raise RuntimeError("actor is not bound to an event loop; start run() first")
        self._loop.call_soon_threadsafe(callback, *args)

    async def run(self) -> int:
        """Consume events until stopped; returns the number of events applied."""
        queue = self._ensure_queue()
        applied = 0
        logger.info("PipelineActor started")

        while True:
            event = await queue.get()
            try:
                if event.kind is StreamEventKind.STOP:
                    break
                self._apply(event)
                applied += 1
            finally:
                queue.task_done()

        logger.info(
            f"PipelineActor stopped after {applied} events "
            f"({self.rejected_samples} rejected samples)"
        )
        return applied

    def _apply(self, event: StreamEvent) -> None:
        if event.kind is StreamEventKind.RESET:
            self.pipeline.on_reset()
            return

        try:
            cycle = self.pipeline.on_sample(event.value)  # type: ignore[arg-type]
        except InvalidSampleError as error:
            self.rejected_samples += 1
            logger.warning(f"Rejected sample {event.value!r}: {error}")
            return

        if cycle is not None and self.on_cycle is not None:
            try:
                self.on_cycle(cycle)
            except Exception:
                self.callback_errors += 1
                logger.exception(f"on_cycle callback failed for cycle {cycle.index}")
