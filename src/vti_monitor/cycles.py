from __future__ import annotations

import enum
import logging
from collections import deque
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class DetectorPhase(str, enum.Enum):
    IDLE = "idle"
    EJECTING = "ejecting"


class DetectorTransition(str, enum.Enum):
    NONE = "none"
    CYCLE_STARTED = "cycle_started"
    CYCLE_ENDED = "cycle_ended"


@dataclass(frozen=True)
class DetectorState:
    """Hysteresis state: current phase plus both confirmation counters."""

    phase: DetectorPhase = DetectorPhase.IDLE
    start_count: int = 0
    end_count: int = 0


IDLE_STATE = DetectorState()


def advance_detector(
    state: DetectorState,
    velocity_m_s: float,
    threshold_m_s: float,
    confirmation_count: int,
) -> tuple[DetectorState, DetectorTransition]:
    """Apply one sample to the detector state and report the transition, if any."""

    above = velocity_m_s >= threshold_m_s

    if state.phase is DetectorPhase.IDLE:
        start_count = state.start_count + 1 if above else 0
        if start_count >= confirmation_count:
            return DetectorState(phase=DetectorPhase.EJECTING), DetectorTransition.CYCLE_STARTED
        return DetectorState(start_count=start_count), DetectorTransition.NONE

    end_count = 0 if above else state.end_count + 1
    if end_count >= confirmation_count:
        return IDLE_STATE, DetectorTransition.CYCLE_ENDED
    return (
        DetectorState(phase=DetectorPhase.EJECTING, end_count=end_count),
        DetectorTransition.NONE,
    )


class CycleDetector:
    """
    Ejection-cycle detector over a single velocity signal.

    Wraps :func:`advance_detector` and owns the per-cycle sample buffer, which
    is non-empty exactly while the detector is ejecting. ``feed`` returns the
    buffered samples of a cycle when it ends; integrating them is the
    caller's job.

    By default a cycle holds the sample that confirmed the start through the
    sample that confirmed the end. With ``trim_confirmation_samples`` the
    returned cycle instead runs from the first sample of the start run to the
    last sample before the end run, so it covers only above-threshold flow.
    """

    def __init__(
        self,
        threshold_m_s: float = 0.15,
        confirmation_count: int = 5,
        trim_confirmation_samples: bool = False,
    ) -> None:
        if confirmation_count < 1:
            raise ValueError("confirmation_count must be >= 1")
        self.threshold_m_s = threshold_m_s
        self.confirmation_count = confirmation_count
        self.trim_confirmation_samples = trim_confirmation_samples
        self._state = IDLE_STATE
        self._cycle: list[float] = []
        self._start_run: deque[float] = deque(maxlen=confirmation_count)

    @property
    def state(self) -> DetectorState:
        return self._state

    @property
    def ejecting(self) -> bool:
        return self._state.phase is DetectorPhase.EJECTING

    @property
    def cycle_samples(self) -> tuple[float, ...]:
        return tuple(self._cycle)

    def feed(self, velocity_m_s: float) -> tuple[float, ...] | None:
        was_ejecting = self.ejecting
        self._state, transition = advance_detector(
            self._state,
            velocity_m_s,
            threshold_m_s=self.threshold_m_s,
            confirmation_count=self.confirmation_count,
        )

        if not was_ejecting:
            if self._state.start_count == 0 and transition is DetectorTransition.NONE:
                self._start_run.clear()
            else:
                self._start_run.append(velocity_m_s)

        if transition is DetectorTransition.CYCLE_STARTED:
            if self.trim_confirmation_samples:
                self._cycle = list(self._start_run)
            else:
                self._cycle = [velocity_m_s]
            self._start_run.clear()
            logger.debug(f"Ejection started at {velocity_m_s:.4f} m/s")
            return None

        if was_ejecting:
            self._cycle.append(velocity_m_s)

        if transition is DetectorTransition.CYCLE_ENDED:
            if self.trim_confirmation_samples:
                completed = tuple(self._cycle[: -self.confirmation_count])
            else:
                completed = tuple(self._cycle)
            self._cycle = []
            return completed

        return None

    def reset(self) -> None:
        if self._cycle:
            logger.debug(f"Discarding partial cycle of {len(self._cycle)} samples")
        self._state = IDLE_STATE
        self._cycle = []
        self._start_run.clear()
