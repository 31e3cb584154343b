"""
Velocity stream pipeline
========================
Turns per-frame Doppler velocity readings into smoothed display samples,
detected ejection cycles and their velocity-time integrals.

Usage:
    pipeline = VelocityPipeline(PipelineConfig())
    for value in frames:
        cycle = pipeline.on_sample(value)
        if cycle is not None:
            print(cycle.vti_m, pipeline.stroke_volume_ml)
    pipeline.on_reset()  # transport disconnected

The pipeline does no locking. Callers deliver samples and resets one at a
time, in arrival order (see ``vti_monitor.stream.PipelineActor``).
"""

from __future__ import annotations

import logging
import math
import numbers

import numpy as np

from .cycles import CycleDetector, DetectorState
from .filters import Downsampler, RollingWaveform, SmoothingFilter
from .metrics import integrate_cycle, stroke_volume_ml
from .models import (
    DEFAULT_VESSEL_RADIUS_M,
    M_TO_CM,
    M_TO_MM,
    CycleResult,
    MonitorReadout,
    PipelineConfig,
)

logger = logging.getLogger(__name__)


class InvalidSampleError(ValueError):
    """Raised when a sample is not a finite real number."""


def _coerce_sample(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidSampleError(f"sample must be a real number, got {type(value).__name__}")
    sample = float(value)
    if not math.isfinite(sample):
        raise InvalidSampleError(f"sample must be finite, got {sample}")
    return sample


def _coerce_radius(radius_m: object) -> float:
    if isinstance(radius_m, bool) or not isinstance(radius_m, numbers.Real):
        raise ValueError("vessel radius must be a real number")
    radius = float(radius_m)
    if not math.isfinite(radius) or radius <= 0:
        raise ValueError("vessel radius must be positive and finite")
    return radius


class VelocityPipeline:
    """
    Single-stream VTI pipeline.

    Owns the downsampler, smoothing filter, rolling waveform and cycle
    detector, plus the latest completed-cycle VTI. The vessel radius is the
    only value set by a different actor (user input); it is one float that is
    replaced whole and survives :meth:`on_reset`.
    """

    def __init__(
        self,
        config: PipelineConfig | None = None,
        vessel_radius_m: float = DEFAULT_VESSEL_RADIUS_M,
    ) -> None:
        """
        Args:
            config          : Pipeline configuration (defaults if omitted)
            vessel_radius_m : Initial vessel radius in metres
        """
        self.config = config or PipelineConfig()
        self._vessel_radius_m = _coerce_radius(vessel_radius_m)

        self._downsampler = Downsampler(self.config.downsample_factor)
        self._filter = SmoothingFilter(self.config.filter_window)
        self._waveform = RollingWaveform(self.config.waveform_capacity)
        self._detector = CycleDetector(
            threshold_m_s=self.config.ejection_threshold,
            confirmation_count=self.config.confirmation_count,
            trim_confirmation_samples=self.config.trim_confirmation_samples,
        )

        self._vti_m = 0.0
        self._cycles_completed = 0

        logger.info(
            f"VelocityPipeline created (K={self.config.downsample_factor}, "
            f"W={self.config.filter_window}, T={self.config.ejection_threshold} m/s, "
            f"C={self.config.confirmation_count}, "
            f"PRF={self.config.pulse_repetition_frequency_hz} Hz, "
            f"signal={self.config.detector_signal}, mode={self.config.downsample_mode})"
        )

    # -----------------------------------------------------------------------
    # Stream input
    # -----------------------------------------------------------------------

    def on_sample(self, value_m_per_s: float) -> CycleResult | None:
        """
        Feed one decoded velocity frame.

        Returns the completed cycle when this sample ends one and the cycle
        could be integrated, otherwise ``None``. Raises
        :class:`InvalidSampleError` without changing any state if the value is
        not a finite real number.
        """
        raw = _coerce_sample(value_m_per_s)
        kept = self._downsampler.accept()

        if self.config.downsample_mode == "gated":
            if not kept:
                return None
            smoothed = self._filter.push(raw)
            self._waveform.push(smoothed)
        else:
            smoothed = self._filter.push(raw)
            if kept:
                self._waveform.push(smoothed)

        signal = smoothed if self.config.detector_signal == "smoothed" else raw
        cycle = self._detector.feed(signal)
        if cycle is None:
            return None
        return self._complete_cycle(cycle)

    def on_reset(self) -> None:
        """Return every stream-derived value to its freshly created state."""
        self._downsampler.reset()
        self._filter.reset()
        self._waveform.reset()
        self._detector.reset()
        self._vti_m = 0.0
        self._cycles_completed = 0
        logger.info("VelocityPipeline reset")

    def _complete_cycle(self, cycle: tuple[float, ...]) -> CycleResult | None:
        dt_s = self.config.sample_interval_s
        vti_m = integrate_cycle(cycle, dt_s)
        if vti_m is None:
            logger.debug(f"Dropped degenerate cycle of {len(cycle)} samples")
            return None

        self._vti_m = vti_m
        self._cycles_completed += 1
        result = CycleResult(
            index=self._cycles_completed,
            sample_count=len(cycle),
            duration_s=(len(cycle) - 1) * dt_s,
            vti_m=vti_m,
            peak_velocity_m_s=max(cycle),
            stroke_volume_ml=self.stroke_volume_ml,
        )
        logger.info(
            f"Cycle {result.index}: {result.sample_count} samples, "
            f"VTI {vti_m * M_TO_CM:.2f} cm, SV {result.stroke_volume_ml:.2f} ml"
        )
        return result

    # -----------------------------------------------------------------------
    # Presentation outputs
    # -----------------------------------------------------------------------

    @property
    def velocity_m_s(self) -> float:
        return self._filter.value

    @property
    def velocity_cm_s(self) -> float:
        return self._filter.value * M_TO_CM

    @property
    def vti_m(self) -> float:
        return self._vti_m

    @property
    def cycles_completed(self) -> int:
        return self._cycles_completed

    @property
    def detector_state(self) -> DetectorState:
        return self._detector.state

    @property
    def ejecting(self) -> bool:
        return self._detector.ejecting

    @property
    def cycle_samples(self) -> tuple[float, ...]:
        return self._detector.cycle_samples

    @property
    def arrivals(self) -> int:
        return self._downsampler.arrivals

    def waveform(self) -> np.ndarray:
        """Read-only copy of the rolling waveform in m/s, oldest first."""
        return self._waveform.snapshot()

    @property
    def vessel_radius_m(self) -> float:
        return self._vessel_radius_m

    @vessel_radius_m.setter
    def vessel_radius_m(self, radius_m: float) -> None:
        self._vessel_radius_m = _coerce_radius(radius_m)
        logger.info(f"Vessel radius set to {self._vessel_radius_m * M_TO_MM:.2f} mm")

    def set_vessel_radius_mm(self, radius_mm: float) -> None:
        self.vessel_radius_m = _coerce_radius(radius_mm) / M_TO_MM

    @property
    def stroke_volume_ml(self) -> float:
        return stroke_volume_ml(self._vti_m, self._vessel_radius_m)

    def readout(self) -> MonitorReadout:
        radius_m = self._vessel_radius_m
        return MonitorReadout(
            velocity_cm_s=self.velocity_cm_s,
            vti_cm=self._vti_m * M_TO_CM,
            vessel_radius_mm=radius_m * M_TO_MM,
            stroke_volume_ml=stroke_volume_ml(self._vti_m, radius_m),
            ejecting=self.ejecting,
            cycles_completed=self._cycles_completed,
        )
