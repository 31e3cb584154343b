from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from typing import Literal

DetectorSignal = Literal["raw", "smoothed"]
DownsampleMode = Literal["gated", "independent"]

DETECTOR_SIGNALS: tuple[str, ...] = ("raw", "smoothed")
DOWNSAMPLE_MODES: tuple[str, ...] = ("gated", "independent")

DEFAULT_VESSEL_RADIUS_M = 0.010
CUBIC_METRES_TO_ML = 1_000_000.0
M_TO_CM = 100.0
M_TO_MM = 1000.0


@dataclass(frozen=True)
class PipelineConfig:
    """Configuration for the velocity-to-VTI stream pipeline."""

    downsample_factor: int = 3
    filter_window: int = 5
    ejection_threshold: float = 0.15
    confirmation_count: int = 5
    waveform_capacity: int = 300
    pulse_repetition_frequency_hz: float = 1000.0
    detector_signal: DetectorSignal = "smoothed"
    downsample_mode: DownsampleMode = "gated"
    trim_confirmation_samples: bool = False

    def __post_init__(self) -> None:
        for field in (
            "downsample_factor",
            "filter_window",
            "confirmation_count",
            "waveform_capacity",
        ):
            value = getattr(self, field)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{field} must be an integer")
            if value < 1:
                raise ValueError(f"{field} must be >= 1")

        for field in ("ejection_threshold", "pulse_repetition_frequency_hz"):
            value = getattr(self, field)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise ValueError(f"{field} must be a real number")

        if not math.isfinite(self.ejection_threshold):
            raise ValueError("ejection_threshold must be finite")
        if (
            not math.isfinite(self.pulse_repetition_frequency_hz)
            or self.pulse_repetition_frequency_hz <= 0
        ):
            raise ValueError("pulse_repetition_frequency_hz must be positive")
        if self.detector_signal not in DETECTOR_SIGNALS:
            raise ValueError(f"unsupported detector_signal: {self.detector_signal}")
        if self.downsample_mode not in DOWNSAMPLE_MODES:
            raise ValueError(f"unsupported downsample_mode: {self.downsample_mode}")

    @property
    def sample_interval_s(self) -> float:
        return 1.0 / self.pulse_repetition_frequency_hz


@dataclass(frozen=True)
class CycleResult:
    """One completed and integrated ejection cycle."""

    index: int
    sample_count: int
    duration_s: float
    vti_m: float
    peak_velocity_m_s: float
    stroke_volume_ml: float


@dataclass(frozen=True)
class MonitorReadout:
    """Display-unit snapshot of the pipeline outputs."""

    velocity_cm_s: float
    vti_cm: float
    vessel_radius_mm: float
    stroke_volume_ml: float
    ejecting: bool
    cycles_completed: int
