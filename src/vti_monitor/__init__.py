"""Core package for Doppler velocity-time integral monitoring."""

from .cycles import (
    CycleDetector,
    DetectorPhase,
    DetectorState,
    DetectorTransition,
    advance_detector,
)
from .filters import Downsampler, RollingWaveform, SmoothingFilter
from .frames import (
    VELOCITY_SERVICE_UUID,
    WAVEFORM_CHARACTERISTIC_UUID,
    FrameDecodeError,
    VelocityStream,
    decode_velocity_frame,
    read_velocity_stream,
    write_velocity_stream,
)
from .metrics import cross_sectional_area_m2, integrate_cycle, stroke_volume_ml
from .models import CycleResult, MonitorReadout, PipelineConfig
from .pipeline import InvalidSampleError, VelocityPipeline
from .stream import PipelineActor
from .synthetic import (
    STREAM_SCENARIOS,
    StreamScenario,
    SyntheticStreamConfig,
    SyntheticVelocityStream,
    available_scenarios,
    generate_timestamps,
    generate_velocity_profile,
    generate_velocity_stream,
    half_sine_vti,
)

__all__ = [
    "PipelineConfig",
    "CycleResult",
    "MonitorReadout",
    "Downsampler",
    "SmoothingFilter",
    "RollingWaveform",
    "DetectorPhase",
    "DetectorState",
    "DetectorTransition",
    "advance_detector",
    "CycleDetector",
    "integrate_cycle",
    "cross_sectional_area_m2",
    "stroke_volume_ml",
    "InvalidSampleError",
    "VelocityPipeline",
    "PipelineActor",
    "VELOCITY_SERVICE_UUID",
    "WAVEFORM_CHARACTERISTIC_UUID",
    "FrameDecodeError",
    "VelocityStream",
    "decode_velocity_frame",
    "read_velocity_stream",
    "write_velocity_stream",
    "StreamScenario",
    "SyntheticStreamConfig",
    "SyntheticVelocityStream",
    "STREAM_SCENARIOS",
    "generate_timestamps",
    "generate_velocity_profile",
    "generate_velocity_stream",
    "half_sine_vti",
    "available_scenarios",
]

try:
    from .monitor_api import create_monitor_app  # noqa: F401
except ModuleNotFoundError:
    # The HTTP surface (fastapi/pydantic) is optional.
    pass
else:
    __all__.append("create_monitor_app")
