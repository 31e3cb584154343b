from __future__ import annotations

import math
import random
from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class SyntheticStreamConfig:
    """Configuration for synthetic Doppler velocity stream generation."""

    scenario: str = "quiet_transducer"
    heart_rate_bpm: float = 72.0
    peak_velocity_m_s: float = 0.9
    ejection_fraction_of_cycle: float = 0.35
    duration_s: float = 5.0
    sample_rate_hz: float = 1000.0
    seed: int = 42


@dataclass(frozen=True)
class StreamScenario:
    """Noise and artifact envelope for the simulated transducer."""

    noise_m_s: float
    spike_probability: float
    spike_m_s: float
    reverse_flow_fraction: float


@dataclass(frozen=True)
class SyntheticVelocityStream:
    """Synthetic velocity series with per-beat ground truth."""

    timestamps_s: list[float]
    velocity_m_s: list[float]
    beat_count: int
    ejection_duration_s: float
    true_vti_m: float


STREAM_SCENARIOS: dict[str, StreamScenario] = {
    "quiet_transducer": StreamScenario(
        noise_m_s=0.005,
        spike_probability=0.0,
        spike_m_s=0.0,
        reverse_flow_fraction=0.0,
    ),
    "noisy_transducer": StreamScenario(
        noise_m_s=0.04,
        spike_probability=0.002,
        spike_m_s=0.3,
        reverse_flow_fraction=0.0,
    ),
    "reverse_flow": StreamScenario(
        noise_m_s=0.01,
        spike_probability=0.0,
        spike_m_s=0.0,
        reverse_flow_fraction=0.15,
    ),
}


def generate_timestamps(duration_s: float, sample_rate_hz: float) -> list[float]:
    if duration_s <= 0:
        raise ValueError("duration_s must be positive")
    if sample_rate_hz <= 0:
        raise ValueError("sample_rate_hz must be positive")

    samples = int(round(duration_s * sample_rate_hz)) + 1
    return [index / sample_rate_hz for index in range(samples)]


def half_sine_vti(peak_velocity_m_s: float, ejection_duration_s: float) -> float:
    """Exact VTI of a half-sine ejection profile."""

    return 2.0 / math.pi * peak_velocity_m_s * ejection_duration_s


def _beat_velocity(
    phase_s: float,
    ejection_s: float,
    peak_velocity_m_s: float,
    reverse_flow_fraction: float,
) -> float:
    if phase_s < ejection_s:
        return peak_velocity_m_s * math.sin(math.pi * phase_s / ejection_s)

    # Brief early-diastolic reversal right after valve closure.
    reverse_window_s = 0.3 * ejection_s
    if reverse_flow_fraction > 0 and phase_s < ejection_s + reverse_window_s:
        reverse_phase = (phase_s - ejection_s) / reverse_window_s
        return -reverse_flow_fraction * peak_velocity_m_s * math.sin(math.pi * reverse_phase)
    return 0.0


def generate_velocity_profile(
    timestamps_s: Sequence[float],
    heart_rate_bpm: float,
    peak_velocity_m_s: float,
    ejection_fraction_of_cycle: float,
    reverse_flow_fraction: float = 0.0,
) -> list[float]:
    if heart_rate_bpm <= 0:
        raise ValueError("heart_rate_bpm must be positive")
    if peak_velocity_m_s <= 0:
        raise ValueError("peak_velocity_m_s must be positive")
    if not 0.0 < ejection_fraction_of_cycle < 0.7:
        raise ValueError("ejection_fraction_of_cycle must be in (0, 0.7)")

    period_s = 60.0 / heart_rate_bpm
    ejection_s = ejection_fraction_of_cycle * period_s
    return [
        _beat_velocity(
            math.fmod(timestamp, period_s),
            ejection_s,
            peak_velocity_m_s,
            reverse_flow_fraction,
        )
        for timestamp in timestamps_s
    ]


def generate_velocity_stream(config: SyntheticStreamConfig) -> SyntheticVelocityStream:
    if config.scenario not in STREAM_SCENARIOS:
        raise ValueError(f"unsupported scenario: {config.scenario}")

    scenario = STREAM_SCENARIOS[config.scenario]
    timestamps_s = generate_timestamps(config.duration_s, config.sample_rate_hz)
    clean = generate_velocity_profile(
        timestamps_s=timestamps_s,
        heart_rate_bpm=config.heart_rate_bpm,
        peak_velocity_m_s=config.peak_velocity_m_s,
        ejection_fraction_of_cycle=config.ejection_fraction_of_cycle,
        reverse_flow_fraction=scenario.reverse_flow_fraction,
    )

    rng = random.Random(config.seed)
    velocity_m_s: list[float] = []
    for value in clean:
        noisy = value + rng.gauss(0.0, scenario.noise_m_s)
        if rng.random() < scenario.spike_probability:
            noisy += scenario.spike_m_s if rng.random() < 0.5 else -scenario.spike_m_s
        velocity_m_s.append(noisy)

    period_s = 60.0 / config.heart_rate_bpm
    ejection_s = config.ejection_fraction_of_cycle * period_s
    beat_count = int(math.floor((timestamps_s[-1] - ejection_s) / period_s)) + 1
    if timestamps_s[-1] < ejection_s:
        beat_count = 0

    return SyntheticVelocityStream(
        timestamps_s=timestamps_s,
        velocity_m_s=velocity_m_s,
        beat_count=beat_count,
        ejection_duration_s=ejection_s,
        true_vti_m=half_sine_vti(config.peak_velocity_m_s, ejection_s),
    )


def available_scenarios() -> tuple[str, ...]:
    return tuple(sorted(STREAM_SCENARIOS))
