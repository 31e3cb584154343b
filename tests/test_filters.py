from __future__ import annotations

import random

import pytest

from vti_monitor.filters import Downsampler, RollingWaveform, SmoothingFilter


def _windowed_means(values: list[float], window: int) -> list[float]:
    padded = [0.0] * (window - 1) + list(values)
    return [sum(padded[i : i + window]) / window for i in range(len(values))]


def test_downsampler_keeps_every_third_arrival() -> None:
    downsampler = Downsampler(3)

    kept = [index for index in range(1, 10) if downsampler.accept()]

    assert kept == [3, 6, 9]
    assert downsampler.arrivals == 9


def test_downsampler_factor_one_keeps_everything_and_reset_restarts_count() -> None:
    downsampler = Downsampler(1)
    assert all(downsampler.accept() for _ in range(4))

    every_other = Downsampler(2)
    assert every_other.accept() is False
    every_other.reset()
    assert every_other.accept() is False
    assert every_other.accept() is True


def test_smoothing_filter_starts_from_zero_seeded_window() -> None:
    smoothing = SmoothingFilter(5)

    outputs = [smoothing.push(1.0) for _ in range(5)]

    assert outputs == pytest.approx([0.2, 0.4, 0.6, 0.8, 1.0])
    assert smoothing.push(0.0) == pytest.approx(0.8)
    assert smoothing.value == pytest.approx(0.8)


def test_smoothing_filter_matches_zero_padded_window_means() -> None:
    rng = random.Random(11)
    values = [rng.uniform(-0.5, 1.5) for _ in range(137)]
    smoothing = SmoothingFilter(7)

    streamed = [smoothing.push(value) for value in values]

    assert streamed == pytest.approx(_windowed_means(values, 7), abs=1e-12)


def test_smoothing_filter_reset_restores_zero_window() -> None:
    smoothing = SmoothingFilter(3)
    for value in (3.0, 6.0, 9.0):
        smoothing.push(value)

    smoothing.reset()

    assert smoothing.value == 0.0
    assert smoothing.push(3.0) == pytest.approx(1.0)


@pytest.mark.parametrize("capacity", [1, 2, 300])
@pytest.mark.parametrize("feeds", [0, 1, 1000])
def test_rolling_waveform_length_always_equals_capacity(capacity: int, feeds: int) -> None:
    waveform = RollingWaveform(capacity)

    for index in range(feeds):
        waveform.push(float(index))

    assert len(waveform) == capacity
    assert waveform.snapshot().shape == (capacity,)


def test_rolling_waveform_drops_oldest_and_snapshot_is_read_only() -> None:
    waveform = RollingWaveform(4)
    for value in (1.0, 2.0, 3.0, 4.0, 5.0):
        waveform.push(value)

    snapshot = waveform.snapshot()

    assert snapshot.tolist() == [2.0, 3.0, 4.0, 5.0]
    with pytest.raises(ValueError):
        snapshot[0] = 99.0

    waveform.reset()
    assert waveform.snapshot().tolist() == [0.0, 0.0, 0.0, 0.0]
    assert snapshot.tolist() == [2.0, 3.0, 4.0, 5.0]
