from __future__ import annotations

import random

from vti_monitor.cycles import (
    IDLE_STATE,
    CycleDetector,
    DetectorPhase,
    DetectorState,
    DetectorTransition,
    advance_detector,
)


def _feed_all(detector: CycleDetector, values: list[float]) -> list[tuple[float, ...]]:
    cycles: list[tuple[float, ...]] = []
    for value in values:
        cycle = detector.feed(value)
        if cycle is not None:
            cycles.append(cycle)
    return cycles


def test_detector_stays_idle_when_every_sample_is_below_threshold() -> None:
    rng = random.Random(5)
    detector = CycleDetector(threshold_m_s=0.15, confirmation_count=5)

    cycles = _feed_all(detector, [rng.uniform(-1.0, 0.149) for _ in range(2000)])

    assert cycles == []
    assert detector.state == IDLE_STATE
    assert detector.cycle_samples == ()


def test_detector_enters_ejecting_exactly_on_confirmation_count() -> None:
    detector = CycleDetector(threshold_m_s=0.15, confirmation_count=5)

    for expected_count in range(1, 5):
        detector.feed(0.2)
        assert detector.ejecting is False
        assert detector.state.start_count == expected_count

    detector.feed(0.2)

    assert detector.ejecting is True
    assert detector.state == DetectorState(phase=DetectorPhase.EJECTING)
    assert detector.cycle_samples == (0.2,)


def test_sub_threshold_sample_restarts_start_confirmation() -> None:
    detector = CycleDetector(threshold_m_s=0.15, confirmation_count=5)

    _feed_all(detector, [0.2, 0.2, 0.2, 0.2, 0.1, 0.2, 0.2, 0.2, 0.2])

    assert detector.ejecting is False
    assert detector.state.start_count == 4


def test_cycle_buffer_runs_from_start_confirmation_to_end_confirmation() -> None:
    detector = CycleDetector(threshold_m_s=0.15, confirmation_count=5)

    cycles = _feed_all(detector, [0.2] * 8 + [0.05] * 5)

    assert cycles == [(0.2,) * 4 + (0.05,) * 5]
    assert detector.state == IDLE_STATE
    assert detector.cycle_samples == ()


def test_trimmed_cycle_covers_only_the_above_threshold_run() -> None:
    detector = CycleDetector(
        threshold_m_s=0.15,
        confirmation_count=5,
        trim_confirmation_samples=True,
    )

    cycles = _feed_all(detector, [0.1, 0.2, 0.1] + [0.2] * 8 + [0.05] * 5)

    assert cycles == [(0.2,) * 8]
    assert detector.cycle_samples == ()


def test_above_threshold_sample_restarts_end_confirmation() -> None:
    detector = CycleDetector(threshold_m_s=0.15, confirmation_count=5)
    _feed_all(detector, [0.2] * 5)

    cycles = _feed_all(detector, [0.05] * 4 + [0.3] + [0.05] * 4)

    assert cycles == []
    assert detector.ejecting is True
    assert detector.state.end_count == 4
    assert len(detector.cycle_samples) == 10


def test_reset_mid_cycle_discards_buffer_and_counters() -> None:
    detector = CycleDetector(threshold_m_s=0.15, confirmation_count=3)
    _feed_all(detector, [0.5, 0.5, 0.5, 0.6, 0.1, 0.1])
    assert detector.ejecting is True

    detector.reset()

    assert detector.state == IDLE_STATE
    assert detector.cycle_samples == ()
    assert detector.feed(0.1) is None
    assert detector.state == IDLE_STATE


def test_advance_detector_is_pure() -> None:
    state = DetectorState(start_count=4)

    first = advance_detector(state, 0.2, threshold_m_s=0.15, confirmation_count=5)
    second = advance_detector(state, 0.2, threshold_m_s=0.15, confirmation_count=5)

    assert first == second
    assert first == (DetectorState(phase=DetectorPhase.EJECTING), DetectorTransition.CYCLE_STARTED)
    assert state == DetectorState(start_count=4)


def test_advance_detector_reports_cycle_end() -> None:
    state = DetectorState(phase=DetectorPhase.EJECTING, end_count=1)

    next_state, transition = advance_detector(
        state, 0.0, threshold_m_s=0.15, confirmation_count=2
    )

    assert next_state == IDLE_STATE
    assert transition is DetectorTransition.CYCLE_ENDED


def test_single_sample_confirmation_produces_two_sample_cycle() -> None:
    detector = CycleDetector(threshold_m_s=0.15, confirmation_count=1)

    cycles = _feed_all(detector, [0.2, 0.05])

    assert cycles == [(0.2, 0.05)]
