from __future__ import annotations

from collections import deque

import numpy as np


class Downsampler:
    """Keep every ``factor``-th arrival, counting arrivals from 1."""

    def __init__(self, factor: int) -> None:
        if factor < 1:
            raise ValueError("factor must be >= 1")
        self.factor = factor
        self._arrivals = 0

    @property
    def arrivals(self) -> int:
        return self._arrivals

    def accept(self) -> bool:
        self._arrivals += 1
        return self._arrivals % self.factor == 0

    def reset(self) -> None:
        self._arrivals = 0


class SmoothingFilter:
    """Moving average over the last ``window`` samples, seeded with zeros."""

    def __init__(self, window: int) -> None:
        if window < 1:
            raise ValueError("window must be >= 1")
        self.window = window
        self._buffer: deque[float] = deque([0.0] * window, maxlen=window)
        self._sum = 0.0
        self._pushes_since_resum = 0
        self._value = 0.0

    @property
    def value(self) -> float:
        return self._value

    def push(self, sample: float) -> float:
        self._sum += sample - self._buffer[0]
        self._buffer.append(sample)

        # Re-sum once per window so the running sum cannot drift.
        self._pushes_since_resum += 1
        if self._pushes_since_resum >= self.window:
            self._sum = sum(self._buffer)
            self._pushes_since_resum = 0

        self._value = self._sum / self.window
        return self._value

    def reset(self) -> None:
        self._buffer = deque([0.0] * self.window, maxlen=self.window)
        self._sum = 0.0
        self._pushes_since_resum = 0
        self._value = 0.0


class RollingWaveform:
    """Fixed-capacity display FIFO; always holds exactly ``capacity`` values."""

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self._points: deque[float] = deque([0.0] * capacity, maxlen=capacity)

    def __len__(self) -> int:
        return len(self._points)

    def push(self, sample: float) -> None:
        self._points.append(sample)

    def snapshot(self) -> np.ndarray:
        points = np.fromiter(self._points, dtype=np.float64, count=self.capacity)
        points.setflags(write=False)
        return points

    def reset(self) -> None:
        self._points = deque([0.0] * self.capacity, maxlen=self.capacity)

