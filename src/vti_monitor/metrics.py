from __future__ import annotations

import math
from collections.abc import Sequence

from .models import CUBIC_METRES_TO_ML


def integrate_cycle(velocities_m_s: Sequence[float], dt_s: float) -> float | None:
    """
    Velocity-time integral of one cycle by the composite trapezoid rule.

    Negative velocities are clamped to zero before integration. Returns
    ``None`` for cycles with fewer than two samples.
    """

    if dt_s <= 0:
        raise ValueError("dt_s must be positive")
    if len(velocities_m_s) < 2:
        return None

    area = 0.0
    previous = max(velocities_m_s[0], 0.0)
    for velocity in velocities_m_s[1:]:
        current = max(velocity, 0.0)
        area += 0.5 * (previous + current) * dt_s
        previous = current
    return area


def cross_sectional_area_m2(radius_m: float) -> float:
    return math.pi * radius_m**2


def stroke_volume_ml(vti_m: float, radius_m: float) -> float:
    """Stroke volume in ml from VTI (m) and vessel radius (m)."""

    return vti_m * cross_sectional_area_m2(radius_m) * CUBIC_METRES_TO_ML
