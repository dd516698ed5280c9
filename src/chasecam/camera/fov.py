from __future__ import annotations

from chasecam.camera.tuning import ChaseCameraTuning
from chasecam.common.math3d import lerp, lerp_to, safe_dt


def speed_fov_target(*, speed: float, tuning: ChaseCameraTuning) -> float:
    max_speed = float(tuning.max_fov_speed)
    if max_speed <= 0.0:
        return float(tuning.max_fov)
    return lerp(tuning.min_fov, tuning.max_fov, abs(float(speed)) / max_speed)


class FovSmoother:
    """Speed-driven field of view, eased toward its target each tick."""

    def __init__(self, tuning: ChaseCameraTuning) -> None:
        self._tuning = tuning
        self._fov = float(tuning.min_fov)

    @property
    def value(self) -> float:
        return self._fov

    def reset(self) -> None:
        self._fov = float(self._tuning.min_fov)

    def observe(self, *, dt: float, speed: float) -> float:
        t = self._tuning
        if float(t.max_fov_speed) <= 0.0:
            self._fov = float(t.max_fov)
            return self._fov
        target = speed_fov_target(speed=speed, tuning=t)
        self._fov = lerp_to(self._fov, target, safe_dt(dt) * float(t.fov_smoothing_speed))
        return self._fov
