from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Protocol

from panda3d.core import LQuaternionf, LVector3f, PerlinNoise3

from chasecam.camera.tuning import ChaseCameraTuning
from chasecam.common.math3d import clamp, quat_from_axis_angle

# Second noise channel samples the same phase at a fixed lattice offset.
_VERTICAL_NOISE_OFFSET = 5.0


class CoherentNoise(Protocol):
    def noise(self, x: float, y: float, z: float) -> float: ...


@dataclass(frozen=True)
class ShakeOffset:
    x: float = 0.0
    y: float = 0.0
    phase: float = 0.0
    intensity: float = 0.0

    @property
    def active(self) -> bool:
        return self.intensity > 0.0


NO_SHAKE = ShakeOffset()


def shake_intensity(*, speed: float, tuning: ChaseCameraTuning) -> float:
    threshold = float(tuning.shake_speed_threshold)
    span = float(tuning.shake_max_speed) - threshold
    max_len = max(0.0, float(tuning.shake_max_length))
    if abs(float(speed)) <= threshold:
        return 0.0
    if span <= 0.0:
        return max_len
    return clamp((abs(float(speed)) - threshold) / span, 0.0, max_len)


def shake_phase(*, now: float, tuning: ChaseCameraTuning) -> float:
    return math.fmod(float(now), math.pi) * float(tuning.shake_speed)


class ShakeGenerator:
    """Perlin-driven high-speed jitter layered on top of the solved camera pose."""

    def __init__(self, tuning: ChaseCameraTuning, *, noise: CoherentNoise | None = None) -> None:
        self._tuning = tuning
        self._noise = noise if noise is not None else PerlinNoise3(1.0, 1.0, 1.0, 256, int(tuning.shake_seed))

    def sample(self, *, speed: float, now: float) -> ShakeOffset:
        t = self._tuning
        intensity = shake_intensity(speed=speed, tuning=t)
        if intensity <= 0.0:
            return NO_SHAKE
        phase = shake_phase(now=now, tuning=t)
        x = float(self._noise.noise(phase, 0.0, 0.0)) * intensity
        y = float(self._noise.noise(phase, _VERTICAL_NOISE_OFFSET, 0.0)) * intensity
        return ShakeOffset(x=x, y=y, phase=phase, intensity=intensity)

    def apply(
        self,
        *,
        pos: LVector3f,
        rot: LQuaternionf,
        speed: float,
        now: float,
    ) -> tuple[LVector3f, LQuaternionf, ShakeOffset]:
        offset = self.sample(speed=speed, now=now)
        if not offset.active:
            return LVector3f(pos), LQuaternionf(rot), offset

        out_pos = LVector3f(pos) + LVector3f(rot.getRight()) * offset.x + LVector3f(rot.getUp()) * offset.y
        # Local-frame turns: left operand applies first in Panda's quaternion order.
        out_rot = quat_from_axis_angle(offset.x, LVector3f.up()) * LQuaternionf(rot)
        out_rot = quat_from_axis_angle(offset.y, LVector3f.right()) * out_rot
        return out_pos, LQuaternionf(out_rot), offset
