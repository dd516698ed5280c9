from __future__ import annotations

import logging
from enum import Enum

from panda3d.core import LQuaternionf

from chasecam.camera.tuning import ChaseCameraTuning
from chasecam.camera.vehicle import VehicleSnapshot
from chasecam.common.math3d import (
    axis_pitch,
    axis_yaw,
    clamp,
    lerp_to,
    normalize_angle_deg,
    quat_from_hpr,
    safe_dt,
    slerp,
)

logger = logging.getLogger(__name__)


class OrbitMode(str, Enum):
    FOLLOW = "follow"
    ORBIT = "orbit"


def follow_return_amount(*, dt: float, speed: float, tuning: ChaseCameraTuning) -> float:
    """Slerp fraction for the follow return: faster cars snap back faster, up to a cap."""

    max_speed = float(tuning.max_orbit_return_speed)
    if max_speed <= 0.0:
        return 1.0
    rate = clamp(abs(float(speed)) / max_speed, 0.0, max(0.0, float(tuning.orbit_return_smoothing_speed)))
    return clamp(safe_dt(dt) * rate, 0.0, 1.0)


def follow_targets(*, vehicle: VehicleSnapshot, car_pitch: float, tuning: ChaseCameraTuning) -> tuple[float, float]:
    yaw = vehicle.heading()
    if vehicle.reversing:
        # Stay behind the direction of travel.
        yaw += 180.0
    pitch = clamp(tuning.fixed_orbit_pitch, tuning.min_orbit_pitch, tuning.max_orbit_pitch)
    return (normalize_angle_deg(yaw), pitch + float(car_pitch))


class CarPitchSmoother:
    """Damped car body pitch contribution. Zero while airborne, mirrored in reverse."""

    def __init__(self, tuning: ChaseCameraTuning) -> None:
        self._tuning = tuning
        self._pitch = 0.0

    @property
    def value(self) -> float:
        return self._pitch

    def reset(self) -> None:
        self._pitch = 0.0

    def update(self, *, dt: float, vehicle: VehicleSnapshot) -> float:
        t = self._tuning
        target = 0.0
        if vehicle.grounded:
            target = clamp(vehicle.body_pitch(), t.min_car_pitch, t.max_car_pitch)
            if vehicle.reversing:
                target = -target
        self._pitch = lerp_to(self._pitch, target, safe_dt(dt) * float(t.car_pitch_smoothing_speed))
        return self._pitch


class OrbitFollowTracker:
    """
    Two-state yaw/pitch tracker.

    FOLLOW: rotations chase the car heading and a fixed pitch at a speed-scaled rate.
    ORBIT: rotations chase the player-driven accumulator at a fixed rate.

    Transitions: look input -> ORBIT, input idle for longer than the cooldown -> FOLLOW.
    Neither transition touches the smoothed rotations, so the view never jumps.
    """

    def __init__(self, tuning: ChaseCameraTuning) -> None:
        self._tuning = tuning
        self._car_pitch = CarPitchSmoother(tuning)
        self.reset()

    def reset(self) -> None:
        self._mode = OrbitMode.FOLLOW
        self._time_since_input = 0.0
        self._yaw = 0.0
        self._pitch = 0.0
        self._yaw_rot = LQuaternionf(1, 0, 0, 0)
        self._pitch_rot = LQuaternionf(1, 0, 0, 0)
        self._car_pitch.reset()
        self._ready = False

    @property
    def mode(self) -> OrbitMode:
        return self._mode

    @property
    def enabled(self) -> bool:
        return self._mode is OrbitMode.ORBIT

    @property
    def time_since_input(self) -> float:
        return self._time_since_input

    @property
    def car_pitch(self) -> float:
        return self._car_pitch.value

    def view_angles(self) -> tuple[float, float]:
        return (normalize_angle_deg(self._yaw), normalize_angle_deg(self._pitch))

    def orientation(self) -> LQuaternionf:
        # Panda applies the left operand first: pitch in the local frame, then yaw.
        return LQuaternionf(self._pitch_rot * self._yaw_rot)

    def apply_input(self, *, yaw_delta: float, pitch_delta: float) -> bool:
        if (abs(float(yaw_delta)) + abs(float(pitch_delta))) <= 0.0:
            return False

        t = self._tuning
        if self._mode is not OrbitMode.ORBIT:
            # Smoothed rotations are kept as-is; HPR readback of them flips past vertical.
            # Orbit targets add car pitch back on, so seed without it.
            self._yaw = axis_yaw(self._yaw_rot)
            self._pitch = axis_pitch(self._pitch_rot) - self._car_pitch.value
            self._mode = OrbitMode.ORBIT
            self._ready = True
            logger.debug("camera orbit engaged at yaw=%.2f pitch=%.2f", self._yaw, self._pitch)

        self._time_since_input = 0.0
        self._yaw = normalize_angle_deg(self._yaw + float(yaw_delta))
        self._pitch = clamp(self._pitch + float(pitch_delta), t.min_orbit_pitch, t.max_orbit_pitch)
        return True

    def advance(self, *, dt: float, vehicle: VehicleSnapshot) -> LQuaternionf:
        t = self._tuning
        frame_dt = safe_dt(dt)
        self._time_since_input += frame_dt

        if self._mode is OrbitMode.ORBIT and self._time_since_input > float(t.orbit_cooldown):
            self._mode = OrbitMode.FOLLOW
            logger.debug("camera orbit idle for %.2fs, returning to follow", self._time_since_input)

        car_pitch = self._car_pitch.update(dt=frame_dt, vehicle=vehicle)

        if self._mode is OrbitMode.ORBIT:
            amount = frame_dt * float(t.orbit_smoothing_speed)
            self._slerp_towards(yaw=self._yaw, pitch=self._pitch + car_pitch, amount=amount)
        else:
            target_yaw, target_pitch = follow_targets(vehicle=vehicle, car_pitch=car_pitch, tuning=t)
            amount = follow_return_amount(dt=frame_dt, speed=vehicle.speed, tuning=t)
            if not self._ready:
                amount = 1.0
            self._slerp_towards(yaw=target_yaw, pitch=target_pitch, amount=amount)
            self._yaw = axis_yaw(self._yaw_rot)
            self._pitch = clamp(axis_pitch(self._pitch_rot), t.min_orbit_pitch, t.max_orbit_pitch)

        self._ready = True
        return self.orientation()

    def _slerp_towards(self, *, yaw: float, pitch: float, amount: float) -> None:
        a = clamp(amount, 0.0, 1.0)
        self._yaw_rot = slerp(self._yaw_rot, quat_from_hpr(yaw, 0.0), a)
        self._pitch_rot = slerp(self._pitch_rot, quat_from_hpr(0.0, pitch), a)
