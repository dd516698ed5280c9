from __future__ import annotations

import logging
from dataclasses import dataclass

from panda3d.core import LQuaternionf, LVecBase3f, LVector3f

from chasecam.camera.fov import FovSmoother
from chasecam.camera.look_input import LookInputBuffer
from chasecam.camera.orbit import OrbitFollowTracker, OrbitMode
from chasecam.camera.pose import CameraPose, WorldProbe, solve_pose
from chasecam.camera.shake import NO_SHAKE, CoherentNoise, ShakeGenerator, ShakeOffset
from chasecam.camera.tuning import ChaseCameraTuning
from chasecam.camera.vehicle import VehicleSnapshot
from chasecam.common.math3d import safe_dt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CameraState:
    pos: LVector3f
    rot: LQuaternionf
    fov: float

    def hpr(self) -> LVecBase3f:
        return LVecBase3f(self.rot.getHpr())


class CarCameraController:
    """
    Third-person chase camera for one vehicle occupancy session.

    Call `activate()` on vehicle entry, `add_look_input()` whenever look deltas arrive,
    and `update()` once per tick. Output is `state` (pos/rot/fov for the view) and
    `view_angles()` (for the input layer).
    """

    def __init__(
        self,
        *,
        tuning: ChaseCameraTuning | None = None,
        probe: WorldProbe | None = None,
        noise: CoherentNoise | None = None,
        look_input: LookInputBuffer | None = None,
    ) -> None:
        self.tuning = tuning or ChaseCameraTuning()
        self.probe = probe
        self.look_input = look_input or LookInputBuffer()
        self._orbit = OrbitFollowTracker(self.tuning)
        self._fov = FovSmoother(self.tuning)
        self._shake = ShakeGenerator(self.tuning, noise=noise)
        self._active = False
        self._state: CameraState | None = None
        self._last_pose: CameraPose | None = None
        self._last_shake: ShakeOffset = NO_SHAKE
        self._skip_reason: str | None = None

    @property
    def active(self) -> bool:
        return self._active

    @property
    def state(self) -> CameraState | None:
        return self._state

    @property
    def mode(self) -> OrbitMode:
        return self._orbit.mode

    @property
    def orbit(self) -> OrbitFollowTracker:
        return self._orbit

    @property
    def fov(self) -> float:
        return self._fov.value

    @property
    def last_pose(self) -> CameraPose | None:
        return self._last_pose

    @property
    def last_shake(self) -> ShakeOffset:
        return self._last_shake

    def activate(self) -> None:
        self._orbit.reset()
        self._fov.reset()
        self.look_input.clear()
        self._state = None
        self._last_pose = None
        self._last_shake = NO_SHAKE
        self._skip_reason = None
        self._active = True
        logger.debug("chase camera activated")

    def deactivate(self) -> None:
        self._active = False
        self._state = None
        self._orbit.reset()
        self._fov.reset()
        self.look_input.clear()
        self._last_pose = None
        self._last_shake = NO_SHAKE
        logger.debug("chase camera deactivated")

    def add_look_input(self, yaw: float, pitch: float) -> None:
        self.look_input.add(yaw, pitch)

    def view_angles(self) -> tuple[float, float]:
        return self._orbit.view_angles()

    def current_rotation(self) -> LQuaternionf:
        if self._state is not None:
            return LQuaternionf(self._state.rot)
        return self._orbit.orientation()

    def apply_look_input(self, yaw: float, pitch: float) -> bool:
        """Fold a look delta into the orbit state right away."""

        return self._orbit.apply_input(yaw_delta=yaw, pitch_delta=pitch)

    def update(self, *, dt: float, now: float, vehicle: VehicleSnapshot | None) -> CameraState | None:
        if not self._active:
            return None
        reason = self._skip_reason_for(vehicle)
        if reason is not None:
            if reason != self._skip_reason:
                logger.debug("chase camera holding last pose: %s", reason)
            self._skip_reason = reason
            return None
        self._skip_reason = None
        assert vehicle is not None

        frame_dt = safe_dt(dt)
        self._update_orbit(frame_dt, vehicle)

        rot = self._orbit.orientation()
        pose = solve_pose(vehicle=vehicle, rot=rot, tuning=self.tuning, probe=self.probe)
        fov = self._fov.observe(dt=frame_dt, speed=vehicle.speed)
        pos, final_rot, shake = self._shake.apply(pos=pose.pos, rot=pose.rot, speed=vehicle.speed, now=now)

        self._last_pose = pose
        self._last_shake = shake
        self._state = CameraState(pos=pos, rot=final_rot, fov=fov)
        return self._state

    def _update_orbit(self, dt: float, vehicle: VehicleSnapshot) -> None:
        if self.look_input.pending():
            yaw, pitch = self.look_input.consume()
            self.apply_look_input(yaw, pitch)
        self._orbit.advance(dt=dt, vehicle=vehicle)

    @staticmethod
    def _skip_reason_for(vehicle: VehicleSnapshot | None) -> str | None:
        if vehicle is None:
            return "no vehicle"
        if not vehicle.body_valid:
            return "vehicle body invalid"
        return None
