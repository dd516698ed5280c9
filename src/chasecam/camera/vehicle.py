from __future__ import annotations

from dataclasses import dataclass, field

from panda3d.core import LQuaternionf, LVector3f

from chasecam.common.math3d import quat_pitch, quat_yaw


@dataclass(frozen=True)
class VehicleSnapshot:
    """Read-only car state for one tick, owned by the vehicle simulation."""

    pos: LVector3f
    rot: LQuaternionf
    # Signed per-tick movement speed; negative while reversing.
    speed: float = 0.0
    grounded: bool = True
    scale: float = 1.0
    # Mass center in the car's local frame.
    mass_center: LVector3f = field(default_factory=lambda: LVector3f(0, 0, 0))
    body_valid: bool = True

    @property
    def reversing(self) -> bool:
        return float(self.speed) < 0.0

    def heading(self) -> float:
        return quat_yaw(self.rot)

    def body_pitch(self) -> float:
        return quat_pitch(self.rot)
