from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from panda3d.core import LQuaternionf, LVector3f

from chasecam.camera.tuning import ChaseCameraTuning
from chasecam.camera.vehicle import VehicleSnapshot
from chasecam.common.math3d import rotate_vec


class WorldProbe(Protocol):
    def probe(self, start: LVector3f, end: LVector3f, radius: float) -> LVector3f: ...


@dataclass(frozen=True)
class CameraPose:
    pos: LVector3f
    rot: LQuaternionf
    pivot: LVector3f
    target: LVector3f
    blocked: bool


def vehicle_pivot(vehicle: VehicleSnapshot) -> LVector3f:
    """Car mass center in world space."""

    return LVector3f(vehicle.pos) + rotate_vec(vehicle.rot, vehicle.mass_center)


def raw_camera_target(*, pivot: LVector3f, rot: LQuaternionf, scale: float, tuning: ChaseCameraTuning) -> LVector3f:
    backward = -LVector3f(rot.getForward())
    return (
        LVector3f(pivot)
        + backward * (float(tuning.orbit_distance) * float(scale))
        + LVector3f.up() * (float(tuning.orbit_height) * float(scale))
    )


def solve_pose(
    *,
    vehicle: VehicleSnapshot,
    rot: LQuaternionf,
    tuning: ChaseCameraTuning,
    probe: WorldProbe | None,
) -> CameraPose:
    pivot = vehicle_pivot(vehicle)
    target = raw_camera_target(pivot=pivot, rot=rot, scale=vehicle.scale, tuning=tuning)
    if probe is None:
        pos = LVector3f(target)
    else:
        pos = LVector3f(probe.probe(LVector3f(pivot), LVector3f(target), float(tuning.collision_radius)))
    blocked = (pos - target).lengthSquared() > 1e-8
    return CameraPose(pos=pos, rot=LQuaternionf(rot), pivot=pivot, target=target, blocked=blocked)
