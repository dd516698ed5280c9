from __future__ import annotations

import hashlib
import json
from dataclasses import asdict, dataclass, field
from pathlib import Path

from panda3d.core import LVector3f

from chasecam.camera.controller import CameraState, CarCameraController
from chasecam.camera.orbit import OrbitMode
from chasecam.camera.tuning import ChaseCameraTuning
from chasecam.camera.vehicle import VehicleSnapshot
from chasecam.common.aabb import AABB
from chasecam.common.math3d import quat_from_hpr, rotate_vec
from chasecam.physics.collision_world import CollisionWorld


@dataclass(frozen=True)
class DriveScript:
    """Deterministic straight-line drive used to eyeball and regression-check camera feel."""

    ticks: int = 600
    tick_rate_hz: int = 60
    # Units per second. The sign flips at `reverse_at`.
    speed: float = 800.0
    heading: float = 0.0
    reverse_at: int | None = None
    # Tick index of a one-tick look burst.
    look_at: int | None = None
    look_yaw: float = 10.0
    look_pitch: float = 5.0
    # Place a wall just behind the start so the first ticks are collision-clamped.
    wall: bool = False
    mass_center: tuple[float, float, float] = (0.0, 0.0, 20.0)
    scale: float = 1.0


@dataclass(frozen=True)
class HarnessSample:
    tick: int
    t: float
    pos: tuple[float, float, float]
    hpr: tuple[float, float, float]
    fov: float
    mode: str
    blocked: bool
    tick_hash: str


@dataclass
class HarnessResult:
    samples: list[HarnessSample] = field(default_factory=list)
    trace_hash: str = "0" * 16
    orbit_ticks: int = 0
    blocked_ticks: int = 0

    def dump_json(self, *, out_path: Path) -> None:
        out_path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "sample_count": len(self.samples),
            "trace_hash": self.trace_hash,
            "orbit_ticks": self.orbit_ticks,
            "blocked_ticks": self.blocked_ticks,
            "samples": [asdict(s) for s in self.samples],
        }
        out_path.write_text(json.dumps(payload, ensure_ascii=True, sort_keys=True, indent=2) + "\n", encoding="utf-8")


def camera_state_hash(*, state: CameraState, mode: OrbitMode) -> str:
    """Quantized per-tick camera hash; tolerant to float noise below 1e-3 units / 1e-2 degrees."""

    hpr = state.hpr()
    q = (
        int(round(float(state.pos.x) * 1000.0)),
        int(round(float(state.pos.y) * 1000.0)),
        int(round(float(state.pos.z) * 1000.0)),
        int(round(float(hpr[0]) * 100.0)),
        int(round(float(hpr[1]) * 100.0)),
        int(round(float(hpr[2]) * 100.0)),
        int(round(float(state.fov) * 100.0)),
        str(mode.value),
    )
    h = hashlib.blake2b(digest_size=8)
    h.update(repr(q).encode("utf-8", errors="strict"))
    return h.hexdigest()


def _chain(prev: str, tick_hash: str) -> str:
    h = hashlib.blake2b(digest_size=8)
    h.update(prev.encode("utf-8", errors="strict"))
    h.update(tick_hash.encode("utf-8", errors="strict"))
    return h.hexdigest()


def build_world(script: DriveScript) -> CollisionWorld:
    world = CollisionWorld()
    if script.wall:
        rot = quat_from_hpr(script.heading, 0.0)
        # Wall plane sits 80 units behind the car, spanning well past the orbit height.
        behind = rotate_vec(rot, LVector3f(0.0, -85.0, 0.0))
        half = LVector3f(400.0, 5.0, 300.0)
        world.add_box(AABB(minimum=behind - half, maximum=behind + half))
    return world


class DriveHarness:
    def __init__(
        self,
        *,
        script: DriveScript,
        tuning: ChaseCameraTuning | None = None,
        world: CollisionWorld | None = None,
    ) -> None:
        self.script = script
        self.world = world if world is not None else build_world(script)
        self.controller = CarCameraController(tuning=tuning, probe=self.world)
        self._car_pos = LVector3f(0, 0, 0)

    def vehicle_at(self, tick: int) -> VehicleSnapshot:
        s = self.script
        speed = float(s.speed)
        if s.reverse_at is not None and tick >= int(s.reverse_at):
            speed = -abs(speed)
        return VehicleSnapshot(
            pos=LVector3f(self._car_pos),
            rot=quat_from_hpr(s.heading, 0.0),
            speed=speed,
            grounded=True,
            scale=float(s.scale),
            mass_center=LVector3f(*s.mass_center),
        )

    def run(self, *, every: int = 1) -> HarnessResult:
        s = self.script
        rate = max(1, int(s.tick_rate_hz))
        dt = 1.0 / float(rate)
        step = max(1, int(every))
        result = HarnessResult()
        self._car_pos = LVector3f(0, 0, 0)
        self.controller.activate()

        for tick in range(max(0, int(s.ticks))):
            now = float(tick) * dt
            vehicle = self.vehicle_at(tick)
            if s.look_at is not None and tick == int(s.look_at):
                self.controller.add_look_input(s.look_yaw, s.look_pitch)

            state = self.controller.update(dt=dt, now=now, vehicle=vehicle)
            assert state is not None
            mode = self.controller.mode
            pose = self.controller.last_pose
            blocked = bool(pose.blocked) if pose is not None else False
            if mode is OrbitMode.ORBIT:
                result.orbit_ticks += 1
            if blocked:
                result.blocked_ticks += 1

            tick_hash = camera_state_hash(state=state, mode=mode)
            result.trace_hash = _chain(result.trace_hash, tick_hash)
            if tick % step == 0:
                hpr = state.hpr()
                result.samples.append(
                    HarnessSample(
                        tick=tick,
                        t=now,
                        pos=(float(state.pos.x), float(state.pos.y), float(state.pos.z)),
                        hpr=(float(hpr[0]), float(hpr[1]), float(hpr[2])),
                        fov=float(state.fov),
                        mode=mode.value,
                        blocked=blocked,
                        tick_hash=tick_hash,
                    )
                )

            forward = rotate_vec(vehicle.rot, LVector3f(0, 1, 0))
            self._car_pos = self._car_pos + forward * (float(vehicle.speed) * dt)

        self.controller.deactivate()
        return result


def format_sample(sample: HarnessSample) -> str:
    x, y, z = sample.pos
    h, p, r = sample.hpr
    flag = " blocked" if sample.blocked else ""
    return (
        f"{sample.tick:5d} t={sample.t:7.3f} pos=({x:9.2f},{y:9.2f},{z:8.2f}) "
        f"hpr=({h:7.2f},{p:6.2f},{r:5.2f}) fov={sample.fov:6.2f} {sample.mode}{flag}"
    )
