from __future__ import annotations

from panda3d.core import LVector3f, NodePath, PerspectiveLens

from chasecam.camera.controller import CarCameraController
from chasecam.camera.vehicle import VehicleSnapshot
from chasecam.common.error_log import ErrorLog
from chasecam.common.math3d import quat_from_hpr
from chasecam.rig import TASK_NAME, CameraRig


class _FakeTaskMgr:
    def __init__(self) -> None:
        self.tasks: dict[str, object] = {}

    def add(self, fn, name: str) -> None:
        self.tasks[name] = fn

    def remove(self, name: str) -> None:
        self.tasks.pop(name, None)


class _FakeClock:
    def __init__(self, dt: float) -> None:
        self.dt = float(dt)
        self.t = 0.0

    def getDt(self) -> float:
        return self.dt

    def getFrameTime(self) -> float:
        self.t += self.dt
        return self.t


class _ZeroNoise:
    def noise(self, x: float, y: float, z: float) -> float:
        return 0.0


def _car() -> VehicleSnapshot:
    return VehicleSnapshot(pos=LVector3f(0, 0, 0), rot=quat_from_hpr(0.0, 0.0), mass_center=LVector3f(0, 0, 20))


def _rig(**kwargs) -> CameraRig:
    kwargs.setdefault("vehicle_source", _car)
    return CameraRig(
        controller=CarCameraController(noise=_ZeroNoise()),
        camera_np=NodePath("camera"),
        **kwargs,
    )


def test_start_registers_task_and_stop_removes_it() -> None:
    mgr = _FakeTaskMgr()
    rig = _rig(task_mgr=mgr, clock=_FakeClock(1.0 / 60.0))
    rig.start()
    assert rig.running
    assert rig.controller.active
    assert TASK_NAME in mgr.tasks
    rig.stop()
    assert not rig.running
    assert not rig.controller.active
    assert mgr.tasks == {}


def test_task_step_writes_pose_and_fov_to_camera() -> None:
    mgr = _FakeTaskMgr()
    lens = PerspectiveLens()
    rig = _rig(task_mgr=mgr, clock=_FakeClock(1.0 / 60.0), lens=lens)
    rig.start()

    mgr.tasks[TASK_NAME](None)

    pos = rig.camera.getPos()
    assert abs(pos.y - (-147.72)) < 1e-2
    assert abs(pos.z - 81.05) < 1e-2
    assert abs(rig.camera.getP() - (-10.0)) < 1e-2
    assert abs(lens.getHfov() - 80.0) < 1e-3


def test_view_angles_are_forwarded_after_each_step() -> None:
    seen: list[tuple[float, float]] = []
    rig = _rig(view_angles_sink=lambda yaw, pitch: seen.append((yaw, pitch)))
    rig.start()
    rig.step(dt=1.0 / 60.0, now=0.0)
    rig.on_look(12.0, 0.0)
    rig.step(dt=1.0 / 60.0, now=1.0 / 60.0)
    assert len(seen) == 2
    assert abs(seen[0][0]) < 1e-2
    assert abs(seen[1][0] - 12.0) < 1e-2


def test_failing_vehicle_source_is_logged_once_and_task_survives() -> None:
    calls = {"n": 0}

    def broken() -> VehicleSnapshot:
        calls["n"] += 1
        raise KeyError("vehicle-7")

    errors = ErrorLog(max_items=10)
    rig = _rig(vehicle_source=broken, error_log=errors)
    rig.start()
    for i in range(5):
        assert rig.step(dt=1.0 / 60.0, now=i / 60.0) is None

    assert calls["n"] == 5
    items = errors.items()
    assert len(items) == 1
    assert items[0].context == "chasecam.update"
    assert items[0].count == 5


def test_missing_vehicle_leaves_camera_untouched() -> None:
    rig = _rig(vehicle_source=lambda: None)
    rig.camera.setPos(1, 2, 3)
    rig.start()
    assert rig.step(dt=1.0 / 60.0, now=0.0) is None
    assert tuple(rig.camera.getPos()) == (1.0, 2.0, 3.0)
