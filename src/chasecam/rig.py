from __future__ import annotations

from typing import Callable

from direct.task import Task
from panda3d.core import ClockObject, NodePath

from chasecam.camera.controller import CameraState, CarCameraController
from chasecam.camera.vehicle import VehicleSnapshot
from chasecam.common.error_log import ErrorLog

TASK_NAME = "chasecam.update"


class CameraRig:
    """
    Panda3D glue: drives a `CarCameraController` from a task and writes the result
    onto a camera NodePath + lens.

    The rig owns no camera logic. It only samples the clock, asks the host for the
    current vehicle, and forwards look input and resolved view angles.
    """

    def __init__(
        self,
        *,
        controller: CarCameraController,
        camera_np: NodePath,
        vehicle_source: Callable[[], VehicleSnapshot | None],
        lens=None,
        task_mgr=None,
        clock: ClockObject | None = None,
        error_log: ErrorLog | None = None,
        view_angles_sink: Callable[[float, float], None] | None = None,
    ) -> None:
        self.controller = controller
        self.camera = camera_np
        self.lens = lens
        self.error_log = error_log or ErrorLog(max_items=30)
        self._vehicle_source = vehicle_source
        self._task_mgr = task_mgr
        self._clock = clock or ClockObject.getGlobalClock()
        self._view_angles_sink = view_angles_sink
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Vehicle entry: reset camera state and begin per-frame updates."""

        self.controller.activate()
        if self._task_mgr is not None and not self._running:
            self._task_mgr.add(self._task, TASK_NAME)
        self._running = True

    def stop(self) -> None:
        """Vehicle exit."""

        if self._task_mgr is not None and self._running:
            self._task_mgr.remove(TASK_NAME)
        self._running = False
        self.controller.deactivate()

    def on_look(self, yaw: float, pitch: float) -> None:
        self.controller.add_look_input(yaw, pitch)

    def step(self, *, dt: float, now: float) -> CameraState | None:
        try:
            state = self.controller.update(dt=dt, now=now, vehicle=self._vehicle_source())
            if state is not None:
                self.apply_state(state)
            if self._view_angles_sink is not None:
                yaw, pitch = self.controller.view_angles()
                self._view_angles_sink(yaw, pitch)
            return state
        except Exception as e:
            # A failing collaborator must not kill the task; the camera holds its last pose.
            self.error_log.log_exception(context="chasecam.update", exc=e)
            return None

    def apply_state(self, state: CameraState) -> None:
        self.camera.setPos(state.pos)
        self.camera.setQuat(state.rot)
        if self.lens is not None:
            self.lens.setFov(float(state.fov))

    def _task(self, task: Task) -> int:
        self.step(dt=self._clock.getDt(), now=self._clock.getFrameTime())
        return Task.cont
