"""Chase camera: orbit/follow tracking, collision-clamped pose, speed FOV and shake."""

from chasecam.camera.controller import CameraState, CarCameraController
from chasecam.camera.fov import FovSmoother, speed_fov_target
from chasecam.camera.look_input import LookInputBuffer
from chasecam.camera.orbit import CarPitchSmoother, OrbitFollowTracker, OrbitMode
from chasecam.camera.pose import CameraPose, WorldProbe, solve_pose, vehicle_pivot
from chasecam.camera.shake import ShakeGenerator, ShakeOffset
from chasecam.camera.tuning import (
    CAMERA_PRESETS,
    ChaseCameraTuning,
    load_tuning_file,
    save_tuning_file,
    tuning_from_preset,
)
from chasecam.camera.vehicle import VehicleSnapshot

__all__ = [
    "CAMERA_PRESETS",
    "CameraPose",
    "CameraState",
    "CarCameraController",
    "CarPitchSmoother",
    "ChaseCameraTuning",
    "FovSmoother",
    "LookInputBuffer",
    "OrbitFollowTracker",
    "OrbitMode",
    "ShakeGenerator",
    "ShakeOffset",
    "VehicleSnapshot",
    "WorldProbe",
    "load_tuning_file",
    "save_tuning_file",
    "solve_pose",
    "speed_fov_target",
    "tuning_from_preset",
    "vehicle_pivot",
]
