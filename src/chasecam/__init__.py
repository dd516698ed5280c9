from __future__ import annotations

from chasecam.camera import (
    CameraState,
    CarCameraController,
    ChaseCameraTuning,
    VehicleSnapshot,
    tuning_from_preset,
)

__all__ = [
    "CameraState",
    "CarCameraController",
    "ChaseCameraTuning",
    "VehicleSnapshot",
    "__version__",
    "tuning_from_preset",
]

__version__ = "0.1.0"
