from __future__ import annotations

import json
import logging
import math
import os
import secrets
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChaseCameraTuning:
    # Field of view (degrees). FOV widens linearly with speed up to max_fov_speed.
    min_fov: float = 80.0
    max_fov: float = 100.0
    # Speed at which max_fov is reached. <= 0 pins FOV to max_fov.
    max_fov_speed: float = 1000.0
    fov_smoothing_speed: float = 4.0

    # Seconds without look input before orbit hands back to follow.
    orbit_cooldown: float = 0.6
    # Fixed slerp rate while the player is orbiting.
    orbit_smoothing_speed: float = 25.0
    # Upper bound for the speed-scaled follow return rate.
    orbit_return_smoothing_speed: float = 4.0
    # Pitch is nose-up positive, so looking down on the car is negative.
    min_orbit_pitch: float = -70.0
    max_orbit_pitch: float = 25.0
    fixed_orbit_pitch: float = -10.0
    orbit_height: float = 35.0
    orbit_distance: float = 150.0
    # Car speed at which follow return runs at rate 1/s. <= 0 snaps every tick.
    max_orbit_return_speed: float = 100.0

    # Car body pitch folded into the camera pitch.
    min_car_pitch: float = -60.0
    max_car_pitch: float = 60.0
    car_pitch_smoothing_speed: float = 1.0

    # Sphere radius for the world collision probe.
    collision_radius: float = 8.0

    # High-speed shake.
    shake_speed: float = 10.0
    shake_speed_threshold: float = 1500.0
    shake_max_speed: float = 2500.0
    shake_max_length: float = 1.0
    # Perlin table seed; 0 lets Panda pick a random one.
    shake_seed: int = 17

    def with_overrides(self, overrides: dict[str, float] | None) -> "ChaseCameraTuning":
        if not overrides:
            return self
        return replace(self, **_coerce_overrides(overrides))


def tuning_field_names() -> list[str]:
    return [f.name for f in fields(ChaseCameraTuning)]


# Variant vehicle cameras are expressed as override sets, not subclasses.
CAMERA_PRESETS: dict[str, dict[str, float]] = {
    "default": {},
    "close": {
        "orbit_distance": 110.0,
        "orbit_height": 28.0,
        "min_fov": 85.0,
        "max_fov": 105.0,
        "collision_radius": 6.0,
    },
    "cinematic": {
        "orbit_distance": 220.0,
        "orbit_height": 55.0,
        "fixed_orbit_pitch": -14.0,
        "min_fov": 70.0,
        "max_fov": 88.0,
        "fov_smoothing_speed": 2.0,
        "orbit_return_smoothing_speed": 2.0,
        "max_orbit_return_speed": 160.0,
        "car_pitch_smoothing_speed": 0.6,
        "shake_max_length": 0.5,
    },
    "rally": {
        "orbit_distance": 135.0,
        "orbit_height": 30.0,
        "orbit_cooldown": 0.4,
        "orbit_return_smoothing_speed": 6.0,
        "max_orbit_return_speed": 80.0,
        "shake_speed": 14.0,
        "shake_speed_threshold": 1100.0,
        "shake_max_speed": 2000.0,
        "shake_max_length": 1.6,
    },
}


def preset_names() -> list[str]:
    return list(CAMERA_PRESETS.keys())


def _coerce_overrides(raw: dict) -> dict[str, float]:
    known = set(tuning_field_names())
    out: dict[str, float] = {}
    for key, value in raw.items():
        if key not in known:
            logger.warning("ignoring unknown camera tuning key %r", key)
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"tuning field {key!r} must be a number, got {value!r}")
        v = float(value)
        if not math.isfinite(v):
            raise ValueError(f"tuning field {key!r} must be finite, got {value!r}")
        out[key] = int(v) if key == "shake_seed" else v
    return out


def tuning_from_preset(name: str = "default", overrides: dict[str, float] | None = None) -> ChaseCameraTuning:
    key = str(name or "default").strip().lower()
    if key not in CAMERA_PRESETS:
        raise ValueError(f"unknown camera preset {name!r} (known: {', '.join(preset_names())})")
    tuning = ChaseCameraTuning().with_overrides(CAMERA_PRESETS[key])
    return tuning.with_overrides(overrides)


def tuning_file_from_env() -> Path | None:
    """Tuning file path from `CHASECAM_TUNING_FILE`, if set."""

    override = os.environ.get("CHASECAM_TUNING_FILE")
    if override and override.strip():
        return Path(override.strip())
    return None


def load_tuning_file(path: Path) -> ChaseCameraTuning:
    """
    Load a tuning JSON file.

    Accepted shapes:
    - `{"preset": "rally", "overrides": {"orbit_distance": 140}}`
    - a flat `{field: value}` dict applied on top of the default preset
    """

    p = Path(path)
    try:
        payload = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"{p}: invalid JSON ({e})") from e
    if not isinstance(payload, dict):
        raise ValueError(f"{p}: expected a JSON object")

    if "preset" in payload or "overrides" in payload:
        preset = payload.get("preset", "default")
        overrides = payload.get("overrides") or {}
        if not isinstance(preset, str):
            raise ValueError(f"{p}: 'preset' must be a string")
        if not isinstance(overrides, dict):
            raise ValueError(f"{p}: 'overrides' must be an object")
        return tuning_from_preset(preset, overrides)
    return tuning_from_preset("default", payload)


def save_tuning_file(path: Path, tuning: ChaseCameraTuning) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    # Unique tmp name so parallel harness runs never clobber each other.
    tmp = p.with_name(f"{p.name}.{os.getpid()}.{secrets.token_hex(6)}.tmp")
    tmp.write_text(json.dumps({"overrides": asdict(tuning)}, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    tmp.replace(p)
