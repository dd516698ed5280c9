from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from chasecam.camera.tuning import (
    CAMERA_PRESETS,
    ChaseCameraTuning,
    load_tuning_file,
    preset_names,
    save_tuning_file,
    tuning_field_names,
    tuning_file_from_env,
    tuning_from_preset,
)


def test_presets_only_override_known_fields() -> None:
    known = set(tuning_field_names())
    assert "default" in preset_names()
    for name, overrides in CAMERA_PRESETS.items():
        assert set(overrides) <= known, name
        tuning = tuning_from_preset(name)
        assert tuning.min_fov <= tuning.max_fov
        assert tuning.min_orbit_pitch <= tuning.fixed_orbit_pitch <= tuning.max_orbit_pitch


def test_default_preset_matches_dataclass_defaults() -> None:
    assert tuning_from_preset("default") == ChaseCameraTuning()
    assert tuning_from_preset("  Rally ").orbit_distance == 135.0


def test_unknown_preset_raises() -> None:
    with pytest.raises(ValueError, match="unknown camera preset"):
        tuning_from_preset("drone")


def test_overrides_apply_on_top_of_preset() -> None:
    tuning = tuning_from_preset("close", {"orbit_distance": 90, "shake_seed": 5.0})
    assert tuning.orbit_distance == 90.0
    assert tuning.orbit_height == 28.0
    assert tuning.shake_seed == 5
    assert isinstance(tuning.shake_seed, int)


def test_unknown_override_key_is_skipped_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="chasecam.camera.tuning"):
        tuning = ChaseCameraTuning().with_overrides({"orbit_distnace": 10.0})
    assert tuning == ChaseCameraTuning()
    assert "orbit_distnace" in caplog.text


@pytest.mark.parametrize("bad", ["far", True, None, float("nan"), float("inf")])
def test_bad_override_values_raise(bad: object) -> None:
    with pytest.raises(ValueError):
        ChaseCameraTuning().with_overrides({"orbit_distance": bad})


def test_load_preset_shaped_file(tmp_path: Path) -> None:
    p = tmp_path / "cam.json"
    p.write_text(json.dumps({"preset": "cinematic", "overrides": {"max_fov": 92}}), encoding="utf-8")
    tuning = load_tuning_file(p)
    assert tuning.orbit_distance == 220.0
    assert tuning.max_fov == 92.0


def test_load_flat_file(tmp_path: Path) -> None:
    p = tmp_path / "cam.json"
    p.write_text(json.dumps({"orbit_cooldown": 1.25}), encoding="utf-8")
    tuning = load_tuning_file(p)
    assert tuning.orbit_cooldown == 1.25
    assert tuning.orbit_distance == ChaseCameraTuning().orbit_distance


def test_load_rejects_malformed_files(tmp_path: Path) -> None:
    p = tmp_path / "cam.json"
    p.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError, match="invalid JSON"):
        load_tuning_file(p)

    p.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError, match="JSON object"):
        load_tuning_file(p)

    p.write_text(json.dumps({"preset": 3}), encoding="utf-8")
    with pytest.raises(ValueError, match="preset"):
        load_tuning_file(p)

    p.write_text(json.dumps({"overrides": [1]}), encoding="utf-8")
    with pytest.raises(ValueError, match="overrides"):
        load_tuning_file(p)


def test_save_then_load_round_trips(tmp_path: Path) -> None:
    tuning = tuning_from_preset("rally", {"shake_seed": 3})
    p = tmp_path / "nested" / "cam.json"
    save_tuning_file(p, tuning)
    assert load_tuning_file(p) == tuning
    assert [x.name for x in p.parent.iterdir()] == ["cam.json"]


def test_tuning_file_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("CHASECAM_TUNING_FILE", raising=False)
    assert tuning_file_from_env() is None
    monkeypatch.setenv("CHASECAM_TUNING_FILE", "   ")
    assert tuning_file_from_env() is None
    monkeypatch.setenv("CHASECAM_TUNING_FILE", str(tmp_path / "cam.json"))
    assert tuning_file_from_env() == tmp_path / "cam.json"
