from __future__ import annotations

import json
from pathlib import Path

import pytest

from chasecam.__main__ import main
from chasecam.harness import DriveHarness, DriveScript, format_sample


def test_same_script_gives_same_trace_hash() -> None:
    script = DriveScript(ticks=90, speed=1800.0, look_at=20)
    a = DriveHarness(script=script).run()
    b = DriveHarness(script=script).run()
    assert a.trace_hash == b.trace_hash
    assert a.trace_hash != "0" * 16
    assert [s.tick_hash for s in a.samples] == [s.tick_hash for s in b.samples]

    other = DriveHarness(script=DriveScript(ticks=90, speed=1800.0)).run()
    assert other.trace_hash != a.trace_hash


def test_wall_behind_start_clamps_only_the_first_ticks() -> None:
    result = DriveHarness(script=DriveScript(ticks=120, wall=True)).run()
    assert result.samples[0].blocked
    assert 0 < result.blocked_ticks < 90
    assert not result.samples[-1].blocked
    # Clamped camera stays on the near side of the wall face at y=-80.
    assert result.samples[0].pos[1] > -80.0


def test_look_burst_orbits_until_cooldown() -> None:
    result = DriveHarness(script=DriveScript(ticks=120, look_at=10)).run()
    assert 30 < result.orbit_ticks < 45
    assert result.samples[10].mode == "orbit"
    assert result.samples[-1].mode == "follow"


def test_reversing_swings_camera_around() -> None:
    result = DriveHarness(script=DriveScript(ticks=240, speed=800.0, reverse_at=60)).run()
    assert abs(result.samples[59].hpr[0]) < 1e-2
    assert abs(abs(result.samples[-1].hpr[0]) - 180.0) < 1.0


def test_every_controls_sampling_and_format() -> None:
    result = DriveHarness(script=DriveScript(ticks=30)).run(every=10)
    assert [s.tick for s in result.samples] == [0, 10, 20]
    line = format_sample(result.samples[0])
    assert line.startswith("    0 t=  0.000")
    assert line.endswith("follow")


def test_cli_prints_trace_and_writes_json(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv("CHASECAM_TUNING_FILE", raising=False)
    out = tmp_path / "run" / "trace.json"
    rc = main(["--preset", "rally", "--ticks", "30", "--every", "10", "--json", str(out)])
    assert rc == 0
    stdout = capsys.readouterr().out
    assert "trace=" in stdout
    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["sample_count"] == 3
    assert payload["trace_hash"] in stdout


def test_cli_uses_tuning_file_from_env(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    p = tmp_path / "cam.json"
    p.write_text(json.dumps({"min_fov": 60.0}), encoding="utf-8")
    monkeypatch.setenv("CHASECAM_TUNING_FILE", str(p))
    assert main(["--ticks", "1", "--every", "1", "--speed", "0"]) == 0
    assert "fov= 60.00" in capsys.readouterr().out


def test_cli_reports_bad_tuning_file(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv("CHASECAM_TUNING_FILE", raising=False)
    bad = tmp_path / "cam.json"
    bad.write_text("{nope", encoding="utf-8")
    assert main(["--tuning-file", str(bad), "--ticks", "5"]) == 2
    assert "chasecam:" in capsys.readouterr().err

    assert main(["--tuning-file", str(tmp_path / "missing.json"), "--ticks", "5"]) == 2
