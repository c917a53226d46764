import os
from datetime import datetime

import pytest

from TRE.SGM.capture_encoder import CaptureEncoder
from TRE.SGM.frame_builder import FrameBuilder
from TRE.SPM.outputs import result_dir_for
from TRE.SVM import capture_sim


def _write_capture(path):
    fb = FrameBuilder()
    fb.add_word(0x42, 8)
    path.write_bytes(CaptureEncoder().encode_capture(fb.bits()))


def test_result_dir_naming(tmp_path):
    when = datetime(2024, 3, 5, 7, 8, 9)
    path = result_dir_for(str(tmp_path / "flight.bin"), when)
    assert path == os.path.join(str(tmp_path), "flight_result_20240305_070809")


def test_main_processes_capture(tmp_path, capsys):
    capture = tmp_path / "cap.bin"
    _write_capture(capture)
    out_dir = tmp_path / "out"

    with pytest.raises(SystemExit) as exc:
        capture_sim.main([str(capture), "--output-dir", str(out_dir), "--dump-frames"])
    assert exc.value.code == 0

    text = capsys.readouterr().out
    assert "VERDICT: LOCKED" in text
    assert "1a cf fc 1d 42" in text
    assert (out_dir / "out.bin").read_bytes() == bytes.fromhex("1acffc1d42")


def test_main_missing_file_exits_nonzero(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        capture_sim.main([str(tmp_path / "missing.bin")])
    assert exc.value.code == 1
    assert "File not found" in capsys.readouterr().out


def test_select_capture_menu(tmp_path, monkeypatch, capsys):
    _write_capture(tmp_path / "a.bin")
    _write_capture(tmp_path / "b.bin")
    monkeypatch.setattr("builtins.input", lambda prompt="": "2")
    assert capture_sim.select_capture(str(tmp_path)) == str(tmp_path / "b.bin")

    monkeypatch.setattr("builtins.input", lambda prompt="": "9")
    assert capture_sim.select_capture(str(tmp_path)) is None
    assert "Invalid selection" in capsys.readouterr().out


def test_select_capture_empty_directory(tmp_path):
    assert capture_sim.select_capture(str(tmp_path)) is None


def test_reporter_quiet_mode_keeps_errors(capsys):
    rep = capture_sim.ConsoleReporter(quiet=True)
    rep.status("stat", "hidden")
    rep.progress("extract", 1, 10)
    rep.status("error", "shown")
    out = capsys.readouterr().out
    assert "hidden" not in out
    assert "[!!] shown" in out
