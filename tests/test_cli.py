from __future__ import annotations

import struct
from pathlib import Path

import msgspec
from typer.testing import CliRunner

from tasimport.cli import MovieSummary, app
from tasimport.formats import fcm


def _write_fm2(tmp_path: Path) -> Path:
    path = tmp_path / "run.fm2"
    path.write_text(
        "version 3\n"
        "emuVersion 20000\n"
        "rerecordCount 42\n"
        "romFilename smb\n"
        "comment author someone\n"
        "subtitle 10 hello there\n"
        "|0|R.......|\n"
        "|0|........|\n"
        "|4|........|\n"
        "|0|.......A|\n",
        encoding="utf-8",
    )
    return path


def test_info_prints_header_and_counts(tmp_path: Path) -> None:
    path = _write_fm2(tmp_path)
    result = CliRunner().invoke(app, ["info", str(path)])
    assert result.exit_code == 0, result.output
    assert "GameName smb" in result.output
    assert "Author someone" in result.output
    assert "frames=4 rerecords=42" in result.output
    assert "subtitles=1 comments=0" in result.output
    assert "Unable to import FDS Insert command on line 9" in result.output


def test_info_json_summary(tmp_path: Path) -> None:
    path = _write_fm2(tmp_path)
    result = CliRunner().invoke(app, ["info", str(path), "--json"])
    assert result.exit_code == 0, result.output
    summary = msgspec.json.decode(result.stdout.strip().splitlines()[-1], type=MovieSummary)
    assert summary.path == str(path)
    assert summary.frame_count == 4
    assert summary.rerecords == 42
    assert summary.header["Platform"] == "NES"
    assert summary.advisories == ["Unable to import FDS Insert command on line 9"]


def test_frames_window(tmp_path: Path) -> None:
    path = _write_fm2(tmp_path)
    result = CliRunner().invoke(app, ["frames", str(path), "--start", "1", "--limit", "2"])
    assert result.exit_code == 0, result.output
    lines = [line for line in result.stdout.splitlines() if "|" in line]
    assert lines == [
        "     1  |0|........|",
        "     2  |0|........|",
    ]


def _fcm_bytes(flags0: int, frame_count: int) -> bytes:
    fields = {
        "version": 2,
        "flags": bytes([flags0, 0, 0, 0]),
        "frame_count": frame_count,
        "rerecord_count": 7,
        "movie_data_size": frame_count * fcm.FRAME_RECORD_SIZE,
        "savestate_offset": 0,
        "first_frame_offset": 0,
        "rom_checksum": b"\x00" * 16,
        "emulator_version": 9828,
        "rom_name": b"smb",
        "author": b"me",
    }
    fields["first_frame_offset"] = 4 + len(fcm.HEADER.build(fields))
    return b"FCM\x1a" + fcm.HEADER.build(fields) + struct.pack("<I", 0) * frame_count


def test_frames_of_binary_movie(tmp_path: Path) -> None:
    path = tmp_path / "old.fcm"
    path.write_bytes(_fcm_bytes(fcm.FLAG_POWER_ON_START, 2))
    result = CliRunner().invoke(app, ["frames", str(path)])
    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == [
        "     0  |0|........|",
        "     1  |0|........|",
    ]


def test_extensions_lists_supported() -> None:
    result = CliRunner().invoke(app, ["extensions"])
    assert result.exit_code == 0, result.output
    assert result.stdout.split() == ["FCM", "FM2", "GMV", "MC2", "MMV", "TAS", "VBM"]


def test_extensions_checks_one() -> None:
    runner = CliRunner()
    ok = runner.invoke(app, ["extensions", ".fm2"])
    assert ok.exit_code == 0
    assert ".fm2: supported" in ok.output
    bad = runner.invoke(app, ["extensions", "smv"])
    assert bad.exit_code == 1
    assert "smv: unsupported" in bad.output


def test_failed_import_exits_nonzero(tmp_path: Path) -> None:
    path = tmp_path / "broken.vbm"
    path.write_bytes(b"nope")
    result = CliRunner().invoke(app, ["info", str(path)])
    assert result.exit_code == 1
    assert "import failed" in result.output


def test_missing_movie_exits_nonzero(tmp_path: Path) -> None:
    result = CliRunner().invoke(app, ["info", str(tmp_path / "absent.fm2")])
    assert result.exit_code == 1
    assert "movie not found" in result.output


def test_extension_without_decoder_exits_nonzero(tmp_path: Path) -> None:
    path = tmp_path / "movie.bkm"
    path.write_bytes(b"")
    result = CliRunner().invoke(app, ["frames", str(path)])
    assert result.exit_code == 1
    assert "unsupported movie extension" in result.output


def test_bad_config_file_exits_nonzero(tmp_path: Path) -> None:
    cfg = tmp_path / "cfg.toml"
    cfg.write_text('fcm_reset_start = "sometimes"\n')
    movie = _write_fm2(tmp_path)
    result = CliRunner().invoke(app, ["--config", str(cfg), "info", str(movie)])
    assert result.exit_code == 1
    assert "config error" in result.output


def test_config_file_changes_import_policy(tmp_path: Path) -> None:
    cfg = tmp_path / "cfg.toml"
    cfg.write_text('fcm_reset_start = "reject"\n')
    path = tmp_path / "reset.fcm"
    path.write_bytes(_fcm_bytes(fcm.FLAG_RESET_START, 1))
    runner = CliRunner()
    assert runner.invoke(app, ["info", str(path)]).exit_code == 0
    rejected = runner.invoke(app, ["--config", str(cfg), "info", str(path)])
    assert rejected.exit_code == 1
    assert "import failed" in rejected.output
