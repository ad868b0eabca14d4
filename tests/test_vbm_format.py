from __future__ import annotations

import struct
from typing import Any

import pytest

from tasimport.errors import ErrorKind, MovieImportError
from tasimport.formats import vbm
from tasimport.importer import load_movie
from tasimport.movie import HeaderKey


def _build_vbm(
    *,
    samples: list[int] | None = None,
    gap: bytes = b"",
    magic: bytes = b"VBM\x1a",
    **overrides: Any,
) -> bytes:
    if samples is None:
        samples = [0x0000, 0x0011, 0x00C0, 0x000E]
    fields: dict[str, Any] = {
        "version": 1,
        "uid": 1234567890,
        "frame_count": len(samples),
        "rerecord_count": 4321,
        "start_flags": 0,
        "controller_flags": 0x01,
        "system_flags": vbm.SYSTEM_GBC,
        "emulation_flags": 0,
        "save_type": 0,
        "flash_size": 0,
        "gb_emulator_type": 0,
        "game_name": b"POKEMON RED\x00",
        "minor_version": 1,
        "internal_crc": 0x20,
        "internal_checksum": 0x91E6,
        "unit_code": 0,
        "save_offset": 0,
        "controller_data_offset": vbm.HEADER_SIZE + len(gap),
        "author": b"TASer".ljust(0x40, b"\x00"),
        "description": b"any% glitched".ljust(0x80, b"\x00"),
    }
    fields.update(overrides)
    body = b"".join(struct.pack("<H", sample) for sample in samples)
    return magic + vbm.HEADER.build(fields) + gap + body


def test_vbm_header_layout_is_0x100_bytes() -> None:
    assert len(_build_vbm(samples=[])) == vbm.HEADER_SIZE


def test_vbm_header_fields_and_frames() -> None:
    movie = load_movie(_build_vbm(), "vbm")
    assert movie.header[HeaderKey.MOVIE_VERSION] == "VBM version 1"
    assert movie.header[HeaderKey.GUID] == "1234567890"
    assert movie.rerecords == 4321
    assert movie.header[HeaderKey.RERECORDS] == "4321"
    assert movie.header[HeaderKey.PLATFORM] == "GBC"
    assert movie.header[HeaderKey.GAME_NAME] == "POKEMON RED"
    assert movie.header[HeaderKey.AUTHOR] == "TASer"
    assert movie.header[HeaderKey.DESCRIPTION] == "any% glitched"
    assert movie.header[HeaderKey.CONTROLLERS] == "1"
    assert movie.frames == [
        "|.|........|",
        "|.|R......A|",
        "|.|..DU....|",
        "|.|....SsB.|",
    ]


def test_vbm_honours_controller_data_offset() -> None:
    movie = load_movie(_build_vbm(samples=[0x0020], gap=b"\xaa" * 0x40), "vbm")
    assert movie.frames == ["|.|.L......|"]


@pytest.mark.parametrize(
    ("system_flags", "platform"),
    [
        (0x00, "GB"),
        (vbm.SYSTEM_GBA, "GBA"),
        (vbm.SYSTEM_GBC, "GBC"),
        (vbm.SYSTEM_SGB, "SGB"),
        (vbm.SYSTEM_SGB | vbm.SYSTEM_GBC, "SGB"),
    ],
)
def test_vbm_platform(system_flags: int, platform: str) -> None:
    movie = load_movie(_build_vbm(system_flags=system_flags), "vbm")
    assert movie.header[HeaderKey.PLATFORM] == platform


def test_vbm_all_system_bits_is_invalid_platform() -> None:
    with pytest.raises(MovieImportError) as excinfo:
        load_movie(_build_vbm(system_flags=vbm.SYSTEM_ALL), "vbm")
    assert excinfo.value.kind is ErrorKind.INVALID_HEADER


@pytest.mark.parametrize(("flags", "count"), [(0x01, 1), (0x03, 2), (0x07, 3), (0x0F, 4)])
def test_vbm_controller_count(flags: int, count: int) -> None:
    movie = load_movie(_build_vbm(controller_flags=flags), "vbm")
    assert movie.header[HeaderKey.CONTROLLERS] == str(count)
    assert movie.frame_count == 4


def test_vbm_quicksave_and_sram_start_is_fatal() -> None:
    flags = vbm.START_FROM_QUICKSAVE | vbm.START_FROM_SRAM
    with pytest.raises(MovieImportError) as excinfo:
        load_movie(_build_vbm(start_flags=flags), "vbm")
    assert excinfo.value.kind is ErrorKind.UNSUPPORTED_START_STATE


def test_vbm_single_start_flag_is_accepted() -> None:
    movie = load_movie(_build_vbm(start_flags=vbm.START_FROM_SRAM), "vbm")
    assert movie.frame_count == 4


def test_vbm_reserved_emulation_bit_is_fatal() -> None:
    with pytest.raises(MovieImportError) as excinfo:
        load_movie(_build_vbm(emulation_flags=vbm.EMU_RESERVED_INVALID), "vbm")
    assert excinfo.value.kind is ErrorKind.INVALID_HEADER


def test_vbm_emulation_flags_are_informational() -> None:
    movie = load_movie(_build_vbm(emulation_flags=vbm.EMU_RTC | vbm.EMU_ECHO_RAM_FIX), "vbm")
    assert movie.header["RtcEnable"] == "True"
    assert movie.header["EchoRamFix"] == "True"
    assert "LagReduction" not in movie.header


def test_vbm_unexpected_version_is_not_fatal() -> None:
    movie = load_movie(_build_vbm(version=2), "vbm")
    assert movie.header[HeaderKey.MOVIE_VERSION] == "VBM version 2"


def test_vbm_signature_byte_order() -> None:
    with pytest.raises(MovieImportError) as excinfo:
        load_movie(_build_vbm(magic=b"\x1aMBV"), "vbm")
    assert excinfo.value.kind is ErrorKind.INVALID_SIGNATURE


def test_vbm_truncated_header() -> None:
    with pytest.raises(MovieImportError) as excinfo:
        load_movie(_build_vbm()[:0x80], "vbm")
    assert excinfo.value.kind is ErrorKind.TRUNCATED_STREAM


def test_vbm_is_finalized_once_by_dispatcher() -> None:
    calls: list[int] = []
    movie = load_movie(_build_vbm(), "vbm", finalizer=lambda m: calls.append(m.frame_count))
    assert calls == [4]
    assert movie.finalized
