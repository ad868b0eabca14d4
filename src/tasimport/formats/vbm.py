"""VisualBoyAdvance `.vbm` movies.

The header is a fixed 0x100 byte block; the controller data offset it declares
must be honoured because SRAM or a savestate may sit in between.
"""

from __future__ import annotations

import logging
from typing import BinaryIO, Final

from construct import Byte, Bytes, Const, Int16ul, Int32ul, Struct

from ..config import DEFAULT_CONFIG, ImportConfig
from ..errors import SAVESTATE_UNSUPPORTED, ErrorKind, MovieImportError
from ..layouts import GAME_BOY, VBM_BITS
from ..mnemonic import buttons_from_bits, encode_frame
from ..movie import HeaderKey, MovieSink
from ..parsing import fixed_str
from ._stream import iter_records, parse_header, parse_signature, seek_frames

_LOGGER = logging.getLogger(__name__)

FMT: Final[str] = "VBM"
EXPECTED_VERSION: Final[int] = 1

START_FROM_QUICKSAVE: Final[int] = 0x01
START_FROM_SRAM: Final[int] = 0x02

SYSTEM_GBA: Final[int] = 0x01
SYSTEM_GBC: Final[int] = 0x02
SYSTEM_SGB: Final[int] = 0x04
SYSTEM_ALL: Final[int] = SYSTEM_GBA | SYSTEM_GBC | SYSTEM_SGB

EMU_USE_BIOS: Final[int] = 0x01
EMU_SKIP_BIOS: Final[int] = 0x02
EMU_RTC: Final[int] = 0x04
EMU_RESERVED_INVALID: Final[int] = 0x08
EMU_LAG_REDUCTION: Final[int] = 0x10
EMU_GBC_HDMA5_FIX: Final[int] = 0x20
EMU_ECHO_RAM_FIX: Final[int] = 0x40

_EMULATION_FLAG_NAMES: Final[tuple[tuple[int, str], ...]] = (
    (EMU_USE_BIOS, "UseBiosFile"),
    (EMU_SKIP_BIOS, "SkipBiosFile"),
    (EMU_RTC, "RtcEnable"),
    (EMU_LAG_REDUCTION, "LagReduction"),
    (EMU_GBC_HDMA5_FIX, "GbcHdma5Fix"),
    (EMU_ECHO_RAM_FIX, "EchoRamFix"),
)

MAGIC = Const(b"VBM\x1a")

HEADER = Struct(
    "version" / Int32ul,  # 0x04
    "uid" / Int32ul,
    "frame_count" / Int32ul,
    "rerecord_count" / Int32ul,  # 0x10
    "start_flags" / Byte,
    "controller_flags" / Byte,
    "system_flags" / Byte,
    "emulation_flags" / Byte,
    "save_type" / Int32ul,  # 0x18
    "flash_size" / Int32ul,
    "gb_emulator_type" / Int32ul,  # 0x20
    "game_name" / Bytes(0x0C),
    "minor_version" / Byte,  # 0x30
    "internal_crc" / Byte,
    "internal_checksum" / Int16ul,
    "unit_code" / Int32ul,
    "save_offset" / Int32ul,
    "controller_data_offset" / Int32ul,
    "author" / Bytes(0x40),  # 0x40
    "description" / Bytes(0x80),  # 0x80
)

HEADER_SIZE: Final[int] = 0x100

FRAME = Int16ul


def controller_count(flags: int) -> int:
    if flags & 0x08:
        return 4
    if flags & 0x04:
        return 3
    if flags & 0x02:
        return 2
    return 1


def platform_name(flags: int) -> str:
    if (flags & SYSTEM_ALL) == SYSTEM_ALL:
        raise MovieImportError(ErrorKind.INVALID_HEADER, "Not a valid VBM platform type.")
    if flags & SYSTEM_SGB:
        return "SGB"
    if flags & SYSTEM_GBC:
        return "GBC"
    if flags & SYSTEM_GBA:
        return "GBA"
    return "GB"


def decode(stream: BinaryIO, sink: MovieSink, config: ImportConfig = DEFAULT_CONFIG) -> tuple[str, ...]:
    parse_signature(MAGIC, stream, FMT)
    header = parse_header(HEADER, stream, FMT)

    start_flags = int(header.start_flags)
    if (start_flags & START_FROM_QUICKSAVE) and (start_flags & START_FROM_SRAM):
        raise MovieImportError(ErrorKind.UNSUPPORTED_START_STATE, SAVESTATE_UNSUPPORTED)

    platform = platform_name(int(header.system_flags))

    emulation_flags = int(header.emulation_flags)
    if emulation_flags & EMU_RESERVED_INVALID:
        raise MovieImportError(ErrorKind.INVALID_HEADER, "Invalid VBM file.")

    version = int(header.version)
    if version != EXPECTED_VERSION:
        _LOGGER.warning("unexpected VBM version %d (expected %d)", version, EXPECTED_VERSION)

    controllers = controller_count(int(header.controller_flags))
    if controllers > 1:
        _LOGGER.debug("VBM declares %d controllers; only the first is imported", controllers)

    sink.set_header(HeaderKey.MOVIE_VERSION, f"VBM version {version}")
    sink.set_header(HeaderKey.GUID, str(int(header.uid)))
    sink.set_rerecord_count(int(header.rerecord_count))
    sink.set_header(HeaderKey.PLATFORM, platform)
    sink.set_header(HeaderKey.CONTROLLERS, str(controllers))
    sink.set_header(HeaderKey.GAME_NAME, fixed_str(header.game_name))
    sink.set_header(HeaderKey.MINOR_VERSION, str(int(header.minor_version)))
    sink.set_header(HeaderKey.AUTHOR, fixed_str(header.author))
    sink.set_header(HeaderKey.DESCRIPTION, fixed_str(header.description))
    for mask, name in _EMULATION_FLAG_NAMES:
        if emulation_flags & mask:
            sink.set_header(name, "True")

    seek_frames(stream, header.controller_data_offset)

    frame_count = int(header.frame_count)
    for state in iter_records(FRAME, stream, frame_count, FMT):
        sink.append_frame(encode_frame(GAME_BOY, [buttons_from_bits(state, VBM_BITS)]))

    _LOGGER.debug("decoded %d VBM frames (%s)", frame_count, platform)
    return ()
