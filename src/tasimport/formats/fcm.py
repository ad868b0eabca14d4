"""FCEU `.fcm` binary movies."""

from __future__ import annotations

import logging
from typing import BinaryIO, Final

from construct import Bytes, Const, GreedyBytes, Int32ul, NullTerminated, Padding, Struct

from ..config import DEFAULT_CONFIG, ImportConfig
from ..errors import SAVESTATE_UNSUPPORTED, ErrorKind, MovieImportError
from ..layouts import NES
from ..mnemonic import blank_frame
from ..movie import HeaderKey, MovieSink, flag_text
from ..parsing import digest_hex
from ._stream import iter_records, parse_header, parse_signature, seek_frames

_LOGGER = logging.getLogger(__name__)

FMT: Final[str] = "FCM"

FLAG_RESET_START: Final[int] = 0x02
FLAG_PAL: Final[int] = 0x04
FLAG_POWER_ON_START: Final[int] = 0x08
FLAG_NO_SYNC_HACK: Final[int] = 0x10

FRAME_RECORD_SIZE: Final[int] = 4

# Fourth signature byte is 0x1A in FCEU output but is not checked.
MAGIC = Struct(Const(b"FCM"), Padding(1))

HEADER = Struct(
    "version" / Int32ul,
    "flags" / Bytes(4),
    "frame_count" / Int32ul,
    "rerecord_count" / Int32ul,
    "movie_data_size" / Int32ul,
    "savestate_offset" / Int32ul,
    "first_frame_offset" / Int32ul,
    "rom_checksum" / Bytes(16),
    "emulator_version" / Int32ul,
    "rom_name" / NullTerminated(GreedyBytes),
    "author" / NullTerminated(GreedyBytes),
)

FRAME = Bytes(FRAME_RECORD_SIZE)


def _start_type(flags: int, config: ImportConfig) -> str:
    if flags & FLAG_POWER_ON_START:
        return "PowerOn"
    if flags & FLAG_RESET_START:
        if config.fcm_reset_start == "reject":
            raise MovieImportError(
                ErrorKind.UNSUPPORTED_START_STATE,
                "Movies that begin with a reset are not supported.",
            )
        _LOGGER.warning("FCM movie starts from reset; importing as a power-on movie")
        return "Reset"
    raise MovieImportError(ErrorKind.UNSUPPORTED_START_STATE, SAVESTATE_UNSUPPORTED)


def decode(stream: BinaryIO, sink: MovieSink, config: ImportConfig = DEFAULT_CONFIG) -> tuple[str, ...]:
    parse_signature(MAGIC, stream, FMT)
    header = parse_header(HEADER, stream, FMT)

    flags = int(header.flags[0])
    start_type = _start_type(flags, config)

    sink.set_header(HeaderKey.MOVIE_VERSION, f"FCEU movie version {int(header.version)} (.fcm)")
    sink.set_header(HeaderKey.EMULATION_VERSION, f"FCEU {int(header.emulator_version)}")
    sink.set_header(HeaderKey.PLATFORM, NES.platform)
    sink.set_header(HeaderKey.GAME_NAME, bytes(header.rom_name).decode("utf-8", errors="replace"))
    sink.set_header(HeaderKey.AUTHOR, bytes(header.author).decode("utf-8", errors="replace"))
    sink.set_header(HeaderKey.MD5, digest_hex(header.rom_checksum))
    sink.set_header(HeaderKey.SYNC_HACK, flag_text(not (flags & FLAG_NO_SYNC_HACK)))
    sink.set_header(HeaderKey.PAL, flag_text(bool(flags & FLAG_PAL)))
    sink.set_header(HeaderKey.START_TYPE, start_type)
    sink.set_rerecord_count(int(header.rerecord_count))

    seek_frames(stream, header.first_frame_offset)

    # Controller bits are not decoded yet; every frame keeps its slot as an idle controller.
    frame = blank_frame(NES, 1)
    frame_count = int(header.frame_count)
    for _record in iter_records(FRAME, stream, frame_count, FMT):
        sink.append_frame(frame)

    _LOGGER.debug("decoded %d FCM frames", frame_count)
    return ()
