"""Dega `.mmv` movies (Sega Master System / Game Gear)."""

from __future__ import annotations

import logging
from typing import BinaryIO, Final

from construct import Byte, Bytes, Const, Int32ul, Padding, Struct

from ..config import DEFAULT_CONFIG, ImportConfig
from ..errors import SAVESTATE_UNSUPPORTED, ErrorKind, MovieImportError
from ..layouts import MMV_BITS, MMV_PAUSE_GG, MMV_PAUSE_SMS, SMS
from ..mnemonic import buttons_from_bits, command_code, encode_frame
from ..movie import HeaderKey, MovieSink, flag_text
from ..parsing import digest_hex, fixed_str
from ._stream import iter_records, parse_header, parse_signature, seek_frames

_LOGGER = logging.getLogger(__name__)

FMT: Final[str] = "MMV"

FLAG_PAL: Final[int] = 0x02
FLAG_JAPAN: Final[int] = 0x04
FLAG_GAME_GEAR: Final[int] = 0x08

PLAYER_COUNT: Final[int] = 2

MAGIC = Const(b"MMV\x00")

HEADER = Struct(
    "version" / Int32ul,
    "frame_count" / Int32ul,
    "rerecord_count" / Int32ul,
    "start_from_reset" / Int32ul,
    "state_offset" / Int32ul,
    "input_data_offset" / Int32ul,
    "input_packet_size" / Int32ul,
    "author" / Bytes(64),
    "flags" / Byte,
    Padding(3),
    "rom_name" / Bytes(128),
    "md5" / Bytes(16),
)

HEADER_SIZE: Final[int] = MAGIC.sizeof() + HEADER.sizeof()

FRAME = Struct(
    "players" / Bytes(PLAYER_COUNT),
)


def decode(stream: BinaryIO, sink: MovieSink, config: ImportConfig = DEFAULT_CONFIG) -> tuple[str, ...]:
    parse_signature(MAGIC, stream, FMT)
    header = parse_header(HEADER, stream, FMT)

    if int(header.start_from_reset) == 0:
        raise MovieImportError(ErrorKind.UNSUPPORTED_START_STATE, SAVESTATE_UNSUPPORTED)

    flags = int(header.flags)
    game_gear = bool(flags & FLAG_GAME_GEAR)

    sink.set_header(HeaderKey.MOVIE_VERSION, f"Dega version {int(header.version)}")
    sink.set_rerecord_count(int(header.rerecord_count))
    sink.set_header(HeaderKey.AUTHOR, fixed_str(header.author))
    sink.set_header(HeaderKey.PAL, flag_text(bool(flags & FLAG_PAL)))
    sink.set_header(HeaderKey.JAPAN, flag_text(bool(flags & FLAG_JAPAN)))
    sink.set_header(HeaderKey.PLATFORM, "GG" if game_gear else "SMS")
    sink.set_header(HeaderKey.GAME_NAME, fixed_str(header.rom_name))
    sink.set_header(HeaderKey.MD5, digest_hex(header.md5))

    # Older files leave the input offset unset; input then follows the header.
    input_offset = int(header.input_data_offset)
    if input_offset >= HEADER_SIZE:
        seek_frames(stream, input_offset)

    pause_mask = MMV_PAUSE_GG if game_gear else MMV_PAUSE_SMS
    frame_count = int(header.frame_count)
    for record in iter_records(FRAME, stream, frame_count, FMT):
        raw = bytes(record.players)
        players = [buttons_from_bits(value, MMV_BITS) for value in raw]
        console = {"Pause": (raw[0] & pause_mask) != 0}
        sink.append_frame(encode_frame(SMS, players, command_code(SMS, console)))

    _LOGGER.debug("decoded %d MMV frames (game_gear=%s)", frame_count, game_gear)
    return ()
