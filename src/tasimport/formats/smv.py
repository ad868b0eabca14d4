"""Snes9x `.smv` movies.

The u32 after the signature selects the dialect. Only 1.43 movies are
decoded; the 1.51 and 1.52 dialects are recognised but yield (almost) empty
movies.
"""

from __future__ import annotations

import logging
from typing import BinaryIO, Callable, Final

from construct import Byte, Bytes, Const, Int16ul, Int32ul, Padding, Struct

from ..config import DEFAULT_CONFIG, ImportConfig
from ..errors import SAVESTATE_UNSUPPORTED, ErrorKind, MovieImportError
from ..layouts import SNES
from ..mnemonic import blank_frame
from ..movie import HeaderKey, MovieSink, flag_text
from ._stream import iter_records, parse_header, parse_signature, seek_frames

_LOGGER = logging.getLogger(__name__)

FMT: Final[str] = "SMV"

MOVIE_FLAG_FROM_RESET: Final[int] = 0x01
MOVIE_FLAG_PAL: Final[int] = 0x02

MAGIC = Struct(Const(b"SMV"), Padding(1))
VERSION = Int32ul

HEADER_143 = Struct(
    "guid" / Int32ul,
    "rerecord_count" / Int32ul,
    "frame_count" / Int32ul,
    "controller_flags" / Byte,
    "movie_flags" / Byte,
    "sync_options" / Bytes(2),
    "savestate_offset" / Int32ul,
    "frame_data_offset" / Int32ul,
)

HEADER_152 = Struct(
    "guid" / Int32ul,
)

CONTROLLER_SAMPLE = Int16ul


def controller_count(flags: int) -> int:
    if flags & 0x10:
        return 5
    if flags & 0x08:
        return 4
    if flags & 0x04:
        return 3
    if flags & 0x02:
        return 2
    return 1


def decode_143(stream: BinaryIO, sink: MovieSink) -> tuple[str, ...]:
    header = parse_header(HEADER_143, stream, FMT)

    movie_flags = int(header.movie_flags)
    if not movie_flags & MOVIE_FLAG_FROM_RESET:
        raise MovieImportError(ErrorKind.UNSUPPORTED_START_STATE, SAVESTATE_UNSUPPORTED)

    controllers = controller_count(int(header.controller_flags))

    sink.set_header(HeaderKey.MOVIE_VERSION, "Snes9x movie version 1.43")
    sink.set_header(HeaderKey.GUID, str(int(header.guid)))
    sink.set_rerecord_count(int(header.rerecord_count))
    sink.set_header(HeaderKey.PLATFORM, SNES.platform)
    sink.set_header(HeaderKey.PAL, flag_text(bool(movie_flags & MOVIE_FLAG_PAL)))
    sink.set_header(HeaderKey.CONTROLLERS, str(controllers))

    seek_frames(stream, header.frame_data_offset)

    # Samples are consumed to keep frame accounting honest; button mapping is not done yet.
    frame = blank_frame(SNES, controllers)
    frame_count = int(header.frame_count)
    samples = iter_records(CONTROLLER_SAMPLE, stream, frame_count * controllers, FMT)
    for index, _sample in enumerate(samples, start=1):
        if index % controllers == 0:
            sink.append_frame(frame)

    _LOGGER.debug("decoded %d SMV 1.43 frames with %d controllers", frame_count, controllers)
    return ()


def decode_151(stream: BinaryIO, sink: MovieSink) -> tuple[str, ...]:
    _LOGGER.debug("SMV 1.51 movies are not decoded; importing an empty movie")
    return ()


def decode_152(stream: BinaryIO, sink: MovieSink) -> tuple[str, ...]:
    header = parse_header(HEADER_152, stream, FMT)
    sink.set_header(HeaderKey.GUID, str(int(header.guid)))
    _LOGGER.debug("SMV 1.52 movies are not decoded beyond the GUID")
    return ()


DIALECTS: Final[dict[int, Callable[[BinaryIO, MovieSink], tuple[str, ...]]]] = {
    1: decode_143,
    4: decode_151,
    5: decode_152,
}


def decode(stream: BinaryIO, sink: MovieSink, config: ImportConfig = DEFAULT_CONFIG) -> tuple[str, ...]:
    parse_signature(MAGIC, stream, FMT)
    version = int(parse_header(VERSION, stream, FMT))
    dialect = DIALECTS.get(version)
    if dialect is None:
        raise MovieImportError(
            ErrorKind.UNRECOGNIZED_VERSION,
            "SMV version not recognized, 143, 151, and 152 are currently supported",
        )
    return dialect(stream, sink)
