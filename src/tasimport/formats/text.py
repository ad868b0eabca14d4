"""Line-oriented movie formats (FCEUX `.fm2`, PCEjin/Mednafen `.mc2`).

Both formats share one grammar: `key value` header lines, free-form comment
lines, and input lines of the form `|commands|player1|player2|...|`. A
`TextProfile` supplies the console-specific parts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import io
import logging
from typing import BinaryIO, Final, Mapping

from ..config import DEFAULT_CONFIG, ImportConfig
from ..errors import SAVESTATE_UNSUPPORTED, ErrorKind, MovieImportError
from ..layouts import NES, PC_ENGINE, ControllerLayout
from ..mnemonic import PlayerState, buttons_from_field, command_code, encode_frame
from ..movie import HeaderKey, MovieSink, Subtitle
from ..parsing import header_value, parse_int

_LOGGER = logging.getLogger(__name__)

FRAME_DELIMITER: Final[str] = "|"


@dataclass(frozen=True, slots=True)
class TextCommand:
    """Meaning of one command code in the first field of an input line."""

    console: str | None = None
    # Label used in the advisory when the host cannot reproduce the command.
    unsupported: str | None = None
    # A hard reset on the very first frame is the same as power-on.
    ok_on_first_frame: bool = False


@dataclass(frozen=True, slots=True)
class TextProfile:
    emulator: str
    platform: str
    layout: ControllerLayout
    # `None` leaves the command field uninterpreted.
    commands: Mapping[str, TextCommand] | None = field(default=None)


FCEUX_COMMANDS: Final[dict[str, TextCommand]] = {
    "0": TextCommand(),
    "1": TextCommand(console="Reset"),
    "2": TextCommand(unsupported="hard reset", ok_on_first_frame=True),
    "4": TextCommand(unsupported="FDS Insert"),
    "8": TextCommand(unsupported="FDS Select"),
}

PCEJIN_COMMANDS: Final[dict[str, TextCommand]] = {
    "0": TextCommand(),
    "1": TextCommand(console="Reset"),
    "2": TextCommand(unsupported="hard reset", ok_on_first_frame=True),
}

FM2_PROFILE: Final[TextProfile] = TextProfile(
    emulator="FCEUX",
    platform="NES",
    layout=NES,
    commands=FCEUX_COMMANDS,
)

MC2_PROFILE: Final[TextProfile] = TextProfile(
    emulator="Mednafen/PCEjin",
    platform="PCE",
    layout=PC_ENGINE,
    commands=PCEJIN_COMMANDS,
)

# Checked in order against the start of the line; first match wins.
_HEADER_PREFIXES: Final[tuple[tuple[str, str], ...]] = (
    ("emuVersion", HeaderKey.EMULATION_VERSION),
    ("version", HeaderKey.MOVIE_VERSION),
    ("romFilename", HeaderKey.GAME_NAME),
    ("comment author", HeaderKey.AUTHOR),
    ("guid", HeaderKey.GUID),
)


def parse_subtitle(line: str) -> Subtitle | None:
    """Parse `subtitle <frame> <message>`; returns None for malformed lines."""
    _, sep, rest = line.partition(" ")
    if not sep:
        return None
    frame_text, sep, message = rest.partition(" ")
    if not sep or not frame_text:
        return None
    frame = parse_int(frame_text, None)
    if frame is None or frame < 0:
        return None
    return Subtitle(frame=frame, text=message)


class _TextDecoder:
    def __init__(self, sink: MovieSink, profile: TextProfile) -> None:
        self.sink = sink
        self.profile = profile
        self.frame_count = 0
        self.advisory: str | None = None

    def feed(self, line_no: int, line: str) -> None:
        if not line:
            return
        if "rerecordCount" in line:
            self._rerecords(line)
            return
        if "StartsFromSavestate" in line:
            if header_value(line, "StartsFromSavestate").strip() == "1":
                raise MovieImportError(ErrorKind.UNSUPPORTED_START_STATE, SAVESTATE_UNSUPPORTED)
            return
        for token, key in _HEADER_PREFIXES:
            if line.startswith(token):
                value = header_value(line, token)
                if key == HeaderKey.EMULATION_VERSION:
                    value = f"{self.profile.emulator} version {value}"
                self.sink.set_header(key, value)
                return
        if line.startswith("sub"):
            subtitle = parse_subtitle(line)
            if subtitle is None:
                _LOGGER.debug("skipping malformed subtitle on line %d: %r", line_no, line)
            else:
                self.sink.add_subtitle(subtitle)
            return
        if line.startswith(FRAME_DELIMITER):
            self._frame(line_no, line)
            return
        self.sink.add_comment(line)

    def _rerecords(self, line: str) -> None:
        count = parse_int(header_value(line, "rerecordCount"), 0)
        if count < 0:
            _LOGGER.debug("negative rerecord count %d, using 0", count)
            count = 0
        self.sink.set_rerecord_count(count)

    def _frame(self, line_no: int, line: str) -> None:
        layout = self.profile.layout
        sections = line.split(FRAME_DELIMITER)
        command_field = sections[1] if len(sections) > 1 else ""
        fields = sections[2:]
        if fields and fields[-1] == "":
            fields.pop()

        console = self._console(line_no, command_field)

        players: list[PlayerState | None] = []
        for text in fields:
            if len(text) == layout.width:
                players.append(buttons_from_field(text, layout))
            else:
                players.append(None)

        self.sink.append_frame(encode_frame(layout, players, command_code(layout, console)))
        self.frame_count += 1

    def _console(self, line_no: int, command_field: str) -> dict[str, bool]:
        commands = self.profile.commands
        if commands is None or not command_field:
            return {}
        command = commands.get(command_field[0])
        if command is None:
            self._advise("unknown", line_no)
            return {}
        if command.unsupported is not None:
            if not (command.ok_on_first_frame and self.frame_count == 0):
                self._advise(command.unsupported, line_no)
            return {}
        if command.console is not None:
            return {command.console: True}
        return {}

    def _advise(self, what: str, line_no: int) -> None:
        if self.advisory is not None:
            return
        self.advisory = f"Unable to import {what} command on line {line_no}"
        _LOGGER.debug("%s (%s)", self.advisory, ErrorKind.UNRECOGNIZED_COMMAND)


def decode_text(
    stream: BinaryIO,
    sink: MovieSink,
    *,
    profile: TextProfile,
    config: ImportConfig = DEFAULT_CONFIG,
) -> tuple[str, ...]:
    decoder = _TextDecoder(sink, profile)
    sink.set_header(HeaderKey.PLATFORM, profile.platform)

    text = io.TextIOWrapper(stream, encoding=config.text_encoding, errors="replace", newline=None)
    try:
        for line_no, raw in enumerate(text, start=1):
            if line_no == 1:
                raw = raw.lstrip("\ufeff")
            decoder.feed(line_no, raw.rstrip("\n"))
    finally:
        # The caller owns the underlying stream.
        text.detach()

    _LOGGER.debug("decoded %d %s frames", decoder.frame_count, profile.platform)
    if decoder.advisory is None:
        return ()
    return (decoder.advisory,)


def decode_fm2(stream: BinaryIO, sink: MovieSink, config: ImportConfig = DEFAULT_CONFIG) -> tuple[str, ...]:
    return decode_text(stream, sink, profile=FM2_PROFILE, config=config)


def decode_mc2(stream: BinaryIO, sink: MovieSink, config: ImportConfig = DEFAULT_CONFIG) -> tuple[str, ...]:
    return decode_text(stream, sink, profile=MC2_PROFILE, config=config)
