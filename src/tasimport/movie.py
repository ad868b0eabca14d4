from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Final, Protocol


class HeaderKey:
    MOVIE_VERSION: Final[str] = "MovieVersion"
    EMULATION_VERSION: Final[str] = "EmulationVersion"
    GAME_NAME: Final[str] = "GameName"
    AUTHOR: Final[str] = "Author"
    GUID: Final[str] = "Guid"
    PLATFORM: Final[str] = "Platform"
    RERECORDS: Final[str] = "Rerecords"

    PAL: Final[str] = "PAL"
    JAPAN: Final[str] = "Japan"
    SYNC_HACK: Final[str] = "SyncHack"
    MD5: Final[str] = "MD5"
    START_TYPE: Final[str] = "StartType"
    CONTROLLERS: Final[str] = "Controllers"
    DESCRIPTION: Final[str] = "Description"
    MINOR_VERSION: Final[str] = "MinorVersion"


SUBTITLE_DEFAULT_X = 0
SUBTITLE_DEFAULT_Y = 0
SUBTITLE_DEFAULT_DURATION = 200
SUBTITLE_DEFAULT_COLOR = 0xFFFFFFFF


def flag_text(value: bool) -> str:
    return "True" if value else "False"


@dataclass(frozen=True, slots=True)
class Subtitle:
    frame: int
    text: str
    x: int = SUBTITLE_DEFAULT_X
    y: int = SUBTITLE_DEFAULT_Y
    duration: int = SUBTITLE_DEFAULT_DURATION
    color: int = SUBTITLE_DEFAULT_COLOR

    def to_line(self) -> str:
        return (
            f"subtitle {int(self.frame)} {int(self.x)} {int(self.y)} {int(self.duration)} "
            f"{int(self.color) & 0xFFFF_FFFF:08X} {self.text}"
        )


class MovieSink(Protocol):
    """Narrow write interface the decoders populate."""

    def set_header(self, key: str, value: str) -> None: ...

    def set_rerecord_count(self, count: int) -> None: ...

    def append_frame(self, line: str) -> None: ...

    def add_subtitle(self, subtitle: Subtitle) -> None: ...

    def add_comment(self, line: str) -> None: ...

    def finalize(self) -> None: ...


Finalizer = Callable[["CanonicalMovie"], None]


@dataclass(slots=True)
class CanonicalMovie:
    header: dict[str, str] = field(default_factory=dict)
    frames: list[str] = field(default_factory=list)
    subtitles: list[Subtitle] = field(default_factory=list)
    comments: list[str] = field(default_factory=list)
    rerecords: int = 0
    source_path: Path | None = None
    finalizer: Finalizer | None = None
    finalized: bool = False

    @property
    def frame_count(self) -> int:
        return len(self.frames)

    @property
    def target_path(self) -> Path | None:
        if self.source_path is None:
            return None
        return Path(self.source_path).with_suffix(".tas")

    def get(self, key: str, default: str = "") -> str:
        return self.header.get(key, default)

    def set_header(self, key: str, value: str) -> None:
        self._check_open()
        self.header[str(key)] = str(value)

    def set_rerecord_count(self, count: int) -> None:
        self._check_open()
        count = int(count)
        if count < 0:
            raise ValueError(f"rerecord count must be non-negative, got {count}")
        self.rerecords = count
        self.header[HeaderKey.RERECORDS] = str(count)

    def append_frame(self, line: str) -> None:
        self._check_open()
        self.frames.append(str(line))

    def add_subtitle(self, subtitle: Subtitle) -> None:
        self._check_open()
        self.subtitles.append(subtitle)

    def add_comment(self, line: str) -> None:
        self._check_open()
        self.comments.append(str(line))

    def finalize(self) -> None:
        if self.finalized:
            raise RuntimeError("movie already finalized")
        self.finalized = True
        if self.finalizer is not None:
            self.finalizer(self)

    def _check_open(self) -> None:
        if self.finalized:
            raise RuntimeError("movie is finalized and can no longer be modified")
