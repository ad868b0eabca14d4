from __future__ import annotations

from dataclasses import dataclass
from typing import Final, TypeAlias


@dataclass(frozen=True, slots=True)
class Button:
    name: str
    marker: str


@dataclass(frozen=True, slots=True)
class ControllerLayout:
    """Ordered button table for one controller type.

    `buttons` fixes both the character position of each button in a mnemonic
    player segment and the marker written when it is pressed. `commands` are
    console-level buttons rendered in the command field instead.
    """

    name: str
    platform: str
    buttons: tuple[Button, ...]
    idle_command: str = "."
    commands: tuple[Button, ...] = ()

    @property
    def width(self) -> int:
        return len(self.buttons)

    @property
    def button_names(self) -> tuple[str, ...]:
        return tuple(button.name for button in self.buttons)

    def command_marker(self, name: str) -> str:
        for command in self.commands:
            if command.name == name:
                return command.marker
        raise KeyError(f"{self.name} has no console command {name!r}")


def _buttons(*pairs: tuple[str, str]) -> tuple[Button, ...]:
    return tuple(Button(name=name, marker=marker) for name, marker in pairs)


NES: Final[ControllerLayout] = ControllerLayout(
    name="NES Controller",
    platform="NES",
    buttons=_buttons(
        ("Right", "R"),
        ("Left", "L"),
        ("Down", "D"),
        ("Up", "U"),
        ("Start", "S"),
        ("Select", "s"),
        ("B", "B"),
        ("A", "A"),
    ),
    idle_command="0",
    commands=_buttons(("Reset", "1")),
)

PC_ENGINE: Final[ControllerLayout] = ControllerLayout(
    name="PC Engine Controller",
    platform="PCE",
    buttons=_buttons(
        ("Up", "U"),
        ("Down", "D"),
        ("Left", "L"),
        ("Right", "R"),
        ("B1", "1"),
        ("B2", "2"),
        ("Run", "r"),
        ("Select", "s"),
    ),
    commands=_buttons(("Reset", "r")),
)

SMS: Final[ControllerLayout] = ControllerLayout(
    name="SMS Controller",
    platform="SMS",
    buttons=_buttons(
        ("Up", "U"),
        ("Down", "D"),
        ("Left", "L"),
        ("Right", "R"),
        ("B1", "1"),
        ("B2", "2"),
    ),
    commands=_buttons(("Pause", "p"), ("Reset", "r")),
)

GAME_BOY: Final[ControllerLayout] = ControllerLayout(
    name="Gameboy Controller",
    platform="GB",
    buttons=_buttons(
        ("Right", "R"),
        ("Left", "L"),
        ("Down", "D"),
        ("Up", "U"),
        ("Start", "S"),
        ("Select", "s"),
        ("B", "B"),
        ("A", "A"),
    ),
    commands=_buttons(("Power", "P")),
)

SNES: Final[ControllerLayout] = ControllerLayout(
    name="SNES Controller",
    platform="SNES",
    buttons=_buttons(
        ("Up", "U"),
        ("Down", "D"),
        ("Left", "L"),
        ("Right", "R"),
        ("Start", "S"),
        ("Select", "s"),
        ("Y", "Y"),
        ("B", "B"),
        ("X", "X"),
        ("A", "A"),
        ("L", "l"),
        ("R", "r"),
    ),
    commands=_buttons(("Reset", "r")),
)

LAYOUTS: Final[dict[str, ControllerLayout]] = {
    layout.platform: layout for layout in (NES, PC_ENGINE, SMS, GAME_BOY, SNES)
}


# (mask, button name) tables, one per source record layout.
BitTable: TypeAlias = tuple[tuple[int, str], ...]

MMV_BITS: Final[BitTable] = (
    (0x01, "Up"),
    (0x02, "Down"),
    (0x04, "Left"),
    (0x08, "Right"),
    (0x10, "B1"),
    (0x20, "B2"),
)
MMV_PAUSE_SMS: Final[int] = 0x40
MMV_PAUSE_GG: Final[int] = 0x80

VBM_BITS: Final[BitTable] = (
    (0x0010, "Right"),
    (0x0020, "Left"),
    (0x0080, "Down"),
    (0x0040, "Up"),
    (0x0008, "Start"),
    (0x0004, "Select"),
    (0x0002, "B"),
    (0x0001, "A"),
)


def layout_for(platform: str) -> ControllerLayout:
    try:
        return LAYOUTS[str(platform).upper()]
    except KeyError:
        raise KeyError(f"no controller layout for platform {platform!r}") from None
