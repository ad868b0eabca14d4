from __future__ import annotations

from typing import Mapping, Sequence

from .layouts import BitTable, ControllerLayout

UNSET = "."

PlayerState = Mapping[str, bool]


def buttons_from_bits(value: int, table: BitTable) -> dict[str, bool]:
    value = int(value)
    return {name: (value & int(mask)) != 0 for mask, name in table}


def buttons_from_field(text: str, layout: ControllerLayout) -> dict[str, bool]:
    """Decode one text-format player field; any char other than `.` or space is pressed."""
    if len(text) != layout.width:
        raise ValueError(f"player field {text!r} does not match {layout.name} width {layout.width}")
    return {button.name: char not in (UNSET, " ") for button, char in zip(layout.buttons, text)}


def command_code(layout: ControllerLayout, console: Mapping[str, bool] | None = None) -> str:
    """Pick the command character for a frame from console-level button states.

    The first pressed console button in layout order wins.
    """
    if console:
        for command in layout.commands:
            if console.get(command.name):
                return command.marker
    return layout.idle_command


def encode_player(layout: ControllerLayout, state: PlayerState | None) -> str:
    if not state:
        return UNSET * layout.width
    return "".join(button.marker if state.get(button.name) else UNSET for button in layout.buttons)


def encode_frame(
    layout: ControllerLayout,
    players: Sequence[PlayerState | None],
    command: str | None = None,
) -> str:
    """Render one frame as `|<command>|<p1>|<p2>|...|`.

    `None` entries in `players` stand for a controller with nothing pressed.
    """
    if command is None:
        command = layout.idle_command
    if len(command) != 1:
        raise ValueError(f"command code must be a single character, got {command!r}")
    parts = [command]
    parts.extend(encode_player(layout, state) for state in players)
    return "|" + "|".join(parts) + "|"


def blank_frame(layout: ControllerLayout, player_count: int = 1, command: str | None = None) -> str:
    return encode_frame(layout, [None] * int(player_count), command)
