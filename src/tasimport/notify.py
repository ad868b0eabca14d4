from __future__ import annotations

import logging
import warnings
from typing import Protocol

from .errors import MovieImportWarning

_LOGGER = logging.getLogger(__name__)


class Notifier(Protocol):
    def show_message(self, text: str) -> None: ...


class WarningNotifier:
    """Surface advisories as `MovieImportWarning`s."""

    def show_message(self, text: str) -> None:
        _LOGGER.warning("%s", text)
        warnings.warn(str(text), category=MovieImportWarning, stacklevel=2)


class CollectingNotifier:
    def __init__(self) -> None:
        self.messages: list[str] = []

    def show_message(self, text: str) -> None:
        self.messages.append(str(text))


class NullNotifier:
    def show_message(self, text: str) -> None:
        _LOGGER.debug("advisory suppressed: %s", text)
