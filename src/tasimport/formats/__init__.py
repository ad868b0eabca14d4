from __future__ import annotations

from typing import BinaryIO, Protocol

from ..config import ImportConfig
from ..movie import MovieSink


class Decoder(Protocol):
    """Populate `sink` from `stream`; returns advisories, raises on fatal input."""

    def __call__(self, stream: BinaryIO, sink: MovieSink, config: ImportConfig = ...) -> tuple[str, ...]: ...


def decode_empty(stream: BinaryIO, sink: MovieSink, config: ImportConfig | None = None) -> tuple[str, ...]:
    """Placeholder for formats that are recognised but not decoded (GMV, MCM)."""
    return ()


__all__ = ["Decoder", "decode_empty"]
