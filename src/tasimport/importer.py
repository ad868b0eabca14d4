from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import BinaryIO, Final

from construct import StreamError

from .config import DEFAULT_CONFIG, ImportConfig
from .errors import ErrorKind, MovieImportError
from .formats import Decoder, decode_empty
from .formats import fcm, mmv, smv, vbm
from .formats.text import decode_fm2, decode_mc2
from .movie import CanonicalMovie, Finalizer
from .notify import Notifier, WarningNotifier

_LOGGER = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS: Final[frozenset[str]] = frozenset({"FCM", "FM2", "GMV", "MC2", "MMV", "TAS", "VBM"})

DECODERS: Final[dict[str, Decoder]] = {
    "FCM": fcm.decode,
    "FM2": decode_fm2,
    "GMV": decode_empty,
    "MCM": decode_empty,
    "MC2": decode_mc2,
    "MMV": mmv.decode,
    "SMV": smv.decode,
    "VBM": vbm.decode,
}


def normalize_extension(extension: str) -> str:
    return str(extension).strip().lstrip(".").upper()


def is_supported_extension(extension: str) -> bool:
    return normalize_extension(extension) in SUPPORTED_EXTENSIONS


def decoder_for(extension: str) -> Decoder | None:
    return DECODERS.get(normalize_extension(extension))


def decode_stream(
    stream: BinaryIO,
    extension: str,
    movie: CanonicalMovie,
    *,
    config: ImportConfig = DEFAULT_CONFIG,
) -> tuple[str, ...]:
    """Run the decoder for `extension` into `movie` and return its advisories.

    Unknown extensions leave the movie empty. Reads past the end of the input
    surface as `TRUNCATED_STREAM`.
    """
    decoder = decoder_for(extension)
    if decoder is None:
        _LOGGER.debug("no decoder for extension %r; importing an empty movie", extension)
        return ()
    try:
        return tuple(decoder(stream, movie, config))
    except StreamError as exc:
        raise MovieImportError(ErrorKind.TRUNCATED_STREAM, f"unexpected end of file: {exc}") from exc


def _complete(
    movie: CanonicalMovie,
    advisories: tuple[str, ...],
    notifier: Notifier | None,
    config: ImportConfig,
) -> CanonicalMovie:
    if advisories and config.notify_advisories:
        if notifier is None:
            notifier = WarningNotifier()
        for text in advisories:
            notifier.show_message(text)
    movie.finalize()
    return movie


def load_movie(
    data: bytes,
    extension: str,
    *,
    notifier: Notifier | None = None,
    finalizer: Finalizer | None = None,
    config: ImportConfig = DEFAULT_CONFIG,
) -> CanonicalMovie:
    movie = CanonicalMovie(finalizer=finalizer)
    advisories = decode_stream(io.BytesIO(bytes(data)), extension, movie, config=config)
    return _complete(movie, advisories, notifier, config)


def import_movie(
    path: str | Path,
    *,
    notifier: Notifier | None = None,
    finalizer: Finalizer | None = None,
    config: ImportConfig | None = None,
) -> CanonicalMovie:
    """Import a legacy movie file, choosing the decoder by extension.

    Raises `MovieImportError` on fatal input; in that case no movie is
    returned and nothing is finalized.
    """
    path = Path(path)
    if config is None:
        config = DEFAULT_CONFIG
    extension = path.suffix
    movie = CanonicalMovie(source_path=path, finalizer=finalizer)

    if decoder_for(extension) is None:
        _LOGGER.debug("unrecognised movie extension %r for %s", extension, path)
        return _complete(movie, (), notifier, config)

    _LOGGER.debug("importing %s", path)
    try:
        with path.open("rb") as stream:
            advisories = decode_stream(stream, extension, movie, config=config)
    except OSError as exc:
        raise MovieImportError(ErrorKind.IO_ERROR, f"Error opening file: {exc}") from exc
    return _complete(movie, advisories, notifier, config)
