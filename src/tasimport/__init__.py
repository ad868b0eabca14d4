from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("tasimport")
except PackageNotFoundError:  # pragma: no cover
    # Allow running from source (e.g. `PYTHONPATH=src`) without installed package metadata.
    __version__ = "0.0.0+dev"

from .errors import ErrorKind, MovieImportError, MovieImportWarning
from .importer import SUPPORTED_EXTENSIONS, import_movie, is_supported_extension, load_movie
from .movie import CanonicalMovie, HeaderKey, MovieSink, Subtitle

__all__ = [
    "CanonicalMovie",
    "ErrorKind",
    "HeaderKey",
    "MovieImportError",
    "MovieImportWarning",
    "MovieSink",
    "SUPPORTED_EXTENSIONS",
    "Subtitle",
    "import_movie",
    "is_supported_extension",
    "load_movie",
]
