from __future__ import annotations

import io
from typing import Any, BinaryIO, Iterator

from construct import ConstError, Construct, ConstructError, StreamError

from ..errors import ErrorKind, MovieImportError


def parse_signature(magic: Construct, stream: BinaryIO, fmt: str) -> None:
    try:
        magic.parse_stream(stream)
    except (ConstError, StreamError) as exc:
        raise MovieImportError(ErrorKind.INVALID_SIGNATURE, f"This is not a valid {fmt} file.") from exc


def parse_header(header: Construct, stream: BinaryIO, fmt: str) -> Any:
    try:
        return header.parse_stream(stream)
    except StreamError as exc:
        raise MovieImportError(ErrorKind.TRUNCATED_STREAM, f"unexpected end of file in {fmt} header") from exc
    except ConstructError as exc:
        raise MovieImportError(ErrorKind.INVALID_HEADER, f"invalid {fmt} header: {exc}") from exc


def seek_frames(stream: BinaryIO, offset: int) -> None:
    stream.seek(int(offset), io.SEEK_SET)


def iter_records(record: Construct, stream: BinaryIO, count: int, fmt: str) -> Iterator[Any]:
    """Yield `count` consecutive records; running out of input is fatal."""
    for index in range(int(count)):
        try:
            yield record.parse_stream(stream)
        except StreamError as exc:
            raise MovieImportError(
                ErrorKind.TRUNCATED_STREAM,
                f"unexpected end of file in {fmt} frame {index} of {int(count)}",
            ) from exc
