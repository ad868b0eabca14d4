from __future__ import annotations

import logging
from pathlib import Path

import msgspec
import typer

from .config import ConfigError, ImportConfig, load_config, load_default_config
from .errors import MovieImportError
from .importer import SUPPORTED_EXTENSIONS, decoder_for, import_movie, is_supported_extension
from .movie import CanonicalMovie
from .notify import CollectingNotifier

app = typer.Typer(add_completion=False)

_STATE: dict[str, ImportConfig] = {}


class MovieSummary(msgspec.Struct, forbid_unknown_fields=True):
    path: str
    header: dict[str, str]
    rerecords: int
    frame_count: int
    subtitles: list[str] = msgspec.field(default_factory=list)
    comments: list[str] = msgspec.field(default_factory=list)
    advisories: list[str] = msgspec.field(default_factory=list)


def _config() -> ImportConfig:
    config = _STATE.get("config")
    if config is None:
        config = load_default_config()
        _STATE["config"] = config
    return config


def _import_or_exit(path: Path) -> tuple[CanonicalMovie, list[str]]:
    if not path.is_file():
        typer.echo(f"movie not found: {path}", err=True)
        raise typer.Exit(code=1)
    if decoder_for(path.suffix) is None:
        typer.echo(f"unsupported movie extension: {path.suffix or '(none)'}", err=True)
        raise typer.Exit(code=1)
    notifier = CollectingNotifier()
    try:
        movie = import_movie(path, notifier=notifier, config=_config())
    except MovieImportError as exc:
        typer.echo(f"import failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    return movie, notifier.messages


def summarize(path: Path, movie: CanonicalMovie, advisories: list[str]) -> MovieSummary:
    return MovieSummary(
        path=str(path),
        header=dict(movie.header),
        rerecords=int(movie.rerecords),
        frame_count=int(movie.frame_count),
        subtitles=[subtitle.to_line() for subtitle in movie.subtitles],
        comments=list(movie.comments),
        advisories=list(advisories),
    )


@app.callback()
def cmd_root(
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="log more (-v info, -vv debug)"),
    config_file: Path | None = typer.Option(
        None,
        "--config",
        help="import config TOML (default: per-user config dir; override with TASIMPORT_CONFIG)",
    ),
) -> None:
    """Inspect legacy TAS movies through the import engine."""
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    _STATE.clear()
    if config_file is not None:
        try:
            _STATE["config"] = load_config(config_file)
        except (OSError, ConfigError) as exc:
            typer.echo(f"config error: {exc}", err=True)
            raise typer.Exit(code=1) from exc


@app.command("info")
def cmd_info(
    movie_file: Path = typer.Argument(..., help="legacy movie file (.fcm, .fm2, .mc2, .mmv, .smv, .vbm, ...)"),
    as_json: bool = typer.Option(False, "--json", help="print the summary as JSON"),
) -> None:
    """Print header fields and counts of an imported movie."""
    movie, advisories = _import_or_exit(movie_file)
    summary = summarize(movie_file, movie, advisories)
    if as_json:
        typer.echo(msgspec.json.encode(summary).decode("utf-8"))
        return
    for key, value in summary.header.items():
        typer.echo(f"{key} {value}")
    typer.echo(f"frames={summary.frame_count} rerecords={summary.rerecords}")
    typer.echo(f"subtitles={len(summary.subtitles)} comments={len(summary.comments)}")
    for text in summary.advisories:
        typer.echo(f"warning: {text}", err=True)


@app.command("frames")
def cmd_frames(
    movie_file: Path = typer.Argument(..., help="legacy movie file"),
    start: int = typer.Option(0, min=0, help="first frame index"),
    limit: int | None = typer.Option(None, min=0, help="max frames to print (default: all)"),
) -> None:
    """Print canonical mnemonic frame lines."""
    movie, advisories = _import_or_exit(movie_file)
    frames = movie.frames[start:]
    if limit is not None:
        frames = frames[:limit]
    for idx, line in enumerate(frames, start=start):
        typer.echo(f"{idx:6d}  {line}")
    for text in advisories:
        typer.echo(f"warning: {text}", err=True)


@app.command("extensions")
def cmd_extensions(
    extension: str | None = typer.Argument(None, help="check a single extension"),
) -> None:
    """List recognised movie extensions, or check one."""
    if extension is not None:
        supported = is_supported_extension(extension)
        typer.echo(f"{extension}: {'supported' if supported else 'unsupported'}")
        if not supported:
            raise typer.Exit(code=1)
        return
    for ext in sorted(SUPPORTED_EXTENSIONS):
        typer.echo(ext)


def main(argv: list[str] | None = None) -> None:
    app(prog_name="tasimport", args=argv)


if __name__ == "__main__":
    main()
