"""CLI implementation for chunkread."""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import typer

from . import open_chunked
from .core.config import ChunkingConfig
from .core.model import ScheduleParseError, SizeParseError
from .core.sizes import format_size

app = typer.Typer(add_completion=False, help="Read remote objects in adaptively sized chunks.")

_COPY_BLOCK = 1024 * 1024


def build_config(chunk_size: str, chunk_size_limit: str, chunk_schedule: Optional[str]) -> ChunkingConfig:
    """Turn the chunking options into a config, as a usage error if malformed."""
    try:
        return ChunkingConfig.from_strings(chunk_size, chunk_size_limit, chunk_schedule)
    except (SizeParseError, ScheduleParseError) as e:
        raise typer.BadParameter(str(e)) from e


ChunkSizeOpt = typer.Option("128M", "--chunk-size", help="Size of the first chunk, 'off' to disable chunking")
ChunkLimitOpt = typer.Option("off", "--chunk-size-limit", help="Chunk sizes double up to this limit")
ScheduleOpt = typer.Option(None, "--chunk-schedule", help="Explicit schedule, e.g. '2M,x2,64M'")


@app.command()
def cat(
    source: str = typer.Argument(..., help="File or URL to read"),
    chunk_size: str = ChunkSizeOpt,
    chunk_size_limit: str = ChunkLimitOpt,
    chunk_schedule: Optional[str] = ScheduleOpt,
    offset: int = typer.Option(0, "--offset", min=0, help="Start reading at this byte"),
    count: int = typer.Option(-1, "--count", help="Read at most N bytes (-1 for all)"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Write to PATH instead of stdout"),
    stats: bool = typer.Option(False, "--stats", help="Print request statistics to stderr as JSON"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Debug logging to stderr"),
):
    """Copy an object (or a slice of it) through a chunked reader."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr)
    config = build_config(chunk_size, chunk_size_limit, chunk_schedule)

    sink = open(output, "wb") if output else None
    bytes_read = 0
    try:
        with open_chunked(source, config) as reader:
            if offset:
                reader.seek(offset)
            remaining = count
            while remaining != 0:
                want = _COPY_BLOCK if remaining < 0 else min(remaining, _COPY_BLOCK)
                data = reader.read(want)
                if not data:
                    break
                if sink is not None:
                    sink.write(data)
                else:
                    typer.echo(data, nl=False)
                bytes_read += len(data)
                if remaining > 0:
                    remaining -= len(data)
            obj = reader.remote_object
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    finally:
        if sink is not None:
            sink.close()

    if stats:
        payload = {
            "bytes_read": bytes_read,
            "requests_made": getattr(obj, "requests_made", None),
            "bytes_fetched": getattr(obj, "bytes_fetched", None),
        }
        typer.echo(json.dumps(payload), err=True)


@app.command()
def plan(
    chunk_size: str = ChunkSizeOpt,
    chunk_size_limit: str = ChunkLimitOpt,
    chunk_schedule: Optional[str] = ScheduleOpt,
    count: int = typer.Option(8, "--count", min=1, help="Number of chunk sizes to print"),
):
    """Print the chunk sizes a configuration would request, in order."""
    iterator = build_config(chunk_size, chunk_size_limit, chunk_schedule).build_iterator()
    for _ in range(count):
        typer.echo(format_size(iterator.next_chunk_size()))


if __name__ == "__main__":
    app()
