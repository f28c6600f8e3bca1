"""
Command-line interface for riffa.

Subcommands:
  inspect  list the chunks of a RIFF file (local path or http(s) URL)
  info     decode and print the WAVE format chunk
  pack     wrap raw PCM into a WAVE file
  copy     re-emit every chunk of a RIFF file through the writer
  play     play a PCM WAVE file through sounddevice
"""

from __future__ import annotations

import argparse
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Sequence

import requests

from .chunk import FILE_TYPE_WAVE, FOURCC_DATA
from .config import AppConfig, load_config
from .errors import AudioDeviceError, ClosedError, CorruptedError, ValidationError
from .logging_utils import EventLogger, LogFormat, create_event_logger
from .reader import RiffReader
from .remote import is_url, open_url
from .transport import ByteSource
from .wave import WaveFormat, read_format, read_wave, write_pcm
from .writer import RiffWriter

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_CORRUPTED = 3
EXIT_IO = 4
EXIT_DEVICE = 5


def create_parser() -> argparse.ArgumentParser:
    """Create the top-level argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="riffa",
        description="Read, write and inspect RIFF containers (WAVE, WEBP, ...).",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Path to an optional configuration file (riffa.toml).",
    )
    parser.add_argument(
        "--json-log",
        action="store_true",
        help="Emit chunk events as JSON lines.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="riffa 0.1.0",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (repeatable).",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress non-essential log output.",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    inspect_parser = subparsers.add_parser("inspect", help="List the chunks of a RIFF file.")
    inspect_parser.add_argument("source", help="File path or http(s) URL.")
    inspect_parser.add_argument(
        "--preview-bytes",
        dest="preview_bytes",
        type=int,
        help="Bytes of each payload to show in hex (default 16).",
    )
    inspect_parser.add_argument(
        "--timeout",
        type=int,
        metavar="MS",
        help="Network timeout in milliseconds for URLs (default 10000).",
    )

    info_parser = subparsers.add_parser("info", help="Print the WAVE format of a file.")
    info_parser.add_argument("source", help="File path or http(s) URL.")
    info_parser.add_argument("--timeout", type=int, metavar="MS")

    pack_parser = subparsers.add_parser("pack", help="Wrap raw PCM audio into a WAVE file.")
    pack_parser.add_argument("raw", help="File holding raw little-endian PCM samples.")
    pack_parser.add_argument("output", help="WAVE file to create.")
    pack_parser.add_argument("--rate", type=int, help="Sample rate in Hz (default 44100).")
    pack_parser.add_argument("--channels", type=int, help="Channel count (default 2).")
    pack_parser.add_argument("--bits", type=int, help="Bits per sample (default 16).")

    copy_parser = subparsers.add_parser("copy", help="Rewrite a RIFF file chunk by chunk.")
    copy_parser.add_argument("source", help="File path or http(s) URL.")
    copy_parser.add_argument("output", help="Destination file.")
    copy_parser.add_argument("--timeout", type=int, metavar="MS")

    play_parser = subparsers.add_parser("play", help="Play a PCM WAVE file.")
    play_parser.add_argument("source", help="File path or http(s) URL.")
    play_parser.add_argument("--device", help="Output device name or index.")
    play_parser.add_argument("--blocksize", type=int, help="PortAudio block size (default 0).")
    play_parser.add_argument("--timeout", type=int, metavar="MS")

    return parser


def _configure_logging(verbosity: int, quiet: bool) -> None:
    """Configure root logger based on verbosity flags."""
    if quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
        if verbosity == 1:
            level = logging.INFO
        elif verbosity >= 2:
            level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    logger.debug("Logging configured (level=%s)", logging.getLevelName(level))


@contextmanager
def _open_source(location: str, config: AppConfig) -> Iterator[ByteSource]:
    if is_url(location):
        timeout_seconds = max(0.1, config.http_timeout_ms / 1000.0)
        with open_url(location, timeout=timeout_seconds, chunk_size=config.http_chunk_size) as source:
            yield source
        return

    with Path(location).open("rb") as fh:
        yield fh


def _format_preview(data: bytes, limit: int) -> str:
    if limit <= 0 or not data:
        return ""
    preview = data[:limit].hex(" ")
    return f"{preview} ..." if len(data) > limit else preview


def _cmd_inspect(args: argparse.Namespace, config: AppConfig, events: EventLogger) -> int:
    with _open_source(args.source, config) as source:
        reader = RiffReader(source)
        print(
            f"RIFF file type={reader.file_type.decode('latin-1')!r} "
            f"declared_size={reader.size}"
        )
        events.log("header", file_type=reader.file_type, size=reader.size)

        count = 0
        for index, chunk in enumerate(reader):
            count += 1
            line = (
                f"  {index:>3}. {chunk.identifier.decode('latin-1')!r} "
                f"size={chunk.size} wire={chunk.byte_length}"
            )
            preview = _format_preview(chunk.data, config.preview_bytes)
            if preview:
                line = f"{line} | {preview}"
            print(line)
            events.log(
                "chunk",
                index=index,
                identifier=chunk.identifier,
                size=chunk.size,
                wire_length=chunk.byte_length,
            )

        print(f"Chunks: {count} total | bytes_read={reader.bytes_read}")
    return EXIT_OK


def _cmd_info(args: argparse.Namespace, config: AppConfig, events: EventLogger) -> int:
    with _open_source(args.source, config) as source:
        reader = RiffReader(source)
        if reader.file_type != FILE_TYPE_WAVE:
            print(f"riffa: {args.source} is not a WAVE file (type {reader.file_type!r}).")
            return EXIT_USAGE
        fmt = read_format(reader)

    print(fmt.describe())
    print(f"Byte rate: {fmt.byte_rate} | Block align: {fmt.block_align}")
    events.log(
        "format",
        sample_rate=fmt.sample_rate,
        channels=fmt.channels,
        bits_per_sample=fmt.bits_per_sample,
        audio_format=int(fmt.audio_format),
    )
    return EXIT_OK


def _cmd_pack(args: argparse.Namespace, config: AppConfig, events: EventLogger) -> int:
    fmt = WaveFormat(
        sample_rate=config.default_sample_rate,
        channels=config.default_channels,
        bits_per_sample=config.default_bits_per_sample,
    ).validate()

    pcm = Path(args.raw).read_bytes()
    if len(pcm) % fmt.block_align != 0:
        logger.warning(
            "PCM length %s is not a multiple of the block alignment %s",
            len(pcm),
            fmt.block_align,
        )

    with Path(args.output).open("wb") as fh:
        writer = RiffWriter(fh, FILE_TYPE_WAVE)
        try:
            written = write_pcm(writer, fmt, pcm)
        finally:
            writer.close()

    print(f"Wrote {written} bytes of chunks to {args.output} ({fmt.describe()}).")
    events.log("packed", output=args.output, bytes_written=written, riff_size=writer.size)
    return EXIT_OK


def _cmd_copy(args: argparse.Namespace, config: AppConfig, events: EventLogger) -> int:
    total = 0
    with _open_source(args.source, config) as source, Path(args.output).open("wb") as fh:
        reader = RiffReader(source)
        writer = RiffWriter(fh, reader.file_type)
        try:
            for chunk in reader:
                total += writer.write_chunk(chunk)
                events.log("copied", identifier=chunk.identifier, size=chunk.size)
        finally:
            writer.close()

    print(f"Copied {total} bytes of chunks to {args.output}.")
    return EXIT_OK


def _cmd_play(args: argparse.Namespace, config: AppConfig, events: EventLogger) -> int:
    # Only load sounddevice when playing.
    from .playback import PlaybackEngine

    with _open_source(args.source, config) as source:
        fmt, chunks = read_wave(RiffReader(source))

    device: int | str | None = config.playback_device
    if isinstance(device, str) and device.isdigit():
        device = int(device)

    engine = PlaybackEngine(device=device, blocksize=config.playback_blocksize)
    engine.start(fmt)
    try:
        for chunk in chunks:
            if chunk.identifier != FOURCC_DATA:
                continue
            usable = len(chunk.data) - len(chunk.data) % fmt.block_align
            engine.submit(chunk.data[:usable])
            events.log("played", bytes=usable)
    finally:
        engine.flush_and_close()
    return EXIT_OK


COMMANDS = {
    "inspect": _cmd_inspect,
    "info": _cmd_info,
    "pack": _cmd_pack,
    "copy": _cmd_copy,
    "play": _cmd_play,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point invoked by the `riffa` console script."""
    parser = create_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose, args.quiet)

    if args.command is None:
        parser.print_help()
        return EXIT_USAGE

    try:
        config = load_config(args)
    except ValueError as exc:
        print(f"riffa: invalid configuration - {exc}")
        return EXIT_USAGE
    logger.debug("Loaded configuration: %s", config)

    events_logger = logging.getLogger("riffa.events")
    events = create_event_logger(events_logger, config.log_format)
    # JSON events are emitted regardless of -v.
    if events.log_format == LogFormat.JSON and not args.quiet:
        events_logger.setLevel(logging.INFO)
    else:
        events_logger.setLevel(logging.NOTSET)

    try:
        return COMMANDS[args.command](args, config, events)
    except CorruptedError as exc:
        logger.error("Corrupted RIFF data: %s", exc)
        print(f"riffa: corrupted RIFF data - {exc}")
        return EXIT_CORRUPTED
    except EOFError:
        logger.error("Unexpected end of stream")
        print("riffa: unexpected end of stream - no format chunk found.")
        return EXIT_CORRUPTED
    except (ValidationError, ClosedError) as exc:
        logger.error("Invalid request: %s", exc)
        print(f"riffa: {exc}")
        return EXIT_USAGE
    except AudioDeviceError as exc:
        logger.error("Playback failure: %s", exc)
        print(f"riffa: playback failed - {exc}")
        return EXIT_DEVICE
    except requests.RequestException as exc:
        logger.error("Network error: %s", exc)
        print(f"riffa: network error - {exc}")
        return EXIT_IO
    except OSError as exc:
        logger.error("I/O error: %s", exc)
        print(f"riffa: I/O error - {exc}")
        return EXIT_IO


if __name__ == "__main__":  # pragma: no cover - allows `python cli.py`
    raise SystemExit(main())
