"""Command-line entry point: list the records of an .arz database."""

import argparse
import logging
import sys
from collections.abc import Sequence

from grimarz import __version__
from grimarz.archive.arz_reader import (
    ArzError,
    ArzIndex,
    InvalidStringIndexError,
    UnsupportedFormatError,
    parse_arz_index,
)
from grimarz.config import settings

logger = logging.getLogger(__name__)

ERROR_IO = "Failed to open the given file for reading."
ERROR_INVALID_HEADER = "Invalid file header, cannot read the given file as an ARZ database!"

EXIT_ERROR = 1
EXIT_IO = 2
EXIT_INVALID_HEADER = 3
EXIT_INVALID_STRING_INDEX = 4


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="grimarz",
        description="Grim Dawn Database File Extractor",
    )
    parser.add_argument("input", metavar="INPUT", help="Sets the input file to use")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _print_index(index: ArzIndex) -> None:
    for record in index:
        print(
            f"{record.record_type}\t{record.path}\t"
            f"offset={record.offset} size={record.compressed_size}/{record.uncompressed_size}"
        )
    print(f"{len(index)} records")


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    _configure_logging("DEBUG" if args.verbose else settings.log_level)

    try:
        index = parse_arz_index(args.input, settings)
    except UnsupportedFormatError as exc:
        logger.debug("%s", exc)
        print(ERROR_INVALID_HEADER, file=sys.stderr)
        return EXIT_INVALID_HEADER
    except InvalidStringIndexError as exc:
        print(f"Record references missing string #{exc.index}: {exc}", file=sys.stderr)
        return EXIT_INVALID_STRING_INDEX
    except ArzError as exc:
        print(f"Failed to read {args.input}: {exc}", file=sys.stderr)
        return EXIT_ERROR
    except OSError as exc:
        logger.debug("Open failed for %s: %s", args.input, exc)
        print(ERROR_IO, file=sys.stderr)
        return EXIT_IO

    _print_index(index)
    return 0


if __name__ == "__main__":
    sys.exit(main())
