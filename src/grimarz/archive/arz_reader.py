"""Reader for Grim Dawn .arz database files.

Reads only the header, string table and record table to build the
index of database records.  Record payloads are never decompressed.

Layout (all integers little-endian):
  header        2x uint16 (id, version) + 5x uint32
  string table  uint32 count, then count x (uint32 length + UTF-8 bytes)
  record table  entry_count x (uint32 path index, uint32 type length +
                UTF-8 bytes, 3x uint32 offset/sizes, uint64 file time)
"""

from __future__ import annotations

import logging
import struct
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, overload

from grimarz.config import Settings

logger = logging.getLogger(__name__)

ARZ_ID = 2
ARZ_VERSION = 3
HEADER_SIZE = 24

# struct formats (little-endian)
_HEADER_FMT = "<HHIIIII"
_U32 = struct.Struct("<I")
_RECORD_SIZES = struct.Struct("<IIIQ")  # offset, compressed, uncompressed, file time


class ArzError(Exception):
    """Base class for failures while decoding an .arz index."""


class UnsupportedFormatError(ArzError):
    def __init__(self, arz_id: int, version: int) -> None:
        self.id = arz_id
        self.version = version
        super().__init__(
            f"Unsupported ARZ format: id={arz_id}, version={version} "
            f"(expected id={ARZ_ID}, version={ARZ_VERSION})"
        )


class InvalidStringIndexError(ArzError):
    def __init__(self, index: int, pool_size: int) -> None:
        self.index = index
        self.pool_size = pool_size
        super().__init__(f"Invalid string index {index} (string table has {pool_size} entries)")


class ArzIOError(ArzError):
    pass


class TableSizeMismatchError(ArzError):
    def __init__(self, table: str, expected: int, actual: int) -> None:
        self.table = table
        self.expected = expected
        self.actual = actual
        super().__init__(f"{table} table size mismatch: header says {expected}, read {actual}")


class StringLengthLimitError(ArzError):
    def __init__(self, what: str, length: int, limit: int) -> None:
        self.length = length
        self.limit = limit
        super().__init__(f"{what} length {length} exceeds the configured limit of {limit} bytes")


@dataclass(frozen=True, slots=True)
class ArzHeader:
    id: int
    version: int
    record_table_start: int
    record_table_size: int
    record_table_entry_count: int
    string_table_start: int
    string_table_size: int


@dataclass(frozen=True, slots=True)
class ArzRecord:
    path: str
    record_type: str
    offset: int
    compressed_size: int
    uncompressed_size: int
    file_time: int  # uint64 Windows FILETIME


def _read_exact(stream: BinaryIO, size: int, what: str) -> bytes:
    try:
        data = stream.read(size)
    except OSError as exc:
        raise ArzIOError(f"Failed to read {what}: {exc}") from exc
    if len(data) < size:
        raise ArzIOError(f"{what} truncated: got {len(data)} bytes, expected {size}")
    return data


def _seek(stream: BinaryIO, offset: int, what: str) -> None:
    try:
        stream.seek(offset)
    except OSError as exc:
        raise ArzIOError(f"Failed to seek to {what} at {offset}: {exc}") from exc


def _read_u32(stream: BinaryIO, what: str) -> int:
    return _U32.unpack(_read_exact(stream, _U32.size, what))[0]


def _read_string(stream: BinaryIO, what: str, max_length: int | None) -> str:
    """Read a uint32 length-prefixed string, replacing invalid UTF-8."""
    length = _read_u32(stream, f"{what} length")
    if max_length is not None and length > max_length:
        raise StringLengthLimitError(what, length, max_length)
    return _read_exact(stream, length, what).decode("utf-8", errors="replace")


def _library_settings() -> Settings:
    # Environment variables apply, a .env in the working directory does not.
    return Settings(_env_file=None)


def _tell(stream: BinaryIO) -> int:
    try:
        return stream.tell()
    except OSError as exc:
        raise ArzIOError(f"Failed to query stream position: {exc}") from exc


def _check_table_size(table: str, expected: int, start: int, end: int) -> None:
    if end - start != expected:
        raise TableSizeMismatchError(table, expected, end - start)


def read_header(stream: BinaryIO) -> ArzHeader:
    """Read and validate the 24-byte header at the current position."""
    data = _read_exact(stream, HEADER_SIZE, "Header")
    (
        arz_id,
        version,
        record_table_start,
        record_table_size,
        record_table_entry_count,
        string_table_start,
        string_table_size,
    ) = struct.unpack(_HEADER_FMT, data)
    if arz_id != ARZ_ID or version != ARZ_VERSION:
        raise UnsupportedFormatError(arz_id, version)
    header = ArzHeader(
        id=arz_id,
        version=version,
        record_table_start=record_table_start,
        record_table_size=record_table_size,
        record_table_entry_count=record_table_entry_count,
        string_table_start=string_table_start,
        string_table_size=string_table_size,
    )
    logger.debug("ARZ header: %s", header)
    return header


def read_string_table(
    stream: BinaryIO, header: ArzHeader, settings: Settings | None = None
) -> list[str]:
    """Read the interned string pool; list position is the string index.

    Without *settings*, only ``GRIMARZ_*`` environment variables are
    consulted.
    """
    settings = settings or _library_settings()
    _seek(stream, header.string_table_start, "string table")
    count = _read_u32(stream, "String table count")
    strings: list[str] = []
    for _ in range(count):
        strings.append(_read_string(stream, "String", settings.max_string_length))

    if settings.verify_table_sizes:
        _check_table_size(
            "String", header.string_table_size, header.string_table_start, _tell(stream)
        )
    logger.debug("Read %d strings at offset %d", count, header.string_table_start)
    return strings


def read_record_table(
    stream: BinaryIO,
    header: ArzHeader,
    strings: list[str],
    settings: Settings | None = None,
) -> list[ArzRecord]:
    """Read every record, resolving each path against *strings*.

    Without *settings*, only ``GRIMARZ_*`` environment variables are
    consulted.

    Raises:
        InvalidStringIndexError: If a path index is not below ``len(strings)``.
    """
    settings = settings or _library_settings()
    _seek(stream, header.record_table_start, "record table")
    records: list[ArzRecord] = []
    for _ in range(header.record_table_entry_count):
        path_index = _read_u32(stream, "Record path index")
        if path_index >= len(strings):
            raise InvalidStringIndexError(path_index, len(strings))
        record_type = _read_string(stream, "Record type", settings.max_string_length)
        offset, compressed_size, uncompressed_size, file_time = _RECORD_SIZES.unpack(
            _read_exact(stream, _RECORD_SIZES.size, "Record")
        )
        records.append(
            ArzRecord(
                path=strings[path_index],
                record_type=record_type,
                offset=offset,
                compressed_size=compressed_size,
                uncompressed_size=uncompressed_size,
                file_time=file_time,
            )
        )

    if settings.verify_table_sizes:
        _check_table_size(
            "Record", header.record_table_size, header.record_table_start, _tell(stream)
        )
    return records


class ArzIndex:
    """Parsed index of an .arz database.

    The whole index is decoded in the constructor; any failure propagates
    and no instance is returned.  The stream is left open for the caller.
    """

    def __init__(self, stream: BinaryIO, settings: Settings | None = None) -> None:
        settings = settings or _library_settings()
        _seek(stream, 0, "header")
        header = read_header(stream)
        strings = read_string_table(stream, header, settings)
        records = read_record_table(stream, header, strings, settings)
        self._header = header
        self._records: tuple[ArzRecord, ...] = tuple(records)
        logger.info("Indexed %d records (%d strings)", len(self._records), len(strings))

    @property
    def header(self) -> ArzHeader:
        return self._header

    @property
    def records(self) -> tuple[ArzRecord, ...]:
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ArzRecord]:
        return iter(self._records)

    @overload
    def __getitem__(self, index: int) -> ArzRecord: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[ArzRecord, ...]: ...

    def __getitem__(self, index: int | slice) -> ArzRecord | tuple[ArzRecord, ...]:
        return self._records[index]

    def __repr__(self) -> str:
        return f"ArzIndex(records={len(self._records)})"


def parse_arz_index(file_path: str | Path, settings: Settings | None = None) -> ArzIndex:
    """Open an .arz file, build its index and close the file."""
    file_path = Path(file_path)
    with file_path.open("rb") as f:
        return ArzIndex(f, settings)
