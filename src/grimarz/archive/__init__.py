from grimarz.archive.arz_reader import (
    ArzError,
    ArzHeader,
    ArzIndex,
    ArzIOError,
    ArzRecord,
    InvalidStringIndexError,
    StringLengthLimitError,
    TableSizeMismatchError,
    UnsupportedFormatError,
    parse_arz_index,
)

__all__ = [
    "ArzError",
    "ArzHeader",
    "ArzIOError",
    "ArzIndex",
    "ArzRecord",
    "InvalidStringIndexError",
    "StringLengthLimitError",
    "TableSizeMismatchError",
    "UnsupportedFormatError",
    "parse_arz_index",
]
