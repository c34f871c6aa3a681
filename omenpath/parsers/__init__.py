from omenpath.parsers.csv_source import (
    RawRow,
    RowSource,
    read_csv_headers,
    read_csv_rows,
    strip_preamble,
)
from omenpath.parsers.dek import read_dek_rows

__all__ = [
    "RawRow",
    "RowSource",
    "read_csv_headers",
    "read_csv_rows",
    "read_dek_rows",
    "strip_preamble",
]
