"""
StatsReader:
Read the header and data rows of an HAProxy CSV statistics export.

Every line of the export ends with a delimiter, so each row carries an
empty trailing column that is dropped here.
"""

import csv
import logging
from collections.abc import Iterator
from typing import Optional, TextIO

from haproxyStats.errors import MalformedRowError, SchemaMismatchError
from haproxyStats.records import METADATA_KEYS

# Configure logger
logger = logging.getLogger(__name__)

HEADER_MARKER = "# "

# Columns renamed so they cannot clash with injected metadata
RENAMED_COLUMNS = {"type": "htype"}


class StatsReader:
    """
    Reads rows of a statistics export from an open text stream.
    """

    def __init__(self, stream: TextIO):
        self._reader = csv.reader(stream)
        self._header: Optional[list[str]] = None
        self.skipped = 0

    @property
    def header(self) -> list[str]:
        """
        Column names, read from the first row on first access.

        Raises:
            SchemaMismatchError: If the stream is empty or the header is unusable
        """
        if self._header is None:
            self._header = self._read_header()
        return self._header

    def _read_header(self) -> list[str]:
        try:
            raw = next(self._reader)
        except StopIteration:
            raise SchemaMismatchError("Statistics export is empty, no header row found")

        names = list(raw[:-1])
        if names and names[0].startswith(HEADER_MARKER):
            names[0] = names[0][len(HEADER_MARKER):]
        names = [RENAMED_COLUMNS.get(name, name) for name in names]

        if not names:
            raise SchemaMismatchError("Statistics export header has no columns")

        reserved = [name for name in names if name in METADATA_KEYS]
        if reserved:
            raise SchemaMismatchError(
                f"Header columns collide with injected metadata: {', '.join(reserved)}",
                fields=reserved
            )

        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise SchemaMismatchError(
                f"Header repeats columns: {', '.join(duplicates)}",
                fields=duplicates
            )

        logger.debug("Read header with %d columns", len(names))
        return names

    def rows(self, strict: bool = False) -> Iterator[tuple[int, list[str]]]:
        """
        Yield (line number, values) for each data row.

        Blank lines are skipped without being reported. Rows whose length
        differs from the header are logged and skipped, or raised when strict.

        Args:
            strict: Raise on the first malformed row instead of skipping it

        Raises:
            MalformedRowError: In strict mode, for a row of the wrong length
        """
        header = self.header
        for row in self._reader:
            if is_blank(row):
                continue

            line_number = self._reader.line_num
            values = row[:-1]
            if len(values) != len(header):
                error = MalformedRowError(
                    f"Line {line_number}: expected {len(header)} values, found {len(values)}",
                    line_number=line_number,
                    expected=len(header),
                    actual=len(values)
                )
                if strict:
                    raise error
                logger.warning("Skipping malformed row: %s", error.message)
                self.skipped += 1
                continue

            yield line_number, values


def is_blank(row: list[str]) -> bool:
    return not row or (len(row) == 1 and not row[0].strip())
