#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
StatsConverter:
Turn one HAProxy statistics export into typed records and hand them to a sink.

Uses Python 3.10+ type annotations.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from haproxyStats.config import CSV_ENCODING, RunConfig
from haproxyStats.filename import CaptureMetadata, parse_capture_filename
from haproxyStats.reader import StatsReader
from haproxyStats.records import RecordMetadata, TypedRecord, build_record
from haproxyStats.sink import DocumentSink, build_sink

# Configure logger
logger = logging.getLogger(__name__)


@dataclass
class ConversionSummary:
    """Counts for one converted file."""
    rows: int = 0
    skipped: int = 0
    delivered: int = 0
    failed: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "rows": self.rows,
            "skipped": self.skipped,
            "delivered": self.delivered,
            "failed": self.failed,
        }


class StatsConverter:
    """
    Converts statistics exports to documents for the configured sink.
    """

    def __init__(self, config: Optional[RunConfig] = None, encoding: str = CSV_ENCODING, strict: bool = False):
        """
        Initialize the converter.

        Args:
            config: Run configuration (defaults to printing flat documents)
            encoding: File encoding of the exports
            strict: Fail on malformed rows instead of skipping them
        """
        self.config = config or RunConfig()
        self.encoding = encoding
        self.strict = strict

    def _open(self, csv_path: Path):
        if not csv_path.exists():
            raise FileNotFoundError(f"Statistics file not found: {csv_path}")
        return csv_path.open(encoding=self.encoding, newline="")

    def iter_records(self, csv_path: Union[str, Path]) -> Iterator[TypedRecord]:
        """
        Yield one typed record per data row of a statistics export.

        Raises:
            FilenameFormatError: If the filename carries no capture metadata
            FileNotFoundError: If the file does not exist
            OSError: If the file cannot be opened
        """
        csv_path = Path(csv_path)
        capture = parse_capture_filename(csv_path)
        with self._open(csv_path) as f:
            yield from self._typed_records(StatsReader(f), capture)

    def _typed_records(self, reader: StatsReader, capture: CaptureMetadata) -> Iterator[TypedRecord]:
        metadata = RecordMetadata.from_capture(capture)
        header = reader.header
        for _, values in reader.rows(strict=self.strict):
            yield build_record(header, values, metadata)

    def convert(self, csv_path: Union[str, Path], sink: Optional[DocumentSink] = None) -> ConversionSummary:
        """
        Convert a statistics export and deliver every record.

        Args:
            csv_path: Path to the export, named <timestamp>.<host>.<name>.csv
            sink: Optional sink (defaults to the one selected by the config)

        Returns:
            ConversionSummary with per-row counts

        Raises:
            FilenameFormatError: On a filename without capture metadata
            FileNotFoundError: If the file does not exist
            SchemaMismatchError: If the export lacks columns the output needs
        """
        csv_path = Path(csv_path)
        capture = parse_capture_filename(csv_path)
        summary = ConversionSummary()

        with self._open(csv_path) as f:
            sink = sink or build_sink(self.config, capture)
            reader = StatsReader(f)

            logger.info("Converting %s (host %s, captured %s)", csv_path.name, capture.host, capture.iso_timestamp)

            for record in self._typed_records(reader, capture):
                summary.rows += 1
                result = sink.send(record)
                if result is None or result.ok:
                    summary.delivered += 1
                else:
                    summary.failed += 1

            summary.skipped = reader.skipped

        logger.info(
            "Converted %s: %d rows, %d skipped, %d delivered, %d failed",
            csv_path.name, summary.rows, summary.skipped, summary.delivered, summary.failed
        )
        return summary
