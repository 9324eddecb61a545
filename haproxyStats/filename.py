"""
Capture metadata embedded in statistics export filenames.

Exports are named <unix-epoch>.<hostname>.<anything>.csv; the epoch is
the capture time and the hostname identifies the load balancer.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Union

from pydantic import BaseModel, ConfigDict

from haproxyStats.errors import FilenameFormatError

ISO_FORMAT = "%Y-%m-%dT%H:%M:%S.000Z"
INDEX_DATE_FORMAT = "%Y.%m.%d"


class CaptureMetadata(BaseModel):
    """Capture time and source host of one statistics export."""
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    host: str

    @property
    def iso_timestamp(self) -> str:
        """Timestamp rendered with millisecond precision and a Z suffix."""
        return self.timestamp.strftime(ISO_FORMAT)

    def date_index(self, prefix: str) -> str:
        """Daily index name, e.g. stats-2024.03.01."""
        return f"{prefix}-{self.timestamp.strftime(INDEX_DATE_FORMAT)}"


def parse_capture_filename(path: Union[str, Path]) -> CaptureMetadata:
    """
    Extract the capture timestamp and source host from a filename.

    Args:
        path: Path to the statistics export

    Returns:
        CaptureMetadata for the file

    Raises:
        FilenameFormatError: If the name has fewer than three components
            or the first one is not an integer timestamp
    """
    name = Path(path).name
    parts = name.split(".")
    if len(parts) < 3:
        raise FilenameFormatError(
            f"Filename '{name}' must look like <timestamp>.<hostname>.<name>.csv",
            file_name=name
        )

    epoch, host = parts[0], parts[1]
    try:
        seconds = int(epoch, 10)
        timestamp = datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (ValueError, OverflowError, OSError) as e:
        raise FilenameFormatError(
            f"Filename '{name}' does not start with a Unix timestamp: {epoch!r}",
            file_name=name
        ) from e

    return CaptureMetadata(timestamp=timestamp, host=host)
