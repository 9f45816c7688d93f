"""
Track records and the source file loader.

A record file is a CSV with four columns and no required header:

    name, artist, playlists ('|' separated), spotify URI (empty if unresolved)

The same format is used for the hand-made / generated input file and for
the found/failed checkpoint files a run writes, so a checkpoint can be
fed straight back in as the next run's input.

Schema Versions:
    Checkpoints written by spot-importer start with a header row:

        #spot-importer-checkpoint,v1,,

    Files without a header are read as version 1. A header naming a
    version this release does not know raises CheckpointSchemaError, so a
    newer checkpoint is never silently misread by an older release.
"""

import csv
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from spot_importer.core.exceptions import (
    CheckpointSchemaError,
    InvalidRecordError,
    MalformedRecordError,
    RecordFileError,
)
from spot_importer.core.logger import get_logger

logger = get_logger(__name__)


PLAYLIST_SEPARATOR = "|"
SCHEMA_MARKER = "#spot-importer-checkpoint"
SCHEMA_VERSION = 1

# Number of columns per schema version
SCHEMA_COLUMNS = {1: 4}


@dataclass(frozen=True)
class TrackRecord:
    """
    One local track to import.

    Attributes:
        name: Track title. Never empty.
        artist: Artist name, empty string if unknown.
        playlists: Destination playlist names, unique, in first-seen
                   order, always including the default playlist once.
        remote_id: Spotify track URI, empty until resolved.
        line: 1-based row number in the source file (diagnostics only).

    Example:
        TrackRecord(
            name="Song A",
            artist="Artist X",
            playlists=("Rock", "imported"),
            remote_id="spotify:track:4cOdK2wGLETKBW3PvgPWqT",
        )
    """
    name: str
    artist: str = ""
    playlists: tuple[str, ...] = ()
    remote_id: str = ""
    line: int | None = None

    @property
    def is_resolved(self) -> bool:
        return bool(self.remote_id)

    def to_row(self, include_remote_id: bool = True) -> list[str]:
        """Serialize to the 4-column record file layout."""
        return [
            self.name,
            self.artist,
            PLAYLIST_SEPARATOR.join(self.playlists),
            self.remote_id if include_remote_id else "",
        ]


def unique(items: Iterable[str]) -> tuple[str, ...]:
    """Deduplicate preserving first occurrence."""
    return tuple(dict.fromkeys(items))


def parse_playlists(field: str, default_playlist: str) -> tuple[str, ...]:
    """
    Parse a '|' separated playlist field.

    Entries are trimmed, empty ones dropped, duplicates removed keeping
    the first occurrence, and the default playlist appended unless it is
    already listed.

    Example:
        parse_playlists("Rock|imported|imported", "imported")
        # ("Rock", "imported")
    """
    names = (name.strip() for name in field.split(PLAYLIST_SEPARATOR))
    return unique([*(name for name in names if name), default_playlist])


def parse_row(row: Sequence[str], default_playlist: str, line: int | None = None) -> TrackRecord:
    """
    Turn one 4-field row into a TrackRecord.

    Raises:
        MalformedRecordError: If the row does not have exactly 4 fields.
        InvalidRecordError: If the name is empty after trimming.
    """
    expected = SCHEMA_COLUMNS[SCHEMA_VERSION]
    if len(row) != expected:
        raise MalformedRecordError(
            f"Row {line} has {len(row)} fields, expected {expected}",
            details={"line": line, "fields": len(row), "row": list(row)}
        )

    name, artist, playlists, remote_id = (field.strip() for field in row)
    if not name:
        raise InvalidRecordError(
            f"Row {line} has an empty track name",
            details={"line": line, "row": list(row)}
        )

    return TrackRecord(
        name=name,
        artist=artist,
        playlists=parse_playlists(playlists, default_playlist),
        remote_id=remote_id,
        line=line,
    )


def schema_header() -> list[str]:
    """Header row written at the top of checkpoint files."""
    return [SCHEMA_MARKER, f"v{SCHEMA_VERSION}", "", ""]


def is_schema_header(row: Sequence[str]) -> bool:
    return bool(row) and row[0].strip() == SCHEMA_MARKER


def _read_schema_version(row: Sequence[str], line: int) -> int:
    version_field = row[1].strip() if len(row) > 1 else ""
    version_text = version_field[1:] if version_field.startswith("v") else ""

    if not version_text.isdigit():
        raise CheckpointSchemaError(
            f"Row {line} has a malformed schema header",
            details={"line": line, "row": list(row)}
        )

    version = int(version_text)
    if version not in SCHEMA_COLUMNS:
        raise CheckpointSchemaError(
            f"Unsupported checkpoint schema version {version} "
            f"(this release reads up to v{SCHEMA_VERSION})",
            details={"line": line, "version": version}
        )
    return version


def parse_rows(rows: Iterable[Sequence[str]], default_playlist: str) -> list[TrackRecord]:
    """
    Parse CSV rows into records.

    Args:
        rows: Rows as produced by csv.reader.
        default_playlist: Playlist added to every record.

    Returns:
        Records in source order.

    Raises:
        RecordError subclasses on the first bad row (the run aborts).
    """
    records: list[TrackRecord] = []
    first_data_row = True

    for line, row in enumerate(rows, start=1):
        if not row or (len(row) == 1 and not row[0].strip()):
            # Blank line
            continue

        if first_data_row and is_schema_header(row):
            _read_schema_version(row, line)
            first_data_row = False
            continue

        first_data_row = False
        records.append(parse_row(row, default_playlist, line))

    return records


def load_records(path: Path, default_playlist: str) -> list[TrackRecord]:
    """
    Load a record file.

    Args:
        path: CSV record file (source file or checkpoint).
        default_playlist: Playlist added to every record.

    Returns:
        Records in file order.

    Raises:
        RecordFileError: If the file cannot be read.
        MalformedRecordError / InvalidRecordError / CheckpointSchemaError:
            On the first bad row.
    """
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            records = parse_rows(csv.reader(f), default_playlist)
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise RecordFileError(
            f"Cannot read record file {path}: {e}",
            details={"path": str(path), "original_error": str(e)}
        ) from e

    logger.info(f"Loaded {len(records)} records from {path}")
    return records
