"""
Checkpoint writer: the found/failed record files of a run.

For an input file `<dir>/B.csv` a run writes, next to it:

    B.found.csv   every record that has a Spotify URI (feed it back in
                  and no search is needed)
    B.failed.csv  every record without a match, URI column empty; fix
                  names/artists by hand and run again with this file
                  (written only if something failed)

Both files start with the schema header row (see records.py) and are
written to a temporary sibling first, then moved into place, so an
interrupted write never leaves a truncated checkpoint behind.
"""

import csv
import os
from pathlib import Path
from typing import Iterable

from spot_importer.core.exceptions import CheckpointError
from spot_importer.core.logger import get_logger
from spot_importer.importer.grouping import PlaylistGrouping
from spot_importer.importer.records import TrackRecord, schema_header

logger = get_logger(__name__)


FOUND_SUFFIX = ".found.csv"
FAILED_SUFFIX = ".failed.csv"


def checkpoint_paths(input_path: Path) -> tuple[Path, Path]:
    """
    Return (found_path, failed_path) for an input file.

    Example:
        checkpoint_paths(Path("music/tracks.csv"))
        # (Path("music/tracks.found.csv"), Path("music/tracks.failed.csv"))
    """
    base = input_path.stem
    return (
        input_path.with_name(base + FOUND_SUFFIX),
        input_path.with_name(base + FAILED_SUFFIX),
    )


def write_checkpoint(
    path: Path,
    records: Iterable[TrackRecord],
    include_remote_id: bool = True
) -> int:
    """
    Write records to a checkpoint file atomically.

    Args:
        path: Destination file.
        records: Records to write, in order.
        include_remote_id: False blanks the URI column (failed file).

    Returns:
        Number of records written.

    Raises:
        CheckpointError: If the file cannot be written.
    """
    tmp_path = path.with_name(path.name + ".tmp")
    count = 0

    try:
        with open(tmp_path, "w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(schema_header())
            for record in records:
                writer.writerow(record.to_row(include_remote_id=include_remote_id))
                count += 1
            f.flush()
            os.fsync(f.fileno())
        tmp_path.replace(path)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise CheckpointError(
            f"Cannot write checkpoint {path}: {e}",
            details={"path": str(path), "original_error": str(e)}
        ) from e

    logger.debug(f"Wrote {count} records to {path}")
    return count


def write_checkpoints(input_path: Path, grouping: PlaylistGrouping) -> tuple[Path, Path | None]:
    """
    Write the found file and, if needed, the failed file for a run.

    Args:
        input_path: The run's input file (determines output names).
        grouping: The run's grouping (resolved and failed records).

    Returns:
        (found_path, failed_path); failed_path is None when nothing failed.

    Raises:
        CheckpointError: If either file cannot be written.
    """
    found_path, failed_path = checkpoint_paths(input_path)

    write_checkpoint(found_path, grouping.resolved)
    logger.info(f"Wrote {len(grouping.resolved)} resolved tracks to {found_path}")

    if not grouping.failed:
        return found_path, None

    write_checkpoint(
        failed_path,
        (failure.record for failure in grouping.failed),
        include_remote_id=False
    )
    logger.info(f"Wrote {len(grouping.failed)} failed tracks to {failed_path}")
    return found_path, failed_path
