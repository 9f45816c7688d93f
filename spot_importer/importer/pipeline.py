"""
Import pipeline: source file -> Spotify playlists -> checkpoint files.

Steps:
    1. Load records from the input file
    2. Resolve each record in source order (checkpoint hit or one search),
       folding outcomes into the playlist grouping as they arrive
    3. Sync the grouping to the account (create missing playlists, add
       tracks in batches of at most 100)
    4. Write B.found.csv and, if needed, B.failed.csv

run_import() never lets an importer error escape: it returns an
ImportResult whose `error` holds the exception that ended the run, and
the caller decides how to exit. When the run stops before step 4, no
checkpoint is written and the original input is still the file to
re-run with.
"""

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterable, Iterator, Sequence

from spot_importer.core.config import DEFAULT_PLAYLIST, MAX_BATCH_SIZE
from spot_importer.core.exceptions import SpotImporterError
from spot_importer.core.logger import (
    format_resolved_message,
    format_summary_message,
    get_logger,
    log_resolution_failure,
)
from spot_importer.core.progress import ResolveProgressBar
from spot_importer.importer.checkpoint import write_checkpoints
from spot_importer.importer.grouping import PlaylistGrouping, group_outcomes
from spot_importer.importer.records import TrackRecord, load_records
from spot_importer.importer.resolver import Outcome, ResolutionFailure, resolve_record
from spot_importer.importer.sync import PlaylistSyncResult, sync_playlists
from spot_importer.spotify.client import SpotifyClient

logger = get_logger(__name__)


@dataclass(frozen=True)
class ImportResult:
    """
    Outcome of one import run.

    Attributes:
        input_path: The file the run read.
        records: Number of valid records loaded.
        searched: Records resolved by a search in this run.
        cached: Records that already had a URI.
        failed: Records with no match.
        playlists: Per-playlist sync results.
        found_path: Resolved checkpoint, None if not written.
        failed_path: Failed checkpoint, None if not written.
        error: The error that ended the run, None on success.
    """
    input_path: Path
    records: int = 0
    searched: int = 0
    cached: int = 0
    failed: int = 0
    playlists: tuple[PlaylistSyncResult, ...] = ()
    found_path: Path | None = None
    failed_path: Path | None = None
    error: SpotImporterError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def resolved(self) -> int:
        return self.searched + self.cached


def resolve_all(
    client: SpotifyClient,
    records: Sequence[TrackRecord],
    show_progress: bool = False
) -> Iterator[Outcome]:
    """
    Lazily resolve records in order, logging each outcome.

    Yields:
        One outcome per record.

    Raises:
        SpotifyError: From a failed search (ends iteration).
    """
    with ResolveProgressBar(total=len(records), enabled=show_progress) as progress:
        for record in records:
            outcome = resolve_record(client, record)

            if isinstance(outcome, ResolutionFailure):
                log_resolution_failure(logger, record.name, record.artist, outcome.query)
                progress.update(resolved=False)
            else:
                if not outcome.cached:
                    logger.debug(format_resolved_message(record.artist, record.name, outcome.remote_id))
                progress.update(resolved=True, cached=outcome.cached)

            yield outcome


def _count_cached(records: Iterable[TrackRecord]) -> int:
    return sum(1 for record in records if record.is_resolved)


def log_summary(result: ImportResult) -> None:
    """Log the end-of-run summary for a completed run."""
    if result.failed:
        logger.warning(
            f"Failed imports: {result.failed}. Correct the names/artists in "
            f"{result.failed_path} and run again with that file."
        )
    else:
        logger.info(f"All {result.resolved} tracks imported successfully")


def run_import(
    client: SpotifyClient,
    input_path: Path,
    default_playlist: str = DEFAULT_PLAYLIST,
    user_id: str | None = None,
    batch_size: int = MAX_BATCH_SIZE,
    show_progress: bool = False
) -> ImportResult:
    """
    Run the full import for one record file.

    Args:
        client: Authenticated Spotify client.
        input_path: Source record file or a previous checkpoint.
        default_playlist: Playlist every track is added to.
        user_id: Playlist owner; the authenticated user when None.
        batch_size: URIs per "add items" request (1-100).
        show_progress: Render Rich progress bars.

    Returns:
        ImportResult. Check `ok`; on failure `error` holds the cause.
    """
    result = ImportResult(input_path=input_path)

    try:
        # 1. Load
        records = load_records(input_path, default_playlist)
        cached = _count_cached(records)
        result = replace(result, records=len(records), cached=cached)
        logger.info(f"{cached} of {len(records)} tracks already resolved")

        # 2. Resolve + group
        grouping: PlaylistGrouping = group_outcomes(resolve_all(client, records, show_progress))
        result = replace(
            result,
            searched=len(grouping.resolved) - cached,
            failed=len(grouping.failed),
        )
        logger.info(format_summary_message(result.searched, cached, result.failed))

        # 3. Sync
        synced: list[PlaylistSyncResult] = []
        if grouping.groups:
            owner = user_id or client.current_user_id()
            synced = sync_playlists(
                client,
                owner,
                grouping.groups,
                batch_size=batch_size,
                show_progress=show_progress,
            )
        else:
            logger.info("No resolved tracks to add")
        result = replace(result, playlists=tuple(synced))

        # 4. Checkpoints
        found_path, failed_path = write_checkpoints(input_path, grouping)
        result = replace(result, found_path=found_path, failed_path=failed_path)

    except SpotImporterError as e:
        logger.error(f"Import stopped: {e.message}")
        if e.details:
            logger.debug(f"Details: {e.details}")
        return replace(result, error=e)

    log_summary(result)
    return result
