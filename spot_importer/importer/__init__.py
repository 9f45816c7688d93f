"""
Import pipeline for spot-importer.

    records     - TrackRecord and the source/checkpoint file loader
    resolver    - First-result Spotify search per unresolved record
    grouping    - Pure fold of outcomes into playlist -> URIs
    sync        - Create-if-absent playlists and batched track adds
    checkpoint  - B.found.csv / B.failed.csv writer
    pipeline    - run_import(), tying the steps together

Usage:
    from spot_importer.importer import run_import

    result = run_import(client, Path("tracks.csv"), default_playlist="imported")
    if not result.ok:
        print(result.error)
"""

from spot_importer.importer.checkpoint import checkpoint_paths, write_checkpoint, write_checkpoints
from spot_importer.importer.grouping import PlaylistGrouping, group_outcomes
from spot_importer.importer.pipeline import ImportResult, run_import
from spot_importer.importer.records import TrackRecord, load_records, parse_rows
from spot_importer.importer.resolver import ResolutionFailure, Resolved, build_query, resolve_record
from spot_importer.importer.sync import PlaylistSyncResult, chunked, sync_playlists

__all__ = [
    "ImportResult",
    "PlaylistGrouping",
    "PlaylistSyncResult",
    "ResolutionFailure",
    "Resolved",
    "TrackRecord",
    "build_query",
    "checkpoint_paths",
    "chunked",
    "group_outcomes",
    "load_records",
    "parse_rows",
    "resolve_record",
    "run_import",
    "sync_playlists",
    "write_checkpoint",
    "write_checkpoints",
]
