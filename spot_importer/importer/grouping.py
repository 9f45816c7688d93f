"""
Playlist grouping: fold resolution outcomes into per-playlist URI lists.

group_outcomes() is pure: it reads the outcome sequence once, collects
into private lists, and freezes them into tuples and a read-only mapping
at the end. Nothing it returns can be changed by the caller, and the
cost is linear in the number of (track, playlist) pairs.

Ordering:
    - Playlists appear in the order their names are first seen.
    - URIs inside a playlist follow record order.
    - URIs are NOT deduplicated: two source rows resolving to the same
      track add it twice.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping

from spot_importer.importer.records import TrackRecord
from spot_importer.importer.resolver import Outcome, ResolutionFailure, Resolved


@dataclass(frozen=True)
class PlaylistGrouping:
    """
    Result of grouping a run's outcomes.

    Attributes:
        groups: Playlist name -> tuple of track URIs (read-only mapping).
        resolved: Records that have a URI, in processing order.
        failed: Failures, in processing order.
    """
    groups: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: MappingProxyType({}))
    resolved: tuple[TrackRecord, ...] = ()
    failed: tuple[ResolutionFailure, ...] = ()

    @property
    def total(self) -> int:
        return len(self.resolved) + len(self.failed)

    @property
    def track_count(self) -> int:
        """Number of URI additions the sync step will perform."""
        return sum(len(uris) for uris in self.groups.values())


def group_outcomes(outcomes: Iterable[Outcome]) -> PlaylistGrouping:
    """
    Reduce resolution outcomes to a PlaylistGrouping.

    Example:
        grouping = group_outcomes([
            Resolved(TrackRecord("Song A", "Artist X", ("Rock", "imported"), "T1")),
            Resolved(TrackRecord("Song B", "", ("imported",), "U2"), cached=True),
        ])
        dict(grouping.groups)
        # {"Rock": ("T1",), "imported": ("T1", "U2")}
    """
    groups: dict[str, list[str]] = {}
    resolved: list[TrackRecord] = []
    failed: list[ResolutionFailure] = []

    for outcome in outcomes:
        if isinstance(outcome, ResolutionFailure):
            failed.append(outcome)
            continue

        resolved.append(outcome.record)
        for playlist in outcome.record.playlists:
            groups.setdefault(playlist, []).append(outcome.remote_id)

    return PlaylistGrouping(
        groups=MappingProxyType({name: tuple(uris) for name, uris in groups.items()}),
        resolved=tuple(resolved),
        failed=tuple(failed),
    )


__all__ = ["PlaylistGrouping", "Resolved", "ResolutionFailure", "group_outcomes"]
