"""
Track resolution: map a local record to a Spotify track URI.

Policy:
    One search per unresolved record, first result wins. There is no
    scoring or disambiguation between results; a record whose search
    returns nothing becomes a ResolutionFailure and ends up in the
    failed checkpoint for manual correction.

    Records that already carry a URI (from a previous run's found file)
    are never searched again.

The resolver is stateless and returns outcomes instead of mutating the
record. SpotifyError from the search call is not caught here: a remote
failure ends the run.
"""

from dataclasses import dataclass, replace
from typing import Union

from spot_importer.core.logger import get_logger
from spot_importer.importer.records import TrackRecord
from spot_importer.spotify.client import SpotifyClient

logger = get_logger(__name__)


@dataclass(frozen=True)
class Resolved:
    """
    A record with a Spotify URI.

    Attributes:
        record: The record, with remote_id set.
        cached: True if the URI came from the input file (no search made).
    """
    record: TrackRecord
    cached: bool = False

    @property
    def remote_id(self) -> str:
        return self.record.remote_id


@dataclass(frozen=True)
class ResolutionFailure:
    """
    A record whose search returned no result.

    Attributes:
        record: The unchanged record (remote_id empty).
        query: The search query that was sent.
    """
    record: TrackRecord
    query: str


Outcome = Union[Resolved, ResolutionFailure]


def build_query(name: str, artist: str = "") -> str:
    """
    Build a field-qualified Spotify search query.

    Examples:
        build_query("Song A", "Artist X")  # "track:Song A artist:Artist X"
        build_query("Song B")              # "track:Song B"
    """
    query = f"track:{name}"
    if artist:
        query += f" artist:{artist}"
    return query


def resolve_record(client: SpotifyClient, record: TrackRecord) -> Outcome:
    """
    Resolve one record.

    Args:
        client: Spotify client used for the search.
        record: Record to resolve.

    Returns:
        Resolved (cached or searched) or ResolutionFailure.

    Raises:
        SpotifyError: If the search request itself fails.
    """
    if record.is_resolved:
        return Resolved(record=record, cached=True)

    query = build_query(record.name, record.artist)
    items = client.search_tracks(query)

    if not items:
        return ResolutionFailure(record=record, query=query)

    match = items[0]
    uri = match.get("uri") or match.get("id")
    if not uri:
        # A result without identifier cannot be added to a playlist
        logger.debug(f"First search result for '{query}' has no URI: {match}")
        return ResolutionFailure(record=record, query=query)

    logger.debug(f"'{query}' -> {match.get('name', '?')} ({uri})")
    return Resolved(record=replace(record, remote_id=uri), cached=False)
