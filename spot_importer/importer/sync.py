"""
Playlist sync: push grouped track URIs to the Spotify account.

Workflow:
    1. Fetch the account's playlists ONCE, before any change
    2. For each group, in first-seen order:
       a. Reuse the existing playlist with exactly the same name, or
          create a new private one
       b. Split the URIs into batches of at most 100 (Spotify rejects
          larger requests)
       c. Add the batches one after another, in order

The sync is strictly additive: nothing is removed or reordered remotely.
Any SpotifyError propagates and stops the sync; playlists and batches
already applied stay applied.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Sequence, TypeVar

from spot_importer.core.logger import get_logger
from spot_importer.core.progress import SyncProgressBar
from spot_importer.spotify.client import ADD_ITEMS_LIMIT, SpotifyClient

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class PlaylistSyncResult:
    """
    What happened to one playlist.

    Attributes:
        name: Playlist name.
        playlist_id: Spotify playlist ID that received the tracks.
        created: True if the playlist was created by this run.
        tracks_added: Number of URIs sent.
        batches: Number of "add items" requests made.
    """
    name: str
    playlist_id: str
    created: bool
    tracks_added: int
    batches: int


def chunked(items: Sequence[T], size: int = ADD_ITEMS_LIMIT) -> list[tuple[T, ...]]:
    """
    Partition a sequence into contiguous chunks of at most `size` items.

    The input is left untouched; order is preserved and every item
    appears in exactly one chunk.

    Example:
        [len(c) for c in chunked(range(250))]  # [100, 100, 50]

    Raises:
        ValueError: If size is smaller than 1.
    """
    if size < 1:
        raise ValueError(f"Chunk size must be positive, got {size}")
    return [tuple(items[i:i + size]) for i in range(0, len(items), size)]


def index_playlists_by_name(playlists: Sequence[Mapping[str, Any]]) -> dict[str, Mapping[str, Any]]:
    """
    Map exact playlist names to playlist objects.

    When the account has several playlists with the same name, the first
    one listed by Spotify is used.
    """
    index: dict[str, Mapping[str, Any]] = {}
    for playlist in playlists:
        name = playlist.get("name")
        if name is not None and name not in index:
            index[name] = playlist
    return index


def sync_playlists(
    client: SpotifyClient,
    user_id: str,
    groups: Mapping[str, Sequence[str]],
    batch_size: int = ADD_ITEMS_LIMIT,
    show_progress: bool = False
) -> list[PlaylistSyncResult]:
    """
    Create missing playlists and add the grouped tracks.

    Args:
        client: Spotify client.
        user_id: Owner of the playlists.
        groups: Playlist name -> track URIs, in the order to process.
        batch_size: URIs per request (1-100).
        show_progress: Render a Rich progress bar.

    Returns:
        One PlaylistSyncResult per group, in processing order.

    Raises:
        ValueError: If batch_size is outside 1..100.
        SpotifyError: On the first failed remote call.
    """
    if not 1 <= batch_size <= ADD_ITEMS_LIMIT:
        raise ValueError(f"batch_size must be between 1 and {ADD_ITEMS_LIMIT}, got {batch_size}")

    if not groups:
        logger.info("No resolved tracks to add")
        return []

    existing = index_playlists_by_name(client.user_playlists(user_id))
    logger.debug(f"Account has {len(existing)} distinct playlist names")

    results: list[PlaylistSyncResult] = []
    total = sum(len(uris) for uris in groups.values())

    with SyncProgressBar(total=total, enabled=show_progress) as progress:
        for name, uris in groups.items():
            logger.info(f"Importing playlist '{name}': {len(uris)} tracks")

            playlist = existing.get(name)
            created = playlist is None
            if created:
                logger.info(f"Creating playlist '{name}'")
                playlist = client.create_playlist(user_id, name, public=False)
                existing[name] = playlist
                progress.playlist_created()

            batches = chunked(uris, batch_size)
            for batch in batches:
                client.add_tracks(playlist["id"], list(batch))
                progress.update(added=len(batch))

            results.append(PlaylistSyncResult(
                name=name,
                playlist_id=playlist["id"],
                created=created,
                tracks_added=len(uris),
                batches=len(batches),
            ))

    return results
