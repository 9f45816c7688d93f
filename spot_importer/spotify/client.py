"""
Spotify API client for spot-importer.

This module wraps spotipy.Spotify and exposes only the calls the import
pipeline needs:

    - search_tracks(): field-qualified track search
    - user_playlists(): the account's playlists (all pages)
    - create_playlist(): create a (private) playlist
    - add_tracks(): append up to 100 track URIs to a playlist
    - current_user_id(): the authenticated user's ID

Every spotipy.SpotifyException and transport error is translated into
SpotifyError, so callers deal with a single remote-failure type. The
wrapper performs no retries of its own.

Usage:
    from spot_importer.spotify.auth import authenticate

    auth = authenticate(client_id, client_secret, redirect_uri, refresh_token)
    client = auth.client
    items = client.search_tracks("track:Song artist:Band")
"""

from typing import Any, Callable, TypeVar

import requests
import spotipy
from spotipy.oauth2 import SpotifyOauthError

from spot_importer.core.exceptions import AuthError, SpotifyError
from spot_importer.core.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# Spotify API limits
ADD_ITEMS_LIMIT = 100
PLAYLISTS_PAGE_LIMIT = 50


class SpotifyClient:
    """
    Spotify API client used by the import pipeline.

    Attributes:
        _spotify: The underlying spotipy.Spotify instance.
        search_limit: Number of search results requested per query.

    Rate Limiting:
        The spotipy instance is expected to be created with retries
        disabled (see spot_importer.spotify.auth); a 429 surfaces as a
        SpotifyError with is_rate_limit=True.

    Example:
        client = SpotifyClient(spotipy.Spotify(auth_manager=oauth))
        playlists = client.user_playlists(client.current_user_id())
    """

    def __init__(self, spotify_instance: spotipy.Spotify, search_limit: int = 1) -> None:
        """
        Args:
            spotify_instance: Authenticated spotipy.Spotify instance.
            search_limit: Results per search. Only the first result is
                          ever used, so one is enough.
        """
        self._spotify = spotify_instance
        self.search_limit = search_limit

    def _call(self, action: str, details: dict[str, Any], func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """
        Run a spotipy call, translating failures into SpotifyError.

        Args:
            action: Short description used in the error message
                    (e.g., "search tracks").
            details: Context attached to the raised error.
            func: The spotipy method to call.

        Raises:
            SpotifyError: On any Spotify or transport failure.
        """
        try:
            return func(*args, **kwargs)
        except spotipy.SpotifyException as e:
            status = e.http_status
            error_details = {**details, "http_status": status, "original_error": str(e)}
            if status == 429:
                raise SpotifyError(
                    f"Rate limited while trying to {action}",
                    details=error_details,
                    is_rate_limit=True,
                    http_status=status
                ) from e
            if status == 401:
                raise SpotifyError(
                    f"Authentication expired or invalid while trying to {action}",
                    details=error_details,
                    is_auth_error=True,
                    http_status=status
                ) from e
            raise SpotifyError(
                f"Failed to {action}: {e.msg}",
                details=error_details,
                http_status=status
            ) from e
        except SpotifyOauthError as e:
            # Token refresh inside spotipy failed (revoked or invalid refresh token)
            raise AuthError(
                f"Token refresh failed while trying to {action}: {e}",
                details={**details, "original_error": str(e)}
            ) from e
        except requests.exceptions.RequestException as e:
            raise SpotifyError(
                f"Network error while trying to {action}: {e}",
                details={**details, "original_error": str(e)}
            ) from e

    # =========================================================================
    # Search
    # =========================================================================

    def search_tracks(self, query: str) -> list[dict[str, Any]]:
        """
        Search the catalog for tracks.

        Args:
            query: Spotify search query, e.g. "track:Song artist:Band".

        Returns:
            Track objects in Spotify's relevance order (possibly empty).

        Raises:
            SpotifyError: If the request fails.
        """
        result = self._call(
            "search tracks",
            {"query": query},
            self._spotify.search,
            q=query,
            type="track",
            limit=self.search_limit,
        )
        return list(((result or {}).get("tracks") or {}).get("items") or [])

    # =========================================================================
    # User / Playlists
    # =========================================================================

    def current_user_id(self) -> str:
        """Return the ID of the authenticated user."""
        user = self._call("fetch current user", {}, self._spotify.current_user)
        if not user or not user.get("id"):
            raise SpotifyError("Spotify returned no current user", is_auth_error=True)
        return user["id"]

    def user_playlists(self, user_id: str) -> list[dict[str, Any]]:
        """
        Get ALL playlists of a user, handling pagination automatically.

        Args:
            user_id: Spotify user ID.

        Returns:
            Simplified playlist objects (each has at least 'id' and 'name'),
            in the order Spotify lists them.

        Raises:
            SpotifyError: If any page request fails.
        """
        all_items: list[dict[str, Any]] = []
        offset = 0

        while True:
            response = self._call(
                "fetch user playlists",
                {"user_id": user_id, "offset": offset},
                self._spotify.user_playlists,
                user_id,
                limit=PLAYLISTS_PAGE_LIMIT,
                offset=offset,
            )
            items = (response or {}).get("items") or []
            all_items.extend(item for item in items if item)

            if not response or response.get("next") is None:
                break
            offset += PLAYLISTS_PAGE_LIMIT

        logger.debug(f"Fetched {len(all_items)} playlists for user {user_id}")
        return all_items

    def create_playlist(self, user_id: str, name: str, public: bool = False) -> dict[str, Any]:
        """
        Create a playlist for a user.

        Args:
            user_id: Owner of the new playlist.
            name: Playlist name.
            public: Visibility. The importer always creates private playlists.

        Returns:
            The created playlist object (has 'id' and 'name').

        Raises:
            SpotifyError: If the request fails or returns no playlist ID.
        """
        playlist = self._call(
            "create playlist",
            {"user_id": user_id, "playlist_name": name},
            self._spotify.user_playlist_create,
            user_id,
            name,
            public=public,
        )
        if not playlist or not playlist.get("id"):
            raise SpotifyError(
                f"Spotify returned no ID for created playlist '{name}'",
                details={"playlist_name": name}
            )
        return playlist

    def add_tracks(self, playlist_id: str, items: list[str]) -> None:
        """
        Append tracks to the end of a playlist.

        Args:
            playlist_id: Target playlist ID.
            items: Track URIs (or IDs), at most 100.

        Raises:
            ValueError: If more than 100 items are given.
            SpotifyError: If the request fails.
        """
        if len(items) > ADD_ITEMS_LIMIT:
            raise ValueError(
                f"Cannot add {len(items)} tracks in one request (limit {ADD_ITEMS_LIMIT})"
            )
        self._call(
            "add tracks to playlist",
            {"playlist_id": playlist_id, "batch_size": len(items)},
            self._spotify.playlist_add_items,
            playlist_id,
            list(items),
        )
