"""
OAuth2 authentication for the Spotify Web API.

Playlist creation needs a user token, so the client-credentials flow is
not enough. Two paths lead to an authenticated client:

    1. Refresh token known (config, env or --refresh-token):
       the token is exchanged for a fresh access token, no interaction.
    2. No refresh token: the authorization URL is printed, the user opens
       it, approves, and pastes back either the full redirected URL or
       just the 'code' query value. The code is exchanged for tokens and
       the new refresh token is reported so the next run can skip this.

Tokens live only in memory (spotipy MemoryCacheHandler); spotipy refreshes
the access token automatically when it expires during a long run.
"""

from dataclasses import dataclass
from typing import Callable

import click
import requests
import spotipy
from spotipy.cache_handler import MemoryCacheHandler
from spotipy.oauth2 import SpotifyOAuth, SpotifyOauthError

from spot_importer.core.exceptions import AuthError
from spot_importer.core.logger import get_logger
from spot_importer.spotify.client import SpotifyClient

logger = get_logger(__name__)


SCOPES = [
    "playlist-read-private",
    "playlist-modify-private",
    "playlist-modify-public",
]

OAUTH_STATE = "spot-importer-state-value"

# Seconds; a hung request blocks the whole sequential run
REQUEST_TIMEOUT = 30


@dataclass(frozen=True)
class Authentication:
    """
    Result of a successful authentication.

    Attributes:
        client: SpotifyClient ready for the pipeline.
        refresh_token: Refresh token to store for future runs.
        interactive: True if the user went through the browser flow.
    """
    client: SpotifyClient
    refresh_token: str
    interactive: bool


def create_oauth_manager(client_id: str, client_secret: str, redirect_uri: str) -> SpotifyOAuth:
    """Build a SpotifyOAuth manager that keeps tokens in memory only."""
    return SpotifyOAuth(
        client_id=client_id,
        client_secret=client_secret,
        redirect_uri=redirect_uri,
        scope=" ".join(SCOPES),
        state=OAUTH_STATE,
        cache_handler=MemoryCacheHandler(),
        open_browser=False,
    )


def _prompt_for_code(authorize_url: str) -> str:
    click.echo(
        f"Open this URL in your browser and approve access:\n\n  {authorize_url}\n\n"
        "You will be redirected to a URL containing a 'code' parameter."
    )
    return click.prompt("Paste the redirected URL (or just the code)")


def authenticate(
    client_id: str,
    client_secret: str,
    redirect_uri: str,
    refresh_token: str | None = None,
    prompt: Callable[[str], str] = _prompt_for_code,
    oauth_manager: SpotifyOAuth | None = None,
) -> Authentication:
    """
    Produce an authenticated SpotifyClient.

    Args:
        client_id: Spotify app client ID.
        client_secret: Spotify app client secret.
        redirect_uri: Redirect URI registered for the app.
        refresh_token: Stored refresh token, or None for the interactive flow.
        prompt: Called with the authorization URL; returns what the user
                pasted (redirected URL or bare code).
        oauth_manager: Pre-built manager (tests); built from the
                       credentials when None.

    Returns:
        Authentication with the client and the refresh token to keep.

    Raises:
        AuthError: If the code exchange or token refresh fails or Spotify
                   cannot be reached.
    """
    oauth = oauth_manager or create_oauth_manager(client_id, client_secret, redirect_uri)
    interactive = not refresh_token

    try:
        if refresh_token:
            logger.debug("Refreshing Spotify access token")
            token_info = oauth.refresh_access_token(refresh_token)
        else:
            response = prompt(oauth.get_authorize_url())
            code = oauth.parse_response_code(response.strip())
            oauth.get_access_token(code, as_dict=False, check_cache=False)
            token_info = oauth.cache_handler.get_cached_token()
    except SpotifyOauthError as e:
        raise AuthError(
            f"Spotify authorization failed: {e}",
            details={"original_error": str(e), "interactive": interactive}
        ) from e
    except requests.exceptions.RequestException as e:
        raise AuthError(
            f"Network error during Spotify authorization: {e}",
            details={"original_error": str(e), "interactive": interactive}
        ) from e

    if not token_info or not token_info.get("access_token"):
        raise AuthError("Spotify returned no access token")

    # Spotify may omit refresh_token on refresh; the old one stays valid
    new_refresh_token = token_info.get("refresh_token") or refresh_token or ""

    if interactive:
        logger.info(f"Refresh token (pass it with --refresh-token next time): {new_refresh_token}")
    else:
        logger.info("Authenticated with stored refresh token")

    spotify_instance = spotipy.Spotify(
        auth_manager=oauth,
        requests_timeout=REQUEST_TIMEOUT,
        retries=0,
        status_retries=0,
    )
    return Authentication(
        client=SpotifyClient(spotify_instance),
        refresh_token=new_refresh_token,
        interactive=interactive,
    )
