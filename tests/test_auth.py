"""Tests for Spotify OAuth authentication"""

from unittest.mock import Mock, patch

import pytest
import requests
from spotipy.oauth2 import SpotifyOauthError

from spot_importer.core.exceptions import AuthError, SpotifyError
from spot_importer.spotify.auth import SCOPES, authenticate, create_oauth_manager
from spot_importer.spotify.client import SpotifyClient


@pytest.fixture
def oauth():
    manager = Mock()
    manager.get_authorize_url.return_value = "https://accounts.spotify.com/authorize?x=1"
    manager.parse_response_code.return_value = "the-code"
    manager.cache_handler.get_cached_token.return_value = {
        "access_token": "access",
        "refresh_token": "new-refresh",
    }
    return manager


class TestAuthenticate:
    """Test both authentication paths"""

    def test_refresh_token_path(self, oauth):
        oauth.refresh_access_token.return_value = {"access_token": "access"}
        prompt = Mock()

        with patch("spot_importer.spotify.auth.spotipy.Spotify") as spotify_cls:
            auth = authenticate("id", "secret", "http://127.0.0.1:8888/callback",
                                refresh_token="stored", prompt=prompt, oauth_manager=oauth)

        oauth.refresh_access_token.assert_called_once_with("stored")
        prompt.assert_not_called()
        assert not auth.interactive
        # Spotify did not rotate the token, the stored one stays valid
        assert auth.refresh_token == "stored"
        assert isinstance(auth.client, SpotifyClient)
        assert spotify_cls.call_args.kwargs["retries"] == 0

    def test_interactive_path(self, oauth):
        prompt = Mock(return_value=" http://127.0.0.1:8888/callback?code=the-code ")

        with patch("spot_importer.spotify.auth.spotipy.Spotify"):
            auth = authenticate("id", "secret", "http://127.0.0.1:8888/callback",
                                prompt=prompt, oauth_manager=oauth)

        prompt.assert_called_once_with("https://accounts.spotify.com/authorize?x=1")
        oauth.parse_response_code.assert_called_once_with("http://127.0.0.1:8888/callback?code=the-code")
        oauth.get_access_token.assert_called_once_with("the-code", as_dict=False, check_cache=False)
        assert auth.interactive
        assert auth.refresh_token == "new-refresh"

    def test_oauth_error_becomes_auth_error(self, oauth):
        oauth.refresh_access_token.side_effect = SpotifyOauthError("invalid_grant")

        with pytest.raises(AuthError) as exc_info:
            authenticate("id", "secret", "http://127.0.0.1:8888/callback",
                         refresh_token="revoked", oauth_manager=oauth)

        assert exc_info.value.is_auth_error
        assert isinstance(exc_info.value, SpotifyError)

    def test_network_error_on_refresh(self, oauth):
        oauth.refresh_access_token.side_effect = requests.exceptions.ConnectionError("down")

        with pytest.raises(AuthError) as exc_info:
            authenticate("id", "secret", "http://127.0.0.1:8888/callback",
                         refresh_token="stored", oauth_manager=oauth)

        assert exc_info.value.details["original_error"] == "down"

    def test_network_error_on_code_exchange(self, oauth):
        oauth.get_access_token.side_effect = requests.exceptions.Timeout("timed out")

        with pytest.raises(AuthError):
            authenticate("id", "secret", "http://127.0.0.1:8888/callback",
                         prompt=Mock(return_value="the-code"), oauth_manager=oauth)

    def test_no_access_token(self, oauth):
        oauth.refresh_access_token.return_value = {}

        with pytest.raises(AuthError):
            authenticate("id", "secret", "http://127.0.0.1:8888/callback",
                         refresh_token="stored", oauth_manager=oauth)


class TestOAuthManager:
    """Test the OAuth manager settings"""

    def test_scopes_and_memory_cache(self):
        manager = create_oauth_manager("id", "secret", "http://127.0.0.1:8888/callback")

        assert set(manager.scope.split()) == set(SCOPES)
        assert manager.cache_handler.get_cached_token() is None
