"""Test configuration and fixtures"""

import csv
import logging
import tempfile
from pathlib import Path

import pytest


class FakeSpotifyClient:
    """In-memory stand-in for SpotifyClient that records every call"""

    def __init__(self, catalog=None, playlists=None, user_id="test_user"):
        self.catalog = dict(catalog or {})
        self.playlists = list(playlists or [])
        self.user_id = user_id
        self.calls = []

    def search_tracks(self, query):
        self.calls.append(("search", query))
        uri = self.catalog.get(query)
        return [{"uri": uri, "name": query}] if uri else []

    def current_user_id(self):
        self.calls.append(("current_user",))
        return self.user_id

    def user_playlists(self, user_id):
        self.calls.append(("user_playlists", user_id))
        return list(self.playlists)

    def create_playlist(self, user_id, name, public=False):
        self.calls.append(("create", name, public))
        playlist = {"id": f"pl_{len(self.playlists) + 1}", "name": name}
        self.playlists.append(playlist)
        return playlist

    def add_tracks(self, playlist_id, items):
        self.calls.append(("add", playlist_id, list(items)))

    def calls_of(self, kind):
        return [call for call in self.calls if call[0] == kind]


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def fake_client():
    """Spotify client with an empty catalog and no playlists"""
    return FakeSpotifyClient()


@pytest.fixture
def write_csv(temp_dir):
    """Write rows to a CSV file in the temporary directory"""
    def _write(name, rows):
        path = temp_dir / name
        with open(path, "w", encoding="utf-8", newline="") as f:
            csv.writer(f).writerows(rows)
        return path
    return _write


@pytest.fixture
def read_csv():
    """Read all rows of a CSV file"""
    def _read(path):
        with open(path, "r", encoding="utf-8", newline="") as f:
            return list(csv.reader(f))
    return _read


@pytest.fixture(autouse=True)
def clean_spotify_env(monkeypatch):
    """Keep real SPOTIFY_* variables out of the tests"""
    for var in (
        "SPOTIFY_CLIENT_ID",
        "SPOTIFY_CLIENT_SECRET",
        "SPOTIFY_REDIRECT_URI",
        "SPOTIFY_REFRESH_TOKEN",
        "SPOTIFY_USERNAME",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def restore_root_logger():
    """Undo setup_logging() changes to the root logger"""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            handler.close()
            root.removeHandler(handler)
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
