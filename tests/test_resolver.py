"""Tests for track resolution"""

from unittest.mock import Mock

import pytest

from spot_importer.core.exceptions import SpotifyError
from spot_importer.importer.records import TrackRecord
from spot_importer.importer.resolver import (
    ResolutionFailure,
    Resolved,
    build_query,
    resolve_record,
)


class TestBuildQuery:
    """Test search query construction"""

    def test_with_artist(self):
        assert build_query("Song A", "Artist X") == "track:Song A artist:Artist X"

    def test_without_artist(self):
        assert build_query("Song B") == "track:Song B"
        assert build_query("Song B", "") == "track:Song B"


class TestResolveRecord:
    """Test resolving one record"""

    def test_already_resolved_makes_no_search(self, fake_client):
        record = TrackRecord("Song B", "", ("imported",), "U2")

        outcome = resolve_record(fake_client, record)

        assert outcome == Resolved(record=record, cached=True)
        assert fake_client.calls == []

    def test_first_result_wins(self):
        client = Mock()
        client.search_tracks.return_value = [
            {"uri": "spotify:track:first", "name": "Song A"},
            {"uri": "spotify:track:second", "name": "Song A (Live)"},
        ]
        record = TrackRecord("Song A", "Artist X", ("Rock", "imported"))

        outcome = resolve_record(client, record)

        client.search_tracks.assert_called_once_with("track:Song A artist:Artist X")
        assert isinstance(outcome, Resolved)
        assert not outcome.cached
        assert outcome.remote_id == "spotify:track:first"
        assert outcome.record.playlists == record.playlists
        # The input record is not modified
        assert record.remote_id == ""

    def test_uri_preferred_over_id(self):
        client = Mock()
        client.search_tracks.return_value = [{"id": "T1", "uri": "spotify:track:T1"}]

        outcome = resolve_record(client, TrackRecord("Song A", "Artist X"))

        assert outcome.remote_id == "spotify:track:T1"

    def test_falls_back_to_id(self):
        client = Mock()
        client.search_tracks.return_value = [{"id": "T1"}]

        outcome = resolve_record(client, TrackRecord("Song A", "Artist X"))

        assert outcome.remote_id == "T1"

    def test_no_result(self, fake_client):
        record = TrackRecord("Unknown Song", "", ("imported",))

        outcome = resolve_record(fake_client, record)

        assert outcome == ResolutionFailure(record=record, query="track:Unknown Song")
        assert fake_client.calls_of("search") == [("search", "track:Unknown Song")]

    def test_result_without_identifier(self):
        client = Mock()
        client.search_tracks.return_value = [{"name": "Song A"}]

        outcome = resolve_record(client, TrackRecord("Song A"))

        assert isinstance(outcome, ResolutionFailure)

    def test_search_error_propagates(self):
        client = Mock()
        client.search_tracks.side_effect = SpotifyError("Rate limited", is_rate_limit=True)

        with pytest.raises(SpotifyError):
            resolve_record(client, TrackRecord("Song A"))
