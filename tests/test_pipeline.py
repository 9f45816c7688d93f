"""Integration tests for the import pipeline"""

from unittest.mock import patch

from spot_importer.core.exceptions import (
    CheckpointError,
    MalformedRecordError,
    RecordFileError,
    SpotifyError,
)
from spot_importer.importer.pipeline import run_import
from spot_importer.importer.records import schema_header


class TestRunImport:
    """Test complete import runs against a fake Spotify account"""

    def test_end_to_end(self, fake_client, write_csv, read_csv):
        fake_client.catalog["track:Song A artist:Artist X"] = "T1"
        input_path = write_csv("tracks.csv", [
            ["Song A", "Artist X", "Rock", ""],
            ["Song B", "", "", "U2"],
        ])

        result = run_import(fake_client, input_path, default_playlist="imported")

        assert result.ok
        assert (result.records, result.searched, result.cached, result.failed) == (2, 1, 1, 0)
        assert read_csv(result.found_path) == [
            schema_header(),
            ["Song A", "Artist X", "Rock|imported", "T1"],
            ["Song B", "", "imported", "U2"],
        ]
        assert result.failed_path is None

        assert fake_client.calls_of("search") == [("search", "track:Song A artist:Artist X")]
        assert len(fake_client.calls_of("user_playlists")) == 1
        assert [c[1] for c in fake_client.calls_of("create")] == ["Rock", "imported"]
        assert [(c[1], c[2]) for c in fake_client.calls_of("add")] == [
            ("pl_1", ["T1"]),
            ("pl_2", ["T1", "U2"]),
        ]
        assert [p.name for p in result.playlists] == ["Rock", "imported"]

    def test_found_file_rerun_makes_no_searches(self, fake_client, write_csv):
        fake_client.catalog["track:Song A artist:Artist X"] = "T1"
        input_path = write_csv("tracks.csv", [["Song A", "Artist X", "Rock", ""]])
        first = run_import(fake_client, input_path)
        fake_client.calls.clear()

        second = run_import(fake_client, first.found_path)

        assert second.ok
        assert fake_client.calls_of("search") == []
        assert second.cached == 1
        # Playlists from the first run are reused
        assert fake_client.calls_of("create") == []

    def test_failures_written_for_retry(self, fake_client, write_csv, read_csv):
        fake_client.catalog["track:Song A"] = "T1"
        input_path = write_csv("tracks.csv", [
            ["Song A", "", "", ""],
            ["Missing Song", "Nobody", "Rock", ""],
        ])

        result = run_import(fake_client, input_path)

        assert result.ok
        assert result.failed == 1
        assert result.failed_path == input_path.with_name("tracks.failed.csv")
        assert read_csv(result.failed_path)[1:] == [["Missing Song", "Nobody", "Rock|imported", ""]]
        # Every record ends up in exactly one of the two files
        assert len(read_csv(result.found_path)) - 1 + len(read_csv(result.failed_path)) - 1 == 2
        # Rock only had the failed track
        assert [c[1] for c in fake_client.calls_of("create")] == ["imported"]

    def test_nothing_resolved(self, fake_client, write_csv, read_csv):
        input_path = write_csv("tracks.csv", [["Missing Song", "", "", ""]])

        result = run_import(fake_client, input_path)

        assert result.ok
        assert result.playlists == ()
        assert fake_client.calls_of("user_playlists") == []
        assert fake_client.calls_of("current_user") == []
        assert read_csv(result.found_path) == [schema_header()]

    def test_explicit_user_id(self, fake_client, write_csv):
        input_path = write_csv("tracks.csv", [["Song B", "", "", "U2"]])

        run_import(fake_client, input_path, user_id="someone")

        assert fake_client.calls_of("current_user") == []
        assert fake_client.calls_of("user_playlists") == [("user_playlists", "someone")]

    def test_default_user_is_authenticated_user(self, fake_client, write_csv):
        input_path = write_csv("tracks.csv", [["Song B", "", "", "U2"]])

        run_import(fake_client, input_path)

        assert fake_client.calls_of("user_playlists") == [("user_playlists", "test_user")]

    def test_malformed_input_returns_error(self, fake_client, write_csv):
        input_path = write_csv("tracks.csv", [["Song A", "Artist X", "Rock", ""], ["broken"]])

        result = run_import(fake_client, input_path)

        assert not result.ok
        assert isinstance(result.error, MalformedRecordError)
        assert fake_client.calls == []
        assert not input_path.with_name("tracks.found.csv").exists()

    def test_missing_input_returns_error(self, fake_client, temp_dir):
        result = run_import(fake_client, temp_dir / "missing.csv")

        assert isinstance(result.error, RecordFileError)

    def test_remote_error_writes_no_checkpoint(self, fake_client, write_csv):
        input_path = write_csv("tracks.csv", [["Song A", "", "", ""]])

        def failing_search(query):
            raise SpotifyError("Rate limited while trying to search tracks", is_rate_limit=True)

        fake_client.search_tracks = failing_search

        result = run_import(fake_client, input_path)

        assert isinstance(result.error, SpotifyError)
        assert result.error.is_rate_limit
        assert not input_path.with_name("tracks.found.csv").exists()
        assert not input_path.with_name("tracks.failed.csv").exists()

    def test_checkpoint_error_returned(self, fake_client, write_csv):
        input_path = write_csv("tracks.csv", [["Song B", "", "", "U2"]])

        with patch(
            "spot_importer.importer.pipeline.write_checkpoints",
            side_effect=CheckpointError("Cannot write checkpoint"),
        ):
            result = run_import(fake_client, input_path)

        assert isinstance(result.error, CheckpointError)
        # The sync already happened
        assert len(result.playlists) == 1
