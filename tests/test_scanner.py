"""Tests for the library scanner (generate-csv)"""

from unittest.mock import Mock, patch

import pytest
from mutagen import MutagenError

from spot_importer.core.exceptions import ScanError
from spot_importer.importer.records import load_records
from spot_importer.library.scanner import parse_track_file, scan_directory, write_source_file


def _audio(tags):
    audio = Mock()
    audio.tags = tags
    return audio


@pytest.fixture
def mutagen_file():
    with patch("spot_importer.library.scanner.mutagen.File") as mock_file:
        mock_file.return_value = None
        yield mock_file


class TestParseTrackFile:
    """Test metadata derivation for one file"""

    def test_from_tags(self, temp_dir, mutagen_file):
        mutagen_file.return_value = _audio({
            "title": ["Paranoid Android"],
            "artist": ["Radiohead, Someone Else"],
            "genre": ["Rock/Alternative", "Art Rock", "Rock"],
        })

        track = parse_track_file(temp_dir / "01 - whatever.mp3")

        assert track.title == "Paranoid Android"
        assert track.artist == "Radiohead"
        assert track.playlists == ("Rock", "Art Rock")
        assert track.to_row() == ["Paranoid Android", "Radiohead", "Rock|Art Rock", ""]

    def test_file_name_fallback(self, temp_dir, mutagen_file):
        track = parse_track_file(temp_dir / "03 - Muse - Hysteria.mp3", r"^\d+\s*-\s*")

        assert track.title == "Muse - Hysteria"
        assert track.artist == "Muse"
        assert track.playlists == ()

    def test_no_dash_in_name(self, temp_dir, mutagen_file):
        track = parse_track_file(temp_dir / "Hysteria.flac")

        assert track.title == "Hysteria"
        assert track.artist == ""

    def test_unreadable_file(self, temp_dir, mutagen_file):
        mutagen_file.side_effect = MutagenError("bad header")

        track = parse_track_file(temp_dir / "broken.mp3")

        assert track.title == "broken"


class TestScanDirectory:
    """Test directory scanning and CSV output"""

    def test_sorted_files_only(self, temp_dir, mutagen_file):
        (temp_dir / "b.mp3").touch()
        (temp_dir / "a.mp3").touch()
        (temp_dir / "subdir").mkdir()

        tracks = scan_directory(temp_dir)

        assert [t.title for t in tracks] == ["a", "b"]

    def test_invalid_filter(self, temp_dir):
        with pytest.raises(ScanError):
            scan_directory(temp_dir, "([unclosed")

    def test_missing_directory(self, temp_dir):
        with pytest.raises(ScanError):
            scan_directory(temp_dir / "missing")

    def test_output_is_importable(self, temp_dir, mutagen_file):
        mutagen_file.return_value = _audio({"title": ["Song A"], "artist": ["Artist X"], "genre": ["Rock"]})
        (temp_dir / "song.mp3").touch()
        output = temp_dir / "out" / "tracks.csv"
        output.parent.mkdir()

        write_source_file(output, scan_directory(temp_dir))
        records = load_records(output, "imported")

        assert [r.to_row() for r in records] == [["Song A", "Artist X", "Rock|imported", ""]]
