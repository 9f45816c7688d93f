"""
Library scanner: build a source record file from a directory of audio files.

For every file in the directory (not recursive, sorted by name):

    title      - 'title' tag, else the file name without extension,
                 with the --filter regex removed
    artist     - first entry of the 'artist' tag (cut at ',' or '/'),
                 else the part after the first '-' in the file name
    playlists  - every 'genre' tag value cut at ',' or '/', joined by '|'

The resulting CSV has the record file layout with an empty URI column
and is the input for `spot-import import-tracks`.
"""

import csv
import re
from dataclasses import dataclass
from pathlib import Path

import mutagen
from mutagen import MutagenError

from spot_importer.core.exceptions import ScanError
from spot_importer.core.logger import get_logger
from spot_importer.importer.records import PLAYLIST_SEPARATOR, unique

logger = get_logger(__name__)


# Multi-value separators used inside artist / genre tags
TAG_SPLIT_PATTERN = re.compile(r"[,/]+")


@dataclass(frozen=True)
class ScannedTrack:
    """Metadata read from one audio file."""
    path: Path
    title: str
    artist: str
    playlists: tuple[str, ...]

    def to_row(self) -> list[str]:
        return [self.title, self.artist, PLAYLIST_SEPARATOR.join(self.playlists), ""]


def _first_part(value: str) -> str:
    return TAG_SPLIT_PATTERN.split(value)[0].strip()


def read_tags(path: Path) -> dict[str, list[str]]:
    """
    Read easy tags from an audio file.

    Returns:
        Tag name -> list of values; empty when the file has no tags or
        is not an audio format mutagen understands.
    """
    try:
        audio = mutagen.File(path, easy=True)
    except (MutagenError, OSError) as e:
        logger.debug(f"Cannot read tags from {path.name}: {e}")
        return {}

    if audio is None or audio.tags is None:
        return {}

    return {key: [str(v) for v in values] for key, values in audio.tags.items()}


def parse_track_file(path: Path, filter_pattern: str = "") -> ScannedTrack:
    """
    Derive title, artist and playlists for one file.

    Args:
        path: Audio file.
        filter_pattern: Regex removed from the file name when it is used
                        as the title (e.g. r"^\\d+\\s*-\\s*" for track numbers).
    """
    tags = read_tags(path)

    title = (tags.get("title") or [""])[0].strip()
    artist = _first_part((tags.get("artist") or [""])[0])
    playlists = unique(
        name for name in (_first_part(genre) for genre in tags.get("genre", [])) if name
    )

    if not title:
        title = re.sub(filter_pattern, "", path.stem).strip() if filter_pattern else path.stem.strip()

    if not artist:
        parts = path.stem.split("-")
        artist = parts[1].strip() if len(parts) > 1 else ""

    return ScannedTrack(path=path, title=title, artist=artist, playlists=playlists)


def scan_directory(directory: Path, filter_pattern: str = "") -> list[ScannedTrack]:
    """
    Scan a directory of audio files.

    Args:
        directory: Directory to scan (sub-directories are skipped).
        filter_pattern: See parse_track_file().

    Returns:
        One ScannedTrack per file, in file name order.

    Raises:
        ScanError: If the directory cannot be listed or the filter is
                   not a valid regex.
    """
    if filter_pattern:
        try:
            re.compile(filter_pattern)
        except re.error as e:
            raise ScanError(
                f"Invalid filter regex '{filter_pattern}': {e}",
                details={"filter": filter_pattern}
            ) from e

    try:
        files = sorted(p for p in directory.iterdir() if p.is_file())
    except OSError as e:
        raise ScanError(
            f"Cannot list directory {directory}: {e}",
            details={"path": str(directory), "original_error": str(e)}
        ) from e

    tracks = [parse_track_file(path, filter_pattern) for path in files]
    logger.info(f"Scanned {len(tracks)} files in {directory}")
    return tracks


def write_source_file(output: Path, tracks: list[ScannedTrack]) -> None:
    """
    Write scanned tracks as a record file (no schema header, URIs empty).

    Raises:
        ScanError: If the file cannot be written.
    """
    try:
        with open(output, "w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f)
            for track in tracks:
                writer.writerow(track.to_row())
    except OSError as e:
        raise ScanError(
            f"Cannot write {output}: {e}",
            details={"path": str(output), "original_error": str(e)}
        ) from e

    logger.info(f"Wrote {len(tracks)} tracks to {output}")
