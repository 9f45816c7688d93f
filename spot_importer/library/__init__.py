"""
Local library scanning (source file generation).
"""

from spot_importer.library.scanner import (
    ScannedTrack,
    parse_track_file,
    read_tags,
    scan_directory,
    write_source_file,
)

__all__ = [
    "ScannedTrack",
    "parse_track_file",
    "read_tags",
    "scan_directory",
    "write_source_file",
]
