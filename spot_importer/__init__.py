"""
spot-importer - import a local music collection into Spotify playlists.

Package layout:
    core      - config, exceptions, logging, progress bars
    spotify   - OAuth authentication and the Spotify API client
    importer  - record loading, resolution, grouping, sync, checkpoints
    library   - source file generation from tagged audio files
    cli       - `spot-import` command line
"""

__version__ = "1.0.0"
