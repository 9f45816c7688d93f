"""
Command-line interface for spot-importer.

This module implements the CLI using Click (rich-click for help colours).

Commands:
    spot-import generate-csv -i <music-dir> -o <tracks.csv> [-f <regex>]
    spot-import import-tracks -i <tracks.csv> [credentials] [-p <playlist>]

Usage:
    # 1. Build a source file from your music folder
    spot-import generate-csv -i ~/Music/Rock -o rock.csv -f "^\\d+\\s*-\\s*"

    # 2. Import it (first time: interactive login, prints a refresh token)
    spot-import import-tracks -i rock.csv -c <client-id> -s <secret> \\
        -r http://127.0.0.1:8888/callback

    # 3. Fix rock.failed.csv by hand, then import it
    spot-import import-tracks -i rock.failed.csv -f <refresh-token> ...

Configuration:
    Credentials can also come from config.yaml or SPOTIFY_* environment
    variables; command-line options win.

Exit Codes:
    0   success (also when some tracks found no match)
    1   configuration error
    2   input record file error
    3   Spotify error
    4   other importer error
    130 interrupted
"""

import sys
from pathlib import Path
from typing import Optional

import rich_click as click

click.rich_click.USE_RICH_MARKUP = True
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.MAX_WIDTH = 100
click.rich_click.OPTION_GROUPS = {
    "spot-import import-tracks": [
        {
            "name": "Input",
            "options": ["--input", "--default-playlist", "--username"],
        },
        {
            "name": "Spotify App",
            "options": ["--client-id", "--client-secret", "--redirect-uri", "--refresh-token"],
        },
        {
            "name": "Advanced Options",
            "options": ["--config", "--log-dir", "--no-progress"],
        },
    ],
}

from spot_importer import __version__
from spot_importer.core import (
    ConfigError,
    RecordError,
    SpotifyError,
    SpotImporterError,
    get_logger,
    load_config,
    setup_logging,
    shutdown_logging,
)
from spot_importer.importer import ImportResult, run_import
from spot_importer.library import scan_directory, write_source_file
from spot_importer.spotify import authenticate

logger = get_logger(__name__)


EXIT_OK = 0
EXIT_CONFIG = 1
EXIT_RECORDS = 2
EXIT_SPOTIFY = 3
EXIT_OTHER = 4
EXIT_INTERRUPTED = 130


def exit_code_for(error: SpotImporterError | None) -> int:
    """Map the error that ended a run to a process exit code."""
    if error is None:
        return EXIT_OK
    if isinstance(error, ConfigError):
        return EXIT_CONFIG
    if isinstance(error, RecordError):
        return EXIT_RECORDS
    if isinstance(error, SpotifyError):
        return EXIT_SPOTIFY
    return EXIT_OTHER


@click.group()
@click.version_option(__version__, prog_name="spot-importer")
def cli() -> None:
    """
    spot-importer: import a local music collection into Spotify playlists.

    \b
    Generate a CSV from a music folder, then import it: each track is
    searched on Spotify and added to playlists named after its genres,
    plus a default playlist. Matches and failures are written next to
    the input so the next run only needs to handle what is left.
    """


@cli.command("generate-csv")
@click.option(
    "-i", "--input", "input_dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    required=True,
    help="Directory with audio files"
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Target CSV file"
)
@click.option(
    "-f", "--filter", "filter_pattern",
    default="",
    metavar="<regex>",
    help="Regex removed from file names used as titles"
)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for log files"
)
def generate_csv(input_dir: Path, output: Path, filter_pattern: str, log_dir: Optional[Path]) -> None:
    """Generate a track CSV file from a directory of audio files."""
    setup_logging(log_dir or Path("logs"))
    try:
        tracks = scan_directory(input_dir, filter_pattern)
        write_source_file(output, tracks)
    except SpotImporterError as e:
        click.echo(f"Error: {e.message}", err=True)
        logger.error(f"Error: {e.message}", exc_info=True)
        sys.exit(EXIT_OTHER)
    finally:
        shutdown_logging()

    click.echo(f"Wrote {len(tracks)} tracks to {output}")


@cli.command("import-tracks")
@click.option(
    "-i", "--input", "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="Input CSV file (generated, hand-made or a previous .found/.failed file)"
)
@click.option("-c", "--client-id", default=None, help="Spotify app client ID")
@click.option("-s", "--client-secret", default=None, help="Spotify app client secret")
@click.option(
    "-r", "--redirect-uri",
    default=None,
    help="Redirect URI (must match the one registered for the app)"
)
@click.option("-u", "--username", default=None, help="Spotify user ID (default: authenticated user)")
@click.option("-f", "--refresh-token", default=None, help="Refresh token from a previous login")
@click.option("-p", "--default-playlist", default=None, help="Playlist every track is added to")
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ./config.yaml if present)"
)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for log files"
)
@click.option("--no-progress", is_flag=True, help="Disable progress bars")
def import_tracks(
    input_file: Path,
    client_id: Optional[str],
    client_secret: Optional[str],
    redirect_uri: Optional[str],
    username: Optional[str],
    refresh_token: Optional[str],
    default_playlist: Optional[str],
    config_path: Optional[Path],
    log_dir: Optional[Path],
    no_progress: bool
) -> None:
    """Import tracks from a CSV file into Spotify playlists."""
    try:
        config = load_config(config_path).with_overrides(
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=redirect_uri,
            username=username,
            refresh_token=refresh_token,
            default_playlist=default_playlist,
            log_directory=log_dir,
        )
        credentials = config.require_credentials()
    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(EXIT_CONFIG)

    setup_logging(config.logging.directory)
    code = EXIT_OTHER
    try:
        logger.info("spot-importer starting")
        auth = authenticate(
            credentials.client_id,
            credentials.client_secret,
            credentials.redirect_uri,
            refresh_token=credentials.refresh_token,
        )
        result = run_import(
            auth.client,
            input_file,
            default_playlist=config.import_.default_playlist,
            user_id=credentials.username,
            batch_size=config.import_.batch_size,
            show_progress=not no_progress,
        )
        _report(result)
        code = exit_code_for(result.error)

    except SpotifyError as e:
        click.echo(f"Spotify error: {e.message}", err=True)
        if e.is_auth_error:
            click.echo("Check your client ID, secret, redirect URI and refresh token", err=True)
        logger.error(f"Spotify error: {e.message}", exc_info=True)
        code = EXIT_SPOTIFY

    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        logger.info("Interrupted by user")
        code = EXIT_INTERRUPTED

    finally:
        shutdown_logging()

    sys.exit(code)


def _report(result: ImportResult) -> None:
    """Print the final run summary for the user."""
    if not result.ok:
        click.echo(f"Import stopped: {result.error}", err=True)
        click.echo(f"Re-run with {result.input_path} once the problem is fixed.", err=True)
        return

    for playlist in result.playlists:
        action = "created" if playlist.created else "updated"
        click.echo(f"  {playlist.name}: {playlist.tracks_added} tracks ({action})")

    if result.failed:
        click.echo(
            f"Failures: {result.failed}. Correct {result.failed_path} and run again with it."
        )
    else:
        click.echo(f"All {result.resolved} tracks imported. Next time use {result.found_path}.")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
