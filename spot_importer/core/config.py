"""
Configuration management for spot-importer.

This module handles loading, validating, and providing access to the
application configuration. Values come from three layers, later layers
overriding earlier ones:

    1. config.yaml (optional; current working directory or --config)
    2. Environment variables (a .env file is loaded first, if present)
    3. Command-line options (applied by the CLI via with_overrides())

Environment Variables:
    SPOTIFY_CLIENT_ID, SPOTIFY_CLIENT_SECRET, SPOTIFY_REDIRECT_URI,
    SPOTIFY_REFRESH_TOKEN, SPOTIFY_USERNAME

Example config.yaml:
    spotify:
      client_id: "your_client_id_here"
      client_secret: "your_client_secret_here"
      redirect_uri: "http://127.0.0.1:8888/callback"
      refresh_token: null   # printed after the first interactive login
      username: null        # defaults to the authenticated user

    import:
      default_playlist: "imported"
      batch_size: 100

    logging:
      directory: "logs"
"""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from spot_importer.core.exceptions import ConfigError


# Default configuration file name (looked up in current working directory)
CONFIG_FILENAME = "config.yaml"

DEFAULT_PLAYLIST = "imported"

# Spotify rejects "add items" requests with more than 100 URIs
MAX_BATCH_SIZE = 100

ENV_MAPPING = {
    "SPOTIFY_CLIENT_ID": "client_id",
    "SPOTIFY_CLIENT_SECRET": "client_secret",
    "SPOTIFY_REDIRECT_URI": "redirect_uri",
    "SPOTIFY_REFRESH_TOKEN": "refresh_token",
    "SPOTIFY_USERNAME": "username",
}


@dataclass(frozen=True)
class SpotifyConfig:
    """
    Spotify application credentials and account selection.

    Attributes:
        client_id: Spotify application client ID.
        client_secret: Spotify application client secret.
        redirect_uri: Redirect URI registered for the application.
                      Must match the dashboard setting exactly.
        refresh_token: Stored refresh token. When set, the interactive
                       authorization step is skipped.
        username: Spotify user ID owning the playlists. When None, the
                  authenticated user is used.
    """
    client_id: str | None = None
    client_secret: str | None = None
    redirect_uri: str | None = None
    refresh_token: str | None = None
    username: str | None = None


@dataclass(frozen=True)
class ImportConfig:
    """
    Import pipeline behavior.

    Attributes:
        default_playlist: Playlist every imported track is added to.
        batch_size: Track URIs per "add items" request (1-100).
    """
    default_playlist: str = DEFAULT_PLAYLIST
    batch_size: int = MAX_BATCH_SIZE


@dataclass(frozen=True)
class LoggingConfig:
    """
    Attributes:
        directory: Directory for log files (relative paths resolve
                   against the working directory).
    """
    directory: Path = Path("logs")


@dataclass(frozen=True)
class Config:
    """
    Complete application configuration.

    Created by load_config() and treated as immutable. Use
    with_overrides() to apply command-line values.
    """
    spotify: SpotifyConfig
    import_: ImportConfig
    logging: LoggingConfig

    def with_overrides(self, **overrides: Any) -> "Config":
        """
        Return a copy with non-None Spotify/import values replaced.

        Args:
            **overrides: Any of client_id, client_secret, redirect_uri,
                         refresh_token, username, default_playlist,
                         log_directory. None values are ignored.

        Returns:
            New Config instance.
        """
        spotify_fields = {
            key: value for key, value in overrides.items()
            if key in ENV_MAPPING.values() and value is not None
        }
        spotify = replace(self.spotify, **spotify_fields)

        import_ = self.import_
        default_playlist = overrides.get("default_playlist")
        if default_playlist is not None:
            import_ = replace(import_, default_playlist=_validate_playlist_name(default_playlist))

        logging_config = self.logging
        log_directory = overrides.get("log_directory")
        if log_directory is not None:
            logging_config = replace(logging_config, directory=Path(log_directory).expanduser())

        return Config(spotify=spotify, import_=import_, logging=logging_config)

    def require_credentials(self) -> SpotifyConfig:
        """
        Check that everything needed to authenticate is present.

        Returns:
            The Spotify section.

        Raises:
            ConfigError: If client_id, client_secret or redirect_uri is missing.
        """
        for field_name in ("client_id", "client_secret", "redirect_uri"):
            if not getattr(self.spotify, field_name):
                raise ConfigError(
                    f"Missing Spotify {field_name.replace('_', ' ')}: set it in "
                    f"{CONFIG_FILENAME}, SPOTIFY_{field_name.upper()} or on the command line",
                    details={"field": f"spotify.{field_name}"}
                )
        return self.spotify


def load_config(config_path: Path | None = None) -> Config:
    """
    Load and validate configuration from YAML and the environment.

    Args:
        config_path: Optional explicit path to a config file.
                     If None, config.yaml in the current directory is used
                     when it exists; a missing default file is not an error.

    Returns:
        Config: A frozen dataclass containing all configuration values.

    Raises:
        ConfigError: If an explicit config file is not found, the YAML is
                     invalid, or a value has the wrong type.

    Behavior:
        1. Load .env (if any) into the process environment
        2. Read and parse the YAML file
        3. Validate each section
        4. Apply environment variables on top of the spotify section
    """
    load_dotenv()

    raw_config = _read_yaml(config_path)

    spotify = _parse_spotify_config(_section(raw_config, "spotify"))
    import_ = _parse_import_config(_section(raw_config, "import"))
    logging_config = _parse_logging_config(_section(raw_config, "logging"))

    env_values = {
        field_name: os.environ[env_var]
        for env_var, field_name in ENV_MAPPING.items()
        if os.environ.get(env_var)
    }
    if env_values:
        spotify = replace(spotify, **env_values)

    return Config(spotify=spotify, import_=import_, logging=logging_config)


def _read_yaml(config_path: Path | None) -> dict[str, Any]:
    explicit = config_path is not None
    path = Path(config_path) if explicit else Path.cwd() / CONFIG_FILENAME

    if not path.exists():
        if explicit:
            raise ConfigError(
                f"Configuration file not found: {path}",
                details={"file_path": str(path)}
            )
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML syntax in {path}: {e}",
            details={"file_path": str(path), "original_error": str(e)}
        ) from e
    except OSError as e:
        raise ConfigError(
            f"Cannot read configuration file {path}: {e}",
            details={"file_path": str(path), "original_error": str(e)}
        ) from e

    if raw_config is None:
        return {}
    if not isinstance(raw_config, dict):
        raise ConfigError(
            f"Configuration file {path} must contain a mapping",
            details={"file_path": str(path)}
        )
    return raw_config


def _section(raw_config: dict[str, Any], name: str) -> dict[str, Any]:
    section = raw_config.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(
            f"Section '{name}' must be a dictionary",
            details={"section": name}
        )
    return section


def _optional_string(section: dict[str, Any], key: str, prefix: str) -> str | None:
    value = section.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(
            f"'{prefix}.{key}' must be a string or null",
            details={"field": f"{prefix}.{key}"}
        )
    return value.strip() or None


def _validate_playlist_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ConfigError(
            "'import.default_playlist' must be a non-empty string",
            details={"field": "import.default_playlist"}
        )
    if "|" in name:
        # '|' separates playlist names inside a record file
        raise ConfigError(
            "'import.default_playlist' cannot contain '|'",
            details={"field": "import.default_playlist", "value": name}
        )
    return name.strip()


def _parse_spotify_config(section: dict[str, Any]) -> SpotifyConfig:
    return SpotifyConfig(
        **{
            field_name: _optional_string(section, field_name, "spotify")
            for field_name in ENV_MAPPING.values()
        }
    )


def _parse_import_config(section: dict[str, Any]) -> ImportConfig:
    """
    Parse and validate the import section, applying defaults.

    Raises:
        ConfigError: If default_playlist is empty or batch_size is
                     not an integer between 1 and 100.
    """
    default_playlist = _validate_playlist_name(section.get("default_playlist", DEFAULT_PLAYLIST))

    batch_size = section.get("batch_size", MAX_BATCH_SIZE)
    if isinstance(batch_size, bool) or not isinstance(batch_size, int) or not 1 <= batch_size <= MAX_BATCH_SIZE:
        raise ConfigError(
            f"'import.batch_size' must be an integer between 1 and {MAX_BATCH_SIZE}",
            details={"field": "import.batch_size", "value": batch_size}
        )

    return ImportConfig(default_playlist=default_playlist, batch_size=batch_size)


def _parse_logging_config(section: dict[str, Any]) -> LoggingConfig:
    directory = section.get("directory", "logs")
    if not isinstance(directory, str) or not directory.strip():
        raise ConfigError(
            "'logging.directory' must be a non-empty string",
            details={"field": "logging.directory"}
        )
    return LoggingConfig(directory=Path(directory.strip()).expanduser())
