"""
Core module for spot-importer.

This module provides the foundational components used throughout the application:
    - exceptions: Custom exception classes for error handling
    - config: Configuration loading (YAML + environment) and validation
    - logger: Logging system with console, file and failure-report outputs
    - progress: Rich progress bars for resolution and playlist sync

Usage:
    from spot_importer.core import (
        Config, load_config,
        setup_logging, get_logger,
        SpotImporterError, ConfigError, SpotifyError
    )
"""

from spot_importer.core.config import (
    DEFAULT_PLAYLIST,
    MAX_BATCH_SIZE,
    Config,
    ImportConfig,
    LoggingConfig,
    SpotifyConfig,
    load_config,
)
from spot_importer.core.exceptions import (
    AuthError,
    CheckpointError,
    CheckpointSchemaError,
    ConfigError,
    InvalidRecordError,
    MalformedRecordError,
    RecordError,
    RecordFileError,
    ScanError,
    SpotifyError,
    SpotImporterError,
)
from spot_importer.core.logger import (
    get_logger,
    log_resolution_failure,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    # Config
    "Config",
    "SpotifyConfig",
    "ImportConfig",
    "LoggingConfig",
    "DEFAULT_PLAYLIST",
    "MAX_BATCH_SIZE",
    "load_config",
    # Exceptions
    "SpotImporterError",
    "ConfigError",
    "RecordError",
    "MalformedRecordError",
    "InvalidRecordError",
    "CheckpointSchemaError",
    "RecordFileError",
    "SpotifyError",
    "AuthError",
    "CheckpointError",
    "ScanError",
    # Logger
    "setup_logging",
    "get_logger",
    "log_resolution_failure",
    "shutdown_logging",
]
