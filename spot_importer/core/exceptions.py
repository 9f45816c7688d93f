"""
Exception classes for spot-importer.

This module defines all custom exceptions used throughout the application.
Each exception carries a human-readable message plus an optional details
dictionary, so the CLI can print a short message while the log keeps the
full context.

Exception Hierarchy:
    SpotImporterError (base)
        ConfigError - Configuration file / credential issues
        RecordError - Source record file issues
            MalformedRecordError - Row with the wrong number of fields
            InvalidRecordError - Row with an empty track name
            CheckpointSchemaError - Unknown checkpoint schema version
            RecordFileError - File cannot be read
        SpotifyError - Any failed remote call (network, auth, rate limit)
            AuthError - Token exchange / refresh failed
        CheckpointError - Found/failed files cannot be written
        ScanError - Audio directory cannot be scanned

Note:
    A track that simply has no search result is NOT an exception. The
    resolver returns a ResolutionFailure outcome for it and the run goes on.
"""


class SpotImporterError(Exception):
    """
    Base exception for all spot-importer errors.

    All custom exceptions in this project inherit from this class,
    allowing callers to catch all importer errors with a single
    except clause.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (e.g., row number, path).

    Example:
        try:
            records = load_records(path, "imported")
        except SpotImporterError as e:
            logger.error(f"Import failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description that will be shown to the user.
            details: Optional dictionary containing additional context about the error.
                     Common keys include:
                     - 'path': File involved in the error
                     - 'line': Row number in a record file
                     - 'original_error': The underlying exception if wrapping another error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(SpotImporterError):
    """
    Raised when there's an issue with the configuration.

    This is a CRITICAL error that stops the program before any
    remote call is made.

    Common causes:
        - Explicit --config file not found
        - config.yaml has invalid YAML syntax
        - A section is not a mapping, or a value has the wrong type
        - Client ID / secret / redirect URI missing after all overrides
    """
    pass


class RecordError(SpotImporterError):
    """
    Base class for problems with a source record file.

    Record errors abort the whole run before resolution starts: a
    broken input file is reported once, with its row number, so the
    user can fix it and re-run.
    """
    pass


class MalformedRecordError(RecordError):
    """
    Raised when a row does not have exactly the expected number of fields.

    Example:
        raise MalformedRecordError(
            "Row 12 has 3 fields, expected 4",
            details={'line': 12, 'fields': 3}
        )
    """
    pass


class InvalidRecordError(RecordError):
    """Raised when a row's track name is empty after trimming."""
    pass


class CheckpointSchemaError(RecordError):
    """
    Raised when a record file declares a schema version this release
    does not know how to read.
    """
    pass


class RecordFileError(RecordError):
    """Raised when a record file cannot be opened or decoded."""
    pass


class SpotifyError(SpotImporterError):
    """
    Raised when a call to the Spotify Web API fails.

    This is always a CRITICAL error for the import run: no retry is
    attempted, the run stops and already-applied playlist changes stay
    in place.

    Common causes:
        - Invalid or expired credentials
        - Rate limiting (HTTP 429)
        - Missing scope / permission not yet propagated (HTTP 403)
        - Network connectivity issues

    Attributes:
        is_auth_error: True if this is an authentication error.
        is_rate_limit: True if this is a rate limit error.
        http_status: HTTP status code returned by Spotify, if any.

    Example:
        raise SpotifyError(
            "Failed to create playlist: Insufficient client scope",
            details={'playlist_name': 'Rock', 'http_status': 403},
            http_status=403
        )
    """

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        is_auth_error: bool = False,
        is_rate_limit: bool = False,
        http_status: int | None = None
    ) -> None:
        """
        Initialize Spotify error with additional flags.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context.
            is_auth_error: Set to True if this is an authentication failure.
            is_rate_limit: Set to True if Spotify answered 429.
            http_status: HTTP status of the failed request, if known.
        """
        super().__init__(message, details)
        self.is_auth_error = is_auth_error
        self.is_rate_limit = is_rate_limit
        self.http_status = http_status


class AuthError(SpotifyError):
    """
    Raised when the OAuth exchange or token refresh fails.

    Example:
        raise AuthError(
            "Failed to refresh access token: invalid_grant",
            details={'original_error': 'invalid_grant'}
        )
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message, details, is_auth_error=True)


class CheckpointError(SpotImporterError):
    """
    Raised when a found/failed checkpoint file cannot be written.

    This is CRITICAL: the checkpoint files are what makes a later run
    resumable, so failing to write them must never be silent.
    """
    pass


class ScanError(SpotImporterError):
    """Raised when the audio directory cannot be listed or the CSV written."""
    pass
