"""
Logging configuration for spot-importer.

This module sets up the logging system with multiple outputs:
    - Console: Run progress, tqdm-compatible and coloured
    - log_full_<timestamp>.log: Complete log of all events (DEBUG and above)
    - log_errors_<timestamp>.log: Only ERROR and CRITICAL level messages
    - import_failures_<timestamp>.log: Tracks that found no Spotify match,
      with the exact search query that was sent

The failed checkpoint CSV is the machine-readable list of failures; the
import_failures log is the human-readable one, showing which query
produced no result so the user knows what to correct.

Usage:
    from spot_importer.core.logger import setup_logging, get_logger

    setup_logging(Path("logs"))    # Call once at startup
    logger = get_logger(__name__)  # Get logger for each module

    logger.info("Starting import")
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TextIO

from tqdm import tqdm


LOG_FULL_PREFIX = "log_full"
LOG_ERRORS_PREFIX = "log_errors"
IMPORT_FAILURES_PREFIX = "import_failures"

# Log format for file output (detailed with timestamp)
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"
    BOLD = "\033[1m"


class ColoredConsoleFormatter(logging.Formatter):
    """
    Formatter that colours the level name on console output.

    Colors:
        - DEBUG: Blue
        - INFO: Green
        - WARNING: Yellow
        - ERROR: Red
        - CRITICAL: Bold Red
    """

    LEVEL_COLORS = {
        logging.DEBUG: Colors.BLUE,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, Colors.WHITE)
        return f"{color}{record.levelname}{Colors.RESET}: {record.getMessage()}"


class TqdmLoggingHandler(logging.Handler):
    """
    Logging handler that writes to the console without breaking progress bars.

    Messages go through tqdm.write(), which prints above any active bar
    instead of tearing it apart with a stray newline.
    """

    def __init__(self, stream: TextIO = sys.stderr) -> None:
        super().__init__()
        self.stream = stream

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            tqdm.write(msg, file=self.stream)
        except Exception:
            self.handleError(record)


class ImportFailureHandler(logging.Handler):
    """
    Handler that collects resolution failures into a report file.

    Only records carrying the 'import_failed_track_name' extra field are
    written; everything else is ignored. Entry format:

        Song Title - Artist Name
        query: track:Song Title artist:Artist Name

    Attributes:
        report_path: Path to the import_failures log.
        report_file: Open file handle, None until open() is called.

    Usage:
        log_resolution_failure(logger, "Song Title", "Artist Name",
                               "track:Song Title artist:Artist Name")
    """

    def __init__(self, report_path: Path) -> None:
        super().__init__()
        self.report_path = report_path
        self.report_file: TextIO | None = None

    def open(self) -> None:
        """Open the report file for writing (overwrites existing content)."""
        self.report_file = open(self.report_path, "w", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        if not hasattr(record, "import_failed_track_name"):
            return

        if self.report_file is None:
            return

        try:
            track_name = getattr(record, "import_failed_track_name", "Unknown")
            artist = getattr(record, "import_failed_track_artist", "")
            query = getattr(record, "import_failed_query", "")

            title = f"{track_name} - {artist}" if artist else track_name
            self.report_file.write(f"{title}\n")
            self.report_file.write(f"query: {query}\n\n")
            self.report_file.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        """Close the report file handle. Safe to call multiple times."""
        if self.report_file is not None:
            try:
                self.report_file.close()
            except OSError:
                pass
            self.report_file = None
        super().close()


class ErrorOnlyFilter(logging.Filter):
    """Filter that only allows ERROR and CRITICAL level records."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.ERROR


def setup_logging(log_dir: Path, console_level: int = logging.INFO) -> Path:
    """
    Configure the logging system for the application.

    This function should be called ONCE at application startup, after
    the configuration is loaded but before any other operations.

    Args:
        log_dir: Directory where log files will be created.
                 Created if it doesn't exist.
        console_level: Minimum level shown on the console.

    Returns:
        Path of the import failures report for this run.

    Behavior:
        1. Create log_dir if it doesn't exist
        2. Generate a timestamp for this run's log files
        3. Replace any existing root handlers with:
           - coloured tqdm-safe console handler
           - full DEBUG log file
           - ERROR-only log file
           - import failures report
    """
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = TqdmLoggingHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(ColoredConsoleFormatter())
    root_logger.addHandler(console_handler)

    full_handler = logging.FileHandler(
        log_dir / f"{LOG_FULL_PREFIX}_{timestamp}.log", mode="w", encoding="utf-8"
    )
    full_handler.setLevel(logging.DEBUG)
    full_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    root_logger.addHandler(full_handler)

    error_handler = logging.FileHandler(
        log_dir / f"{LOG_ERRORS_PREFIX}_{timestamp}.log", mode="w", encoding="utf-8"
    )
    error_handler.setLevel(logging.DEBUG)  # Filter handles the level restriction
    error_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    error_handler.addFilter(ErrorOnlyFilter())
    root_logger.addHandler(error_handler)

    failures_path = log_dir / f"{IMPORT_FAILURES_PREFIX}_{timestamp}.log"
    failures_handler = ImportFailureHandler(failures_path)
    failures_handler.open()
    root_logger.addHandler(failures_handler)

    # spotipy and urllib3 log every request at DEBUG
    logging.getLogger("spotipy").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    return failures_path


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The logger name, typically __name__ of the calling module.

    Returns:
        logging.Logger configured by setup_logging().

    Note:
        Loggers obtained before setup_logging() is called propagate to a
        root logger with no handlers until setup runs.
    """
    return logging.getLogger(name)


def format_resolved_message(artist: str, name: str, uri: str) -> str:
    """Format a coloured 'Matched' message."""
    title = f"{artist} - {name}" if artist else name
    return (
        f"{Colors.GREEN}Matched{Colors.RESET}: "
        f"{title} -> "
        f"{Colors.CYAN}{uri}{Colors.RESET}"
    )


def format_no_match_message(artist: str, name: str, query: str) -> str:
    """Format a coloured 'No match' message."""
    title = f"{artist} - {name}" if artist else name
    return (
        f"{Colors.RED}No match{Colors.RESET}: "
        f"{title} "
        f"(query: {query})"
    )


def format_summary_message(resolved: int, cached: int, failed: int) -> str:
    """
    Format the end-of-resolution summary line.

    Args:
        resolved: Records resolved by a search in this run.
        cached: Records that already carried a track URI.
        failed: Records with no match.
    """
    return (
        f"Resolved: {Colors.GREEN}{resolved}{Colors.RESET}, "
        f"from checkpoint: {Colors.CYAN}{cached}{Colors.RESET}, "
        f"failed: {Colors.RED}{failed}{Colors.RESET}"
    )


def log_resolution_failure(
    logger: logging.Logger,
    track_name: str,
    artist: str,
    query: str
) -> None:
    """
    Log a track that found no match on Spotify.

    Logs a WARNING and attaches the extra fields ImportFailureHandler
    uses to write the failures report.

    Args:
        logger: The logger to use for the message.
        track_name: The local track name.
        artist: The local artist name (may be empty).
        query: The search query that returned no result.
    """
    logger.warning(
        format_no_match_message(artist, track_name, query),
        extra={
            "import_failed_track_name": track_name,
            "import_failed_track_artist": artist,
            "import_failed_query": query,
        }
    )


def shutdown_logging() -> None:
    """
    Flush, close and detach all root handlers.

    Typically called in a finally block at application exit.
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        try:
            handler.flush()
            handler.close()
        except OSError:
            pass
        root_logger.removeHandler(handler)
