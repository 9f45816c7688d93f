"""
Progress bar handling for spot-importer using the Rich library.

Two bars are used by the import pipeline:
    - ResolveProgressBar: one step per source record (search or checkpoint hit)
    - SyncProgressBar: one step per track URI pushed to a playlist

Usage:
    from spot_importer.core.progress import ResolveProgressBar

    with ResolveProgressBar(total=len(records)) as progress:
        for record in records:
            outcome = resolve_record(client, record)
            progress.update(resolved=..., cached=...)

    Passing enabled=False turns every method into a no-op, which is what
    tests and non-interactive runs use.
"""

from abc import ABC, abstractmethod
from typing import Optional

from rich import get_console
from rich.console import JustifyMethod, OverflowMethod
from rich.progress import (
    BarColumn,
    Progress,
    ProgressColumn,
    Task,
    TaskID,
)
from rich.style import StyleType
from rich.text import Text
from rich.theme import Theme


PROGRESS_THEME = Theme({
    "bar.back": "grey23",
    "bar.complete": "rgb(30,215,96)",
    "bar.finished": "rgb(114,156,31)",
    "bar.pulse": "rgb(30,215,96)",
    "progress.percentage": "white",
})


class SizedTextColumn(ProgressColumn):
    """Text column truncated with an ellipsis beyond a fixed width."""

    def __init__(
        self,
        text_format: str,
        style: StyleType = "none",
        justify: JustifyMethod = "left",
        overflow: Optional[OverflowMethod] = None,
        width: int = 20,
    ) -> None:
        self.text_format = text_format
        self.justify: JustifyMethod = justify
        self.style = style
        self.overflow: Optional[OverflowMethod] = overflow
        self.width = width
        super().__init__()

    def render(self, task: Task) -> Text:
        text = Text.from_markup(
            self.text_format.format(task=task), style=self.style, justify=self.justify
        )
        text.truncate(max_width=self.width, overflow=self.overflow, pad=True)
        return text


class BaseProgressBar(ABC):
    """
    Abstract base class for the pipeline progress bars.

    Provides:
    - Rich Progress instance with the shared theme
    - Context manager support (__enter__/__exit__)
    - A disabled mode where nothing is rendered

    Subclasses must implement _get_status_text().
    """

    def __init__(
        self,
        total: int,
        description: str,
        enabled: bool = True,
        status_width: int = 35
    ):
        self.total = total
        self.description = description
        self.completed = 0
        self.enabled = enabled

        self.progress: Progress | None = None
        if enabled:
            self.progress = Progress(
                SizedTextColumn("[white]{task.description}", overflow="ellipsis", width=15),
                SizedTextColumn("{task.fields[status]}", width=status_width, style="white"),
                BarColumn(bar_width=40, finished_style="green"),
                "[progress.percentage]{task.percentage:>3.0f}%",
                console=get_console(),
                transient=False,
                refresh_per_second=10,
            )

        self.task_id: Optional[TaskID] = None
        self._started = False

    def __enter__(self) -> "BaseProgressBar":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    def start(self) -> None:
        if self.progress is not None and not self._started:
            self.progress.console.push_theme(PROGRESS_THEME)
            self.progress.start()
            self.task_id = self.progress.add_task(
                description=self.description,
                total=self.total,
                status=self._get_status_text(),
            )
            self._started = True

    def stop(self) -> None:
        if self.progress is not None and self._started:
            self.progress.stop()
            self.progress.console.pop_theme()
            self._started = False

    def _update_progress(self) -> None:
        if self.progress is not None and self.task_id is not None:
            self.progress.update(
                self.task_id,
                completed=self.completed,
                status=self._get_status_text(),
            )

    @abstractmethod
    def _get_status_text(self) -> str:
        """Return the status text (Rich markup) shown next to the bar."""


class ResolveProgressBar(BaseProgressBar):
    """
    Progress bar for track resolution.

    Example:
        Resolving       ✓ 45  ↺ 120  ✗ 2        ━━━━━━━━━━━━━━━━━  47%
    """

    def __init__(self, total: int, enabled: bool = True, description: str = "Resolving"):
        self.resolved = 0
        self.cached = 0
        self.failed = 0
        super().__init__(total=total, description=description, enabled=enabled)

    def _get_status_text(self) -> str:
        return "  ".join([
            f"[green]✓ {self.resolved}[/green]",
            f"[cyan]↺ {self.cached}[/cyan]",
            f"[red]✗ {self.failed}[/red]",
        ])

    def update(self, resolved: bool, cached: bool = False) -> None:
        """
        Record one processed track.

        Args:
            resolved: Whether the track has a Spotify URI now.
            cached: Whether the URI came from the input file (no search).
        """
        self.completed += 1
        if not resolved:
            self.failed += 1
        elif cached:
            self.cached += 1
        else:
            self.resolved += 1
        self._update_progress()


class SyncProgressBar(BaseProgressBar):
    """
    Progress bar for playlist sync, advancing by track URIs added.

    Example:
        Syncing         + 300  ★ 2               ━━━━━━━━━━━━━━━━━  60%
    """

    def __init__(self, total: int, enabled: bool = True, description: str = "Syncing"):
        self.added = 0
        self.created = 0
        super().__init__(total=total, description=description, enabled=enabled)

    def _get_status_text(self) -> str:
        parts = [f"[green]+ {self.added}[/green]"]
        if self.created > 0:
            parts.append(f"[yellow]★ {self.created}[/yellow]")
        return "  ".join(parts)

    def playlist_created(self) -> None:
        self.created += 1
        self._update_progress()

    def update(self, added: int) -> None:
        """Record one applied batch of `added` URIs."""
        self.completed += added
        self.added += added
        self._update_progress()


__all__ = [
    "PROGRESS_THEME",
    "SizedTextColumn",
    "BaseProgressBar",
    "ResolveProgressBar",
    "SyncProgressBar",
]
