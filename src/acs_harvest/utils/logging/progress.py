# ABOUTME: Progress tracking for harvest runs using Rich's built-in progress bar
# ABOUTME: Exposes a per-target callback so the scheduler stays unaware of the display

from collections.abc import Callable
from typing import Any

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn


class HarvestProgressTracker:
    """Advances a Rich task once per finished target and shows the running match count."""

    def __init__(self, progress: Progress, task_id: Any, description: str):
        self.progress = progress
        self.task_id = task_id
        self.description = description
        self.matches = 0

    def __call__(self, matched: bool) -> None:
        if matched:
            self.matches += 1
        self.progress.update(
            self.task_id,
            advance=1,
            description=f"{self.description} - Matches: {self.matches}",
        )


def create_harvest_progress(
    console: Console, description: str, total: int | None
) -> tuple[Progress, HarvestProgressTracker]:
    """Create a progress bar for a harvest run.

    Args:
        console: Rich console instance
        description: Label shown next to the bar
        total: Number of targets, None for an indeterminate spinner

    Returns:
        Tuple of (progress, tracker); pass the tracker as the scheduler's progress callback
    """
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=False,
    )
    task_id = progress.add_task(description, total=total)
    return progress, HarvestProgressTracker(progress, task_id, description)


ProgressCallback = Callable[[bool], None]
