"""
Diagnostics and console output for Sceneware
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Union

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .models import NarratorStats


# Rich console for pretty output
console = Console()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def enable_diagnostics(
    level: str = "INFO",
    use_rich: bool = True,
    log_file: Optional[Union[str, Path]] = None,
    format: str = LOG_FORMAT,
) -> logging.Logger:
    """Configure the ``sceneware`` logger.

    Console output goes through Rich unless ``use_rich`` is False. When
    ``log_file`` is given, records are also appended to that file.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("sceneware")
    logger.setLevel(log_level)

    if use_rich:
        handler: logging.Handler = RichHandler(
            console=console,
            show_time=True,
            show_path=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(format))

    # Replace handlers from a previous call instead of stacking them
    for existing in list(logger.handlers):
        if getattr(existing, "_sceneware_handler", False):
            logger.removeHandler(existing)
            existing.close()

    handler._sceneware_handler = True
    logger.addHandler(handler)

    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(format))
        file_handler._sceneware_handler = True
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def stats_table(stats: NarratorStats) -> Table:
    """Build a summary table for a narration session."""
    data = stats.to_dict()

    table = Table(title="Narration Session Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Duration (s)", f"{data['duration_seconds']:.1f}")
    table.add_row("Cycles", str(data["cycles"]))
    table.add_row("Skipped cycles", str(data["cycles_skipped"]))
    table.add_row("Detections", str(data["detections"]))
    table.add_row("Descriptions", str(data["descriptions"]))
    table.add_row("Narrations spoken", str(data["narrations"]))
    table.add_row("Backend faults", f"[yellow]{data['backend_faults']}[/yellow]")
    table.add_row("Detection errors", f"[red]{data['detection_errors']}[/red]")
    table.add_row("Avg cycle (ms)", f"{data['avg_cycle_ms']:.1f}")
    return table


def print_stats(stats: NarratorStats):
    """Print a summary table of a narration session."""
    console.print(stats_table(stats))


def config_table(values: Dict[str, str], categories: Dict) -> Table:
    """Build a table of configuration values grouped by category."""
    table = Table(title="Sceneware Configuration")
    table.add_column("Category", style="cyan")
    table.add_column("Key", style="yellow")
    table.add_column("Value", style="green")
    table.add_column("Description")

    for category, items in categories.items():
        for key, label, desc in items:
            table.add_row(category, key, values.get(key, ""), desc)
    return table
