"""Console rendering of evaluation tables, neighbour lists and phase timings."""

import math
from typing import Iterable, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .core.evaluation import DatasetResult
from .core.topk import Neighbor
from .utils.timing import PhaseTiming


def format_coefficient(value: float) -> str:
    return "nan" if math.isnan(value) else f"{value:8.3f}"


def evaluation_table(results: Iterable[DatasetResult]) -> Table:
    """
    Build the per-dataset results table.

    Args:
        results: Dataset results in display order

    Returns:
        Table with Filename, Spearman and OOV columns
    """
    table = Table(title="Spearman correlation with human judgments")

    table.add_column("Filename", style="cyan")
    table.add_column("Spearman", justify="right", style="magenta")
    table.add_column("OOV", justify="right")
    table.add_column("Pairs", justify="right", style="dim")

    for result in results:
        table.add_row(
            escape(result.name),
            format_coefficient(result.coefficient),
            f"{int(result.oov_percent)}%",
            f"{result.matched}/{result.total}",
        )

    return table


def neighbors_table(query: str, neighbors: List[Neighbor], k: int) -> Table:
    table = Table(title=f"Top {k} for '{escape(query)}'")
    table.add_column("Rank", justify="right", style="dim")
    table.add_column("Word", style="cyan")
    table.add_column("Similarity", justify="right", style="magenta")

    for rank, neighbor in enumerate(neighbors, 1):
        word = neighbor.word if neighbor.word is not None else str(neighbor.identifier)
        table.add_row(str(rank), escape(word), f"{neighbor.score:.4f}")

    return table


def timings_table(timings: Iterable[PhaseTiming]) -> Table:
    table = Table(title="Timings")
    table.add_column("Phase", style="cyan")
    table.add_column("Seconds", justify="right")

    for timing in timings:
        table.add_row(f"{timing.operation}()", f"{timing.duration:.6f}")

    return table


def render_evaluation(results: Iterable[DatasetResult], console: Optional[Console] = None):
    console = console or Console()
    console.print(evaluation_table(results))


def render_neighbors(query: str, neighbors: Optional[List[Neighbor]], k: int,
                     elapsed: Optional[float] = None, console: Optional[Console] = None):
    """
    Print the neighbours of one query, or an out-of-vocabulary notice.

    Args:
        query: Query word as typed
        neighbors: Top-k result, ``None`` when the word has no vector
        k: Number of neighbours requested
        elapsed: Query latency in seconds
        console: Console to print to
    """
    console = console or Console()
    if neighbors is None:
        console.print(f"[yellow]'{escape(query)}' is out of vocabulary[/yellow]")
    else:
        console.print(neighbors_table(query, neighbors, k))
        if len(neighbors) < k:
            console.print(f"[dim]only {len(neighbors)} of {k} neighbours available[/dim]")
    if elapsed is not None:
        console.print(f"[dim]query time: {elapsed:.6f}s[/dim]")


def render_timings(timings: Iterable[PhaseTiming], console: Optional[Console] = None):
    console = console or Console()
    console.print(timings_table(timings))
