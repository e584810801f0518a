"""Wall-clock timing of the load and query phases."""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List

logger = logging.getLogger(__name__)


@dataclass
class PhaseTiming:
    """Duration of one named phase."""

    operation: str
    start_time: float
    end_time: float = 0.0
    duration: float = 0.0
    items_processed: int = 0
    metadata: Dict[str, Any] = field(default_factory=dict)

    def complete(self):
        """Mark phase as complete and calculate its duration."""
        self.end_time = time.perf_counter()
        self.duration = self.end_time - self.start_time

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'operation': self.operation,
            'duration': round(self.duration, 6),
            'items_processed': self.items_processed,
            **self.metadata,
        }


class PhaseTimer:
    """Collects :class:`PhaseTiming` records in the order phases finish."""

    def __init__(self):
        self.timings: List[PhaseTiming] = []

    @contextmanager
    def track(self, operation: str, **metadata) -> Iterator[PhaseTiming]:
        """
        Context manager for timing a phase.

        Args:
            operation: Phase name
            **metadata: Extra values stored on the record

        Yields:
            PhaseTiming instance, completed on exit
        """
        timing = PhaseTiming(operation=operation, start_time=time.perf_counter(),
                             metadata=dict(metadata))
        try:
            yield timing
        finally:
            timing.complete()
            self.timings.append(timing)
            logger.info(
                f"{operation} completed in {timing.duration:.6f}s",
                extra={'operation': operation, 'duration': timing.duration}
            )

    def total(self) -> float:
        return sum(t.duration for t in self.timings)

    def __iter__(self):
        return iter(self.timings)

    def __len__(self) -> int:
        return len(self.timings)
