"""Randomized order search over the placement heuristic.

Each attempt runs the full placement heuristic. Between attempts the
working order is partially shuffled in place, so every attempt starts from
the order the previous one left behind rather than from the sorted order.
"""

import random
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from sheetnest.nesting.collision import AnchorProximity, CollisionTest
from sheetnest.nesting.geometry import rotation_angles
from sheetnest.nesting.models import NestingConfig, Placement
from sheetnest.nesting.parts import PartInstance, total_area
from sheetnest.nesting.placement import place_instances
from sheetnest.nesting.scoring import attempt_utilization
from sheetnest.utils import get_logger

logger = get_logger("nesting.search")

ProgressCallback = Callable[[int, int, float], None]


@dataclass
class SearchOutcome:
    """Best attempt found by the search."""
    placements: List[Placement] = field(default_factory=list)
    best_utilization: float = 0.0
    iterations_run: int = 0
    dropped_count: int = 0
    cancelled: bool = False


class SearchLoop:
    """Owns the working instance order and the best attempt seen so far."""

    def __init__(
        self,
        instances: Sequence[PartInstance],
        config: NestingConfig,
        rng: Optional[random.Random] = None,
        collision_test: Optional[CollisionTest] = None,
    ):
        self.config = config
        self.order: List[PartInstance] = list(instances)
        self.rng = rng or random.Random(config.seed)
        self.collision_test = collision_test or AnchorProximity()
        self.rotations = rotation_angles(config.rotation_steps)
        self.part_area = total_area(self.order)

    def mutate(self) -> None:
        """Partially shuffle the working order in place.

        Walks from the last index down to 1 and, with probability
        ``mutation_rate``, swaps each position with a uniform pick from
        [0, i].
        """
        order = self.order
        rate = self.config.mutation_rate
        for i in range(len(order) - 1, 0, -1):
            if self.rng.random() < rate:
                j = int(self.rng.random() * (i + 1))
                order[i], order[j] = order[j], order[i]

    def run(
        self,
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[threading.Event] = None,
    ) -> SearchOutcome:
        """Run the configured number of attempts and keep the best one."""
        outcome = SearchOutcome()
        total = self.config.iterations

        for attempt_number in range(1, total + 1):
            if cancel is not None and cancel.is_set():
                logger.info(f"Search cancelled after {outcome.iterations_run} of {total} attempts")
                outcome.cancelled = True
                break

            if attempt_number > 1:
                self.mutate()

            attempt = place_instances(
                self.order, self.config, self.rotations, self.collision_test
            )
            score = attempt_utilization(self.part_area, attempt.sheets_opened, self.config)

            if score > outcome.best_utilization:
                outcome.best_utilization = score
                outcome.placements = attempt.placements
                logger.debug(
                    f"Attempt {attempt_number}: {attempt.sheets_opened} sheets, "
                    f"utilization {score:.3f}"
                )

            outcome.iterations_run = attempt_number
            self._notify(progress, attempt_number, total, outcome.best_utilization)

        if outcome.iterations_run:
            outcome.dropped_count = len(self.order) - len(outcome.placements)
        return outcome

    def _notify(
        self,
        progress: Optional[ProgressCallback],
        attempt_number: int,
        total: int,
        best: float,
    ) -> None:
        """Report progress. Callback errors are logged and never stop the search."""
        if progress is None:
            return
        try:
            progress(attempt_number, total, best)
        except Exception as e:
            logger.error(f"Progress callback error: {e}")
