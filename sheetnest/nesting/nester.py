"""Sheet nesting entry point.

Places polygonal parts onto fixed-size rectangular sheets, minimizing the
number of sheets and maximizing material utilization.
"""

import math
import random
import threading
from datetime import datetime
from typing import List, Optional, Sequence

from sheetnest.nesting.collision import CollisionTest
from sheetnest.nesting.errors import InvalidPart
from sheetnest.nesting.models import NestingAlgorithm, NestingConfig, NestingResult
from sheetnest.nesting.parts import Part, PartLike, expand_parts
from sheetnest.nesting.scoring import assemble_result
from sheetnest.nesting.search import ProgressCallback, SearchLoop
from sheetnest.nesting.shelf_packer import shelf_pack
from sheetnest.utils import get_logger

logger = get_logger("nesting.nester")


class Nester:
    """
    Sheet nesting optimizer.

    Expands parts by quantity, then searches over placement orders to find
    the layout with the fewest sheets and highest utilization.
    """

    def __init__(
        self,
        config: Optional[NestingConfig] = None,
        collision_test: Optional[CollisionTest] = None,
    ):
        """
        Initialize nester.

        Args:
            config: Nesting configuration
            collision_test: Anchor conflict test for the grid scan
        """
        self.config = config or NestingConfig()
        self.collision_test = collision_test

    def nest(
        self,
        parts: Sequence[PartLike],
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[threading.Event] = None,
        rng: Optional[random.Random] = None,
    ) -> NestingResult:
        """
        Nest parts onto sheets.

        Args:
            parts: Parts (or part dicts) with quantities
            progress: Called as ``progress(attempt, total, best_utilization)``
                after every attempt
            cancel: Checked before each attempt; when set, the search stops
                and returns the best attempt so far
            rng: Random source for order mutation. Defaults to one seeded
                from ``config.seed``

        Returns:
            Nesting result with placements and per-sheet utilization

        Raises:
            InvalidConfiguration: If the configuration is malformed
            InvalidPart: If a part is malformed
        """
        start_time = datetime.now()
        self.config.validate()
        parts = self._coerce_parts(parts)

        if self.config.algorithm == NestingAlgorithm.SHELF:
            result = shelf_pack(
                parts,
                self.config.sheet_width,
                self.config.sheet_height,
                self.config.spacing,
                strict_compat=self.config.strict_compat,
            )
            if progress is not None:
                try:
                    progress(1, 1, result.best_utilization)
                except Exception as e:
                    logger.error(f"Progress callback error: {e}")
            result.processing_time = (datetime.now() - start_time).total_seconds()
            return result

        instances = expand_parts(parts)
        logger.info(
            f"Nesting {len(instances)} instances of {len(parts)} parts on "
            f"{self.config.sheet_width:g}x{self.config.sheet_height:g} sheets, "
            f"{self.config.iterations} iterations"
        )

        loop = SearchLoop(instances, self.config, rng=rng, collision_test=self.collision_test)
        outcome = loop.run(progress=progress, cancel=cancel)

        if outcome.dropped_count and not self.config.strict_compat:
            logger.warning(f"{outcome.dropped_count} instances did not fit on any sheet")

        result = assemble_result(
            outcome.placements,
            self.config,
            iterations_run=outcome.iterations_run,
            best_utilization=outcome.best_utilization,
            dropped_count=outcome.dropped_count,
            processing_time=(datetime.now() - start_time).total_seconds(),
            cancelled=outcome.cancelled,
        )

        logger.info(
            f"Nesting finished: {result.placed_count} placed on {result.sheets_used} sheets "
            f"after {result.iterations_run} iterations"
        )
        return result

    def _coerce_parts(self, parts: Sequence[PartLike]) -> List[Part]:
        """Convert part dicts to Part objects."""
        coerced = []
        for part in parts:
            if isinstance(part, Part):
                coerced.append(part)
            elif isinstance(part, dict):
                try:
                    coerced.append(Part.from_dict(part))
                except KeyError as e:
                    raise InvalidPart(f"Part is missing field {e}") from e
            else:
                raise InvalidPart(f"Unsupported part type: {type(part).__name__}")
        return coerced

    def export_layout(self, result: NestingResult) -> str:
        """Export layout as text description."""
        lines = [
            f"; Sheet layout ({result.algorithm.value})",
            f"; Sheet: {self.config.sheet_width:g}x{self.config.sheet_height:g}",
            f"; Sheets used: {result.sheets_used}",
            f"; Parts placed: {result.placed_count}",
            f"; Iterations: {result.iterations_run}",
            "",
        ]

        for sheet_index, util in enumerate(result.utilization):
            lines.append(f"; Sheet {sheet_index + 1}: {util * 100:.1f}% utilization")
            for p in result.placements_on(sheet_index):
                lines.append(
                    f";   {p.part_id} at ({p.x:.1f}, {p.y:.1f}) "
                    f"rotated {math.degrees(p.rotation):.0f}°"
                )
            lines.append("")

        if result.dropped_count:
            lines.append(f"; Unplaced instances: {result.dropped_count}")

        return "\n".join(lines)


# Convenience functions
def create_nester(
    sheet_width: float = 3000.0,
    sheet_height: float = 1500.0,
    algorithm: str = "search",
    **options,
) -> Nester:
    """Create a nester with specified settings."""
    config = NestingConfig(
        sheet_width=sheet_width,
        sheet_height=sheet_height,
        algorithm=NestingAlgorithm.parse(algorithm),
        **options,
    )
    return Nester(config=config)


def nest_parts(
    parts: Sequence[PartLike],
    sheet_width: float = 3000.0,
    sheet_height: float = 1500.0,
    progress: Optional[ProgressCallback] = None,
    **options,
) -> NestingResult:
    """
    Nest parts onto sheets.

    Args:
        parts: Parts (or part dicts) to nest
        sheet_width: Sheet width
        sheet_height: Sheet height
        progress: Optional progress callback
        **options: Any other NestingConfig field

    Returns:
        Nesting result
    """
    nester = create_nester(sheet_width, sheet_height, **options)
    return nester.nest(parts, progress=progress)
