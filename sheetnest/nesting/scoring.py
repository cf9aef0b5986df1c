"""Utilization scoring and result assembly."""

from typing import List, Optional, Sequence

from sheetnest.nesting.models import NestingAlgorithm, NestingConfig, NestingResult, Placement


def attempt_utilization(part_area: float, sheets_opened: int, config: NestingConfig) -> float:
    """Score used to rank attempts.

    ``part_area`` is the area of every expanded instance, placed or not,
    so an attempt that drops parts is not rewarded for it.
    """
    sheet_total = sheets_opened * config.sheet_area
    if sheet_total <= 0:
        return 0.0
    return part_area / sheet_total


def count_sheets(placements: Sequence[Placement]) -> int:
    """One more than the highest sheet index, 0 when nothing was placed."""
    return max((p.sheet_index + 1 for p in placements), default=0)


def sheet_utilization(
    placements: Sequence[Placement],
    sheets_used: int,
    config: NestingConfig,
) -> List[float]:
    """Placed area over sheet area, for each sheet index in [0, sheets_used)."""
    used = [0.0] * sheets_used
    for p in placements:
        if 0 <= p.sheet_index < sheets_used:
            used[p.sheet_index] += p.area
    return [u / config.sheet_area for u in used]


def assemble_result(
    placements: Sequence[Placement],
    config: NestingConfig,
    iterations_run: int,
    best_utilization: float = 0.0,
    dropped_count: Optional[int] = 0,
    processing_time: float = 0.0,
    algorithm: NestingAlgorithm = NestingAlgorithm.SEARCH,
    cancelled: bool = False,
) -> NestingResult:
    """Build the result bundle from the kept placement list."""
    sheets_used = count_sheets(placements)
    return NestingResult(
        placements=list(placements),
        sheets_used=sheets_used,
        utilization=sheet_utilization(placements, sheets_used, config),
        iterations_run=iterations_run,
        dropped_count=None if config.strict_compat else dropped_count,
        best_utilization=best_utilization,
        processing_time=processing_time,
        algorithm=algorithm,
        cancelled=cancelled,
    )
