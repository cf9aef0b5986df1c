"""Grid placement heuristic.

Assigns each part instance, in list order, a sheet, an anchor and a rotation.
Existing sheets are tried first, in creation order; a new sheet is opened only
when none of them has room at the current rotation.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from sheetnest.nesting.collision import Anchor, AnchorProximity, CollisionTest
from sheetnest.nesting.geometry import rotate, rotation_angles
from sheetnest.nesting.models import NestingConfig, Placement
from sheetnest.nesting.parts import PartInstance


@dataclass
class SheetOccupancy:
    """Anchors already placed on one sheet during an attempt."""
    index: int
    anchors: List[Anchor] = field(default_factory=list)


@dataclass
class LayoutAttempt:
    """Outcome of one pass of the placement heuristic."""
    placements: List[Placement] = field(default_factory=list)
    sheets: List[SheetOccupancy] = field(default_factory=list)
    dropped: List[PartInstance] = field(default_factory=list)

    @property
    def sheets_opened(self) -> int:
        return len(self.sheets)


def find_anchor(
    sheet: SheetOccupancy,
    pad_w: float,
    pad_h: float,
    config: NestingConfig,
    collision_test: CollisionTest,
) -> Optional[Anchor]:
    """Scan the sheet row by row for the first conflict-free anchor."""
    step = config.grid_step
    y = 0.0
    while y + pad_h <= config.sheet_height:
        x = 0.0
        while x + pad_w <= config.sheet_width:
            if not collision_test.conflicts(x, y, pad_w, pad_h, sheet.anchors):
                return (x, y)
            x += step
        y += step
    return None


def place_instances(
    instances: Sequence[PartInstance],
    config: NestingConfig,
    rotations: Optional[Sequence[float]] = None,
    collision_test: Optional[CollisionTest] = None,
) -> LayoutAttempt:
    """Run one placement attempt over ``instances`` starting from no sheets."""
    if rotations is None:
        rotations = rotation_angles(config.rotation_steps)
    collision_test = collision_test or AnchorProximity()

    attempt = LayoutAttempt()

    for inst in instances:
        placed = False

        for rotation in rotations:
            rotated = rotate(inst.polygon, rotation)
            pad_w = rotated.width + config.spacing
            pad_h = rotated.height + config.spacing

            for sheet in attempt.sheets:
                anchor = find_anchor(sheet, pad_w, pad_h, config, collision_test)
                if anchor is not None:
                    x, y = anchor
                    attempt.placements.append(
                        Placement(inst.part_id, sheet.index, x, y, rotation, inst.area)
                    )
                    sheet.anchors.append(anchor)
                    placed = True
                    break

            if not placed and pad_w <= config.sheet_width and pad_h <= config.sheet_height:
                sheet = SheetOccupancy(index=len(attempt.sheets), anchors=[(0.0, 0.0)])
                attempt.sheets.append(sheet)
                attempt.placements.append(
                    Placement(inst.part_id, sheet.index, 0.0, 0.0, rotation, inst.area)
                )
                placed = True

            if placed:
                break

        if not placed:
            attempt.dropped.append(inst)

    return attempt
