"""Shelf packing on part bounding boxes.

A single-pass first-fit decreasing-height packer. Parts are laid left to
right along horizontal shelves; a new shelf starts above the tallest one
when the row is full, and a new sheet when the sheet is full.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from sheetnest.nesting.models import NestingAlgorithm, NestingConfig, NestingResult, Placement
from sheetnest.nesting.parts import PartLike, expand_by_quantity
from sheetnest.nesting.scoring import attempt_utilization, sheet_utilization
from sheetnest.utils import get_logger

logger = get_logger("nesting.shelf_packer")


@dataclass
class Shelf:
    """A horizontal row on a sheet."""
    y: float
    height: float
    x_cursor: float


@dataclass
class ShelfSheet:
    """Shelves opened on one sheet."""
    index: int
    shelves: List[Shelf] = field(default_factory=list)

    @property
    def used_height(self) -> float:
        return max((s.y + s.height for s in self.shelves), default=0.0)


class ShelfPacker:
    """Packs bounding boxes onto sheets shelf by shelf."""

    def __init__(
        self,
        sheet_width: float,
        sheet_height: float,
        kerf: float = 2.0,
        log_drops: bool = True,
    ):
        self.sheet_width = sheet_width
        self.sheet_height = sheet_height
        self.kerf = kerf
        self.log_drops = log_drops

    def try_place(self, sheet: ShelfSheet, w: float, h: float) -> Optional[Tuple[float, float]]:
        """Place a w x h box on the sheet, returning its lower-left corner."""
        for shelf in sheet.shelves:
            if h <= shelf.height and shelf.x_cursor + w + self.kerf <= self.sheet_width:
                x = shelf.x_cursor
                shelf.x_cursor += w + self.kerf
                return (x, shelf.y)

        current = sheet.used_height
        if current + h + self.kerf <= self.sheet_height and w + self.kerf <= self.sheet_width:
            shelf = Shelf(
                y=current + (self.kerf if current > 0 else 0.0),
                height=h,
                x_cursor=w + self.kerf,
            )
            sheet.shelves.append(shelf)
            return (0.0, shelf.y)

        return None

    def _place_either_way(
        self, sheet: ShelfSheet, w: float, h: float
    ) -> Optional[Tuple[float, float, float]]:
        """Try upright, then turned 90 degrees. Returns (x, y, rotation)."""
        pos = self.try_place(sheet, w, h)
        if pos:
            return (pos[0], pos[1], 0.0)
        pos = self.try_place(sheet, h, w)
        if pos:
            return (pos[0], pos[1], math.pi / 2)
        return None

    def _fits_empty(self, w: float, h: float) -> bool:
        fits = w + self.kerf <= self.sheet_width and h + self.kerf <= self.sheet_height
        turned = h + self.kerf <= self.sheet_width and w + self.kerf <= self.sheet_height
        return fits or turned

    def pack(self, parts: Sequence[PartLike]) -> Tuple[List[Placement], int, int]:
        """Pack parts. Returns (placements, sheets used, dropped count)."""
        boxes = []
        for inst in expand_by_quantity(parts):
            boxes.append((inst.part_id, inst.polygon.width, inst.polygon.height))
        # Tallest first
        boxes.sort(key=lambda b: b[2], reverse=True)

        sheets: List[ShelfSheet] = []
        placements: List[Placement] = []
        dropped = 0

        for part_id, w, h in boxes:
            spot = None
            target = None
            for sheet in sheets:
                spot = self._place_either_way(sheet, w, h)
                if spot:
                    target = sheet
                    break

            if spot is None and self._fits_empty(w, h):
                target = ShelfSheet(index=len(sheets))
                spot = self._place_either_way(target, w, h)
                sheets.append(target)

            if spot is None:
                if self.log_drops:
                    logger.warning(f"Part {part_id} ({w:.1f}x{h:.1f}) does not fit on an empty sheet")
                dropped += 1
                continue

            x, y, rotation = spot
            placements.append(Placement(part_id, target.index, x, y, rotation, w * h))

        return placements, len(sheets), dropped


def shelf_pack(
    parts: Sequence[PartLike],
    sheet_width: float,
    sheet_height: float,
    kerf: float = 2.0,
    strict_compat: bool = False,
) -> NestingResult:
    """Shelf-pack parts onto sheet_width x sheet_height sheets.

    With ``strict_compat`` dropped parts are not logged and the result
    carries no dropped count.
    """
    config = NestingConfig(
        sheet_width=sheet_width,
        sheet_height=sheet_height,
        spacing=kerf,
        strict_compat=strict_compat,
        algorithm=NestingAlgorithm.SHELF,
    )
    config.validate()

    packer = ShelfPacker(sheet_width, sheet_height, kerf, log_drops=not strict_compat)
    placements, sheets_used, dropped = packer.pack(parts)

    return NestingResult(
        placements=placements,
        sheets_used=sheets_used,
        utilization=sheet_utilization(placements, sheets_used, config),
        iterations_run=1,
        dropped_count=None if strict_compat else dropped,
        best_utilization=attempt_utilization(
            sum(p.area for p in placements), sheets_used, config
        ),
        algorithm=NestingAlgorithm.SHELF,
    )
