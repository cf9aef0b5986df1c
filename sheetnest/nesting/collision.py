"""Collision tests used by the grid placement scan."""

from abc import ABC, abstractmethod
from typing import Sequence, Tuple

Anchor = Tuple[float, float]


class CollisionTest(ABC):
    """Decides whether a candidate anchor conflicts with anchors on a sheet."""

    name = "abstract"

    @abstractmethod
    def conflicts(
        self,
        x: float,
        y: float,
        pad_w: float,
        pad_h: float,
        anchors: Sequence[Anchor],
    ) -> bool:
        """Return True if placing a (pad_w, pad_h) footprint at (x, y) conflicts."""
        raise NotImplementedError


class AnchorProximity(CollisionTest):
    """Approximate test comparing anchor distances to the candidate footprint.

    A candidate conflicts with an existing anchor (ox, oy) when
    ``|x - ox| < pad_w`` and ``|y - oy| < pad_h``. Only the candidate's own
    footprint is used, not the sizes of the parts already placed, so this
    is not a true overlap test.
    """

    name = "anchor_proximity"

    def conflicts(self, x, y, pad_w, pad_h, anchors):
        for ox, oy in anchors:
            if abs(x - ox) < pad_w and abs(y - oy) < pad_h:
                return True
        return False
