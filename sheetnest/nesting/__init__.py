"""Nesting module for laying out parts on material sheets.

Provides polygon geometry, the grid placement heuristic, and the
randomized order search that drives it.
"""

from sheetnest.nesting.collision import AnchorProximity, CollisionTest
from sheetnest.nesting.errors import InvalidConfiguration, InvalidPart, NestingError
from sheetnest.nesting.geometry import Polygon, area, bounds, rotate, translate
from sheetnest.nesting.models import (
    NestingAlgorithm,
    NestingConfig,
    NestingResult,
    Placement,
)
from sheetnest.nesting.nester import Nester, create_nester, nest_parts
from sheetnest.nesting.parts import Part, PartInstance, expand_parts
from sheetnest.nesting.shelf_packer import shelf_pack

__all__ = [
    "AnchorProximity",
    "CollisionTest",
    "InvalidConfiguration",
    "InvalidPart",
    "NestingError",
    "Polygon",
    "area",
    "bounds",
    "rotate",
    "translate",
    "NestingAlgorithm",
    "NestingConfig",
    "NestingResult",
    "Placement",
    "Nester",
    "create_nester",
    "nest_parts",
    "Part",
    "PartInstance",
    "expand_parts",
    "shelf_pack",
]
