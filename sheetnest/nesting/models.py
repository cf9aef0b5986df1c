"""Configuration and result types for sheet nesting."""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from sheetnest.config import Settings, get_settings
from sheetnest.nesting.errors import InvalidConfiguration


class NestingAlgorithm(str, Enum):
    """Layout engines."""
    SEARCH = "search"  # Grid placement with randomized order search
    SHELF = "shelf"  # Single-pass shelf packing on bounding boxes

    @classmethod
    def parse(cls, value) -> "NestingAlgorithm":
        """Look up an algorithm by value, raising InvalidConfiguration if unknown."""
        try:
            return cls(value)
        except ValueError:
            choices = ", ".join(a.value for a in cls)
            raise InvalidConfiguration(f"Unknown algorithm {value!r}, expected one of: {choices}")


@dataclass
class NestingConfig:
    """Configuration for sheet nesting."""
    # Sheet dimensions
    sheet_width: float = 3000.0
    sheet_height: float = 1500.0

    # Gap added to both footprint dimensions
    spacing: float = 2.0

    # Search
    rotation_steps: int = 4  # 4 -> 0, 90, 180, 270 degrees
    iterations: int = 50
    population_size: int = 10  # Reserved, not used by the search
    mutation_rate: float = 0.1
    grid_step: float = 10.0
    seed: Optional[int] = None

    # Options
    strict_compat: bool = False  # Silent drops, no dropped_count
    algorithm: NestingAlgorithm = NestingAlgorithm.SEARCH

    @property
    def sheet_area(self) -> float:
        return self.sheet_width * self.sheet_height

    def validate(self) -> None:
        """Raise InvalidConfiguration if the values cannot produce a layout."""
        for name in ("sheet_width", "sheet_height"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise InvalidConfiguration(f"{name} must be a positive number, got {value}")
        for name in ("rotation_steps", "iterations", "population_size"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidConfiguration(f"{name} must be an integer, got {value!r}")
        if not math.isfinite(self.spacing) or self.spacing < 0:
            raise InvalidConfiguration(f"spacing must be non-negative, got {self.spacing}")
        if self.rotation_steps < 1:
            raise InvalidConfiguration(f"rotation_steps must be at least 1, got {self.rotation_steps}")
        if self.iterations < 0:
            raise InvalidConfiguration(f"iterations must be non-negative, got {self.iterations}")
        if self.population_size < 1:
            raise InvalidConfiguration(f"population_size must be at least 1, got {self.population_size}")
        if not 0.0 <= self.mutation_rate <= 1.0:
            raise InvalidConfiguration(f"mutation_rate must be within [0, 1], got {self.mutation_rate}")
        if not math.isfinite(self.grid_step) or self.grid_step <= 0:
            raise InvalidConfiguration(f"grid_step must be positive, got {self.grid_step}")

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "sheet_width": self.sheet_width,
            "sheet_height": self.sheet_height,
            "spacing": self.spacing,
            "rotation_steps": self.rotation_steps,
            "iterations": self.iterations,
            "population_size": self.population_size,
            "mutation_rate": self.mutation_rate,
            "grid_step": self.grid_step,
            "seed": self.seed,
            "strict_compat": self.strict_compat,
            "algorithm": self.algorithm.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "NestingConfig":
        """Create from dictionary. Missing keys take the dataclass defaults."""
        defaults = cls()
        return cls(
            sheet_width=data.get("sheet_width", defaults.sheet_width),
            sheet_height=data.get("sheet_height", defaults.sheet_height),
            spacing=data.get("spacing", defaults.spacing),
            rotation_steps=data.get("rotation_steps", defaults.rotation_steps),
            iterations=data.get("iterations", defaults.iterations),
            population_size=data.get("population_size", defaults.population_size),
            mutation_rate=data.get("mutation_rate", defaults.mutation_rate),
            grid_step=data.get("grid_step", defaults.grid_step),
            seed=data.get("seed", defaults.seed),
            strict_compat=data.get("strict_compat", defaults.strict_compat),
            algorithm=NestingAlgorithm.parse(data.get("algorithm", defaults.algorithm.value)),
        )

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **overrides) -> "NestingConfig":
        """Create from application settings, with keyword overrides."""
        settings = settings or get_settings()
        values = {
            "sheet_width": settings.sheet_width,
            "sheet_height": settings.sheet_height,
            "spacing": settings.spacing,
            "rotation_steps": settings.rotation_steps,
            "iterations": settings.iterations,
            "population_size": settings.population_size,
            "mutation_rate": settings.mutation_rate,
            "grid_step": settings.grid_step,
            "seed": settings.seed,
            "strict_compat": settings.strict_compat,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.from_dict(values)


@dataclass
class Placement:
    """A part instance placed on a sheet."""
    part_id: str
    sheet_index: int  # 0-based, in order of creation
    x: float  # Lower-left anchor of the padded footprint
    y: float
    rotation: float  # Radians
    area: float = 0.0  # Prototype area of the placed part

    @property
    def rotation_degrees(self) -> float:
        return math.degrees(self.rotation)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "part_id": self.part_id,
            "sheet_index": self.sheet_index,
            "x": self.x,
            "y": self.y,
            "rotation": self.rotation,
            "area": self.area,
        }


@dataclass
class NestingResult:
    """Result of a nesting run."""
    placements: List[Placement] = field(default_factory=list)
    sheets_used: int = 0
    utilization: List[float] = field(default_factory=list)  # Per sheet, 0..1
    iterations_run: int = 0
    dropped_count: Optional[int] = 0  # None in strict compatibility mode
    best_utilization: float = 0.0  # Attempt-time score of the kept attempt
    processing_time: float = 0.0
    algorithm: NestingAlgorithm = NestingAlgorithm.SEARCH
    cancelled: bool = False

    @property
    def placed_count(self) -> int:
        return len(self.placements)

    @property
    def overall_utilization(self) -> float:
        """Placed part area over the area of all used sheets."""
        if not self.utilization:
            return 0.0
        return sum(self.utilization) / len(self.utilization)

    def placements_on(self, sheet_index: int) -> List[Placement]:
        """Placements on one sheet, in placement order."""
        return [p for p in self.placements if p.sheet_index == sheet_index]

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "placements": [p.to_dict() for p in self.placements],
            "sheets_used": self.sheets_used,
            "utilization": list(self.utilization),
            "iterations_run": self.iterations_run,
            "dropped_count": self.dropped_count,
            "best_utilization": self.best_utilization,
            "processing_time": self.processing_time,
            "algorithm": self.algorithm.value,
            "cancelled": self.cancelled,
        }
