"""Tests for the nesting entry point."""

import json
import logging
import random
import threading

import pytest

from sheetnest.nesting import (
    InvalidConfiguration,
    InvalidPart,
    Nester,
    NestingAlgorithm,
    NestingConfig,
    NestingError,
    NestingResult,
    Part,
    Polygon,
    create_nester,
    nest_parts,
)
from sheetnest.nesting.parts import expand_parts


def square_parts(size, count):
    return [Part("sq", Polygon.rectangle(size, size), quantity=count)]


@pytest.fixture
def grid_config():
    """A 100x100 sheet, no spacing, no rotation, one attempt."""
    return NestingConfig(
        sheet_width=100, sheet_height=100, spacing=0, rotation_steps=1, iterations=1
    )


@pytest.fixture
def job_parts():
    """A realistic mix of parts."""
    return [
        Part("bracket", Polygon.from_points([(0, 0), (80, 0), (80, 20), (20, 20), (20, 60), (0, 60)]), 4),
        Part("plate", Polygon.rectangle(150, 90), 2),
        Part("washer", Polygon.rectangle(25, 25), 10),
        Part("rib", Polygon((0, 0, 120, 0, 120, 12, 0, 12)), 3),
    ]


class TestNestingAlgorithm:
    """Tests for NestingAlgorithm enum."""

    def test_algorithm_values(self):
        """Test algorithm values."""
        assert NestingAlgorithm.SEARCH.value == "search"
        assert NestingAlgorithm.SHELF.value == "shelf"


class TestNestingConfig:
    """Tests for NestingConfig dataclass."""

    def test_default_config(self):
        """Test default configuration."""
        config = NestingConfig()

        assert config.sheet_width == 3000.0
        assert config.sheet_height == 1500.0
        assert config.spacing == 2.0
        assert config.rotation_steps == 4
        assert config.iterations == 50
        assert config.population_size == 10
        assert config.mutation_rate == 0.1
        assert config.grid_step == 10.0
        assert config.seed is None
        assert config.strict_compat is False
        assert config.algorithm == NestingAlgorithm.SEARCH

    def test_sheet_area(self):
        """Test sheet area."""
        assert NestingConfig(sheet_width=20, sheet_height=5).sheet_area == 100

    def test_to_dict(self):
        """Test config serialization."""
        d = NestingConfig(seed=4, algorithm=NestingAlgorithm.SHELF).to_dict()

        assert d["seed"] == 4
        assert d["algorithm"] == "shelf"
        assert "population_size" in d

    def test_from_dict(self):
        """Test config deserialization."""
        config = NestingConfig.from_dict({"sheet_width": 1200, "iterations": 5, "algorithm": "shelf"})

        assert config.sheet_width == 1200
        assert config.iterations == 5
        assert config.algorithm == NestingAlgorithm.SHELF
        assert config.sheet_height == 1500.0

    def test_default_config_is_valid(self):
        """Test that defaults pass validation."""
        NestingConfig().validate()

    @pytest.mark.parametrize(
        "field,value",
        [
            ("sheet_width", 0),
            ("sheet_height", -10),
            ("sheet_width", float("nan")),
            ("spacing", -1),
            ("rotation_steps", 0),
            ("iterations", -1),
            ("population_size", 0),
            ("mutation_rate", 1.5),
            ("mutation_rate", -0.1),
            ("grid_step", 0),
        ],
    )
    def test_invalid_values(self, field, value):
        """Test that malformed values are rejected."""
        config = NestingConfig(**{field: value})
        with pytest.raises(InvalidConfiguration):
            config.validate()

    @pytest.mark.parametrize(
        "field,value",
        [("rotation_steps", 2.5), ("iterations", 10.0), ("population_size", True)],
    )
    def test_non_integer_counts(self, field, value):
        """Test that counts must be integers."""
        config = NestingConfig(**{field: value})
        with pytest.raises(InvalidConfiguration, match="must be an integer"):
            config.validate()

    def test_from_dict_unknown_algorithm(self):
        """Test that an unknown algorithm name is a configuration error."""
        with pytest.raises(InvalidConfiguration, match="Unknown algorithm"):
            NestingConfig.from_dict({"algorithm": "genetic"})

    def test_error_hierarchy(self):
        """Test that config errors are value errors."""
        assert issubclass(InvalidConfiguration, NestingError)
        assert issubclass(InvalidConfiguration, ValueError)


class TestNester:
    """Tests for Nester class."""

    @pytest.fixture
    def nester(self, grid_config):
        """Create test nester."""
        return Nester(grid_config)

    def test_init(self):
        """Test nester initialization."""
        nester = Nester()
        assert nester.config is not None
        assert nester.config.algorithm == NestingAlgorithm.SEARCH

    def test_nest_no_parts(self, nester):
        """Test nesting with no parts."""
        result = nester.nest([])

        assert isinstance(result, NestingResult)
        assert result.placements == []
        assert result.sheets_used == 0
        assert result.utilization == []

    def test_single_square(self, nester):
        """Test one square lands at the origin of the first sheet."""
        result = nester.nest(square_parts(30, 1))

        assert len(result.placements) == 1
        p = result.placements[0]
        assert (p.part_id, p.sheet_index, p.x, p.y, p.rotation) == ("sq", 0, 0.0, 0.0, 0.0)
        assert result.sheets_used == 1
        assert result.utilization[0] == pytest.approx(900 / 10000)
        assert result.iterations_run == 1

    def test_squares_fill_one_sheet(self, nester):
        """Test that squares tiling the sheet exactly use one sheet."""
        result = nester.nest(square_parts(50, 4))

        assert result.sheets_used == 1
        assert all(p.sheet_index == 0 for p in result.placements)
        assert result.utilization == [1.0]

    def test_one_more_square_opens_sheet(self, nester):
        """Test that one extra square forces a second sheet."""
        result = nester.nest(square_parts(50, 5))

        assert result.sheets_used == 2
        assert result.utilization == [1.0, 0.25]
        assert result.best_utilization == pytest.approx(0.625)

    def test_single_iteration_is_deterministic(self, nester, job_parts):
        """Test that one attempt gives identical placements."""
        first = nester.nest(job_parts)
        second = nester.nest(job_parts)

        assert first.placements == second.placements

    def test_nest_dict_parts(self, nester):
        """Test nesting parts given as dictionaries."""
        result = nester.nest([{"id": "d", "polygon": [0, 0, 20, 0, 20, 20, 0, 20], "quantity": 2}])

        assert result.placed_count == 2
        assert {p.part_id for p in result.placements} == {"d"}

    def test_nest_dict_missing_id(self, nester):
        """Test that a dictionary without an id is rejected."""
        with pytest.raises(InvalidPart):
            nester.nest([{"polygon": [0, 0, 1, 0, 1, 1]}])

    def test_nest_unsupported_part(self, nester):
        """Test that other part types are rejected."""
        with pytest.raises(InvalidPart):
            nester.nest([42])

    def test_invalid_config_raises(self):
        """Test that nesting validates the configuration first."""
        nester = Nester(NestingConfig(sheet_width=0))
        with pytest.raises(InvalidConfiguration):
            nester.nest(square_parts(10, 1))

    def test_oversized_part_dropped(self, nester, caplog):
        """Test that an oversized part is dropped and reported."""
        parts = square_parts(50, 1) + [Part("huge", Polygon.rectangle(200, 10))]

        with caplog.at_level(logging.WARNING, logger="sheetnest.nesting.nester"):
            result = nester.nest(parts)

        assert [p.part_id for p in result.placements] == ["sq"]
        assert result.dropped_count == 1
        assert "did not fit" in caplog.text

    def test_strict_compat_drops_silently(self, grid_config, caplog):
        """Test that strict compatibility reports nothing about drops."""
        grid_config.strict_compat = True
        parts = square_parts(50, 1) + [Part("huge", Polygon.rectangle(200, 10))]

        with caplog.at_level(logging.WARNING, logger="sheetnest.nesting.nester"):
            result = Nester(grid_config).nest(parts)

        assert result.placed_count == 1
        assert result.dropped_count is None
        assert "did not fit" not in caplog.text

    def test_zero_iterations(self, grid_config):
        """Test that zero iterations give an empty result."""
        grid_config.iterations = 0
        result = Nester(grid_config).nest(square_parts(10, 3))

        assert result.placements == []
        assert result.sheets_used == 0
        assert result.iterations_run == 0

    def test_population_size_has_no_effect(self, job_parts):
        """Test that population size does not change the layout."""
        small = NestingConfig(sheet_width=400, sheet_height=300, iterations=5, seed=1, population_size=1)
        large = NestingConfig(sheet_width=400, sheet_height=300, iterations=5, seed=1, population_size=500)

        assert Nester(small).nest(job_parts).placements == Nester(large).nest(job_parts).placements

    def test_injected_rng(self, job_parts):
        """Test passing a random source."""
        config = NestingConfig(sheet_width=400, sheet_height=300, iterations=8, mutation_rate=0.5)
        nester = Nester(config)

        first = nester.nest(job_parts, rng=random.Random(9))
        second = nester.nest(job_parts, rng=random.Random(9))

        assert first.placements == second.placements

    def test_progress_callback(self, job_parts):
        """Test progress reporting through the nester."""
        config = NestingConfig(sheet_width=400, sheet_height=300, iterations=6, seed=2)
        calls = []

        result = Nester(config).nest(job_parts, progress=lambda *args: calls.append(args))

        assert len(calls) == 6
        assert calls[-1] == (6, 6, result.best_utilization)

    def test_cancelled_before_start(self, nester):
        """Test nesting with an already cancelled event."""
        cancel = threading.Event()
        cancel.set()

        result = nester.nest(square_parts(10, 3), cancel=cancel)

        assert result.cancelled is True
        assert result.iterations_run == 0
        assert result.placements == []

    def test_processing_time(self, nester):
        """Test that elapsed time is recorded."""
        result = nester.nest(square_parts(10, 3))
        assert result.processing_time >= 0


class TestLayoutProperties:
    """Tests for properties every search layout must have."""

    @pytest.fixture
    def result(self, job_parts):
        """A seeded multi-sheet layout."""
        config = NestingConfig(sheet_width=400, sheet_height=300, spacing=3, iterations=15, seed=21)
        return Nester(config).nest(job_parts)

    def test_every_instance_accounted_for(self, result, job_parts):
        """Test placed plus dropped equals the expanded count."""
        assert result.placed_count + result.dropped_count == len(expand_parts(job_parts))

    def test_sheet_indices_contiguous(self, result):
        """Test that every used sheet holds at least one placement."""
        assert {p.sheet_index for p in result.placements} == set(range(result.sheets_used))
        assert len(result.utilization) == result.sheets_used

    def test_anchors_on_sheet(self, result):
        """Test that anchors are within the sheet."""
        for p in result.placements:
            assert 0 <= p.x <= 400
            assert 0 <= p.y <= 300

    def test_rotations_from_steps(self, result):
        """Test that rotations are multiples of the step angle."""
        allowed = {0.0, 90.0, 180.0, 270.0}
        assert {round(p.rotation_degrees, 6) for p in result.placements} <= allowed

    def test_utilization_in_range(self, result):
        """Test per-sheet utilization is a positive ratio."""
        assert all(u > 0 for u in result.utilization)

    def test_result_is_json_serializable(self, result):
        """Test that the result dict dumps to JSON."""
        data = json.loads(json.dumps(result.to_dict()))
        assert data["sheets_used"] == result.sheets_used


class TestShelfAlgorithm:
    """Tests for selecting the shelf packer through the nester."""

    @pytest.fixture
    def config(self):
        """Shelf packing on a 1000x500 sheet."""
        return NestingConfig(sheet_width=1000, sheet_height=500, algorithm=NestingAlgorithm.SHELF)

    def test_shelf_result(self, config, job_parts):
        """Test that the shelf packer runs once."""
        result = Nester(config).nest(job_parts)

        assert result.algorithm == NestingAlgorithm.SHELF
        assert result.iterations_run == 1
        assert result.placed_count == 19

    def test_shelf_progress(self, config, job_parts):
        """Test a single progress report."""
        calls = []
        result = Nester(config).nest(job_parts, progress=lambda *args: calls.append(args))

        assert calls == [(1, 1, result.best_utilization)]

    def test_shelf_strict_compat(self, config, caplog):
        """Test that strict compatibility hides the shelf drop count."""
        config.strict_compat = True
        with caplog.at_level(logging.WARNING, logger="sheetnest.nesting"):
            result = Nester(config).nest([Part("huge", Polygon.rectangle(5000, 5000))])

        assert result.placements == []
        assert result.dropped_count is None
        assert "does not fit" not in caplog.text


class TestExportLayout:
    """Tests for layout export."""

    @pytest.fixture
    def nester(self, grid_config):
        """Create test nester."""
        return Nester(grid_config)

    def test_export_layout(self, nester):
        """Test exporting a layout."""
        result = nester.nest(square_parts(50, 5))
        layout = nester.export_layout(result)

        assert "; Sheet: 100x100" in layout
        assert "; Sheets used: 2" in layout
        assert "; Parts placed: 5" in layout
        assert "; Sheet 1: 100.0% utilization" in layout
        assert "; Sheet 2: 25.0% utilization" in layout
        assert ";   sq at (50.0, 0.0) rotated 0°" in layout

    def test_export_unplaced(self, nester):
        """Test that dropped instances are listed."""
        result = nester.nest(square_parts(50, 1) + [Part("huge", Polygon.rectangle(200, 10))])
        layout = nester.export_layout(result)

        assert "; Unplaced instances: 1" in layout

    def test_export_empty(self, nester):
        """Test exporting an empty result."""
        layout = nester.export_layout(NestingResult())

        assert "; Sheets used: 0" in layout
        assert "Unplaced" not in layout


class TestConvenienceFunctions:
    """Tests for convenience functions."""

    def test_create_nester(self):
        """Test create_nester function."""
        nester = create_nester(
            sheet_width=1200,
            sheet_height=600,
            algorithm="shelf",
            spacing=5,
        )

        assert nester.config.sheet_width == 1200
        assert nester.config.sheet_height == 600
        assert nester.config.algorithm == NestingAlgorithm.SHELF
        assert nester.config.spacing == 5

    def test_create_nester_bad_algorithm(self):
        """Test that an unknown algorithm name is rejected."""
        with pytest.raises(InvalidConfiguration):
            create_nester(algorithm="genetic")

    def test_nest_parts_function(self, job_parts):
        """Test nest_parts function."""
        calls = []
        result = nest_parts(
            job_parts,
            sheet_width=500,
            sheet_height=400,
            progress=lambda *args: calls.append(args),
            iterations=3,
            seed=5,
        )

        assert isinstance(result, NestingResult)
        assert result.iterations_run == 3
        assert len(calls) == 3
        assert result.placed_count == 19
