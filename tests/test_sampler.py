"""Test module for asciidraw.sampler

The tests are run using pytest.
These tests cover the placement table, the lattice quantization and the
run compositing of SubCellSampler including corner smoothing and the
wrap-around of closed paths.
"""

from itertools import combinations

import pytest

from asciidraw.accumulator import AdAccumulator
from asciidraw.common import AdCellBits, AdSubPosition
from asciidraw.grid import AdGrid
from asciidraw.sampler import PLACEMENT_BITS, SubCellSampler, placement_bits

P = AdSubPosition
B = AdCellBits


@pytest.fixture
def grid():
    """A 5x5 grid of 10x10 cells at the screen origin."""
    return AdGrid(cell_width=10.0, cell_height=10.0, cols=5, rows=5)


@pytest.fixture
def accumulator():
    """An empty accumulator matching the grid."""
    return AdAccumulator(5, 5)


def _walk_small_loop(sampler):
    """Feed the touches of a loop around the shared corner of cells (1,1), (2,1), (2,2), (1,2)."""
    sampler.begin(15.0, 15.0)
    for touch in [
        (1, 1, 20.0, 15.0),
        (2, 1, 25.0, 15.0),
        (2, 1, 25.0, 20.0),
        (2, 2, 25.0, 25.0),
        (2, 2, 20.0, 25.0),
        (1, 2, 15.0, 25.0),
        (1, 2, 15.0, 20.0),
        (1, 1, 15.0, 15.0),
    ]:
        sampler.touch(*touch)
    sampler.finish()


###############################################################################
# Placement table Tests
###############################################################################


class TestPlacementBits:
    """Test class for the placement table."""

    def test_table_covers_all_pairs(self):
        """Test that every unordered pair of distinct positions has an entry."""
        expected = {frozenset(pair) for pair in combinations(P, 2)}

        assert set(PLACEMENT_BITS.keys()) == expected
        assert len(PLACEMENT_BITS) == 36

    def test_every_entry_has_one_or_two_bits(self):
        """Test that placements set only a few known bits."""
        for bits in PLACEMENT_BITS.values():
            assert 1 <= bin(int(bits)).count("1") <= 2

    def test_symmetric(self):
        """Test that the direction of a placement does not matter."""
        for entry, exit_ in combinations(P, 2):
            assert placement_bits(entry, exit_) == placement_bits(exit_, entry)

    @pytest.mark.parametrize(
        "entry, exit_, expected",
        [
            (P.C, P.TM, B.ARM_N),
            (P.ML, P.MR, B.ARM_W | B.ARM_E),
            (P.BR, P.TL, B.ARM_NW | B.ARM_SE),
            (P.BM, P.MR, B.ARC_SE),
            (P.TL, P.TR, B.EDGE_N),
            (P.BR, P.MR, B.EDGE_E),
            (P.TL, P.BM, B.STEEP_BACK),
            (P.BL, P.MR, B.SHALLOW_FWD),
        ],
    )
    def test_examples(self, entry, exit_, expected):
        """Test a few table entries."""
        assert placement_bits(entry, exit_) == expected

    def test_same_position(self):
        """Test that an empty placement gives no bits."""
        assert placement_bits(P.C, P.C) == B.NONE


###############################################################################
# SubCellSampler Tests
###############################################################################


class TestSubCellSampler:
    """Test class for SubCellSampler."""

    @pytest.mark.parametrize(
        "x, y, expected",
        [
            (10.0, 10.0, P.TL),
            (15.0, 15.0, P.C),
            (20.0, 15.0, P.MR),
            (12.4, 17.6, P.BL),
            (19.0, 11.0, P.TR),
            (17.5, 12.5, P.MR),
        ],
    )
    def test_quantize(self, grid, accumulator, x, y, expected):
        """Test rounding points of cell (1, 1) to the nearest lattice point."""
        sampler = SubCellSampler(grid, accumulator)

        assert sampler.quantize(1, 1, x, y) == expected

    def test_quantize_clamps_to_cell(self, grid, accumulator):
        """Test that points outside the cell snap to its border."""
        sampler = SubCellSampler(grid, accumulator)

        assert sampler.quantize(1, 1, 40.0, -30.0) == P.TR

    def test_cell_change_flushes_run(self, grid, accumulator):
        """Test that leaving a cell composites its run and re-enters at the crossing."""
        sampler = SubCellSampler(grid, accumulator)
        sampler.begin(15.0, 15.0)
        sampler.touch(1, 1, 20.0, 15.0)
        sampler.touch(2, 1, 25.0, 15.0)

        assert accumulator.get(1, 1) == B.ARM_E
        assert accumulator.get(2, 1) == 0

        sampler.finish()

        assert accumulator.get(2, 1) == B.ARM_W
        assert not sampler.active

    def test_corner_smoothing_collapses_arc(self, grid, accumulator):
        """Test that a turn close to the chord becomes one arc placement."""
        sampler = SubCellSampler(grid, accumulator, corner_smoothing=0.4)
        sampler.begin(10.0, 15.0)
        sampler.touch(1, 1, 15.0, 15.0)
        sampler.touch(1, 1, 15.0, 20.0)
        sampler.finish()

        assert accumulator.get(1, 1) == B.ARC_SW

    def test_without_smoothing_keeps_arms(self, grid, accumulator):
        """Test that disabled smoothing composites every placement."""
        sampler = SubCellSampler(grid, accumulator, corner_smoothing=0.0)
        sampler.begin(10.0, 15.0)
        sampler.touch(1, 1, 15.0, 15.0)
        sampler.touch(1, 1, 15.0, 20.0)
        sampler.finish()

        assert accumulator.get(1, 1) == B.ARM_W | B.ARM_S

    def test_sharp_turn_is_not_smoothed(self, grid, accumulator):
        """Test that a V-shaped run keeps both arms."""
        sampler = SubCellSampler(grid, accumulator, corner_smoothing=0.4)
        sampler.begin(10.0, 10.0)
        sampler.touch(1, 1, 15.0, 15.0)
        sampler.touch(1, 1, 20.0, 10.0)
        sampler.finish()

        assert accumulator.get(1, 1) == B.ARM_NW | B.ARM_NE

    def test_out_of_range_cells_are_dropped(self, grid, accumulator):
        """Test that runs outside the grid write nothing."""
        sampler = SubCellSampler(grid, accumulator)
        sampler.begin(-5.0, -5.0)
        sampler.touch(-1, -1, -1.0, -5.0)
        sampler.finish()

        assert accumulator.is_empty

    def test_closed_path_joins_first_and_last_run(self, grid, accumulator):
        """Test that the start cell of a closed loop gets one rounded corner."""
        sampler = SubCellSampler(grid, accumulator, closed=True)

        _walk_small_loop(sampler)

        assert accumulator.get(1, 1) == B.ARC_SE
        assert accumulator.get(2, 1) == B.ARC_SW
        assert accumulator.get(2, 2) == B.ARC_NW
        assert accumulator.get(1, 2) == B.ARC_NE

    def test_open_path_keeps_start_and_end_apart(self, grid, accumulator):
        """Test that an open path composites its first and last run separately."""
        sampler = SubCellSampler(grid, accumulator, closed=False)

        _walk_small_loop(sampler)

        assert accumulator.get(1, 1) == B.ARM_E | B.ARM_S
        assert accumulator.get(2, 2) == B.ARC_NW

    def test_closed_path_deferral(self, grid, accumulator):
        """Test that the first run of a closed path is written by finish()."""
        sampler = SubCellSampler(grid, accumulator, closed=True)
        sampler.begin(15.0, 15.0)
        sampler.touch(1, 1, 20.0, 15.0)
        sampler.touch(2, 1, 30.0, 15.0)
        sampler.touch(3, 1, 35.0, 15.0)

        assert accumulator.get(1, 1) == 0
        assert accumulator.get(2, 1) == B.ARM_W | B.ARM_E

        sampler.finish()

        assert accumulator.get(1, 1) == B.ARM_E

    def test_restart_breaks_the_path(self, grid, accumulator):
        """Test that restart() does not connect the runs before and after."""
        sampler = SubCellSampler(grid, accumulator)
        sampler.begin(15.0, 15.0)
        sampler.touch(1, 1, 20.0, 15.0)
        sampler.restart(35.0, 35.0)
        sampler.touch(3, 3, 35.0, 40.0)
        sampler.finish()

        assert accumulator.get(1, 1) == B.ARM_E
        assert accumulator.get(3, 3) == B.ARM_S
