"""
Tests for the median-threshold boundary classifier.
"""

import numpy as np
import pytest

from jigsaw_solver.config.settings import get_settings
from jigsaw_solver.models.boundary_classifier import (
    BoundaryMap,
    Orientation,
    ThresholdBoundaryClassifier,
)
from jigsaw_solver.utils.error_handling import BoundaryShapeError


def test_thick_segments_are_above_threshold(standard_counts):
    """Box walls at 40 ink against a median of 10 are classified thick."""
    horizontal, vertical = standard_counts
    boundary_map = ThresholdBoundaryClassifier().classify(horizontal, vertical)

    assert boundary_map.median == 10.0
    assert boundary_map.threshold == 15.0
    # 36 perimeter segments plus 2x9 inner walls per orientation
    assert boundary_map.thick_count == 72
    assert boundary_map.horizontal[3].all()
    assert not boundary_map.horizontal[1].any()
    assert boundary_map.vertical[6].all()
    assert not boundary_map.vertical[4].any()


def test_count_equal_to_threshold_is_thin():
    horizontal = np.full((10, 9), 10.0)
    vertical = np.full((10, 9), 10.0)
    horizontal[5, 4] = 15.0
    vertical[2, 7] = 15.5

    boundary_map = ThresholdBoundaryClassifier().classify(horizontal, vertical)

    assert not boundary_map.is_thick(Orientation.HORIZONTAL, 5, 4)
    assert boundary_map.is_thick(Orientation.VERTICAL, 2, 7)


def test_perimeter_forced_thick_even_without_ink():
    zeros = np.zeros((10, 9))
    boundary_map = ThresholdBoundaryClassifier().classify(zeros, zeros)

    for line in (0, 9):
        assert boundary_map.horizontal[line].all()
        assert boundary_map.vertical[line].all()
    assert not boundary_map.horizontal[1:9].any()
    assert not boundary_map.vertical[1:9].any()


def test_perimeter_can_follow_counts_when_not_forced():
    zeros = np.zeros((10, 9))
    boundary_map = ThresholdBoundaryClassifier(force_outer_border=False).classify(zeros, zeros)

    assert boundary_map.thick_count == 0


def test_median_covers_both_tables():
    horizontal = np.full((10, 9), 2.0)
    vertical = np.full((10, 9), 100.0)

    boundary_map = ThresholdBoundaryClassifier().classify(horizontal, vertical)

    # Even count of segments: median is the mean of the two middle values
    assert boundary_map.median == pytest.approx(51.0)
    assert boundary_map.vertical.all()
    assert not boundary_map.horizontal[1:9].any()


def test_threshold_factor_from_settings(standard_counts):
    get_settings().set("boundary_classifier.threshold_factor", 5.0)
    horizontal, vertical = standard_counts

    classifier = ThresholdBoundaryClassifier()
    boundary_map = classifier.classify(horizontal, vertical)

    assert classifier.threshold_factor == 5.0
    # 40 is not above 5 * 10, so only the forced perimeter remains
    assert boundary_map.thick_count == 36


def test_input_tables_not_modified(standard_counts):
    horizontal, vertical = standard_counts
    before = (horizontal.copy(), vertical.copy())

    ThresholdBoundaryClassifier().classify(horizontal, vertical)

    np.testing.assert_array_equal(horizontal, before[0])
    np.testing.assert_array_equal(vertical, before[1])


def test_nested_lists_accepted(standard_counts):
    horizontal, vertical = standard_counts
    from_lists = ThresholdBoundaryClassifier().classify(horizontal.tolist(), vertical.tolist())
    from_arrays = ThresholdBoundaryClassifier().classify(horizontal, vertical)

    np.testing.assert_array_equal(from_lists.horizontal, from_arrays.horizontal)
    np.testing.assert_array_equal(from_lists.vertical, from_arrays.vertical)


@pytest.mark.parametrize("shape", [(9, 9), (10, 10), (9, 10)])
def test_wrong_table_shape_rejected(shape):
    with pytest.raises(BoundaryShapeError):
        ThresholdBoundaryClassifier().classify(np.ones(shape), np.ones((10, 9)))


def test_negative_counts_rejected():
    horizontal = np.ones((10, 9))
    horizontal[4, 4] = -1
    with pytest.raises(BoundaryShapeError):
        ThresholdBoundaryClassifier().classify(horizontal, np.ones((10, 9)))


def test_non_finite_counts_rejected():
    vertical = np.ones((10, 9))
    vertical[0, 0] = np.nan
    with pytest.raises(BoundaryShapeError):
        ThresholdBoundaryClassifier().classify(np.ones((10, 9)), vertical)


def test_boundary_shape_error_is_value_error():
    with pytest.raises(ValueError):
        ThresholdBoundaryClassifier().classify(np.ones((3, 3)), np.ones((10, 9)))


class TestBoundaryMap:
    def test_segment_between_horizontal_neighbours(self):
        assert BoundaryMap.segment_between((4, 2), (4, 3)) == (Orientation.VERTICAL, 3, 4)
        assert BoundaryMap.segment_between((4, 3), (4, 2)) == (Orientation.VERTICAL, 3, 4)

    def test_segment_between_vertical_neighbours(self):
        assert BoundaryMap.segment_between((2, 6), (3, 6)) == (Orientation.HORIZONTAL, 3, 6)

    def test_segment_between_rejects_non_neighbours(self):
        with pytest.raises(ValueError):
            BoundaryMap.segment_between((0, 0), (1, 1))
        with pytest.raises(ValueError):
            BoundaryMap.segment_between((0, 0), (0, 2))

    def test_separates_follows_walls(self, standard_counts):
        boundary_map = ThresholdBoundaryClassifier().classify(*standard_counts)

        assert boundary_map.separates((0, 2), (0, 3))
        assert boundary_map.separates((2, 0), (3, 0))
        assert not boundary_map.separates((0, 0), (0, 1))
        assert not boundary_map.separates((4, 4), (5, 4))

    def test_segments_cover_every_line_position(self, standard_counts):
        boundary_map = ThresholdBoundaryClassifier().classify(*standard_counts)
        segments = list(boundary_map.segments())

        assert len(segments) == 180
        assert sum(segment.thick for segment in segments) == boundary_map.thick_count
        assert all(segment.thick for segment in segments if segment.is_outer)
        assert segments[0].count == 40.0

    def test_rejects_wrong_shape(self):
        with pytest.raises(BoundaryShapeError):
            BoundaryMap(np.zeros((9, 9), dtype=bool), np.zeros((10, 9), dtype=bool))
