import math

import pytest

from slope_api.terrain.classification import classify_slope
from slope_api.terrain.features_math import CellSlope
from slope_api.terrain.stats import build_slope_matrix, compute_stats


def _cell(row, col, degrees):
    return CellSlope(
        row=row,
        col=col,
        degrees=degrees,
        percent=100.0 * math.tan(math.radians(degrees)),
        aspect_degrees=None,
        aspect_direction=None,
        classification=classify_slope(degrees),
    )


def test_stats_moments_and_distribution():
    degrees = [1.0, 2.0, 5.0, 10.0, 20.0, 31.0, 45.0]
    slopes = [_cell(1, i + 1, d) for i, d in enumerate(degrees)]
    z = [[100.0, None, 120.0], [110.0, 115.0, None]]

    stats = compute_stats(slopes, z)

    mean = sum(degrees) / len(degrees)
    std = math.sqrt(sum((d - mean) ** 2 for d in degrees) / len(degrees))
    assert stats.mean_degrees == pytest.approx(mean)
    assert stats.std_degrees == pytest.approx(std)
    assert stats.min_degrees == 1.0
    assert stats.max_degrees == 45.0
    assert stats.cell_count == 7

    assert stats.min_elevation == 100.0
    assert stats.max_elevation == 120.0
    assert stats.elevation_range == pytest.approx(20.0)
    assert stats.avg_elevation == pytest.approx(445.0 / 4)

    by_name = {b.name: b for b in stats.distribution}
    assert [b.name for b in stats.distribution] == ["flat", "gentle", "moderate", "steep", "very steep"]
    assert sum(b.percent for b in stats.distribution) == pytest.approx(100.0)
    assert by_name["very steep"].count == sum(1 for d in degrees if d >= 30.0)
    assert by_name["flat"].count == 2
    assert stats.flat_percent == pytest.approx(200.0 / 7)
    assert stats.steep_percent == pytest.approx(300.0 / 7)


def test_implausible_elevations_are_excluded():
    z = [[-9999.0, 50.0], [60.0, 8000.0]]
    stats = compute_stats([_cell(1, 1, 4.0)], z)
    assert stats.min_elevation == 50.0
    assert stats.max_elevation == 60.0


def test_empty_slope_set_yields_zero_stats():
    stats = compute_stats([], [[None, None], [None, None]])
    assert stats.mean_degrees == 0.0
    assert stats.elevation_range == 0.0
    assert stats.cell_count == 0
    assert stats.distribution == []


def test_slope_matrix_places_degrees_by_row_and_col():
    matrix = build_slope_matrix([_cell(1, 2, 12.5)], rows=3, cols=4)
    assert matrix[1][2] == 12.5
    assert sum(v is not None for row in matrix for v in row) == 1
