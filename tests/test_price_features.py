"""
Unit tests for price feature extraction.
Tests Finland filtering, regional averaging, synthetic weather and calendar flags.
"""

import unittest
import numpy as np
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from features.price_features import (
    FEATURE_NAMES, build_design_matrix, extract_features, filter_finland_points,
    regional_averages, synthetic_weather, time_flags
)
from models.data_models import DailyForecast, ForecastPoint, PriceRecord


def make_point(lat, lon, days):
    """Create a forecast point from (wind, temperature) tuples."""
    return ForecastPoint(lat=lat, lon=lon, forecasts=[
        DailyForecast(day=i, wind_speed=w, temperature=t) for i, (w, t) in enumerate(days)
    ])


class TestFinlandSelection(unittest.TestCase):
    """Test cases for the Finland bounding box."""

    def test_filter_keeps_points_inside_box(self):
        """Test that only points inside lat [60, 70] and lon [20, 32] are kept."""
        inside = make_point(65.0, 25.0, [(5, 0)])
        on_edge = make_point(60.0, 32.0, [(5, 0)])
        south = make_point(59.9, 25.0, [(5, 0)])
        west = make_point(65.0, 19.5, [(5, 0)])

        selected = filter_finland_points([inside, on_edge, south, west])
        self.assertEqual(selected, [inside, on_edge])

    def test_filter_handles_empty_and_none(self):
        """Test filtering of empty grids."""
        self.assertEqual(filter_finland_points([]), [])
        self.assertEqual(filter_finland_points(None), [])

    def test_regional_averages_count_missing_days(self):
        """Test that a point without the day still counts in the denominator."""
        long_series = make_point(65.0, 25.0, [(10, -3), (6, 1)])
        short_series = make_point(61.0, 21.0, [(4, 5)])

        wind, temp = regional_averages([long_series, short_series], 1)
        self.assertAlmostEqual(wind, 3.0)
        self.assertAlmostEqual(temp, 0.5)

        wind, temp = regional_averages([long_series, short_series], 1,
                                       missing_wind_speed=5.0, missing_temperature=0.0)
        self.assertAlmostEqual(wind, 5.5)

    def test_regional_averages_empty(self):
        """Test that an empty point set averages to zero instead of NaN."""
        self.assertEqual(regional_averages([], 0), (0.0, 0.0))


class TestSyntheticWeather(unittest.TestCase):
    """Test cases for the deterministic fallback weather."""

    def test_known_date_values(self):
        """Test values derived from the character-code sum of the date string."""
        # Character codes of '2024-01-15' sum to 489
        wind, temp = synthetic_weather('2024-01-15')
        self.assertAlmostEqual(wind, 3 + 0.89 * 8)
        self.assertAlmostEqual(temp, -5 + 0.89 * 20)

    def test_same_string_same_values(self):
        """Test reproducibility across calls."""
        self.assertEqual(synthetic_weather('2023-11-02'), synthetic_weather('2023-11-02'))

    def test_value_ranges(self):
        """Test that synthetic values stay within their ranges."""
        for day in range(1, 29):
            wind, temp = synthetic_weather(f'2024-02-{day:02d}')
            self.assertGreaterEqual(wind, 3)
            self.assertLess(wind, 11)
            self.assertGreaterEqual(temp, -5)
            self.assertLess(temp, 15)


class TestTimeFlags(unittest.TestCase):
    """Test cases for calendar-derived indicators."""

    def test_winter_months(self):
        """Test that November through March count as winter."""
        self.assertEqual(time_flags('2024-11-01')['isWinter'], 1)
        self.assertEqual(time_flags('2024-12-15')['isWinter'], 1)
        self.assertEqual(time_flags('2024-01-15')['isWinter'], 1)
        self.assertEqual(time_flags('2024-03-31')['isWinter'], 1)
        self.assertEqual(time_flags('2024-04-01')['isWinter'], 0)
        self.assertEqual(time_flags('2024-10-31')['isWinter'], 0)

    def test_peak_hours(self):
        """Test morning (7-9) and evening (17-20) peak boundaries."""
        self.assertEqual(time_flags('2024-01-15 06:00')['isMorningPeak'], 0)
        self.assertEqual(time_flags('2024-01-15 07:00')['isMorningPeak'], 1)
        self.assertEqual(time_flags('2024-01-15 09:59')['isMorningPeak'], 1)
        self.assertEqual(time_flags('2024-01-15 10:00')['isMorningPeak'], 0)
        self.assertEqual(time_flags('2024-01-15 16:00')['isEveningPeak'], 0)
        self.assertEqual(time_flags('2024-01-15 17:00')['isEveningPeak'], 1)
        self.assertEqual(time_flags('2024-01-15 20:00')['isEveningPeak'], 1)
        self.assertEqual(time_flags('2024-01-15 21:00')['isEveningPeak'], 0)

    def test_weekend(self):
        """Test Saturday and Sunday detection."""
        self.assertEqual(time_flags('2024-06-14')['isWeekend'], 0)  # Friday
        self.assertEqual(time_flags('2024-06-15')['isWeekend'], 1)  # Saturday
        self.assertEqual(time_flags('2024-06-16')['isWeekend'], 1)  # Sunday
        self.assertEqual(time_flags('2024-06-17')['isWeekend'], 0)  # Monday

    def test_date_only_is_midnight(self):
        """Test that a bare date has no peak flags set."""
        flags = time_flags('2024-01-15')
        self.assertEqual(flags['isMorningPeak'], 0)
        self.assertEqual(flags['isEveningPeak'], 0)


class TestExtractFeatures(unittest.TestCase):
    """Test cases for extract_features."""

    def setUp(self):
        """Set up test fixtures."""
        self.grid = [
            make_point(65.0, 25.0, [(10, -3), (6, 1)]),
            make_point(61.0, 21.0, [(4, 5)]),
            make_point(55.0, 10.0, [(20, 10), (20, 10)]),  # Denmark, ignored
        ]

    def test_uses_forecast_within_horizon(self):
        """Test averaging of Finland points for an in-horizon index."""
        features = extract_features(self.grid, [], '2024-01-15', 0)
        np.testing.assert_allclose(features, [7.0, 1.0, 1, 0, 0, 0, 7.0])

    def test_missing_day_entries_contribute_zero(self):
        """Test that missing per-point entries add zero but still count."""
        features = extract_features(self.grid, [], '2024-01-15', 1)
        self.assertAlmostEqual(features[0], 3.0)
        self.assertAlmostEqual(features[1], 0.5)

    def test_beyond_horizon_uses_synthetic_weather(self):
        """Test fallback for historical indices."""
        features = extract_features(self.grid, [], '2024-01-15', 9)
        wind, temp = synthetic_weather('2024-01-15')
        self.assertAlmostEqual(features[0], wind)
        self.assertAlmostEqual(features[1], temp)
        self.assertAlmostEqual(features[6], wind)

        negative = extract_features(self.grid, [], '2024-01-15', -1)
        np.testing.assert_allclose(negative, features)

    def test_empty_finland_selection_is_defined(self):
        """Test that a grid with no Finland points still yields a finite vector."""
        outside_only = [make_point(55.0, 10.0, [(20, 10)])]
        for day_index in range(9):
            features = extract_features(outside_only, [], '2024-06-15', day_index)
            self.assertEqual(len(features), 7)
            self.assertTrue(np.all(np.isfinite(features)))

    def test_deterministic_beyond_horizon(self):
        """Test that repeated calls give identical synthetic features."""
        first = extract_features([], [], '2023-12-24', 20)
        second = extract_features([], [], '2023-12-24', 20)
        np.testing.assert_array_equal(first, second)

    def test_vector_shape(self):
        """Test that the vector always has seven values."""
        cases = [(self.grid, 0), (self.grid, 15), ([], 0), (None, 3)]
        for grid, index in cases:
            features = extract_features(grid, [], '2024-07-01', index)
            self.assertEqual(features.shape, (7,))
        self.assertEqual(len(FEATURE_NAMES), 7)

    def test_summer_weekend_flags(self):
        """Test calendar flags for a summer Saturday."""
        features = extract_features(self.grid, [], '2024-06-15', 0)
        self.assertEqual(features[2], 0)  # isWinter
        self.assertEqual(features[5], 1)  # isWeekend
        self.assertEqual(features[6], 0)  # interaction vanishes outside winter


class TestDesignMatrix(unittest.TestCase):
    """Test cases for design matrix construction."""

    def test_rows_targets_and_default_price(self):
        """Test one row per record and the default target for missing prices."""
        prices = [
            PriceRecord(date='2024-01-15', avg_price=80.0),
            PriceRecord(date='2024-01-14'),
            PriceRecord(date='2024-01-13', avg_price=0.0),
        ]
        X, y = build_design_matrix([], prices)

        self.assertEqual(list(X.columns), FEATURE_NAMES)
        self.assertEqual(len(X), 3)
        self.assertEqual(list(y), [80.0, 50.0, 0.0])

    def test_empty_history(self):
        """Test that an empty history gives an empty matrix with named columns."""
        X, y = build_design_matrix([], [])
        self.assertTrue(X.empty)
        self.assertEqual(list(X.columns), FEATURE_NAMES)
        self.assertEqual(len(y), 0)


if __name__ == '__main__':
    unittest.main()
