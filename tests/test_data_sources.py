"""
Unit tests for data storage, synthetic generators and source resolution.
"""

import unittest
import tempfile
import shutil
import json
from datetime import date
from pathlib import Path
import numpy as np
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from data.storage import read_json, write_json_atomic
from data.synthetic import (
    generate_sample_price_data, generate_sample_wind_data, is_winter_month
)
from data.sources import (
    DataSource, Loaded, Synthetic, load_forecast_grid, load_price_history,
    resolve_forecast_grid, resolve_price_history
)
from models.data_models import ForecastGrid, PriceHistory
from utils.exceptions import DataLoadError


class TestStorage(unittest.TestCase):
    """Test cases for JSON storage helpers."""

    def setUp(self):
        """Set up test fixtures."""
        self.test_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_write_and_read(self):
        """Test writing then reading a record."""
        target = self.test_dir / "nested" / "record.json"
        path = write_json_atomic(target, {'a': 1, 'b': [1, 2]})

        self.assertEqual(path, target)
        self.assertEqual(read_json(target), {'a': 1, 'b': [1, 2]})
        self.assertEqual(os.listdir(target.parent), ['record.json'])

    def test_write_replaces_existing(self):
        """Test that writes replace the previous content."""
        target = self.test_dir / "record.json"
        write_json_atomic(target, {'version': 1})
        write_json_atomic(target, {'version': 2})
        self.assertEqual(read_json(target), {'version': 2})

    def test_failed_write_keeps_previous(self):
        """Test that an unserializable payload leaves the old file intact."""
        target = self.test_dir / "record.json"
        write_json_atomic(target, {'version': 1})

        class Unserializable:
            def __str__(self):
                raise RuntimeError("cannot serialize")

        with self.assertRaises(RuntimeError):
            write_json_atomic(target, {'bad': Unserializable()})

        self.assertEqual(read_json(target), {'version': 1})
        self.assertEqual(os.listdir(self.test_dir), ['record.json'])

    def test_read_missing(self):
        """Test reading a missing file."""
        with self.assertRaises(DataLoadError):
            read_json(self.test_dir / "missing.json")

    def test_read_invalid_json(self):
        """Test reading a corrupt file."""
        target = self.test_dir / "corrupt.json"
        target.write_text("{not json")
        with self.assertRaises(DataLoadError):
            read_json(target)


class TestSyntheticData(unittest.TestCase):
    """Test cases for synthetic data generators."""

    def test_winter_months(self):
        """Test the winter month set."""
        self.assertEqual([m for m in range(1, 13) if is_winter_month(m)], [1, 2, 3, 11, 12])

    def test_wind_grid_shape_and_bounds(self):
        """Test grid coverage and value bounds."""
        points = generate_sample_wind_data(np.random.default_rng(0))

        self.assertEqual(len(points), 11 * 17)
        lats = {p.lat for p in points}
        self.assertEqual(min(lats), 55.0)
        self.assertEqual(max(lats), 70.0)
        for point in points:
            self.assertEqual([f.day for f in point.forecasts], list(range(9)))
            for forecast in point.forecasts:
                self.assertGreaterEqual(forecast.wind_speed, 1.0)
                self.assertGreaterEqual(forecast.wind_direction, 0.0)
                self.assertLess(forecast.wind_direction, 360.0)
                self.assertEqual(forecast.humidity, 50.0)

    def test_wind_grid_reproducible(self):
        """Test that a seeded generator reproduces the grid."""
        first = generate_sample_wind_data(np.random.default_rng(11))
        second = generate_sample_wind_data(np.random.default_rng(11))
        self.assertEqual(first, second)

    def test_price_history_shape(self):
        """Test record count, dates and hourly structure."""
        records = generate_sample_price_data(np.random.default_rng(0), today=date(2024, 3, 31))

        self.assertEqual(len(records), 31)
        self.assertEqual(records[0].date, '2024-03-01')
        self.assertEqual(records[-1].date, '2024-03-31')
        for record in records:
            prices = [h.price for h in record.hourly_prices]
            self.assertEqual([h.hour for h in record.hourly_prices], list(range(24)))
            self.assertTrue(all(p >= 0 for p in prices))
            self.assertAlmostEqual(record.avg_price, sum(prices) / 24)
            self.assertEqual(record.max_price, max(prices))
            self.assertEqual(record.min_price, min(prices))
            self.assertEqual(record.area, 'FI')

    def test_winter_prices_higher(self):
        """Test the seasonal price heuristic."""
        winter = generate_sample_price_data(np.random.default_rng(5), today=date(2024, 1, 31))
        summer = generate_sample_price_data(np.random.default_rng(5), today=date(2024, 7, 31))
        winter_mean = np.mean([r.avg_price for r in winter])
        summer_mean = np.mean([r.avg_price for r in summer])
        self.assertGreater(winter_mean, summer_mean)

    def test_evening_peak_above_night(self):
        """Test the time-of-day price heuristic."""
        records = generate_sample_price_data(np.random.default_rng(2), today=date(2024, 1, 31))
        night = np.mean([r.hourly_prices[3].price for r in records])
        evening = np.mean([r.hourly_prices[18].price for r in records])
        self.assertGreater(evening, night)


class TestSources(unittest.TestCase):
    """Test cases for loading and resolving data sources."""

    def setUp(self):
        """Set up test fixtures."""
        self.test_dir = Path(tempfile.mkdtemp())
        self.wind_file = self.test_dir / "wind-data.json"
        self.price_file = self.test_dir / "nordpool-prices.json"
        self.rng = np.random.default_rng(8)

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def write(self, path, payload):
        with open(path, 'w') as f:
            json.dump(payload, f)

    def test_load_grid_envelope(self):
        """Test loading a persisted grid envelope."""
        grid = ForecastGrid(data=generate_sample_wind_data(self.rng))
        write_json_atomic(self.wind_file, grid.to_dict())

        loaded = load_forecast_grid(self.wind_file)
        self.assertEqual(loaded.point_count, grid.point_count)
        self.assertEqual(loaded.data[0].forecasts[0].wind_speed, grid.data[0].forecasts[0].wind_speed)

    def test_load_grid_bare_list(self):
        """Test that a bare list of points is accepted."""
        self.write(self.wind_file, [{'lat': 65, 'lon': 25, 'forecasts': [
            {'day': 0, 'windSpeed': 6.5, 'temperature': -2}
        ]}])
        loaded = load_forecast_grid(self.wind_file)
        self.assertEqual(loaded.point_count, 1)
        self.assertEqual(loaded.data[0].forecasts[0].humidity, 50.0)

    def test_load_grid_rejects_day_mismatch(self):
        """Test that a forecast stored at the wrong position is rejected."""
        self.write(self.wind_file, {'data': [{'lat': 65, 'lon': 25, 'forecasts': [
            {'day': 1, 'windSpeed': 6.5, 'temperature': -2}
        ]}]})
        with self.assertRaises(DataLoadError):
            load_forecast_grid(self.wind_file)

    def test_load_prices(self):
        """Test loading a persisted price history."""
        history = PriceHistory(data=generate_sample_price_data(self.rng, today=date(2024, 5, 1)))
        write_json_atomic(self.price_file, history.to_dict())

        loaded = load_price_history(self.price_file)
        self.assertEqual(len(loaded.data), 31)
        self.assertEqual(loaded.data[-1].date, '2024-05-01')
        self.assertEqual(loaded.source, 'external')

    def test_load_prices_missing_field(self):
        """Test that a record without a date is rejected."""
        self.write(self.price_file, {'data': [{'avgPrice': 40}]})
        with self.assertRaises(DataLoadError):
            load_price_history(self.price_file)

    def test_data_source_is_abstract(self):
        """Test that only the Loaded and Synthetic variants can be created."""
        with self.assertRaises(TypeError):
            DataSource()

    def test_resolve_missing_files(self):
        """Test fallback to synthetic data when files are absent."""
        wind = resolve_forecast_grid(self.wind_file, self.rng)
        prices = resolve_price_history(self.price_file, self.rng)

        self.assertIsInstance(wind, Synthetic)
        self.assertTrue(wind.is_synthetic)
        self.assertTrue(wind.provenance.startswith("synthetic ("))
        self.assertEqual(len(wind.data), 11 * 17)
        self.assertIsInstance(prices, Synthetic)
        self.assertEqual(len(prices.data), 31)

    def test_resolve_loaded_files(self):
        """Test that present files are reported as loaded."""
        self.write(self.wind_file, [])
        self.write(self.price_file, [{'date': '2024-01-15', 'avgPrice': 72.5}])

        wind = resolve_forecast_grid(self.wind_file, self.rng)
        prices = resolve_price_history(self.price_file, self.rng)

        self.assertIsInstance(wind, Loaded)
        self.assertFalse(wind.is_synthetic)
        self.assertEqual(wind.data, [])
        self.assertEqual(wind.provenance, f"loaded from {self.wind_file}")
        self.assertIsInstance(prices, Loaded)
        self.assertEqual(prices.data[0].avg_price, 72.5)

    def test_resolve_empty_prices_falls_back(self):
        """Test that an empty price history is replaced by synthetic prices."""
        self.write(self.price_file, {'data': []})
        prices = resolve_price_history(self.price_file, self.rng)
        self.assertTrue(prices.is_synthetic)
        self.assertIn("empty", prices.reason)

    def test_resolve_corrupt_grid_falls_back(self):
        """Test that a corrupt grid file is replaced by a synthetic grid."""
        self.wind_file.write_text("{")
        wind = resolve_forecast_grid(self.wind_file, self.rng)
        self.assertTrue(wind.is_synthetic)


if __name__ == '__main__':
    unittest.main()
