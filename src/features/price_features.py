"""
Feature extraction for the electricity price regression.
Turns a forecast grid snapshot and a target date into the seven-element
feature vector the linear model is trained on.
"""

from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple, Union
import logging

import numpy as np
import pandas as pd

from models.data_models import ForecastPoint, PriceRecord

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Order is part of the model contract: weights align positionally
FEATURE_NAMES = [
    'windSpeed',
    'temperature',
    'isWinter',
    'isMorningPeak',
    'isEveningPeak',
    'isWeekend',
    'windSpeed_x_isWinter',
]
N_FEATURES = len(FEATURE_NAMES)

# Region whose weather drives the Finnish price area
FINLAND_BOUNDS = {
    'lat_min': 60.0,
    'lat_max': 70.0,
    'lon_min': 20.0,
    'lon_max': 32.0,
}

FORECAST_HORIZON_DAYS = 9

MORNING_PEAK_HOURS = range(7, 10)
EVENING_PEAK_HOURS = range(17, 21)
WINTER_MONTHS = {11, 12, 1, 2, 3}

DateLike = Union[str, datetime, pd.Timestamp]


def filter_finland_points(points: Optional[Sequence[ForecastPoint]]) -> List[ForecastPoint]:
    """Select the grid points inside the Finland bounding box (inclusive)."""
    if not points:
        return []

    return [
        p for p in points
        if FINLAND_BOUNDS['lat_min'] <= p.lat <= FINLAND_BOUNDS['lat_max']
        and FINLAND_BOUNDS['lon_min'] <= p.lon <= FINLAND_BOUNDS['lon_max']
    ]


def regional_averages(points: Sequence[ForecastPoint],
                      day_offset: int,
                      missing_wind_speed: float = 0.0,
                      missing_temperature: float = 0.0) -> Tuple[float, float]:
    """
    Average wind speed and temperature over ``points`` at ``day_offset``.

    A point without a forecast for that day contributes the ``missing_*``
    values but still counts in the denominator. An empty point set averages
    to (0, 0).

    Returns:
        Tuple of (average wind speed, average temperature)
    """
    if not points:
        return 0.0, 0.0

    wind_total = 0.0
    temp_total = 0.0
    for point in points:
        forecast = point.forecast_for_day(day_offset)
        if forecast is None:
            wind_total += missing_wind_speed
            temp_total += missing_temperature
        else:
            wind_total += forecast.wind_speed
            temp_total += forecast.temperature

    return wind_total / len(points), temp_total / len(points)


def synthetic_weather(target_date: DateLike) -> Tuple[float, float]:
    """
    Deterministic stand-in weather for dates outside the forecast horizon.

    The seed is the sum of the character codes of the date string, so the
    same string always yields the same values.

    Returns:
        Tuple of (wind speed in [3, 11), temperature in [-5, 15))
    """
    seed = sum(ord(c) for c in str(target_date))
    fraction = (seed % 100) / 100
    return 3 + fraction * 8, -5 + fraction * 20


def time_flags(when: DateLike) -> Dict[str, int]:
    """
    Calendar indicators for a timestamp.

    Args:
        when: Date or timestamp; a bare date has hour 0

    Returns:
        Dictionary with isWinter, isMorningPeak, isEveningPeak and isWeekend
    """
    ts = pd.Timestamp(when)
    return {
        'isWinter': int(ts.month in WINTER_MONTHS),
        'isMorningPeak': int(ts.hour in MORNING_PEAK_HOURS),
        'isEveningPeak': int(ts.hour in EVENING_PEAK_HOURS),
        'isWeekend': int(ts.dayofweek >= 5),
    }


def build_feature_vector(wind_speed: float, temperature: float, when: DateLike) -> np.ndarray:
    """Assemble the feature vector from regional weather and a timestamp."""
    flags = time_flags(when)
    return np.array([
        wind_speed,
        temperature,
        flags['isWinter'],
        flags['isMorningPeak'],
        flags['isEveningPeak'],
        flags['isWeekend'],
        wind_speed * flags['isWinter'],
    ], dtype=float)


def extract_features(forecast_grid: Optional[Sequence[ForecastPoint]],
                     price_history: Optional[Sequence[PriceRecord]],
                     target_date: DateLike,
                     day_index: int) -> np.ndarray:
    """
    Build the feature vector for one price record.

    Indices 0..8 use the live forecast for that day offset averaged over the
    Finland points. Older dates, or an empty Finland selection, fall back to
    :func:`synthetic_weather` since no historical weather is kept.

    Args:
        forecast_grid: Forecast points (may be empty)
        price_history: Price records the index refers to (not read)
        target_date: Date of the price record
        day_index: Position of the record in the price history

    Returns:
        Array of seven floats ordered as FEATURE_NAMES
    """
    finland_points = filter_finland_points(forecast_grid)
    has_forecast = 0 <= day_index < FORECAST_HORIZON_DAYS and len(finland_points) > 0

    if has_forecast:
        wind_speed, temperature = regional_averages(finland_points, day_index)
    else:
        wind_speed, temperature = synthetic_weather(target_date)

    return build_feature_vector(wind_speed, temperature, target_date)


def build_design_matrix(forecast_grid: Optional[Sequence[ForecastPoint]],
                        price_history: Sequence[PriceRecord],
                        default_price: float = 50.0) -> Tuple[pd.DataFrame, pd.Series]:
    """
    Create the training matrix with one row per price record.

    Args:
        forecast_grid: Forecast points
        price_history: Price records; a record without avgPrice uses ``default_price``
        default_price: Target substituted for missing prices

    Returns:
        Tuple of (features DataFrame with FEATURE_NAMES columns, target Series)
    """
    rows = []
    targets = []
    for index, record in enumerate(price_history):
        rows.append(extract_features(forecast_grid, price_history, record.date, index))
        targets.append(record.avg_price if record.avg_price is not None else default_price)

    X = pd.DataFrame(rows, columns=FEATURE_NAMES, dtype=float)
    y = pd.Series(targets, name='avgPrice', dtype=float)

    logger.info(f"Built design matrix with {len(X)} samples and {X.shape[1]} features")
    return X, y
