"""
Synthetic forecast grid and price history used when real data is unavailable.
Values are plausible and bounded; they are reproducible only through the
random generator passed in.
"""

from datetime import date, datetime, timedelta
from typing import List, Optional
import logging

import numpy as np

from models.data_models import DailyForecast, ForecastPoint, HourlyPrice, PriceRecord

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Sampling bounds of the synthetic Nordic grid
SAMPLE_GRID = {
    'lat_min': 55.0,
    'lat_max': 70.0,
    'lon_min': 5.0,
    'lon_max': 30.0,
    'step': 1.5,
}

SAMPLE_HISTORY_DAYS = 30
MIN_SAMPLE_WIND_SPEED = 1.0


def is_winter_month(month: int) -> bool:
    """November through March (1-based months)."""
    return month >= 11 or month <= 3


def _make_rng(rng: Optional[np.random.Generator]) -> np.random.Generator:
    return rng if rng is not None else np.random.default_rng()


def generate_sample_wind_data(rng: Optional[np.random.Generator] = None,
                              days: int = 9) -> List[ForecastPoint]:
    """
    Generate a forecast grid with a smooth per-point random walk in wind speed.
    
    Args:
        rng: Random generator (a fresh unseeded one if None)
        days: Number of forecast days per point
        
    Returns:
        List of forecast points covering the Nordic sample bounds
    """
    rng = _make_rng(rng)
    points = []
    
    lats = np.arange(SAMPLE_GRID['lat_min'], SAMPLE_GRID['lat_max'] + 1e-9, SAMPLE_GRID['step'])
    lons = np.arange(SAMPLE_GRID['lon_min'], SAMPLE_GRID['lon_max'] + 1e-9, SAMPLE_GRID['step'])
    
    for lat in lats:
        for lon in lons:
            base_speed = 3 + rng.random() * 7
            base_temp = 5 - (lat - 55) * 0.4
            
            forecasts = []
            for day in range(days):
                forecasts.append(DailyForecast(
                    day=day,
                    wind_speed=float(max(MIN_SAMPLE_WIND_SPEED, base_speed + (rng.random() - 0.5) * 4)),
                    temperature=float(base_temp + (rng.random() - 0.5) * 5),
                    wind_direction=float(rng.random() * 360),
                    humidity=50.0,
                ))
                base_speed += (rng.random() - 0.5) * 2
            
            points.append(ForecastPoint(lat=round(float(lat), 2), lon=round(float(lon), 2), forecasts=forecasts))
    
    logger.info(f"Generated sample wind grid with {len(points)} points")
    return points


def _sample_hourly_price(rng: np.random.Generator, hour: int, winter: bool) -> float:
    base_price = 80.0 if winter else 40.0  # EUR/MWh
    
    if 7 <= hour <= 9:
        base_price *= 1.5
    elif 17 <= hour <= 20:
        base_price *= 1.8
    elif 0 <= hour <= 5:
        base_price *= 0.5
    
    price = max(0.0, base_price + (rng.random() - 0.5) * 40)
    return round(price, 2)


def generate_sample_price_data(rng: Optional[np.random.Generator] = None,
                               today: Optional[date] = None,
                               area: str = 'FI') -> List[PriceRecord]:
    """
    Generate daily price records from 30 days back through today.
    
    Hourly prices follow a time-of-day and season heuristic with uniform noise.
    """
    rng = _make_rng(rng)
    today = today or datetime.now().date()
    records = []
    
    for offset in range(-SAMPLE_HISTORY_DAYS, 1):
        day = today + timedelta(days=offset)
        winter = is_winter_month(day.month)
        
        hourly = [HourlyPrice(hour, _sample_hourly_price(rng, hour, winter)) for hour in range(24)]
        prices = [h.price for h in hourly]
        
        records.append(PriceRecord(
            date=day.isoformat(),
            avg_price=sum(prices) / 24,
            hourly_prices=hourly,
            area=area,
            max_price=max(prices),
            min_price=min(prices),
        ))
    
    logger.info(f"Generated {len(records)} sample price records")
    return records
