"""
Forecast grid fetcher for the MET Norway locationforecast API.
Samples the Nordic region on a regular grid and reduces each location's
timeseries to one midday forecast per day.
"""

from datetime import date, datetime, time as dt_time, timedelta
from typing import Any, Dict, List, Optional, Tuple
import logging
import time

import numpy as np
import pandas as pd
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from models.data_models import DailyForecast, ForecastGrid, ForecastPoint
from utils.exceptions import DataCollectionError

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

MET_NORWAY_URL = "https://api.met.no/weatherapi/locationforecast/2.0/compact"

NORDIC_BOUNDS = {
    'north': 71.5,
    'south': 54.0,
    'west': 4.0,
    'east': 32.0,
}
GRID_RESOLUTION = 1.5  # degrees
FORECAST_DAYS = 9


def generate_grid_points(bounds: Optional[Dict[str, float]] = None,
                         resolution: float = GRID_RESOLUTION) -> List[Tuple[float, float]]:
    """Regular (lat, lon) grid over ``bounds``, rounded to two decimals."""
    bounds = bounds or NORDIC_BOUNDS
    lats = np.arange(bounds['south'], bounds['north'] + 1e-9, resolution)
    lons = np.arange(bounds['west'], bounds['east'] + 1e-9, resolution)
    return [(round(float(lat), 2), round(float(lon), 2)) for lat in lats for lon in lons]


def parse_forecast_response(payload: Dict[str, Any],
                            today: Optional[date] = None,
                            timezone: str = 'Europe/Helsinki',
                            days: int = FORECAST_DAYS) -> List[DailyForecast]:
    """
    Reduce a locationforecast response to one forecast per day.

    For each day the timeseries entry closest to 12:00 local time is used.

    Args:
        payload: Decoded JSON response
        today: First forecast day (today in ``timezone`` if None)
        timezone: Zone in which "midday" is evaluated
        days: Number of days to extract

    Returns:
        Daily forecasts, empty if the response has no timeseries
    """
    timeseries = (payload.get('properties') or {}).get('timeseries') or []
    if not timeseries:
        return []

    times = pd.to_datetime([entry.get('time') for entry in timeseries], utc=True)
    today = today or pd.Timestamp.now(tz=timezone).date()

    forecasts = []
    for day in range(days):
        target = pd.Timestamp(datetime.combine(today + timedelta(days=day), dt_time(12))).tz_localize(timezone)
        closest = int(np.argmin(np.abs((times - target).total_seconds())))
        details = ((timeseries[closest].get('data') or {}).get('instant') or {}).get('details') or {}

        forecasts.append(DailyForecast(
            day=day,
            wind_speed=float(details.get('wind_speed') or 0),
            wind_direction=float(details.get('wind_from_direction') or 0),
            temperature=float(details.get('air_temperature') or 0),
            humidity=float(details.get('relative_humidity') or 50),
        ))

    return forecasts


class MetNorwayForecastConnector:
    """
    Fetches the forecast grid from MET Norway (free, User-Agent required).
    """

    def __init__(self,
                 user_agent: str,
                 request_delay: float = 0.5,
                 bounds: Optional[Dict[str, float]] = None,
                 resolution: float = GRID_RESOLUTION,
                 timezone: str = 'Europe/Helsinki'):
        """
        Initialize the connector.

        Args:
            user_agent: Identifying User-Agent header, mandatory for the API
            request_delay: Seconds to wait between point requests
            bounds: Grid bounds (Nordic region by default)
            resolution: Grid spacing in degrees
            timezone: Zone in which daily midday is evaluated
        """
        self.user_agent = user_agent
        self.request_delay = request_delay
        self.bounds = bounds or NORDIC_BOUNDS
        self.resolution = resolution
        self.timezone = timezone
        self.session = self._create_session()

    def _create_session(self) -> requests.Session:
        """Create requests session with retry strategy."""
        session = requests.Session()

        retry_strategy = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        session.headers.update({'User-Agent': self.user_agent})
        return session

    def fetch_point(self, lat: float, lon: float) -> Dict[str, Any]:
        """
        Fetch the raw forecast for one location.

        Raises:
            DataCollectionError: On HTTP failure or an undecodable body
        """
        try:
            response = self.session.get(MET_NORWAY_URL, params={'lat': lat, 'lon': lon}, timeout=30)
        except requests.RequestException as e:
            raise DataCollectionError(f"Request failed for {lat},{lon}: {e}") from e

        if response.status_code == 203:
            logger.warning("MET Norway reports this endpoint may be deprecated")
        elif response.status_code != 200:
            raise DataCollectionError(f"HTTP {response.status_code} for {lat},{lon}")

        try:
            return response.json()
        except ValueError as e:
            raise DataCollectionError(f"Invalid JSON for {lat},{lon}") from e

    def fetch_grid(self, today: Optional[date] = None) -> ForecastGrid:
        """
        Fetch every grid point; failed points are logged and skipped.

        Returns:
            Forecast grid of the points that returned forecasts
        """
        grid_points = generate_grid_points(self.bounds, self.resolution)
        logger.info(f"Fetching forecasts for {len(grid_points)} grid points")

        points = []
        failed = 0
        for i, (lat, lon) in enumerate(grid_points):
            if i % 10 == 0:
                logger.info(f"Progress: {i}/{len(grid_points)} ({round(i / len(grid_points) * 100)}%)")

            try:
                payload = self.fetch_point(lat, lon)
            except DataCollectionError as e:
                logger.error(f"Failed to fetch {lat},{lon}: {e}")
                failed += 1
            else:
                forecasts = parse_forecast_response(payload, today, self.timezone)
                if forecasts:
                    points.append(ForecastPoint(lat=lat, lon=lon, forecasts=forecasts))

            if self.request_delay:
                time.sleep(self.request_delay)

        logger.info(f"Completed: {len(points)} success, {failed} failed")
        return ForecastGrid(data=points)
