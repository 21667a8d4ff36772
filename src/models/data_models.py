"""
Data models for the wind-driven price prediction pipeline.

Field names on the wire are camelCase because the dashboard reads the
persisted JSON records directly.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

import pandas as pd

from utils.exceptions import DataValidationError


def _require(data: Dict[str, Any], key: str, record: str) -> Any:
    if not isinstance(data, dict):
        raise DataValidationError(f"{record} must be an object, got {type(data).__name__}")
    if key not in data or data[key] is None:
        raise DataValidationError(f"{record} is missing required field '{key}'")
    return data[key]


def _parse_timestamp(value: Any) -> datetime:
    if not value:
        return datetime.now()
    try:
        return pd.Timestamp(value).to_pydatetime()
    except (TypeError, ValueError):
        raise DataValidationError(f"Invalid timestamp: {value!r}")


def _as_float(value: Any, key: str, record: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise DataValidationError(f"{record}.{key} is not numeric: {value!r}")


class PriceLevel(Enum):
    """Discrete classification of a predicted average daily price."""
    LOW = "LOW"
    NORMAL = "NORMAL"
    HIGH = "HIGH"
    VERY_HIGH = "VERY HIGH"


@dataclass
class DailyForecast:
    """Weather forecast for one day offset at one grid point."""
    day: int
    wind_speed: float  # m/s
    temperature: float  # deg C
    wind_direction: float = 0.0  # degrees
    humidity: float = 50.0  # percent

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DailyForecast':
        day = int(_require(data, 'day', 'DailyForecast'))
        return cls(
            day=day,
            wind_speed=_as_float(data.get('windSpeed', 0), 'windSpeed', 'DailyForecast'),
            temperature=_as_float(data.get('temperature', 0), 'temperature', 'DailyForecast'),
            wind_direction=_as_float(data.get('windDirection', 0), 'windDirection', 'DailyForecast'),
            humidity=_as_float(data.get('humidity', 50), 'humidity', 'DailyForecast'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'day': self.day,
            'windSpeed': self.wind_speed,
            'windDirection': self.wind_direction,
            'temperature': self.temperature,
            'humidity': self.humidity,
        }


@dataclass
class ForecastPoint:
    """Geographic grid point carrying up to nine daily forecasts."""
    lat: float
    lon: float
    forecasts: List[DailyForecast] = field(default_factory=list)

    def forecast_for_day(self, day_offset: int) -> Optional[DailyForecast]:
        """Return the forecast at ``day_offset`` or None if the series is shorter."""
        if 0 <= day_offset < len(self.forecasts):
            return self.forecasts[day_offset]
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ForecastPoint':
        lat = _as_float(_require(data, 'lat', 'ForecastPoint'), 'lat', 'ForecastPoint')
        lon = _as_float(_require(data, 'lon', 'ForecastPoint'), 'lon', 'ForecastPoint')
        raw = data.get('forecasts') or []
        if not isinstance(raw, list):
            raise DataValidationError("ForecastPoint.forecasts must be a list")
        forecasts = [DailyForecast.from_dict(f) for f in raw]
        for position, forecast in enumerate(forecasts):
            if forecast.day != position:
                raise DataValidationError(
                    f"Forecast at position {position} of point ({lat}, {lon}) has day {forecast.day}"
                )
        return cls(lat=lat, lon=lon, forecasts=forecasts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'lat': self.lat,
            'lon': self.lon,
            'forecasts': [f.to_dict() for f in self.forecasts],
        }


@dataclass
class ForecastGrid:
    """Envelope of a persisted forecast grid."""
    data: List[ForecastPoint]
    generated: datetime = field(default_factory=datetime.now)

    @property
    def point_count(self) -> int:
        return len(self.data)

    @classmethod
    def from_dict(cls, payload: Any) -> 'ForecastGrid':
        # A bare list is accepted as the point collection itself
        if isinstance(payload, list):
            return cls(data=[ForecastPoint.from_dict(p) for p in payload])
        points = _require(payload, 'data', 'ForecastGrid')
        if not isinstance(points, list):
            raise DataValidationError("ForecastGrid.data must be a list")
        generated = payload.get('generated')
        return cls(
            data=[ForecastPoint.from_dict(p) for p in points],
            generated=_parse_timestamp(generated),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'generated': self.generated.isoformat(),
            'pointCount': self.point_count,
            'data': [p.to_dict() for p in self.data],
        }


@dataclass
class HourlyPrice:
    hour: int
    price: float

    def to_dict(self) -> Dict[str, Any]:
        return {'hour': self.hour, 'price': self.price}


@dataclass
class PriceRecord:
    """Daily electricity price, optionally with its hourly breakdown."""
    date: str  # ISO calendar date
    avg_price: Optional[float] = None  # currency/MWh
    hourly_prices: List[HourlyPrice] = field(default_factory=list)
    area: Optional[str] = None
    max_price: Optional[float] = None
    min_price: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PriceRecord':
        date = str(_require(data, 'date', 'PriceRecord'))
        avg = data.get('avgPrice')
        hourly = []
        for entry in data.get('hourlyPrices') or []:
            hour = int(_require(entry, 'hour', 'HourlyPrice'))
            if not 0 <= hour <= 23:
                raise DataValidationError(f"HourlyPrice.hour out of range: {hour}")
            hourly.append(HourlyPrice(hour, _as_float(entry.get('price', 0), 'price', 'HourlyPrice')))
        return cls(
            date=date,
            avg_price=_as_float(avg, 'avgPrice', 'PriceRecord') if avg is not None else None,
            hourly_prices=hourly,
            area=data.get('area'),
            max_price=data.get('maxPrice'),
            min_price=data.get('minPrice'),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {'date': self.date}
        if self.area is not None:
            result['area'] = self.area
        if self.hourly_prices:
            result['hourlyPrices'] = [h.to_dict() for h in self.hourly_prices]
        result['avgPrice'] = self.avg_price
        if self.max_price is not None:
            result['maxPrice'] = self.max_price
        if self.min_price is not None:
            result['minPrice'] = self.min_price
        return result


@dataclass
class PriceHistory:
    """Envelope of a persisted price history."""
    data: List[PriceRecord]
    source: str = 'external'  # "sample" or "external"
    generated: datetime = field(default_factory=datetime.now)

    @classmethod
    def from_dict(cls, payload: Any) -> 'PriceHistory':
        if isinstance(payload, list):
            return cls(data=[PriceRecord.from_dict(r) for r in payload])
        records = _require(payload, 'data', 'PriceHistory')
        if not isinstance(records, list):
            raise DataValidationError("PriceHistory.data must be a list")
        generated = payload.get('generated')
        return cls(
            data=[PriceRecord.from_dict(r) for r in records],
            source=payload.get('source', 'external'),
            generated=_parse_timestamp(generated),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'generated': self.generated.isoformat(),
            'source': self.source,
            'data': [r.to_dict() for r in self.data],
        }


@dataclass
class Prediction:
    """Predicted prices for one calendar day."""
    date: str
    day_name: str
    avg_wind_speed: float
    avg_temperature: float
    predicted_price: float
    price_level: PriceLevel
    hourly_predictions: List[HourlyPrice]
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'date': self.date,
            'dayName': self.day_name,
            'avgWindSpeed': self.avg_wind_speed,
            'avgTemperature': self.avg_temperature,
            'predictedPrice': self.predicted_price,
            'priceLevel': self.price_level.value,
            'hourlyPredictions': [h.to_dict() for h in self.hourly_predictions],
            'confidence': self.confidence,
        }
