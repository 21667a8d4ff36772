"""
Daily electricity price predictions from the trained model and the current
wind forecast.
"""

from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union
import logging

import numpy as np

from .linear_regression import GradientDescentRegressor
from .model_persistence import ModelStore
from .trainer import ModelTrainer
from data.sources import resolve_forecast_grid
from data.storage import write_json_atomic
from features.price_features import (
    N_FEATURES, build_feature_vector, filter_finland_points, regional_averages
)
from models.data_models import ForecastPoint, HourlyPrice, Prediction, PriceLevel
from utils.exceptions import DataLoadError, ForecastingError

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

MODEL_VERSION = 'LinearRegression v1'
FORECAST_DAYS = 9

LOW_PRICE_THRESHOLD = 40.0
HIGH_PRICE_THRESHOLD = 100.0
VERY_HIGH_PRICE_THRESHOLD = 150.0

BASE_CONFIDENCE = 0.7
CONFIDENCE_DECAY_PER_DAY = 0.05

# Substituted for a Finland point that lacks the requested day
MISSING_WIND_SPEED = 5.0
MISSING_TEMPERATURE = 0.0


def classify_price_level(avg_price: float) -> PriceLevel:
    """
    Bucket an average daily price (EUR/MWh).

    The very-high threshold is checked before the high one so both levels
    are reachable.
    """
    if avg_price < LOW_PRICE_THRESHOLD:
        return PriceLevel.LOW
    if avg_price > VERY_HIGH_PRICE_THRESHOLD:
        return PriceLevel.VERY_HIGH
    if avg_price > HIGH_PRICE_THRESHOLD:
        return PriceLevel.HIGH
    return PriceLevel.NORMAL


def confidence_for_day(day_offset: int) -> float:
    """Linearly decreasing confidence; 0.7 today, 0.3 eight days out."""
    return round(BASE_CONFIDENCE - CONFIDENCE_DECAY_PER_DAY * day_offset, 4)


def day_name(day_offset: int) -> str:
    if day_offset == 0:
        return 'Today'
    if day_offset == 1:
        return 'Tomorrow'
    return f'+{day_offset} days'


class PricePredictor:
    """
    Generates nine days of hourly price predictions.
    """

    def __init__(self, trainer: Optional[ModelTrainer] = None, forecast_days: int = FORECAST_DAYS):
        """
        Initialize the predictor.

        Args:
            trainer: Trainer used when no persisted model exists
            forecast_days: Number of calendar days to predict
        """
        self.trainer = trainer or ModelTrainer()
        self.forecast_days = forecast_days

    def predict_day(self,
                    model: GradientDescentRegressor,
                    finland_points: Sequence[ForecastPoint],
                    target_day: date,
                    day_offset: int) -> Prediction:
        """
        Predict the 24 hourly prices of one day and summarize them.

        Args:
            model: Fitted model
            finland_points: Forecast points inside the Finland bounding box
            target_day: Calendar day being predicted
            day_offset: Offset of ``target_day`` from today, indexing the forecasts

        Returns:
            Daily prediction
        """
        avg_wind, avg_temp = regional_averages(
            finland_points, day_offset,
            missing_wind_speed=MISSING_WIND_SPEED,
            missing_temperature=MISSING_TEMPERATURE,
        )

        hourly = []
        for hour in range(24):
            features = build_feature_vector(avg_wind, avg_temp, datetime.combine(target_day, time(hour)))
            price = max(0.0, model.predict(features))
            hourly.append(HourlyPrice(hour=hour, price=round(price, 2)))

        avg_price = sum(h.price for h in hourly) / 24

        return Prediction(
            date=target_day.isoformat(),
            day_name=day_name(day_offset),
            avg_wind_speed=round(avg_wind, 1),
            avg_temperature=round(avg_temp, 1),
            predicted_price=round(avg_price, 2),
            price_level=classify_price_level(avg_price),
            hourly_predictions=hourly,
            confidence=confidence_for_day(day_offset),
        )

    def generate_predictions(self,
                             model: GradientDescentRegressor,
                             forecast_grid: Sequence[ForecastPoint],
                             start: Optional[date] = None) -> List[Prediction]:
        """
        Predict each day from ``start`` (today by default) across the horizon.

        Raises:
            ForecastingError: If the model is unfitted or has the wrong number of weights
        """
        if not model.is_fitted:
            raise ForecastingError("Model must be fitted before generating predictions")
        if model.weights.shape != (N_FEATURES,):
            raise ForecastingError(
                f"Model has weights of shape {model.weights.shape}, expected ({N_FEATURES},)"
            )

        start = start or datetime.now().date()
        finland_points = filter_finland_points(forecast_grid)
        if not finland_points:
            logger.warning("No forecast points inside Finland; regional averages default to 0")

        predictions = []
        for offset in range(self.forecast_days):
            target_day = start + timedelta(days=offset)
            predictions.append(self.predict_day(model, finland_points, target_day, offset))

        return predictions

    def load_or_train(self,
                      model_file: Union[str, Path],
                      wind_file: Union[str, Path],
                      price_file: Union[str, Path],
                      rng: Optional[np.random.Generator] = None) -> GradientDescentRegressor:
        """
        Load the persisted model, training and saving a fresh one when the
        record is missing, unreadable, unfitted or not seven weights long.
        """
        store = ModelStore(model_file)
        try:
            model = store.load(
                GradientDescentRegressor,
                learning_rate=self.trainer.learning_rate,
                iterations=self.trainer.iterations,
            )
        except DataLoadError as e:
            logger.info(f"No usable model ({e}). Training first...")
            return self.trainer.run(wind_file, price_file, model_file, rng).model

        if not model.is_fitted or model.weights.shape != (N_FEATURES,):
            logger.warning(f"Model in {model_file} does not hold {N_FEATURES} weights. Retraining...")
            return self.trainer.run(wind_file, price_file, model_file, rng).model

        return model

    def run(self,
            model_file: Union[str, Path],
            wind_file: Union[str, Path],
            price_file: Union[str, Path],
            prediction_file: Union[str, Path],
            rng: Optional[np.random.Generator] = None,
            start: Optional[date] = None) -> Dict[str, Any]:
        """
        Produce and persist the prediction record, replacing any earlier one.

        Returns:
            The prediction record as written
        """
        logger.info("Generating predictions...")

        model = self.load_or_train(model_file, wind_file, price_file, rng)
        wind_source = resolve_forecast_grid(wind_file, rng)

        predictions = self.generate_predictions(model, wind_source.data, start)
        record = {
            'generated': datetime.now().isoformat(),
            'model': MODEL_VERSION,
            'predictions': [p.to_dict() for p in predictions],
        }
        write_json_atomic(prediction_file, record)

        self._log_summary(predictions)
        return record

    @staticmethod
    def _log_summary(predictions: Sequence[Prediction]) -> None:
        logger.info(f"{len(predictions)}-day price forecast:")
        for p in predictions:
            logger.info(
                f"{p.day_name:<10} | Wind: {p.avg_wind_speed:.1f}m/s | Temp: {p.avg_temperature:.0f}C | "
                f"EUR {p.predicted_price:.0f}/MWh {p.price_level.value:>10}"
            )
