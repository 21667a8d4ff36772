"""
Model training orchestrator for the price prediction pipeline.
Coordinates data resolution, design matrix construction, fitting, evaluation
and persistence.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional, Sequence, Tuple, Union
import pandas as pd
import numpy as np
from datetime import datetime
import logging
from pathlib import Path

from .linear_regression import GradientDescentRegressor, DEFAULT_ITERATIONS, DEFAULT_LEARNING_RATE
from .model_persistence import ModelStore
from .validation import ModelEvaluator
from data.sources import resolve_forecast_grid, resolve_price_history
from features.price_features import FEATURE_NAMES, build_design_matrix
from models.data_models import ForecastPoint, PriceRecord
from utils.exceptions import InvalidInputError

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEFAULT_TARGET_PRICE = 50.0


@dataclass
class TrainingReport:
    """Outcome of one training run."""
    model: GradientDescentRegressor
    r2: float
    metrics: Dict[str, float]
    n_samples: int
    wind_provenance: str = 'provided'
    price_provenance: str = 'provided'
    trained_at: datetime = field(default_factory=datetime.now)
    model_path: Optional[Path] = None


class ModelTrainer:
    """
    Orchestrates the training workflow.
    Builds the design matrix from the price history, fits a fresh model and
    reports its fit on the training set.
    """

    def __init__(self,
                 learning_rate: float = DEFAULT_LEARNING_RATE,
                 iterations: int = DEFAULT_ITERATIONS,
                 default_metrics: Optional[List[str]] = None):
        """
        Initialize the model trainer.

        Args:
            learning_rate: Gradient descent step size
            iterations: Gradient descent iterations
            default_metrics: Evaluation metrics reported after fitting
        """
        self.learning_rate = learning_rate
        self.iterations = iterations
        self.default_metrics = default_metrics or ['mae', 'rmse', 'r2']

        self.evaluator = ModelEvaluator()
        self.training_history: List[Dict[str, Any]] = []

    def build_training_set(self,
                           forecast_grid: Sequence[ForecastPoint],
                           price_history: Sequence[PriceRecord]) -> Tuple[pd.DataFrame, pd.Series]:
        """
        Create features and targets, one row per price record.

        Raises:
            InvalidInputError: If the price history yields no samples
        """
        X, y = build_design_matrix(forecast_grid, price_history, default_price=DEFAULT_TARGET_PRICE)
        if X.empty:
            raise InvalidInputError("Price history produced an empty training set")
        return X, y

    def train(self,
              forecast_grid: Sequence[ForecastPoint],
              price_history: Sequence[PriceRecord],
              wind_provenance: str = 'provided',
              price_provenance: str = 'provided') -> TrainingReport:
        """
        Fit a fresh model on the given data.

        Args:
            forecast_grid: Forecast points
            price_history: Price records used as targets
            wind_provenance: Description of where the grid came from
            price_provenance: Description of where the prices came from

        Returns:
            Training report with the fitted model and its training-set metrics
        """
        X, y = self.build_training_set(forecast_grid, price_history)
        logger.info(f"Training samples: {len(X)}")

        model = GradientDescentRegressor(
            learning_rate=self.learning_rate,
            iterations=self.iterations,
            feature_names=FEATURE_NAMES,
        )
        model.fit(X, y)

        y_pred = model.predict_batch(X)
        metrics = self.evaluator.evaluate_model(y.values, y_pred, self.default_metrics)
        if 'r2' not in metrics:
            metrics.update(self.evaluator.evaluate_model(y.values, y_pred, ['r2']))

        self._log_coefficients(model)
        r2 = metrics['r2']
        if np.isnan(r2):
            logger.info("Model R2 score: undefined")
        else:
            logger.info(f"Model R2 score: {r2 * 100:.1f}%")

        report = TrainingReport(
            model=model,
            r2=r2,
            metrics=metrics,
            n_samples=len(X),
            wind_provenance=wind_provenance,
            price_provenance=price_provenance,
        )
        self.training_history.append({
            'trained_at': report.trained_at.isoformat(),
            'n_samples': report.n_samples,
            'metrics': metrics,
            'wind_provenance': wind_provenance,
            'price_provenance': price_provenance,
        })
        return report

    def run(self,
            wind_file: Union[str, Path],
            price_file: Union[str, Path],
            model_file: Union[str, Path],
            rng: Optional[np.random.Generator] = None) -> TrainingReport:
        """
        Resolve the data sources, train, and persist the model.

        Missing or malformed inputs are replaced by synthetic data; the report
        records which one was used.
        """
        logger.info("Training price prediction model")

        wind_source = resolve_forecast_grid(wind_file, rng)
        price_source = resolve_price_history(price_file, rng)

        report = self.train(
            wind_source.data,
            price_source.data,
            wind_provenance=wind_source.provenance,
            price_provenance=price_source.provenance,
        )
        report.model_path = ModelStore(model_file).save(report.model)
        return report

    @staticmethod
    def _log_coefficients(model: GradientDescentRegressor) -> None:
        logger.info("Model coefficients:")
        for name, weight in zip(model.feature_names, model.weights):
            direction = 'up' if weight > 0 else 'down'
            logger.info(f"  {name}: {weight:.3f} ({direction})")
        logger.info(f"  bias: {model.bias:.3f}")
