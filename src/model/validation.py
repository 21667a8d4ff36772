"""
Fit-quality evaluation for price regression models.
"""

from typing import Dict, List, Optional
import numpy as np
import logging
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class ModelEvaluator:
    """
    Model evaluation over a set of predictions.
    """

    def __init__(self):
        """Initialize the model evaluator."""
        self.metrics_registry = {
            'mae': self._mean_absolute_error,
            'mse': self._mean_squared_error,
            'rmse': self._root_mean_squared_error,
            'r2': self._r_squared,
            'forecast_bias': self._forecast_bias
        }

    def evaluate_model(self,
                      y_true: np.ndarray,
                      y_pred: np.ndarray,
                      metrics: Optional[List[str]] = None) -> Dict[str, float]:
        """
        Evaluate model performance using multiple metrics.

        Args:
            y_true: True values
            y_pred: Predicted values
            metrics: List of metrics to compute (if None, uses all)

        Returns:
            Dictionary of metric names and values
        """
        if metrics is None:
            metrics = list(self.metrics_registry.keys())

        y_true = np.asarray(y_true, dtype=float)
        y_pred = np.asarray(y_pred, dtype=float)

        results = {}

        for metric in metrics:
            if metric in self.metrics_registry:
                try:
                    value = self.metrics_registry[metric](y_true, y_pred)
                    results[metric] = float(value)
                except ValueError as e:
                    logger.warning(f"Failed to compute {metric}: {e}")
                    results[metric] = np.nan
            else:
                logger.warning(f"Unknown metric: {metric}")

        return results

    def _mean_absolute_error(self, y_true: np.ndarray, y_pred: np.ndarray) -> float:
        """Calculate Mean Absolute Error."""
        return mean_absolute_error(y_true, y_pred)

    def _mean_squared_error(self, y_true: np.ndarray, y_pred: np.ndarray) -> float:
        """Calculate Mean Squared Error."""
        return mean_squared_error(y_true, y_pred)

    def _root_mean_squared_error(self, y_true: np.ndarray, y_pred: np.ndarray) -> float:
        """Calculate Root Mean Squared Error."""
        return np.sqrt(mean_squared_error(y_true, y_pred))

    def _r_squared(self, y_true: np.ndarray, y_pred: np.ndarray) -> float:
        """
        Calculate R-squared (1 - SS_res / SS_tot).

        Constant targets make SS_tot zero; the score is then 1.0 for an exact
        fit and 0.0 otherwise instead of an infinite ratio.
        """
        if len(y_true) < 2:
            logger.warning("R-squared is undefined for fewer than two samples")
            return np.nan

        ss_tot = np.sum((y_true - np.mean(y_true)) ** 2)
        if ss_tot == 0:
            ss_res = np.sum((y_true - y_pred) ** 2)
            return 1.0 if ss_res == 0 else 0.0

        return r2_score(y_true, y_pred)

    def _forecast_bias(self, y_true: np.ndarray, y_pred: np.ndarray) -> float:
        """Calculate forecast bias (mean of residuals)."""
        return np.mean(y_pred - y_true)
