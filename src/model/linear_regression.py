"""
Linear regression trained by full-batch gradient descent.
"""

from typing import Dict, List, Any, Optional, Union
import numpy as np
import pandas as pd
import logging

from .base_model import BaseForecaster, ArrayLike
from utils.exceptions import InvalidInputError, ModelDivergenceError

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEFAULT_LEARNING_RATE = 0.01
DEFAULT_ITERATIONS = 1000


class GradientDescentRegressor(BaseForecaster):
    """
    Multiple linear regression ``weights . x + bias``.

    ``fit`` always restarts from zero weights and runs a fixed number of
    synchronous batch updates with a constant learning rate. There is no
    early stopping and no feature scaling, so inputs with large magnitudes
    can diverge; divergence is reported as :class:`ModelDivergenceError`.
    """

    def __init__(self,
                 learning_rate: float = DEFAULT_LEARNING_RATE,
                 iterations: int = DEFAULT_ITERATIONS,
                 feature_names: Optional[List[str]] = None):
        """
        Initialize the regressor in the unfitted state.

        Args:
            learning_rate: Gradient descent step size
            iterations: Number of full-batch updates per fit
            feature_names: Names of the features, for reporting only
        """
        super().__init__("LinearRegression", "linear")
        self.learning_rate = learning_rate
        self.iterations = iterations
        self.weights: Optional[np.ndarray] = None
        self.bias = 0.0
        self.feature_names = list(feature_names) if feature_names else []

    @property
    def is_fitted(self) -> bool:
        return self.weights is not None

    def fit(self, X: ArrayLike, y: Union[pd.Series, np.ndarray, List[float]]) -> 'GradientDescentRegressor':
        """
        Fit weights and bias by batch gradient descent.

        Args:
            X: N samples of F features
            y: N targets

        Returns:
            Self for method chaining

        Raises:
            InvalidInputError: If X is empty, ragged, or does not match y
            ModelDivergenceError: If the parameters become non-finite
        """
        X_arr = self.validate_input(X, y)
        y_arr = np.asarray(y, dtype=float)
        if isinstance(X, pd.DataFrame) and not self.feature_names:
            self.feature_names = list(X.columns)

        n_samples, n_features = X_arr.shape
        weights = np.zeros(n_features)
        bias = 0.0

        with np.errstate(over='ignore', invalid='ignore'):
            for _ in range(self.iterations):
                errors = X_arr @ weights + bias - y_arr
                weights = weights - self.learning_rate * (X_arr.T @ errors) / n_samples
                bias = bias - self.learning_rate * errors.mean()

        if not (np.all(np.isfinite(weights)) and np.isfinite(bias)):
            raise ModelDivergenceError(
                f"Gradient descent diverged after {self.iterations} iterations "
                f"(learning rate {self.learning_rate}); rescale the features or lower the rate"
            )

        self.weights = weights
        self.bias = float(bias)
        logger.info(f"Fitted linear model on {n_samples} samples, {n_features} features")
        return self

    def predict(self, x: Union[np.ndarray, List[float]]) -> float:
        """
        Predict one sample as ``weights . x + bias``.

        An unfitted model predicts 0.

        Raises:
            InvalidInputError: If ``x`` does not have one value per weight
        """
        if self.weights is None:
            return 0.0

        x_arr = np.asarray(x, dtype=float)
        if x_arr.shape != self.weights.shape:
            raise InvalidInputError(
                f"Expected {len(self.weights)} features, got {x_arr.size}"
            )
        return float(x_arr @ self.weights + self.bias)

    def get_coefficients(self) -> Dict[str, Any]:
        """
        Model coefficients for interpretation and persistence.

        Returns:
            Dictionary with weights, bias and featureNames
        """
        return {
            'weights': self.weights.tolist() if self.weights is not None else None,
            'bias': self.bias,
            'featureNames': list(self.feature_names),
        }

    def _get_model_state(self) -> Dict[str, Any]:
        """Get model state."""
        return self.get_coefficients()

    def _set_model_state(self, state: Dict[str, Any]) -> None:
        """Replace weights, bias and feature names with the record's values."""
        weights = state.get('weights')
        self.weights = np.asarray(weights, dtype=float) if weights is not None else None
        self.bias = float(state.get('bias') or 0.0)
        self.feature_names = list(state.get('featureNames') or [])
