"""
Base model interface for the price prediction pipeline.
Provides the common interface shared by regression models.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Any, Optional, Union
import pandas as pd
import numpy as np
import logging

from utils.exceptions import InvalidInputError

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ArrayLike = Union[pd.DataFrame, np.ndarray, List[List[float]]]


class BaseForecaster(ABC):
    """
    Abstract base class for price models.
    Defines the common interface that all models must implement.
    """

    def __init__(self, model_name: str, model_type: str):
        """
        Initialize the base forecaster.

        Args:
            model_name: Human-readable name for the model
            model_type: Type category (e.g., 'linear')
        """
        self.model_name = model_name
        self.model_type = model_type
        self.feature_names: List[str] = []

        logger.debug(f"Initialized {self.model_type} model: {self.model_name}")

    @property
    @abstractmethod
    def is_fitted(self) -> bool:
        """Whether the model holds trained parameters."""
        pass

    @abstractmethod
    def fit(self, X: ArrayLike, y: Union[pd.Series, np.ndarray, List[float]]) -> 'BaseForecaster':
        """
        Train the model on the provided data.

        Args:
            X: Feature matrix
            y: Target variable

        Returns:
            Self for method chaining
        """
        pass

    @abstractmethod
    def predict(self, x: Union[np.ndarray, List[float]]) -> float:
        """
        Predict a single sample.

        Args:
            x: Feature vector

        Returns:
            Predicted value
        """
        pass

    def predict_batch(self, X: ArrayLike) -> np.ndarray:
        """
        Predict every row of a feature matrix.

        Args:
            X: Feature matrix

        Returns:
            Array of predictions
        """
        rows = X.values if isinstance(X, pd.DataFrame) else X
        return np.array([self.predict(row) for row in rows], dtype=float)

    def to_dict(self) -> Dict[str, Any]:
        """Serializable record of the model parameters."""
        return self._get_model_state()

    @classmethod
    def from_dict(cls, record: Dict[str, Any], **kwargs) -> 'BaseForecaster':
        """
        Create a model from a serialized record.

        Args:
            record: Record produced by :meth:`to_dict`
            **kwargs: Constructor arguments

        Returns:
            Model instance holding the record's parameters
        """
        instance = cls(**kwargs)
        instance._set_model_state(record)
        return instance

    @abstractmethod
    def _get_model_state(self) -> Dict[str, Any]:
        """
        Get model-specific state for serialization.

        Returns:
            Dictionary containing model state
        """
        pass

    @abstractmethod
    def _set_model_state(self, state: Dict[str, Any]) -> None:
        """
        Restore model-specific state from serialization.

        Args:
            state: Dictionary containing model state
        """
        pass

    @staticmethod
    def validate_input(X: ArrayLike, y: Optional[Any] = None) -> np.ndarray:
        """
        Validate input data shape and consistency.

        Args:
            X: Feature matrix
            y: Target variable (optional)

        Returns:
            X as a two-dimensional float array

        Raises:
            InvalidInputError: If input data is empty or inconsistent
        """
        if isinstance(X, pd.DataFrame):
            rows = X.values.tolist()
        else:
            rows = [list(row) for row in X]

        if len(rows) == 0:
            raise InvalidInputError("X cannot be empty")

        n_features = len(rows[0])
        if n_features == 0:
            raise InvalidInputError("Samples must have at least one feature")

        for i, row in enumerate(rows):
            if len(row) != n_features:
                raise InvalidInputError(
                    f"Sample {i} has {len(row)} features, expected {n_features}"
                )

        if y is not None and len(y) != len(rows):
            raise InvalidInputError("X and y must have the same number of samples")

        return np.asarray(rows, dtype=float)

