"""
Model persistence for the price prediction pipeline.
Handles saving and loading the trained model record.
"""

from pathlib import Path
from typing import Type, Union
import logging

from .base_model import BaseForecaster
from data.storage import read_json, write_json_atomic
from utils.exceptions import DataLoadError, ModelNotFoundError

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class ModelStore:
    """
    Stores one model record as JSON at a fixed path.
    The record is replaced atomically on every save.
    """

    def __init__(self, filepath: Union[str, Path]):
        """
        Initialize the model store.

        Args:
            filepath: Location of the model record
        """
        self.filepath = Path(filepath)

    def exists(self) -> bool:
        """Whether a model record is present."""
        return self.filepath.exists()

    def save(self, model: BaseForecaster) -> Path:
        """
        Persist a fitted model.

        Args:
            model: Trained model to save

        Returns:
            Path of the model record
        """
        if not model.is_fitted:
            raise ValueError("Cannot save unfitted model")

        write_json_atomic(self.filepath, model.to_dict())
        logger.info(f"Model saved to {self.filepath}")
        return self.filepath

    def load(self, model_class: Type[BaseForecaster], **kwargs) -> BaseForecaster:
        """
        Load the persisted model.

        Args:
            model_class: Model class to instantiate
            **kwargs: Constructor arguments for the model

        Returns:
            Model holding the persisted parameters

        Raises:
            ModelNotFoundError: If no record exists
            DataLoadError: If the record is not a JSON object
        """
        if not self.exists():
            raise ModelNotFoundError(f"Model file not found: {self.filepath}")

        record = read_json(self.filepath)
        if not isinstance(record, dict):
            raise DataLoadError(f"Malformed model record in {self.filepath}")

        try:
            model = model_class.from_dict(record, **kwargs)
        except (TypeError, ValueError) as e:
            raise DataLoadError(f"Malformed model record in {self.filepath}: {e}") from e

        logger.info(f"Model loaded from {self.filepath}")
        return model


def save_model(model: BaseForecaster, filepath: Union[str, Path]) -> Path:
    """
    Convenience function to save a model record.

    Args:
        model: Trained model to save
        filepath: Location of the model record

    Returns:
        Path of the model record
    """
    return ModelStore(filepath).save(model)


def load_model(filepath: Union[str, Path], model_class: Type[BaseForecaster], **kwargs) -> BaseForecaster:
    """
    Convenience function to load a model record.

    Args:
        filepath: Location of the model record
        model_class: Model class to instantiate

    Returns:
        Loaded model instance
    """
    return ModelStore(filepath).load(model_class, **kwargs)
