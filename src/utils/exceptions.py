"""
Custom exceptions for the wind-driven price prediction pipeline.
"""


class WindPriceError(Exception):
    """Base exception for the price prediction pipeline."""
    pass


class DataCollectionError(WindPriceError):
    """Exception raised while fetching forecast data from a remote API."""
    pass


class DataLoadError(WindPriceError):
    """Exception raised when a persisted artifact is missing or malformed."""
    pass


class ModelNotFoundError(DataLoadError):
    """Exception raised when no persisted model record exists."""
    pass


class DataValidationError(WindPriceError):
    """Exception raised when a record fails validation."""
    pass


class InvalidInputError(DataValidationError):
    """Exception raised for empty or inconsistently shaped training input."""
    pass


class ModelTrainingError(WindPriceError):
    """Exception raised during model training."""
    pass


class ModelDivergenceError(ModelTrainingError):
    """Exception raised when gradient descent produces non-finite parameters."""
    pass


class ForecastingError(WindPriceError):
    """Exception raised during price prediction generation."""
    pass
