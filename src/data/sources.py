"""
Data source resolution for the forecast grid and the price history.

Callers receive either a ``Loaded`` source (read from disk) or a ``Synthetic``
one (generated because loading failed), so provenance is never ambiguous.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Generic, List, Optional, TypeVar, Union
import logging

import numpy as np

from data.storage import read_json
from data.synthetic import generate_sample_price_data, generate_sample_wind_data
from models.data_models import ForecastGrid, ForecastPoint, PriceHistory, PriceRecord
from utils.exceptions import DataLoadError, DataValidationError

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

T = TypeVar('T')


class DataSource(ABC, Generic[T]):
    """Data paired with where it came from."""

    data: T

    @property
    def is_synthetic(self) -> bool:
        return isinstance(self, Synthetic)

    @property
    @abstractmethod
    def provenance(self) -> str:
        """Human-readable description of where the data came from."""
        pass


@dataclass
class Loaded(DataSource[T]):
    data: T
    origin: str

    @property
    def provenance(self) -> str:
        return f"loaded from {self.origin}"


@dataclass
class Synthetic(DataSource[T]):
    data: T
    reason: str

    @property
    def provenance(self) -> str:
        return f"synthetic ({self.reason})"


def load_forecast_grid(filepath: Union[str, Path]) -> ForecastGrid:
    """
    Load a persisted forecast grid.

    Raises:
        DataLoadError: If the file is missing, not JSON, or fails validation
    """
    payload = read_json(filepath)
    try:
        return ForecastGrid.from_dict(payload)
    except DataValidationError as e:
        raise DataLoadError(f"Malformed forecast grid in {filepath}: {e}") from e


def load_price_history(filepath: Union[str, Path]) -> PriceHistory:
    """
    Load a persisted price history.

    Raises:
        DataLoadError: If the file is missing, not JSON, or fails validation
    """
    payload = read_json(filepath)
    try:
        return PriceHistory.from_dict(payload)
    except DataValidationError as e:
        raise DataLoadError(f"Malformed price history in {filepath}: {e}") from e


def resolve_forecast_grid(filepath: Union[str, Path],
                          rng: Optional[np.random.Generator] = None) -> DataSource[List[ForecastPoint]]:
    """Load the forecast grid, substituting a synthetic grid on failure."""
    try:
        grid = load_forecast_grid(filepath)
        source = Loaded(grid.data, str(filepath))
    except DataLoadError as e:
        logger.warning(f"Forecast grid unavailable: {e}")
        source = Synthetic(generate_sample_wind_data(rng), str(e))

    logger.info(f"Forecast grid: {len(source.data)} points, {source.provenance}")
    return source


def resolve_price_history(filepath: Union[str, Path],
                          rng: Optional[np.random.Generator] = None) -> DataSource[List[PriceRecord]]:
    """Load the price history, substituting synthetic prices on failure or when empty."""
    try:
        history = load_price_history(filepath)
        if not history.data:
            raise DataLoadError(f"Price history in {filepath} is empty")
        source = Loaded(history.data, str(filepath))
    except DataLoadError as e:
        logger.warning(f"Price history unavailable: {e}")
        source = Synthetic(generate_sample_price_data(rng), str(e))

    logger.info(f"Price history: {len(source.data)} records, {source.provenance}")
    return source
