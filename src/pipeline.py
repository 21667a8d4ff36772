#!/usr/bin/env python3
"""
Daily update pipeline: fetch the wind grid, refresh the price history,
train the price model and write the nine-day predictions.
"""

import argparse
import logging
from datetime import date, datetime
from typing import List, Optional

import numpy as np
import pandas as pd

from data.connectors import MetNorwayForecastConnector
from data.sources import load_price_history
from data.storage import write_json_atomic
from data.synthetic import generate_sample_price_data
from model.predictor import PricePredictor
from model.trainer import ModelTrainer
from models.data_models import PriceHistory
from utils.config import Config
from utils.exceptions import DataCollectionError, DataLoadError

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def make_rng(config=Config) -> np.random.Generator:
    return np.random.default_rng(config.RANDOM_SEED)


def fetch_wind_data(config=Config) -> bool:
    """Fetch and persist the forecast grid. Returns False if nothing was saved."""
    connector = MetNorwayForecastConnector(config.USER_AGENT, request_delay=config.REQUEST_DELAY)
    try:
        grid = connector.fetch_grid()
    except DataCollectionError as e:
        logger.error(f"Wind data fetch failed: {e}")
        return False

    if not grid.data:
        logger.warning("Wind data fetch returned no points; keeping the previous grid")
        return False

    write_json_atomic(config.WIND_DATA_FILE, grid.to_dict())
    logger.info(f"Saved {grid.point_count} points to {config.WIND_DATA_FILE}")
    return True


def newest_price_date(history: PriceHistory) -> Optional[date]:
    dates = pd.to_datetime([r.date for r in history.data], errors='coerce').dropna()
    if len(dates) == 0:
        return None
    return dates.max().date()


def refresh_price_history(config=Config,
                          rng: Optional[np.random.Generator] = None,
                          today: Optional[date] = None) -> bool:
    """
    Keep the price history current.

    A missing or unreadable history, or a sample history whose newest record
    is older than ``today``, is replaced by a fresh 31-day sample ending today.
    An external history is left untouched.

    Returns:
        True if a sample history was written
    """
    today = today or datetime.now().date()
    try:
        history = load_price_history(config.PRICE_DATA_FILE)
    except DataLoadError as e:
        logger.info(f"No usable price history ({e}); writing sample prices for development")
    else:
        if history.source != 'sample':
            logger.info(f"Keeping {history.source} price history with {len(history.data)} records")
            return False
        newest = newest_price_date(history)
        if newest is not None and newest >= today:
            return False
        logger.info(f"Sample price history ends {newest}; regenerating through {today}")

    history = PriceHistory(data=generate_sample_price_data(rng, today=today), source='sample')
    write_json_atomic(config.PRICE_DATA_FILE, history.to_dict())
    return True


def build_trainer(config=Config) -> ModelTrainer:
    return ModelTrainer(learning_rate=config.LEARNING_RATE, iterations=config.ITERATIONS)


def train(config=Config, rng: Optional[np.random.Generator] = None):
    return build_trainer(config).run(
        config.WIND_DATA_FILE, config.PRICE_DATA_FILE, config.MODEL_FILE, rng
    )


def predict(config=Config, rng: Optional[np.random.Generator] = None):
    predictor = PricePredictor(build_trainer(config), forecast_days=config.FORECAST_DAYS)
    return predictor.run(
        config.MODEL_FILE, config.WIND_DATA_FILE, config.PRICE_DATA_FILE,
        config.PREDICTION_FILE, rng,
    )


def run_daily_update(config=Config, fetch: bool = True):
    """Run every stage in order."""
    config.validate()
    rng = make_rng(config)

    if fetch:
        fetch_wind_data(config)
    refresh_price_history(config, rng)
    train(config, rng)
    return predict(config, rng)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Wind-driven electricity price prediction")
    parser.add_argument('--fetch', action='store_true', help="fetch the wind forecast grid")
    parser.add_argument('--prices', action='store_true', help="refresh the sample price history if stale")
    parser.add_argument('--train', action='store_true', help="train and save the price model")
    parser.add_argument('--predict', action='store_true', help="write the nine-day price predictions")
    parser.add_argument('--all', action='store_true', help="run the full daily update")
    args = parser.parse_args(argv)

    Config.validate()
    rng = make_rng()

    if args.all:
        run_daily_update()
        return 0

    if args.fetch:
        fetch_wind_data()
    if args.prices:
        refresh_price_history(rng=rng)
    if args.train:
        train(rng=rng)
    if args.predict or not (args.fetch or args.prices or args.train):
        predict(rng=rng)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
