import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()


def _optional_int(value):
    if value is None or value == '':
        return None
    return int(value)


class Config:
    DATA_DIR = Path(os.getenv('WINDPRICE_DATA_DIR', 'data'))
    WIND_DATA_FILE = Path(os.getenv('WINDPRICE_WIND_FILE', DATA_DIR / 'wind-data.json'))
    PRICE_DATA_FILE = Path(os.getenv('WINDPRICE_PRICE_FILE', DATA_DIR / 'nordpool-prices.json'))
    MODEL_FILE = Path(os.getenv('WINDPRICE_MODEL_FILE', DATA_DIR / 'prediction-model.json'))
    PREDICTION_FILE = Path(os.getenv('WINDPRICE_PREDICTION_FILE', DATA_DIR / 'price-predictions.json'))

    LEARNING_RATE = float(os.getenv('WINDPRICE_LEARNING_RATE', 0.01))
    ITERATIONS = int(os.getenv('WINDPRICE_ITERATIONS', 1000))
    FORECAST_DAYS = int(os.getenv('WINDPRICE_FORECAST_DAYS', 9))
    RANDOM_SEED = _optional_int(os.getenv('WINDPRICE_RANDOM_SEED'))

    USER_AGENT = os.getenv('WINDPRICE_USER_AGENT', 'WindPrice/1.0 (electricity price forecasting)')
    REQUEST_DELAY = float(os.getenv('WINDPRICE_REQUEST_DELAY', 0.5))

    @classmethod
    def validate(cls):
        """Validate numeric settings"""
        if cls.LEARNING_RATE <= 0:
            raise ValueError("WINDPRICE_LEARNING_RATE must be positive")
        if cls.ITERATIONS < 1:
            raise ValueError("WINDPRICE_ITERATIONS must be at least 1")
        if cls.FORECAST_DAYS < 1:
            raise ValueError("WINDPRICE_FORECAST_DAYS must be at least 1")
        if cls.REQUEST_DELAY < 0:
            raise ValueError("WINDPRICE_REQUEST_DELAY cannot be negative")
