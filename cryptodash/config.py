"""
Application configuration and constants.
"""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _optional_int(name: str):
    value = os.getenv(name, "").strip()
    return int(value) if value else None


# API settings
API_TITLE = "CryptoDash API"
API_DESCRIPTION = "Short-horizon crypto price forecasts with confidence bands"
API_VERSION = "1.0.0"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Market data: 'mock' or 'coingecko'
MARKET_DATA_SOURCE = os.getenv("MARKET_DATA_SOURCE", "mock")
COINGECKO_API_URL = os.getenv("COINGECKO_API_URL", "https://api.coingecko.com/api/v3")
COINGECKO_API_KEY = os.getenv("COINGECKO_API_KEY", "")
COINGECKO_TIMEOUT = float(os.getenv("COINGECKO_TIMEOUT", "5"))
TOP_ASSETS_LIMIT = int(os.getenv("TOP_ASSETS_LIMIT", "20"))

# Refresh intervals used by the streaming endpoints (seconds)
FORECAST_REFRESH_SECONDS = float(os.getenv("FORECAST_REFRESH_SECONDS", "60"))
MARKET_REFRESH_SECONDS = float(os.getenv("MARKET_REFRESH_SECONDS", "30"))

# Fixed seed makes every refresh reproducible; unset means a fresh random stream
FORECAST_SEED = _optional_int("FORECAST_SEED")

# Margin used for the hypothetical leveraged profit figures (USD)
INITIAL_MARGIN = float(os.getenv("INITIAL_MARGIN", "1050"))

API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))
