"""
Configuration constants for the SMS inspector backend.

Supports environment variables:
- SMS_INSPECTOR_DATA_DIR: Directory holding settings.json (default: data)
- SMS_INSPECTOR_API_URL: Billing API CSV endpoint
- SMS_INSPECTOR_LOG_LEVEL: Logging level (default: INFO)
- SMS_INSPECTOR_CORS_ORIGINS: Comma-separated front-end origins
"""

import logging
import os
from pathlib import Path
from typing import List

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

DATA_DIR = Path(os.getenv("SMS_INSPECTOR_DATA_DIR", str(PROJECT_ROOT / "data")))
SETTINGS_FILE_NAME = "settings.json"

API_URL = os.getenv("SMS_INSPECTOR_API_URL", "https://api.premiumy.net/v1.0/csv")
REQUEST_TIMEOUT_SECONDS = 30.0
PER_PAGE = 100

PROXY_CHECK_URL = "https://httpbin.org/get"
PROXY_CHECK_TIMEOUT_SECONDS = 10.0

LOG_LEVEL = os.getenv("SMS_INSPECTOR_LOG_LEVEL", "INFO")

CORS_ORIGINS: List[str] = [
    origin.strip()
    for origin in os.getenv("SMS_INSPECTOR_CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Configure root logging once per process with a single console handler."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)
