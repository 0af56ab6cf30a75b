"""Configuration settings for Scribe Core."""

import os
from pathlib import Path

# Paths
BASE_DIR = Path(__file__).parent.parent
DATA_DIR = Path(os.environ.get("SCRIBE_DATA_DIR", BASE_DIR / "data"))
MODELS_DIR = DATA_DIR / "models"
CACHE_DIR = DATA_DIR / "model-cache"
CACHE_INDEX_FILE = "cache-index.json"

# Cache bounds
MAX_CACHE_BYTES = 10 * 1024 * 1024 * 1024  # 10 GiB
MAX_MODEL_AGE_SECONDS = 30 * 24 * 60 * 60  # 30 days

# Downloads
DOWNLOAD_TIMEOUT_SECONDS = 5 * 60
DOWNLOAD_CHUNK_SIZE = 1024 * 1024
HASH_CHUNK_SIZE = 65536

# Server
HOST = "127.0.0.1"
PORT = 7879

# API
API_PREFIX = "/api"
API_VERSION = "0.1.0"

# Logging
LOG_LEVEL = os.environ.get("SCRIBE_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
