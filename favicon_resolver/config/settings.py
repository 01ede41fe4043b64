import os

# Read from environment with sensible defaults
FETCH_TIMEOUT = float(os.getenv("FETCH_TIMEOUT", "10"))
CONNECT_TIMEOUT = float(os.getenv("CONNECT_TIMEOUT", "5"))
MAX_REDIRECTS = int(os.getenv("MAX_REDIRECTS", "5"))
PROVIDER_FETCH_ATTEMPTS = int(os.getenv("PROVIDER_FETCH_ATTEMPTS", "2"))

CACHE_MAX_ENTRIES = int(os.getenv("CACHE_MAX_ENTRIES", "5000"))
CACHE_TTL_SECONDS = float(os.getenv("CACHE_TTL_SECONDS", str(60 * 60 * 24)))
CACHE_MAX_AGE = int(os.getenv("CACHE_MAX_AGE", "86400"))

# Fixed output geometry, not configurable
CANVAS_SIZE = 100
PADDING = 10

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8080"))
