import os


def _strip_trailing_slash(value: str) -> str:
    return value[:-1] if value.endswith("/") else value


API_URL = _strip_trailing_slash(os.environ.get("API_URL", "http://localhost:3000"))
API_PREFIX = _strip_trailing_slash(os.environ.get("API_PREFIX", ""))
API_TIMEOUT = float(os.environ.get("API_TIMEOUT", "15"))
API_MAX_RETRIES = int(os.environ.get("API_MAX_RETRIES", "0"))  # GET transport errors only

REDIS_URL = os.environ.get("REDIS_URL", "redis://localhost:6379/0")
SESSION_NAMESPACE = os.environ.get("SESSION_NAMESPACE", "tourbook")
RECENT_DESTINATIONS_LIMIT = 3

DASHBOARD_POLL_INTERVAL = float(os.environ.get("DASHBOARD_POLL_INTERVAL", "12"))
