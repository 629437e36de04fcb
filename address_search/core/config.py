import os
from dotenv import load_dotenv

load_dotenv()


def _as_list(val: str | None) -> list[str]:
    if not val:
        return []
    return [part.strip() for part in val.split(",") if part.strip()]


class Settings:
    # Logging
    LOG_DIR = os.getenv("LOG_DIR", "logs")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    APP_LOG_FILENAME = os.getenv("APP_LOG_FILENAME", "address_search.log")
    TRACE_LOG_FILENAME = os.getenv("TRACE_LOG_FILENAME", "search_trace.log")
    TRACE_LOG_PATH = os.path.join(LOG_DIR, TRACE_LOG_FILENAME)

    # Nominatim upstream
    NOMINATIM_BASE_URL = os.getenv(
        "NOMINATIM_BASE_URL", "https://nominatim.openstreetmap.org"
    ).rstrip("/")
    NOMINATIM_USER_AGENT = os.getenv("NOMINATIM_USER_AGENT")
    NOMINATIM_REFERER = os.getenv("NOMINATIM_REFERER")
    NOMINATIM_TIMEOUT_SECONDS = float(os.getenv("NOMINATIM_TIMEOUT_SECONDS", "10"))
    FALLBACK_USER_AGENT = "address-search/1.0 (contact: ops@example.com)"

    # Query defaults
    DEFAULT_COUNTRY_CODES = os.getenv("DEFAULT_COUNTRY_CODES", "de")
    ACCEPT_LANGUAGE = os.getenv("ACCEPT_LANGUAGE", "de")
    DEFAULT_LIMIT = int(os.getenv("DEFAULT_LIMIT", "5"))
    MAX_LIMIT = int(os.getenv("MAX_LIMIT", "50"))
    MIN_QUERY_LENGTH = int(os.getenv("MIN_QUERY_LENGTH", "3"))
    DEFAULT_CITIES = _as_list(os.getenv("DEFAULT_CITIES"))

    # City matching
    CITY_MATCH_THRESHOLD = float(os.getenv("CITY_MATCH_THRESHOLD", "0.7"))

    # Upstream limit inflation (absorbs post-filtering losses)
    FILTERED_LIMIT_MULTIPLIER = int(os.getenv("FILTERED_LIMIT_MULTIPLIER", "5"))
    FILTERED_LIMIT_FLOOR = int(os.getenv("FILTERED_LIMIT_FLOOR", "50"))
    UNFILTERED_LIMIT_MULTIPLIER = int(os.getenv("UNFILTERED_LIMIT_MULTIPLIER", "3"))
    UNFILTERED_LIMIT_FLOOR = int(os.getenv("UNFILTERED_LIMIT_FLOOR", "30"))

    # Search Application
    APP_PORT = int(os.getenv("APP_PORT", "8000"))
    SERVICE_HOST = os.getenv("SERVICE_HOST", "127.0.0.1")


settings = Settings()
