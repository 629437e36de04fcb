import logging
import os

from address_search.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def setup_logging(log_filename: str | None = None, level: str | None = None):
    """Attach console and file handlers to the root logger.

    Safe to call more than once; handlers are only added the first time.
    """
    global _configured
    root = logging.getLogger()
    root.setLevel(level or settings.LOG_LEVEL)
    if _configured:
        return root

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    os.makedirs(settings.LOG_DIR, exist_ok=True)
    file_handler = logging.FileHandler(
        os.path.join(settings.LOG_DIR, log_filename or settings.APP_LOG_FILENAME)
    )
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    _configured = True
    return root


def truncate_query(query: str, max_len: int = 40) -> str:
    if query is None:
        return ""
    if len(query) <= max_len:
        return query
    return query[: max_len - 3] + "..."
