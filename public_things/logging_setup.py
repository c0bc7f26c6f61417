"""
Logging setup with contextvars-based transaction id injection.

- Adds the current request's transaction id into every log line.
- Tunes noisy third-party library loggers (neo4j, urllib3, uvicorn access).
"""

import contextvars
import logging
import secrets
import string
from typing import Optional

cv_transaction_id = contextvars.ContextVar("transaction_id", default="-")

_TID_ALPHABET = string.ascii_letters + string.digits


def new_transaction_id() -> str:
    """Generate a transaction id for requests that arrive without one."""
    return "tid_" + "".join(secrets.choice(_TID_ALPHABET) for _ in range(10))


def set_transaction_id(transaction_id: Optional[str]) -> contextvars.Token:
    return cv_transaction_id.set(transaction_id or "-")


def get_transaction_id() -> str:
    return cv_transaction_id.get() or "-"


class ContextInjectFilter(logging.Filter):
    """Inject the transaction id into log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.transaction_id = get_transaction_id()
        return True


def configure_logging(level: int = logging.INFO) -> None:
    """
    Configure application logging.

    Args:
        level: Minimum level for the console handler
    """
    # Clear existing handlers to avoid duplicate logs if called multiple times
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s | tid=%(transaction_id)s | %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )
    handler.addFilter(ContextInjectFilter())
    root.addHandler(handler)

    logging.getLogger("neo4j").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    logging.getLogger(__name__).info(f"Logging configured (level={logging.getLevelName(level)})")
