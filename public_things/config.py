"""
Service configuration.

Reads settings from environment variables; CLI flags override them. No
global state - each ServiceConfig instance is independent and is passed to
the components that need it.
"""
import os
import re
import logging
from dataclasses import dataclass, replace
from typing import Dict, Optional

logger = logging.getLogger(__name__)

SUPPORTED_BACKENDS = ("neo4j", "concepts-api")

_DURATION_UNITS: Dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "panic": logging.CRITICAL,
}


def parse_duration(value: str) -> float:
    """Parse a duration such as ``30s`` or ``2h45m`` into seconds.

    Raises:
        ValueError: If the value is not a valid duration
    """
    text = (value or "").strip()
    if text == "0":
        return 0.0

    sign = 1.0
    if text[:1] in ("+", "-"):
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]

    if not text:
        raise ValueError(f"invalid duration {value!r}")

    total = 0.0
    pos = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            raise ValueError(f"invalid duration {value!r}")
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()

    if pos != len(text):
        raise ValueError(f"invalid duration {value!r}")
    return sign * total


def cache_control_header(cache_duration: str) -> str:
    """Build the Cache-Control header for successful responses."""
    return f"max-age={parse_duration(cache_duration):.0f}, public"


def _number(env, names, cast, default):
    """First set variable among ``names`` converted with ``cast``.

    Raises:
        ValueError: Naming the variable when its value is not a number
    """
    for name in names:
        value = env.get(name)
        if value:
            try:
                return cast(value)
            except ValueError:
                raise ValueError(f"{name} must be a number, got {value!r}") from None
    return default


def parse_log_level(level: str) -> int:
    """Map a level name to a logging level, falling back to INFO."""
    parsed = _LOG_LEVELS.get((level or "").strip().lower())
    if parsed is None:
        logger.warning(f"Cannot parse log level {level!r}, setting it to INFO.")
        return logging.INFO
    return parsed


@dataclass
class ServiceConfig:
    """Runtime configuration of the public things service."""
    backend: str = "neo4j"
    neo_url: str = "bolt://localhost:7687"
    neo_user: str = ""
    neo_password: str = ""
    neo_database: str = "neo4j"
    concepts_api_url: str = "http://localhost:8080"
    host: str = "0.0.0.0"
    port: int = 8080
    env: str = "local"
    cache_duration: str = "30s"
    log_level: str = "info"
    http_timeout: float = 60.0
    app_system_code: str = "public-things-api"
    app_name: str = "Public Things API"

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "ServiceConfig":
        """Build a config from environment variables."""
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            backend=env.get("THINGS_BACKEND", defaults.backend),
            neo_url=env.get("NEO_URL", defaults.neo_url),
            neo_user=env.get("NEO_USER", defaults.neo_user),
            neo_password=env.get("NEO_PASSWORD", defaults.neo_password),
            neo_database=env.get("NEO_DATABASE", defaults.neo_database),
            concepts_api_url=env.get("CONCEPTS_API_URL", defaults.concepts_api_url),
            port=_number(env, ("APP_PORT", "PORT"), int, defaults.port),
            env=env.get("APP_ENV", defaults.env),
            cache_duration=env.get("CACHE_DURATION", defaults.cache_duration),
            log_level=env.get("LOG_LEVEL", defaults.log_level),
            http_timeout=_number(env, ("HTTP_TIMEOUT",), float, defaults.http_timeout),
            app_system_code=env.get("APP_SYSTEM_CODE", defaults.app_system_code),
            app_name=env.get("APP_NAME", defaults.app_name),
        )

    def override(self, **values) -> "ServiceConfig":
        """Return a copy with the given non-None values replaced."""
        return replace(self, **{key: value for key, value in values.items() if value is not None})

    def validate(self) -> None:
        """Raise ValueError for settings the service cannot start with."""
        if self.backend not in SUPPORTED_BACKENDS:
            raise ValueError(f"Unknown backend: {self.backend}. Supported: {', '.join(SUPPORTED_BACKENDS)}")
        parse_duration(self.cache_duration)

    @property
    def cache_control(self) -> str:
        return cache_control_header(self.cache_duration)

    @property
    def level(self) -> int:
        return parse_log_level(self.log_level)
