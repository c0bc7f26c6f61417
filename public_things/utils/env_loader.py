"""Environment loader utilities.

A tiny `.env` loader so connection settings (Neo4j credentials, upstream URLs)
can live outside the shell profile during local development.

Security:
  - `.env` should remain uncommitted.
  - This loader does NOT log values, only the names of the keys it set.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)


def _parse_line(raw_line: str):
    line = raw_line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    if line.startswith("export "):
        line = line[len("export "):].lstrip()

    key, value = line.split("=", 1)
    key = key.strip()
    value = value.strip()
    if not key:
        return None

    if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
        value = value[1:-1]
    elif " #" in value:
        value = value.split(" #", 1)[0].rstrip()
    return key, value


def load_dotenv(path: str | os.PathLike[str] = ".env", *, override: bool = False) -> List[str]:
    """Load environment variables from a .env file.

    Supports ``KEY=VALUE`` and ``export KEY=VALUE`` lines, optional surrounding
    quotes and trailing `` # comments`` on unquoted values.

    Args:
        path: Path to .env file (default: ".env" in current working directory).
        override: If True, overwrite existing os.environ keys.

    Returns:
        Names of the keys that were set; empty if the file does not exist.
    """
    p = Path(path)
    if not p.is_file():
        return []

    loaded = []
    for raw_line in p.read_text(encoding="utf-8", errors="ignore").splitlines():
        parsed = _parse_line(raw_line)
        if parsed is None:
            continue
        key, value = parsed
        if not override and key in os.environ:
            continue
        os.environ[key] = value
        loaded.append(key)

    logger.debug(f"Loaded {len(loaded)} settings from {p}: {', '.join(loaded)}")
    return loaded
