"""Concurrent batch resolution.

One thread per requested uuid. Results are collected in completion order; the
first failure wins and is raised immediately. Remaining tasks are signalled
through a shared cancellation event and not waited for.
"""

import contextvars
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, List, Optional

from .errors import BatchResolutionError
from .models import Concept

logger = logging.getLogger(__name__)

ResolveFn = Callable[[str, threading.Event], Optional[Concept]]


def _run(uuid: str, resolve: ResolveFn, cancelled: threading.Event) -> Optional[Concept]:
    if cancelled.is_set():
        return None
    return resolve(uuid, cancelled)


def aggregate(uuids: List[str], resolve: ResolveFn) -> Dict[str, Concept]:
    """Resolve every uuid concurrently.

    Args:
        uuids: Validated uuids, as requested
        resolve: Called as ``resolve(uuid, cancelled)``; returns a Concept,
            None for not found, or raises

    Returns:
        Mapping of requested uuid to Concept; not-found uuids are absent

    Raises:
        BatchResolutionError: Wrapping the first failure observed
    """
    if not uuids:
        return {}

    cancelled = threading.Event()
    executor = ThreadPoolExecutor(max_workers=len(uuids), thread_name_prefix="things-batch")
    futures = {
        executor.submit(contextvars.copy_context().run, _run, uuid, resolve, cancelled): uuid for uuid in uuids
    }

    things: Dict[str, Concept] = {}
    try:
        for future in as_completed(futures):
            uuid = futures[future]
            try:
                concept = future.result()
            except Exception as e:
                cancelled.set()
                logger.error(f"Error getting thing with uuid {uuid}: {e}")
                raise BatchResolutionError(uuid, e) from e
            if concept is not None:
                things[uuid] = concept
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    logger.debug(f"Resolved {len(things)} of {len(uuids)} requested things")
    return things
