"""
Canonical identifier resolution.

A requested uuid may resolve to a concept whose canonical uuid differs (the
requested node is a concorded leaf). Single lookups answer with a redirect to
the canonical uuid; batch lookups follow it themselves, at most one hop.
"""

import logging
import re
import threading
import uuid as uuidlib
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .aggregator import aggregate
from .errors import InvalidUUIDError
from .models import Concept
from .store import ConceptStore

logger = logging.getLogger(__name__)

UUID_PATTERN = re.compile(
    r"([0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12})$"
)


def validate_uuids(*uuids: str) -> None:
    """Raise InvalidUUIDError for the first malformed uuid."""
    for value in uuids:
        try:
            uuidlib.UUID(value)
        except (ValueError, TypeError, AttributeError) as e:
            raise InvalidUUIDError(value, str(e)) from e


def canonical_uuid_of(concept: Concept) -> str:
    """Extract the uuid at the end of a concept's id URL."""
    match = UUID_PATTERN.search(concept.id)
    return match.group(1) if match else ""


def is_canonical_for(concept: Concept, uuid: str) -> bool:
    return uuid in concept.id


@dataclass(frozen=True)
class Resolution:
    """Outcome of a single lookup.

    Attributes:
        concept: Concept the requested uuid resolved to
        redirect_uuid: Canonical uuid to redirect to, None when the request was canonical
    """
    concept: Concept
    redirect_uuid: Optional[str] = None

    @property
    def is_redirect(self) -> bool:
        return self.redirect_uuid is not None


class ThingResolver:
    """Resolves requested uuids against a concept store."""

    def __init__(self, store: ConceptStore):
        self.store = store

    def resolve(
        self,
        uuid: str,
        relationships: Optional[Iterable[str]] = None,
        transaction_id: Optional[str] = None,
    ) -> Optional[Resolution]:
        """Resolve one uuid for the single-item endpoint.

        Returns:
            Resolution, or None when not found

        Raises:
            UpstreamError: If the store fails
        """
        concept = self.store.read(uuid, relationships, transaction_id)
        if concept is None:
            return None
        if is_canonical_for(concept, uuid):
            return Resolution(concept)

        canonical_uuid = canonical_uuid_of(concept)
        logger.debug(f"uuid {uuid} is not canonical, redirecting to {canonical_uuid}")
        return Resolution(concept, redirect_uuid=canonical_uuid)

    def resolve_for_batch(
        self,
        uuid: str,
        relationships: Optional[Iterable[str]] = None,
        transaction_id: Optional[str] = None,
        cancelled: Optional[threading.Event] = None,
    ) -> Optional[Concept]:
        """Resolve one uuid for a batch, following one canonical hop.

        Returns:
            Canonical Concept, or None when it is missing or further than one hop away
        """
        concept = self.store.read(uuid, relationships, transaction_id)
        if concept is None or is_canonical_for(concept, uuid):
            return concept

        if cancelled is not None and cancelled.is_set():
            return None

        canonical_uuid = canonical_uuid_of(concept)
        concept = self.store.read(canonical_uuid, relationships, transaction_id)
        if concept is None:
            logger.error(
                f"Referenced canonical uuid : {canonical_uuid} is missing in graph store for {uuid}, "
                "possible data inconsistency"
            )
            return None

        if not is_canonical_for(concept, canonical_uuid):
            logger.warning(f"Multiple level of indirection to canonical node for uuid: {uuid}, giving up traversing")
            return None

        return concept

    def resolve_many(
        self,
        uuids: List[str],
        relationships: Optional[Iterable[str]] = None,
        transaction_id: Optional[str] = None,
    ) -> Dict[str, Concept]:
        """Resolve a batch concurrently, keyed by the requested uuids.

        Raises:
            BatchResolutionError: On the first lookup failure
        """
        relationships = list(relationships or [])

        def resolve_one(uuid: str, cancelled: threading.Event) -> Optional[Concept]:
            return self.resolve_for_batch(uuid, relationships, transaction_id, cancelled)

        return aggregate(uuids, resolve_one)
