"""
Concept assembly from lookup rows.

Turns the rows returned by the lookup statement into a public Concept:
- leaf vs canonical precedence (concordance)
- type hierarchy mapping
- relationship lists, with transitive broader entries deduplicated against
  the direct ones
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from ..errors import InconsistentDataError
from ..models import (
    BROADER,
    BROADER_TRANSITIVE,
    NARROWER,
    RELATED,
    SKOS_BROADER,
    SKOS_BROADER_TRANSITIVE,
    SKOS_NARROWER,
    SKOS_RELATED,
    Concept,
    Thing,
)
from ..ontology import api_url, id_url, type_uris
from .cypher_builder import collection_name, column_alias

logger = logging.getLogger(__name__)

# Content is stored in the same graph but is not published as a thing.
EXCLUDED_LABELS = frozenset({"Content"})


class SourceKind(str, Enum):
    """Which node of a concordance pair supplies the public attributes."""
    CANONICAL = "canonical"
    LEAF = "leaf"


@dataclass(frozen=True)
class ConceptSource:
    """Scalar attributes of one node of the concordance pair."""
    kind: SourceKind
    uuid: str
    labels: List[str] = field(default_factory=list)
    pref_label: str = ""
    aliases: List[str] = field(default_factory=list)
    description_xml: str = ""
    image_url: str = ""
    email_address: str = ""
    facebook_page: str = ""
    twitter_handle: str = ""
    scope_note: str = ""
    short_label: str = ""

    @classmethod
    def from_row(cls, row: Dict[str, Any], kind: SourceKind) -> "ConceptSource":
        def value(attribute: str) -> Any:
            return row.get(column_alias(kind.value, attribute))

        return cls(
            kind=kind,
            uuid=value("UUID") or "",
            labels=list(value("types") or []),
            pref_label=value("prefLabel") or "",
            aliases=list(value("aliases") or []),
            description_xml=value("descriptionXML") or "",
            image_url=value("imageUrl") or "",
            email_address=value("emailAddress") or "",
            facebook_page=value("facebookPage") or "",
            twitter_handle=value("twitterHandle") or "",
            scope_note=value("scopeNote") or "",
            short_label=value("shortLabel") or "",
        )


def select_source(row: Dict[str, Any]) -> ConceptSource:
    """Canonical attributes win whenever the canonical node has a prefLabel."""
    if row.get(column_alias(SourceKind.CANONICAL.value, "prefLabel")):
        return ConceptSource.from_row(row, SourceKind.CANONICAL)
    return ConceptSource.from_row(row, SourceKind.LEAF)


def is_excluded(row: Dict[str, Any]) -> bool:
    labels = row.get(column_alias(SourceKind.LEAF.value, "types")) or []
    return any(label in EXCLUDED_LABELS for label in labels)


def _has_entries(entries: Optional[Sequence[Dict[str, Any]]]) -> bool:
    # An OPTIONAL MATCH with no hit still collects one all-null map.
    return bool(entries) and bool(entries[0].get("id"))


class ConceptAssembler:
    """Builds Concepts from lookup rows.

    Args:
        env: Deployment environment, used for API URLs
    """

    def __init__(self, env: str = "local"):
        self.env = env

    def assemble(self, uuid: str, rows: Sequence[Dict[str, Any]]) -> Optional[Concept]:
        """Interpret the lookup rows for ``uuid``.

        Returns:
            Concept, or None if the thing is absent, excluded or unmappable

        Raises:
            InconsistentDataError: If several nodes share the identifier
        """
        if not rows or not rows[0].get("leafUUID"):
            return None

        if len(rows) > 1:
            logger.error(f"Multiple Things found with the same UUID {uuid} ({len(rows)} rows)")
            raise InconsistentDataError(f"Multiple Things found with the same UUID:{uuid} !", uuid=uuid)

        row = rows[0]
        if is_excluded(row):
            logger.debug(f"Thing {uuid} is content, not exposed")
            return None

        return self.map_concept(select_source(row), row)

    def map_concept(self, source: ConceptSource, row: Dict[str, Any]) -> Optional[Concept]:
        """Map the chosen source plus relationship collections to a Concept."""
        types = type_uris(source.labels)
        if types is None:
            logger.error(
                f"Could not map type URIs for ID {source.uuid} with types {source.labels} "
                f"({source.kind.value})"
            )
            return None

        concept = Concept(
            id=id_url(source.uuid),
            api_url=api_url(source.uuid, source.labels, self.env),
            types=types,
            direct_type=types[-1],
            pref_label=source.pref_label,
            aliases=source.aliases,
            description_xml=source.description_xml,
            image_url=source.image_url,
            email_address=source.email_address,
            facebook_page=source.facebook_page,
            twitter_handle=source.twitter_handle,
            scope_note=source.scope_note,
            short_label=source.short_label,
        )

        concept.broader_concepts = self.populate_relationships(
            row.get(collection_name(BROADER)),
            SKOS_BROADER,
            row.get(collection_name(BROADER_TRANSITIVE)),
            SKOS_BROADER_TRANSITIVE,
        )
        concept.narrower_concepts = self.populate_relationships(row.get(collection_name(NARROWER)), SKOS_NARROWER)
        concept.related_concepts = self.populate_relationships(row.get(collection_name(RELATED)), SKOS_RELATED)

        logger.debug(f"Mapped concept {concept.id}")
        return concept

    def populate_relationships(
        self,
        entries: Optional[Sequence[Dict[str, Any]]],
        predicate: str,
        transitive_entries: Optional[Sequence[Dict[str, Any]]] = None,
        transitive_predicate: str = "",
    ) -> Optional[List[Thing]]:
        """Build one relationship list.

        Returns None when there is no direct entry. Transitive entries are
        appended after the direct ones, skipping ids already listed.
        """
        if not _has_entries(entries):
            return None

        things = []
        direct_ids = set()
        for entry in entries:
            direct_ids.add(entry.get("id"))
            thing = self.map_thing(entry, predicate)
            if thing is not None:
                things.append(thing)

        if _has_entries(transitive_entries):
            for entry in transitive_entries:
                if entry.get("id") in direct_ids:
                    continue
                thing = self.map_thing(entry, transitive_predicate)
                if thing is not None:
                    things.append(thing)

        return things

    def map_thing(self, entry: Dict[str, Any], predicate: str) -> Optional[Thing]:
        if not entry.get("id"):
            return None
        labels = entry.get("types") or []
        types = type_uris(labels)
        if types is None:
            logger.error(f"Could not map type URIs for ID {entry.get('id')} with types {labels}")
            return None

        return Thing(
            id=id_url(entry["id"]),
            api_url=api_url(entry["id"], labels, self.env),
            types=types,
            direct_type=types[-1],
            pref_label=entry.get("prefLabel") or "",
            predicate=predicate,
        )
