"""
Ontology mapping - graph labels to public type URIs

Maps the raw labels carried by a graph node (including abstract ancestor
labels such as ``Thing`` and ``Concept``) to the public ontology URIs, ordered
from the most generic to the most specific type. Also builds the public
``id`` and ``apiUrl`` URLs for a concept.
"""

import logging
from typing import Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

ONTOLOGY_PREFIX = "http://www.ft.com/ontology/"
THING_ID_PREFIX = "http://api.ft.com/things/"
UPSTREAM_THING_PREFIX = "http://www.ft.com/thing/"

API_BASE_URL = "http://api.ft.com/"
TEST_API_BASE_URL = "http://test.api.ft.com/"

# label -> public type URI
TYPE_URIS: Dict[str, str] = {
    "Thing": ONTOLOGY_PREFIX + "core/Thing",
    "Concept": ONTOLOGY_PREFIX + "concept/Concept",
    "Classification": ONTOLOGY_PREFIX + "classification/Classification",
    "Subject": ONTOLOGY_PREFIX + "Subject",
    "SpecialReport": ONTOLOGY_PREFIX + "SpecialReport",
    "Topic": ONTOLOGY_PREFIX + "Topic",
    "Location": ONTOLOGY_PREFIX + "Location",
    "Section": ONTOLOGY_PREFIX + "Section",
    "Genre": ONTOLOGY_PREFIX + "Genre",
    "AlphavilleSeries": ONTOLOGY_PREFIX + "AlphavilleSeries",
    "Brand": ONTOLOGY_PREFIX + "product/Brand",
    "IndustryClassification": ONTOLOGY_PREFIX + "industry/IndustryClassification",
    "NAICSIndustryClassification": ONTOLOGY_PREFIX + "industry/NAICSIndustryClassification",
    "Person": ONTOLOGY_PREFIX + "person/Person",
    "Organisation": ONTOLOGY_PREFIX + "organisation/Organisation",
    "Company": ONTOLOGY_PREFIX + "company/Company",
    "PublicCompany": ONTOLOGY_PREFIX + "company/PublicCompany",
    "PrivateCompany": ONTOLOGY_PREFIX + "company/PrivateCompany",
    "Membership": ONTOLOGY_PREFIX + "organisation/Membership",
    "Role": ONTOLOGY_PREFIX + "organisation/Role",
    "BoardRole": ONTOLOGY_PREFIX + "organisation/BoardRole",
    "MembershipRole": ONTOLOGY_PREFIX + "MembershipRole",
    "FinancialInstrument": ONTOLOGY_PREFIX + "FinancialInstrument",
    "Content": ONTOLOGY_PREFIX + "content/Content",
}

# label -> parent label ("" for the root)
PARENT_TYPES: Dict[str, str] = {
    "Thing": "",
    "Concept": "Thing",
    "Classification": "Concept",
    "Subject": "Classification",
    "SpecialReport": "Classification",
    "Topic": "Concept",
    "Location": "Concept",
    "Section": "Classification",
    "Genre": "Classification",
    "AlphavilleSeries": "Classification",
    "Brand": "Classification",
    "IndustryClassification": "Classification",
    "NAICSIndustryClassification": "IndustryClassification",
    "Person": "Concept",
    "Organisation": "Concept",
    "Company": "Organisation",
    "PublicCompany": "Company",
    "PrivateCompany": "Company",
    "Membership": "Concept",
    "Role": "Thing",
    "BoardRole": "Role",
    "MembershipRole": "Role",
    "FinancialInstrument": "Concept",
    "Content": "Thing",
}

# Labels with a dedicated public API collection; everything else is a "thing".
API_PATHS: Dict[str, str] = {
    "Person": "people",
    "Organisation": "organisations",
    "Brand": "brands",
    "Content": "content",
    "Thing": "things",
}

_LABELS_BY_URI: Dict[str, str] = {uri: label for label, uri in TYPE_URIS.items()}


def _depth(label: str) -> int:
    depth = 0
    parent = PARENT_TYPES.get(label, "")
    while parent:
        depth += 1
        parent = PARENT_TYPES.get(parent, "")
    return depth


def _ordered_labels(labels: Iterable[str]) -> List[str]:
    return sorted(set(labels), key=lambda label: (_depth(label), label))


def type_uris(labels: Iterable[str]) -> Optional[List[str]]:
    """Map graph labels to ontology URIs ordered generic to specific.

    Args:
        labels: Raw node labels, in any order

    Returns:
        List of type URIs, or None when the labels are empty, any label
        has no known URI, or the labels do not form a single parent chain
    """
    if labels is None:
        return None
    ordered = _ordered_labels(labels)
    if not ordered:
        return None

    uris = []
    for label in ordered:
        uri = TYPE_URIS.get(label)
        if uri is None:
            logger.debug(f"No type URI known for label {label!r}")
            return None
        uris.append(uri)

    for parent, child in zip(ordered, ordered[1:]):
        if PARENT_TYPES.get(child) != parent:
            logger.debug(f"Labels {ordered} do not form a single type hierarchy")
            return None
    return uris


def most_specific_label(labels: Iterable[str]) -> Optional[str]:
    """Return the deepest known label, or None if none is known."""
    known = [label for label in _ordered_labels(labels or []) if label in TYPE_URIS]
    return known[-1] if known else None


def full_type_hierarchy(type_uri: str) -> List[str]:
    """Expand a single direct type URI into its generic-to-specific hierarchy.

    Unknown URIs yield an empty list.
    """
    label = _LABELS_BY_URI.get(type_uri or "")
    if label is None:
        return []

    chain = []
    while label:
        chain.append(TYPE_URIS[label])
        label = PARENT_TYPES.get(label, "")
    chain.reverse()
    return chain


def label_for_type_uri(type_uri: str) -> str:
    """Return the label for a type URI, falling back to its last path segment."""
    return _LABELS_BY_URI.get(type_uri, (type_uri or "").rstrip("/").split("/")[-1])


def id_url(uuid: str) -> str:
    return THING_ID_PREFIX + uuid


def api_url(uuid: str, labels: Iterable[str], env: str = "local") -> str:
    """Build the public API URL for a node.

    The path is taken from the nearest ancestor of the most specific label
    that has a dedicated API collection, defaulting to ``things``.
    """
    base = TEST_API_BASE_URL if env == "test" else API_BASE_URL

    path = ""
    label = most_specific_label(labels)
    while label and not path:
        path = API_PATHS.get(label, "")
        label = PARENT_TYPES.get(label, "")

    return f"{base}{path or 'things'}/{uuid}"
