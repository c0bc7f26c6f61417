"""
Public response models.

- Concept: the canonicalized public record for a requested identifier
- Thing: a reference to another concept inside a relationship list
"""

from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field

SKOS_PREFIX = "http://www.w3.org/2004/02/skos/core#"

BROADER = "broader"
BROADER_TRANSITIVE = "broaderTransitive"
NARROWER = "narrower"
RELATED = "related"

SKOS_BROADER = SKOS_PREFIX + BROADER
SKOS_BROADER_TRANSITIVE = SKOS_PREFIX + BROADER_TRANSITIVE
SKOS_NARROWER = SKOS_PREFIX + NARROWER
SKOS_RELATED = SKOS_PREFIX + RELATED


def _put(result: Dict[str, Any], key: str, value: Any) -> None:
    if value:
        result[key] = value


@dataclass
class Thing:
    """
    Relationship reference to another concept.

    Attributes:
        id: Public id URL of the referenced concept
        api_url: Public API URL of the referenced concept
        types: Type URIs, generic to specific
        direct_type: Most specific type URI
        predicate: SKOS predicate URI naming the relationship kind
    """
    id: str
    api_url: str
    types: List[str] = field(default_factory=list)
    direct_type: str = ""
    pref_label: str = ""
    predicate: str = ""
    is_deprecated: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the public JSON representation."""
        result = {"id": self.id, "apiUrl": self.api_url}
        _put(result, "prefLabel", self.pref_label)
        result["types"] = list(self.types)
        _put(result, "directType", self.direct_type)
        _put(result, "predicate", self.predicate)
        _put(result, "isDeprecated", self.is_deprecated)
        return result


@dataclass
class Concept:
    """
    Canonicalized public record for a concept.

    Relationship lists are None when the relationship was not requested or
    the concept has no such relationship; they are then left out of the JSON.
    """
    id: str
    api_url: str
    types: List[str]
    direct_type: str
    pref_label: str = ""
    aliases: List[str] = field(default_factory=list)
    description_xml: str = ""
    image_url: str = ""
    email_address: str = ""
    facebook_page: str = ""
    twitter_handle: str = ""
    scope_note: str = ""
    short_label: str = ""
    is_deprecated: bool = False
    broader_concepts: Optional[List[Thing]] = None
    narrower_concepts: Optional[List[Thing]] = None
    related_concepts: Optional[List[Thing]] = None

    def __post_init__(self):
        """Validate the type hierarchy."""
        if not self.types:
            raise ValueError("Concept types cannot be empty")
        if self.direct_type != self.types[-1]:
            raise ValueError("Concept direct_type must be the most specific type")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the public JSON representation."""
        result = {"id": self.id, "apiUrl": self.api_url}
        _put(result, "prefLabel", self.pref_label)
        result["types"] = list(self.types)
        _put(result, "directType", self.direct_type)
        _put(result, "aliases", list(self.aliases or []))
        _put(result, "descriptionXML", self.description_xml)
        _put(result, "imageUrl", self.image_url)
        _put(result, "emailAddress", self.email_address)
        _put(result, "facebookPage", self.facebook_page)
        _put(result, "twitterHandle", self.twitter_handle)
        _put(result, "scopeNote", self.scope_note)
        _put(result, "shortLabel", self.short_label)
        _put(result, "isDeprecated", self.is_deprecated)
        for key, things in (
            ("broaderConcepts", self.broader_concepts),
            ("narrowerConcepts", self.narrower_concepts),
            ("relatedConcepts", self.related_concepts),
        ):
            if things:
                result[key] = [thing.to_dict() for thing in things]
        return result
