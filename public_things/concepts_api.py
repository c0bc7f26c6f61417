"""
Concepts service client.

Alternative concept store that fetches a single JSON concept document from an
upstream concepts API and translates it into the same public Concept model as
the graph store.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

import requests
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import UpstreamError
from .models import Concept, Thing, SKOS_BROADER, SKOS_NARROWER
from .ontology import (
    THING_ID_PREFIX,
    UPSTREAM_THING_PREFIX,
    api_url,
    full_type_hierarchy,
    label_for_type_uri,
)
from .store import ConceptStore

logger = logging.getLogger(__name__)

SHORT_LABEL_URI = "http://www.ft.com/ontology/shortLabel"
ALIAS_LABEL_URIS = frozenset({
    "http://www.w3.org/2008/05/skos-xl#altLabel",
    "http://www.ft.com/ontology/Alias",
})
EMAIL_ADDRESS_URI = "http://www.ft.com/ontology/emailAddress"
FACEBOOK_PAGE_URI = "http://www.ft.com/ontology/facebookPage"
TWITTER_URI = "http://www.ft.com/ontology/twitterHandle"

USER_AGENT = "UPP public-things-api"

BRAND_PREDICATES: Dict[str, str] = {
    "http://www.ft.com/ontology/subBrandOf": SKOS_BROADER,
    "http://www.ft.com/ontology/hasSubBrand": SKOS_NARROWER,
}


class TypedValue(BaseModel):
    """Typed value pair used for labels and social accounts."""

    type: Optional[str] = None
    value: Optional[str] = None


class BasicConcept(BaseModel):
    """Minimal concept reference as returned by the concepts API."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    api_url: Optional[str] = Field(None, alias="apiUrl")
    type: Optional[str] = None
    pref_label: Optional[str] = Field(None, alias="prefLabel")
    is_deprecated: bool = Field(False, alias="isDeprecated")

    @field_validator("is_deprecated", mode="before")
    @classmethod
    def _null_is_false(cls, value):
        return False if value is None else value


class ConceptRelationship(BaseModel):
    """A related concept and the predicate linking to it."""

    concept: BasicConcept = Field(default_factory=BasicConcept)
    predicate: Optional[str] = None

    @field_validator("concept", mode="before")
    @classmethod
    def _null_is_blank(cls, value):
        return {} if value is None else value


class ConceptDocument(BasicConcept):
    """Full concept document returned by ``GET /concepts/{uuid}``."""

    description_xml: Optional[str] = Field(None, alias="descriptionXML")
    image_url: Optional[str] = Field(None, validation_alias=AliasChoices("imageUrl", "imageURL"))
    account: List[TypedValue] = Field(default_factory=list)
    alternative_labels: List[TypedValue] = Field(default_factory=list, alias="alternativeLabels")
    scope_note: Optional[str] = Field(None, alias="scopeNote")
    short_label: Optional[str] = Field(None, alias="shortLabel")
    broader: List[ConceptRelationship] = Field(default_factory=list, alias="broaderConcepts")
    narrower: List[ConceptRelationship] = Field(default_factory=list, alias="narrowerConcepts")
    related: List[ConceptRelationship] = Field(default_factory=list, alias="relatedConcepts")

    @field_validator("account", "alternative_labels", "broader", "narrower", "related", mode="before")
    @classmethod
    def _null_is_empty(cls, value):
        return [] if value is None else value


def convert_id(concepts_api_id: str) -> str:
    return (concepts_api_id or "").replace(UPSTREAM_THING_PREFIX, THING_ID_PREFIX, 1)


def last_segment(value: str) -> str:
    return (value or "").rstrip("/").split("/")[-1]


def map_predicate(predicate: str) -> str:
    return BRAND_PREDICATES.get(predicate, predicate or "")


class ConceptsAPIStore(ConceptStore):
    """
    Concept store backed by the upstream concepts API.

    A single ``requests.Session`` is shared by every lookup. API URLs always
    point at the production host; the upstream service does not vary by
    environment.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def close(self):
        self.session.close()

    def read(
        self,
        uuid: str,
        relationships: Optional[Iterable[str]] = None,
        transaction_id: Optional[str] = None,
    ) -> Optional[Concept]:
        url = f"{self.base_url}/concepts/{uuid}"
        params = [("showRelationship", name) for name in dict.fromkeys(relationships or [])]
        headers = {"X-Request-Id": transaction_id} if transaction_id else {}

        try:
            response = self.session.get(url, params=params, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"request to {url} was unsuccessful: {e}", exc_info=True)
            raise UpstreamError(f"request to {url} was unsuccessful: {e}", uuid=uuid) from e

        if response.status_code == 404:
            return None
        if not response.ok:
            msg = f"request to {url} returned status: {response.status_code}"
            logger.error(msg)
            raise UpstreamError(msg, uuid=uuid)

        try:
            document = ConceptDocument.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"failed to unmarshal response body from {url}: {e}")
            raise UpstreamError(f"failed to unmarshal response body: {e}", uuid=uuid) from e

        return self.map_concept(uuid, document)

    def map_concept(self, uuid: str, document: ConceptDocument) -> Optional[Concept]:
        """Translate a concepts API document into a Concept."""
        types = full_type_hierarchy(document.type)
        if not types:
            logger.error(f"Could not map type URIs for ID {uuid} with type {document.type}")
            return None

        concept = Concept(
            id=convert_id(document.id),
            api_url=api_url(uuid, [label_for_type_uri(document.type)]),
            types=types,
            direct_type=types[-1],
            pref_label=document.pref_label or "",
            is_deprecated=document.is_deprecated,
            description_xml=document.description_xml or "",
            image_url=document.image_url or "",
            scope_note=document.scope_note or "",
            short_label=document.short_label or "",
        )

        aliases = []
        for label in document.alternative_labels:
            if label.type in ALIAS_LABEL_URIS and label.value:
                aliases.append(label.value)
            elif label.type == SHORT_LABEL_URI:
                concept.short_label = label.value or ""
        concept.aliases = aliases

        for account in document.account:
            self._map_account(concept, account)

        if document.broader:
            concept.broader_concepts = self.convert_relationships(document.broader)
        if document.narrower:
            concept.narrower_concepts = self.convert_relationships(document.narrower)
        if document.related:
            concept.related_concepts = self.convert_relationships(document.related)

        return concept

    def convert_relationships(self, relationships: List[ConceptRelationship]) -> List[Thing]:
        things = []
        for relationship in relationships:
            related = relationship.concept
            types = full_type_hierarchy(related.type)
            if not types:
                logger.error(f"Could not map type URIs for ID {related.id} with type {related.type}")
                continue
            things.append(
                Thing(
                    id=convert_id(related.id),
                    api_url=api_url(last_segment(related.id), [label_for_type_uri(related.type)]),
                    types=types,
                    direct_type=types[-1],
                    pref_label=related.pref_label or "",
                    predicate=map_predicate(relationship.predicate),
                    is_deprecated=related.is_deprecated,
                )
            )
        return things

    @staticmethod
    def _map_account(concept: Concept, account: TypedValue):
        if account.type == EMAIL_ADDRESS_URI:
            concept.email_address = account.value or ""
        elif account.type == FACEBOOK_PAGE_URI:
            concept.facebook_page = account.value or ""
        elif account.type == TWITTER_URI:
            concept.twitter_handle = account.value or ""
        else:
            logger.error(f"Type {account.type} not currently supported")

    def check_connectivity(self) -> str:
        try:
            response = self.session.get(
                f"{self.base_url}/__gtg",
                headers={"User-Agent": USER_AGENT},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise UpstreamError(f"Error connecting to public-concepts-api: {e}") from e

        if response.status_code != 200:
            raise UpstreamError(f"health check returned a non-200 HTTP status: {response.status_code}")
        return "Public Concepts API is healthy"
