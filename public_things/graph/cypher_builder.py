"""
Cypher statement builder for concept lookups.

A lookup is described by an ordered list of ``TraversalFragment`` records, one
per requested relationship kind, and rendered in a single pass. Every
``WITH`` clause carries forward the collections materialized by the fragments
rendered before it, so none is dropped by a later aggregation.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..relationships import RELATIONSHIP_PATTERNS, RelationshipSet

SUBJECT_PARAMETER = "thingUUID"

EQUIVALENT_TO = "-[:EQUIVALENT_TO]->"

# Scalar attributes read from both the leaf and its canonical node.
NODE_ATTRIBUTES = (
    "prefLabel",
    "descriptionXML",
    "imageUrl",
    "aliases",
    "emailAddress",
    "facebookPage",
    "twitterHandle",
    "scopeNote",
    "shortLabel",
)

_MATCH_SUBJECT = (
    f"MATCH (identifier:UPPIdentifier {{value: ${SUBJECT_PARAMETER}}})\n"
    "MATCH (identifier)-[:IDENTIFIES]->(leaf:Concept)\n"
    f"OPTIONAL MATCH (leaf){EQUIVALENT_TO}(canonical:Concept)"
)


@dataclass(frozen=True)
class TraversalFragment:
    """One relationship traversal rooted at the leaf node.

    Attributes:
        relationship: Relationship kind, e.g. "broader"
        pattern: Rendered Cypher relationship pattern
        node_var: Variable bound to the traversed node
        canonical_var: Variable bound to the traversed node's canonical node
        collection: Name of the collected result column
    """
    relationship: str
    pattern: str
    node_var: str
    canonical_var: str
    collection: str

    def render(self, carried: List[str]) -> str:
        """Render this fragment, carrying forward ``carried`` collections."""
        projection = (
            f"{{id: {self.canonical_var}.prefUUID, "
            f"prefLabel: {self.canonical_var}.prefLabel, "
            f"types: labels({self.canonical_var})}}"
        )
        with_vars = ", ".join(["leaf", "canonical", *carried])
        return (
            f"OPTIONAL MATCH (leaf){self.pattern}({self.node_var}:Concept)\n"
            f"OPTIONAL MATCH ({self.node_var}){EQUIVALENT_TO}({self.canonical_var}:Concept)\n"
            f"WITH {with_vars}, collect(DISTINCT {projection}) AS {self.collection}"
        )


@dataclass(frozen=True)
class CypherStatement:
    """A parameterized Cypher statement ready to run."""
    text: str
    parameters: Dict[str, Any] = field(default_factory=dict)
    collections: List[str] = field(default_factory=list)


def collection_name(relationship: str) -> str:
    return f"{relationship}Concepts"


def build_fragments(relationships: RelationshipSet) -> List[TraversalFragment]:
    """Create the traversal IR for the retained relationships, in table order."""
    fragments = []
    for index, relationship in enumerate(relationships.ordered()):
        fragments.append(
            TraversalFragment(
                relationship=relationship,
                pattern=RELATIONSHIP_PATTERNS[relationship].render(),
                node_var=f"c{index}",
                canonical_var=f"{relationship}Canonical",
                collection=collection_name(relationship),
            )
        )
    return fragments


def column_alias(node_var: str, attribute: str) -> str:
    """Result column name for a node attribute, e.g. ``leafPrefLabel``."""
    return node_var + attribute[0].upper() + attribute[1:]


def _return_clause(collections: List[str]) -> str:
    columns = []
    for node_var, id_property in (("leaf", "uuid"), ("canonical", "prefUUID")):
        columns.append(f"{node_var}.{id_property} AS {column_alias(node_var, 'UUID')}")
        columns.append(f"labels({node_var}) AS {column_alias(node_var, 'types')}")
        columns += [f"{node_var}.{attr} AS {column_alias(node_var, attr)}" for attr in NODE_ATTRIBUTES]
    columns += collections
    return "RETURN " + ",\n       ".join(columns)


class CypherStatementBuilder:
    """Builds the single lookup statement for a thing and its relationships.

    Example:
        >>> stmt = CypherStatementBuilder("6773e864-...").with_relationships(
        ...     RelationshipSet.from_names(["broaderTransitive"])).build()
        >>> stmt.collections
        ['broaderConcepts', 'broaderTransitiveConcepts']
    """

    def __init__(self, thing_uuid: str):
        self.thing_uuid = thing_uuid
        self.relationships = RelationshipSet()

    def with_relationships(self, relationships: RelationshipSet) -> "CypherStatementBuilder":
        self.relationships = relationships
        return self

    def build(self) -> CypherStatement:
        """Render the statement. Never fails."""
        parts = [_MATCH_SUBJECT]
        carried: List[str] = []
        for fragment in build_fragments(self.relationships):
            parts.append(fragment.render(carried))
            carried.append(fragment.collection)
        parts.append(_return_clause(carried))

        return CypherStatement(
            text="\n".join(parts),
            parameters={SUBJECT_PARAMETER: self.thing_uuid},
            collections=list(carried),
        )
