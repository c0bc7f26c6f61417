"""
Relationship kinds a caller can ask for with ``showRelationship``.

Each supported kind maps to a graph traversal pattern. Unknown names are
dropped silently; ``broaderTransitive`` always brings ``broader`` along since
both share the same predicate family and are returned side by side.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Tuple

from .models import BROADER, BROADER_TRANSITIVE, NARROWER, RELATED

_BROADER_TYPES = ("HAS_BROADER", "HAS_PARENT")


@dataclass(frozen=True)
class RelationshipPattern:
    """Graph traversal for one relationship kind.

    Attributes:
        rel_types: Graph relationship types to follow
        direction: "out", "in" or "both"
        min_hops: Minimum traversal depth
        max_hops: Maximum traversal depth (None for unbounded)
    """
    rel_types: Tuple[str, ...]
    direction: str = "out"
    min_hops: int = 1
    max_hops: Optional[int] = 1

    def render(self) -> str:
        """Render as a Cypher relationship pattern, e.g. ``-[:A|B*2..]->``."""
        types = "|".join(self.rel_types)
        if self.min_hops == 1 and self.max_hops == 1:
            hops = ""
        elif self.max_hops is None:
            hops = f"*{self.min_hops}.."
        else:
            hops = f"*{self.min_hops}..{self.max_hops}"

        body = f"[:{types}{hops}]"
        if self.direction == "out":
            return f"-{body}->"
        if self.direction == "in":
            return f"<-{body}-"
        return f"-{body}-"


# Ordered: statements are rendered in this order.
RELATIONSHIP_PATTERNS: Dict[str, RelationshipPattern] = {
    BROADER: RelationshipPattern(_BROADER_TYPES, "out"),
    BROADER_TRANSITIVE: RelationshipPattern(_BROADER_TYPES, "out", min_hops=2, max_hops=None),
    NARROWER: RelationshipPattern(_BROADER_TYPES, "in"),
    RELATED: RelationshipPattern(("IS_RELATED_TO",), "both"),
}

SUPPORTED_RELATIONSHIPS: Tuple[str, ...] = tuple(RELATIONSHIP_PATTERNS)

# A requested kind that needs other kinds computed alongside it.
_IMPLIED: Dict[str, Tuple[str, ...]] = {
    BROADER_TRANSITIVE: (BROADER,),
}


@dataclass(frozen=True)
class RelationshipSet:
    """Supported relationship kinds retained from a caller's request."""

    names: FrozenSet[str] = frozenset()

    @classmethod
    def from_names(cls, names: Optional[Iterable[str]]) -> "RelationshipSet":
        """Deduplicate, drop unsupported names and add implied kinds."""
        retained = {name for name in (names or []) if name in RELATIONSHIP_PATTERNS}
        for name in list(retained):
            retained.update(_IMPLIED.get(name, ()))
        return cls(frozenset(retained))

    def ordered(self) -> List[str]:
        """Retained names in rendering order."""
        return [name for name in SUPPORTED_RELATIONSHIPS if name in self.names]

    def __contains__(self, name: object) -> bool:
        return name in self.names

    def __iter__(self) -> Iterator[str]:
        return iter(self.ordered())

    def __len__(self) -> int:
        return len(self.names)
