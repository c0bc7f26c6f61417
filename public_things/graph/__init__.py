"""
Graph store backend: Cypher query construction, row assembly and the Neo4j store.

The Neo4j driver is only imported when ``Neo4jConceptStore`` is requested.
"""

from .cypher_builder import CypherStatement, CypherStatementBuilder
from .assembler import ConceptAssembler

__all__ = [
    "CypherStatement",
    "CypherStatementBuilder",
    "ConceptAssembler",
    "Neo4jConceptStore",
    "Neo4jConfig",
]


def __getattr__(name: str):
    if name in ("Neo4jConceptStore", "Neo4jConfig"):
        from . import neo4j_store
        value = getattr(neo4j_store, name)
        globals()[name] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
