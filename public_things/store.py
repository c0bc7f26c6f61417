"""Concept store interface and factory."""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from .models import Concept


class ConceptStore(ABC):
    """Abstract source of concept records.

    Implementations are shared by every concurrent lookup and must not keep
    per-request state.
    """

    @abstractmethod
    def read(
        self,
        uuid: str,
        relationships: Optional[Iterable[str]] = None,
        transaction_id: Optional[str] = None,
    ) -> Optional[Concept]:
        """Fetch the concept identified by ``uuid``.

        Args:
            uuid: Requested identifier
            relationships: Requested relationship names (unsupported ones are ignored)
            transaction_id: Request correlation id, forwarded where supported

        Returns:
            The Concept, or None when nothing publishable was found

        Raises:
            UpstreamError: If the store cannot be queried or returns inconsistent data
        """
        pass

    @abstractmethod
    def check_connectivity(self) -> str:
        """Check the store is reachable.

        Returns:
            Human readable success message

        Raises:
            UpstreamError: If the store is not reachable
        """
        pass

    def close(self):
        """Release any connections held by the store."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def create_concept_store(backend: str = "neo4j", env: str = "local", **kwargs) -> ConceptStore:
    """Factory function to create a concept store.

    Args:
        backend: Store type ("neo4j" or "concepts-api")
        env: Deployment environment, used by the neo4j backend when building API URLs
        **kwargs: Store-specific parameters

    Examples:
        >>> store = create_concept_store("neo4j", uri="bolt://localhost:7687", user="neo4j", password="...")
        >>> store = create_concept_store("concepts-api", base_url="http://concepts-api:8080")
    """
    backend_lower = backend.lower()

    if backend_lower == "neo4j":
        from .graph.neo4j_store import Neo4jConceptStore, Neo4jConfig

        config = Neo4jConfig(
            uri=kwargs["uri"],
            user=kwargs.get("user", ""),
            password=kwargs.get("password", ""),
            database=kwargs.get("database", "neo4j"),
        )
        return Neo4jConceptStore(config, env=env)

    elif backend_lower in ("concepts-api", "concepts_api"):
        from .concepts_api import ConceptsAPIStore

        return ConceptsAPIStore(
            base_url=kwargs["base_url"],
            timeout=kwargs.get("timeout", 60.0),
        )

    else:
        raise ValueError(f"Unknown concept store backend: {backend}. Supported: neo4j, concepts-api")
