"""
Neo4j concept store.

Reads concepts from the Neo4j concordance graph with one parameterized
statement per lookup:
- the identifier node and the leaf concept it identifies
- the leaf's canonical (EQUIVALENT_TO) node
- one collected traversal per requested relationship
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from neo4j import GraphDatabase
from neo4j.exceptions import DriverError, Neo4jError

from ..errors import UpstreamError
from ..models import Concept
from ..relationships import RelationshipSet
from ..store import ConceptStore
from .assembler import ConceptAssembler
from .cypher_builder import CypherStatement, CypherStatementBuilder

logger = logging.getLogger(__name__)

CONNECTIVITY_QUERY = "MATCH (x) RETURN id(x) AS id LIMIT 1"


@dataclass
class Neo4jConfig:
    """Neo4j connection configuration."""
    uri: str
    user: str = ""
    password: str = ""
    database: str = "neo4j"


class Neo4jConceptStore(ConceptStore):
    """
    Concept store backed by Neo4j.

    One driver is shared by all lookups; sessions are opened per read.
    """

    def __init__(self, config: Neo4jConfig, env: str = "local", driver=None):
        """Initialize the store.

        Args:
            config: Neo4j connection configuration
            env: Deployment environment, used when building API URLs
            driver: Pre-built driver (tests); one is created from config otherwise
        """
        self.config = config
        self.assembler = ConceptAssembler(env=env)
        if driver is None:
            auth = (config.user, config.password) if config.user else None
            driver = GraphDatabase.driver(config.uri, auth=auth)
            logger.info(f"Connected to Neo4j at {config.uri}")
        self.driver = driver

    def close(self):
        """Close Neo4j driver connection."""
        if self.driver:
            self.driver.close()
            logger.info("Neo4j connection closed")

    def read(
        self,
        uuid: str,
        relationships: Optional[Iterable[str]] = None,
        transaction_id: Optional[str] = None,
    ) -> Optional[Concept]:
        statement = (
            CypherStatementBuilder(uuid)
            .with_relationships(RelationshipSet.from_names(relationships))
            .build()
        )
        rows = self._run(uuid, statement)
        logger.debug(f"Found {len(rows)} rows for uuid {uuid}")
        return self.assembler.assemble(uuid, rows)

    def _run(self, uuid: str, statement: CypherStatement) -> List[Dict[str, Any]]:
        logger.debug(f"Query for {uuid}: {statement.text}")
        try:
            with self.driver.session(database=self.config.database) as session:
                return session.run(statement.text, statement.parameters).data()
        except (Neo4jError, DriverError) as e:
            logger.error(f"Error looking up uuid {uuid} in Neo4j: {e}", exc_info=True)
            raise UpstreamError(f"Error accessing Things datastore for uuid: {uuid}: {e}", uuid=uuid) from e

    def check_connectivity(self) -> str:
        try:
            with self.driver.session(database=self.config.database) as session:
                session.run(CONNECTIVITY_QUERY).consume()
        except (Neo4jError, DriverError) as e:
            raise UpstreamError(f"Error connecting to neo4j: {e}") from e
        return "Connectivity to neo4j is ok"
