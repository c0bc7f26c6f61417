"""
Pytest configuration and shared fixtures for public-things tests.

Stores are replaced by in-memory fakes or mocked drivers, so no Neo4j instance
or upstream concepts API is needed.
"""
import threading
import pytest
from unittest.mock import MagicMock
from typing import Dict, Optional, Union

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from public_things.graph.cypher_builder import NODE_ATTRIBUTES, column_alias
from public_things.models import Concept
from public_things.ontology import id_url, api_url, type_uris
from public_things.store import ConceptStore


CANONICAL_UUID = "6773e864-78ab-4051-abc2-f4e9ab423ebb"
LEAF_UUID = "2cca9e2a-2248-3e48-abc1-93d718b91bbe"
OTHER_UUID = "7f40d291-b3cb-47c4-9bce-18413e9350cf"
MISSING_UUID = "f6a9c1f4-3d7e-4b6a-8f0e-6a2d4c1e9b55"

SECTION_LABELS = ["Thing", "Concept", "Classification", "Section"]
PERSON_LABELS = ["Thing", "Concept", "Person"]


def make_row(**values) -> Dict:
    """Build one lookup row with every column present and unset ones None."""
    row = {}
    for node_var in ("leaf", "canonical"):
        row[column_alias(node_var, "UUID")] = None
        row[column_alias(node_var, "types")] = None
        for attribute in NODE_ATTRIBUTES:
            row[column_alias(node_var, attribute)] = None
    row.update(values)
    return row


def make_concept(uuid: str, labels=None, pref_label: str = "", **kwargs) -> Concept:
    """Build a Concept the way the graph assembler would."""
    labels = labels or SECTION_LABELS
    types = type_uris(labels)
    return Concept(
        id=id_url(uuid),
        api_url=api_url(uuid, labels),
        types=types,
        direct_type=types[-1],
        pref_label=pref_label,
        **kwargs,
    )


class FakeConceptStore(ConceptStore):
    """In-memory store: uuid -> Concept, or an exception to raise."""

    def __init__(self, records: Optional[Dict[str, Union[Concept, Exception]]] = None, connectivity_error=None):
        self.records = dict(records or {})
        self.connectivity_error = connectivity_error
        self.reads = []
        self._lock = threading.Lock()
        self.closed = False

    def read(self, uuid, relationships=None, transaction_id=None):
        with self._lock:
            self.reads.append((uuid, list(relationships or []), transaction_id))
        record = self.records.get(uuid)
        if isinstance(record, Exception):
            raise record
        return record

    def check_connectivity(self):
        if self.connectivity_error is not None:
            raise self.connectivity_error
        return "Fake store is ok"

    def close(self):
        self.closed = True


@pytest.fixture
def canonical_row():
    """Row for a concorded Section whose canonical node carries the public data."""
    return make_row(
        leafUUID=LEAF_UUID,
        leafTypes=SECTION_LABELS,
        leafPrefLabel="Leaf label",
        canonicalUUID=CANONICAL_UUID,
        canonicalTypes=SECTION_LABELS,
        canonicalPrefLabel="Markets",
        canonicalAliases=["Markets section"],
        canonicalDescriptionXML="<p>Markets</p>",
        canonicalImageUrl="http://example.com/markets.png",
    )


@pytest.fixture
def leaf_only_row():
    """Row for a concept with no canonical node."""
    return make_row(
        leafUUID=OTHER_UUID,
        leafTypes=PERSON_LABELS,
        leafPrefLabel="Jane Doe",
        leafTwitterHandle="@janedoe",
    )


@pytest.fixture
def fake_store():
    return FakeConceptStore()


@pytest.fixture
def mock_driver():
    """Mocked neo4j driver whose session().run().data() returns ``driver.rows``."""
    driver = MagicMock()
    session = MagicMock()
    driver.session.return_value.__enter__.return_value = session
    driver.rows = []
    session.run.side_effect = lambda *args, **kwargs: MagicMock(data=MagicMock(return_value=driver.rows))
    driver.mock_session = session
    return driver
