"""
Neo4j store tests using a mocked driver.
"""
import pytest
from unittest.mock import MagicMock

from neo4j.exceptions import ServiceUnavailable

from public_things.errors import UpstreamError
from public_things.graph.neo4j_store import CONNECTIVITY_QUERY, Neo4jConceptStore, Neo4jConfig

from conftest import CANONICAL_UUID, LEAF_UUID


@pytest.fixture
def store(mock_driver):
    return Neo4jConceptStore(Neo4jConfig(uri="bolt://localhost:7687", database="graph"), driver=mock_driver)


class TestNeo4jConceptStore:
    def test_read_runs_parameterized_statement(self, store, mock_driver, canonical_row):
        mock_driver.rows = [canonical_row]

        concept = store.read(LEAF_UUID, ["broader", "bogus"])

        assert concept.id.endswith(CANONICAL_UUID)
        mock_driver.session.assert_called_with(database="graph")
        text, parameters = mock_driver.mock_session.run.call_args[0]
        assert parameters == {"thingUUID": LEAF_UUID}
        assert "AS broaderConcepts" in text
        assert "bogus" not in text

    def test_read_not_found(self, store, mock_driver):
        mock_driver.rows = []
        assert store.read(LEAF_UUID) is None

    def test_driver_error_becomes_upstream_error(self, store, mock_driver):
        mock_driver.mock_session.run.side_effect = ServiceUnavailable("connection refused")

        with pytest.raises(UpstreamError) as exc_info:
            store.read(LEAF_UUID)
        assert exc_info.value.found is False
        assert exc_info.value.uuid == LEAF_UUID

    def test_check_connectivity(self, store, mock_driver):
        assert store.check_connectivity() == "Connectivity to neo4j is ok"
        assert mock_driver.mock_session.run.call_args[0][0] == CONNECTIVITY_QUERY

    def test_check_connectivity_failure(self, store, mock_driver):
        mock_driver.mock_session.run.side_effect = ServiceUnavailable("down")
        with pytest.raises(UpstreamError):
            store.check_connectivity()

    def test_close_closes_driver(self, store, mock_driver):
        store.close()
        mock_driver.close.assert_called_once()

    def test_context_manager_closes(self, mock_driver):
        with Neo4jConceptStore(Neo4jConfig(uri="bolt://x"), driver=mock_driver):
            pass
        mock_driver.close.assert_called_once()

    def test_creates_driver_from_config(self, monkeypatch):
        fake_graph_database = MagicMock()
        monkeypatch.setattr("public_things.graph.neo4j_store.GraphDatabase", fake_graph_database)

        Neo4jConceptStore(Neo4jConfig(uri="bolt://db:7687", user="neo4j", password="secret"))

        fake_graph_database.driver.assert_called_once_with("bolt://db:7687", auth=("neo4j", "secret"))
