"""
Ontology mapping tests: labels to type URIs, id and API URLs.
"""
import pytest

from public_things.ontology import (
    ONTOLOGY_PREFIX,
    TYPE_URIS,
    api_url,
    full_type_hierarchy,
    id_url,
    label_for_type_uri,
    most_specific_label,
    type_uris,
)


class TestTypeURIs:
    def test_orders_generic_to_specific(self):
        uris = type_uris(["Section", "Thing", "Classification", "Concept"])
        assert uris == [
            ONTOLOGY_PREFIX + "core/Thing",
            ONTOLOGY_PREFIX + "concept/Concept",
            ONTOLOGY_PREFIX + "classification/Classification",
            ONTOLOGY_PREFIX + "Section",
        ]

    def test_duplicates_collapse(self):
        assert type_uris(["Thing", "Thing", "Concept"]) == [
            TYPE_URIS["Thing"],
            TYPE_URIS["Concept"],
        ]

    def test_deep_company_hierarchy(self):
        uris = type_uris(["PublicCompany", "Company", "Organisation", "Concept", "Thing"])
        assert uris[-1] == TYPE_URIS["PublicCompany"]
        assert uris[0] == TYPE_URIS["Thing"]

    @pytest.mark.parametrize("labels", [[], None, ["Thing", "Unicorn"]])
    def test_unmappable_labels(self, labels):
        assert type_uris(labels) is None

    @pytest.mark.parametrize(
        "labels",
        [
            ["Thing", "Concept", "Person", "Topic"],
            ["Thing", "Concept", "Organisation", "Classification"],
            ["Thing", "Classification"],
        ],
    )
    def test_labels_must_form_one_chain(self, labels):
        assert type_uris(labels) is None


class TestTypeHierarchy:
    def test_full_hierarchy_from_direct_type(self):
        assert full_type_hierarchy(TYPE_URIS["Brand"]) == [
            TYPE_URIS["Thing"],
            TYPE_URIS["Concept"],
            TYPE_URIS["Classification"],
            TYPE_URIS["Brand"],
        ]

    def test_unknown_type_yields_empty(self):
        assert full_type_hierarchy("http://www.ft.com/ontology/Unicorn") == []
        assert full_type_hierarchy("") == []

    def test_label_for_type_uri(self):
        assert label_for_type_uri(TYPE_URIS["Person"]) == "Person"
        assert label_for_type_uri("http://example.com/ontology/Widget") == "Widget"

    def test_most_specific_label_ignores_unknown(self):
        assert most_specific_label(["Thing", "Concept", "Person", "Unicorn"]) == "Person"
        assert most_specific_label([]) is None


class TestURLs:
    def test_id_url(self):
        assert id_url("abc") == "http://api.ft.com/things/abc"

    def test_api_url_uses_collection_of_nearest_ancestor(self):
        assert api_url("u1", ["Thing", "Concept", "Person"]) == "http://api.ft.com/people/u1"
        assert api_url("u2", ["Thing", "Concept", "Organisation", "Company", "PublicCompany"]) == (
            "http://api.ft.com/organisations/u2"
        )
        assert api_url("u3", ["Thing", "Concept", "Classification", "Brand"]) == "http://api.ft.com/brands/u3"

    def test_api_url_defaults_to_things(self):
        assert api_url("u4", ["Thing", "Concept", "Topic"]) == "http://api.ft.com/things/u4"
        assert api_url("u5", []) == "http://api.ft.com/things/u5"

    def test_api_url_test_environment(self):
        assert api_url("u1", ["Person"], env="test") == "http://test.api.ft.com/people/u1"
