"""
Canonical resolution and batch aggregation tests.
"""
import threading
import time
import pytest

from public_things.aggregator import aggregate
from public_things.errors import BatchResolutionError, InvalidUUIDError, UpstreamError
from public_things.logging_setup import cv_transaction_id, get_transaction_id, set_transaction_id
from public_things.resolver import ThingResolver, canonical_uuid_of, validate_uuids

from conftest import CANONICAL_UUID, LEAF_UUID, MISSING_UUID, OTHER_UUID, FakeConceptStore, make_concept


class TestValidateUUIDs:
    def test_valid(self):
        validate_uuids(LEAF_UUID, CANONICAL_UUID)

    def test_invalid_names_the_offender(self):
        with pytest.raises(InvalidUUIDError) as exc_info:
            validate_uuids(LEAF_UUID, "not-a-uuid")
        assert exc_info.value.uuid == "not-a-uuid"
        assert str(exc_info.value).startswith("Invalid uuid: not-a-uuid, err: ")


class TestResolve:
    def test_canonical_request(self):
        store = FakeConceptStore({CANONICAL_UUID: make_concept(CANONICAL_UUID, pref_label="Markets")})
        resolution = ThingResolver(store).resolve(CANONICAL_UUID)

        assert not resolution.is_redirect
        assert resolution.concept.pref_label == "Markets"

    def test_leaf_request_redirects(self):
        store = FakeConceptStore({LEAF_UUID: make_concept(CANONICAL_UUID)})
        resolution = ThingResolver(store).resolve(LEAF_UUID)

        assert resolution.is_redirect
        assert resolution.redirect_uuid == CANONICAL_UUID

    def test_not_found(self, fake_store):
        assert ThingResolver(fake_store).resolve(MISSING_UUID) is None

    def test_store_error_propagates(self):
        store = FakeConceptStore({LEAF_UUID: UpstreamError("boom", uuid=LEAF_UUID)})
        with pytest.raises(UpstreamError):
            ThingResolver(store).resolve(LEAF_UUID)

    def test_relationships_and_transaction_id_are_forwarded(self):
        store = FakeConceptStore({CANONICAL_UUID: make_concept(CANONICAL_UUID)})
        ThingResolver(store).resolve(CANONICAL_UUID, ["related"], "tid_abc")
        assert store.reads == [(CANONICAL_UUID, ["related"], "tid_abc")]

    def test_canonical_uuid_of(self):
        assert canonical_uuid_of(make_concept(CANONICAL_UUID)) == CANONICAL_UUID


class TestResolveForBatch:
    def test_follows_one_hop(self):
        canonical = make_concept(CANONICAL_UUID, pref_label="Markets")
        store = FakeConceptStore({LEAF_UUID: make_concept(CANONICAL_UUID), CANONICAL_UUID: canonical})

        assert ThingResolver(store).resolve_for_batch(LEAF_UUID) is canonical
        assert [read[0] for read in store.reads] == [LEAF_UUID, CANONICAL_UUID]

    def test_missing_canonical_is_dropped(self):
        store = FakeConceptStore({LEAF_UUID: make_concept(CANONICAL_UUID)})
        assert ThingResolver(store).resolve_for_batch(LEAF_UUID) is None

    def test_two_hops_are_not_followed(self):
        store = FakeConceptStore(
            {
                LEAF_UUID: make_concept(CANONICAL_UUID),
                CANONICAL_UUID: make_concept(OTHER_UUID),
                OTHER_UUID: make_concept(OTHER_UUID),
            }
        )
        assert ThingResolver(store).resolve_for_batch(LEAF_UUID) is None
        assert len(store.reads) == 2

    def test_cancelled_batch_skips_second_hop(self):
        store = FakeConceptStore({LEAF_UUID: make_concept(CANONICAL_UUID)})
        cancelled = threading.Event()
        cancelled.set()

        assert ThingResolver(store).resolve_for_batch(LEAF_UUID, cancelled=cancelled) is None
        assert len(store.reads) == 1


class TestResolveMany:
    def test_keyed_by_requested_uuid(self):
        canonical = make_concept(CANONICAL_UUID)
        store = FakeConceptStore({LEAF_UUID: make_concept(CANONICAL_UUID), CANONICAL_UUID: canonical})

        things = ThingResolver(store).resolve_many([LEAF_UUID, MISSING_UUID])

        assert list(things) == [LEAF_UUID]
        assert things[LEAF_UUID] is canonical

    def test_failure_fails_the_batch(self):
        store = FakeConceptStore(
            {
                CANONICAL_UUID: make_concept(CANONICAL_UUID),
                LEAF_UUID: UpstreamError("datastore unavailable", uuid=LEAF_UUID),
            }
        )
        with pytest.raises(BatchResolutionError) as exc_info:
            ThingResolver(store).resolve_many([CANONICAL_UUID, LEAF_UUID, OTHER_UUID])
        assert exc_info.value.uuid == LEAF_UUID
        assert str(exc_info.value) == f"Error getting thing with uuid {LEAF_UUID}, err=datastore unavailable"


class TestAggregate:
    def test_empty(self):
        assert aggregate([], lambda uuid, cancelled: None) == {}

    def test_first_failure_wins_without_waiting_for_slow_tasks(self):
        release = threading.Event()

        def resolve(uuid, cancelled):
            if uuid == "b":
                raise RuntimeError("lookup failed")
            release.wait(timeout=2)
            return None

        started = time.monotonic()
        with pytest.raises(BatchResolutionError) as exc_info:
            aggregate(["a", "b", "c"], resolve)
        release.set()

        assert exc_info.value.uuid == "b"
        assert isinstance(exc_info.value.cause, RuntimeError)
        assert time.monotonic() - started < 2

    def test_transaction_id_reaches_worker_threads(self):
        seen = []

        def resolve(uuid, cancelled):
            seen.append(get_transaction_id())
            return None

        token = set_transaction_id("tid_batch")
        try:
            aggregate(["a", "b"], resolve)
        finally:
            cv_transaction_id.reset(token)

        assert seen == ["tid_batch", "tid_batch"]
