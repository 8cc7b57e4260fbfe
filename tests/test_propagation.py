"""
Unit tests for tenant-to-location propagation
"""

import pytest

from cms_sync.core.errors import StoreError
from cms_sync.services.propagation import RelationPropagator


@pytest.fixture
def propagator(store) -> RelationPropagator:
    return RelationPropagator(store, max_concurrency=2)


@pytest.mark.asyncio
async def test_propagate_to_existing_location(propagator, store):
    """Test the tenant id is merged onto an existing location"""
    await store.set("locations", "L1", {"id": "L1", "title": "Library"})

    assigned = await propagator.propagate("T1", "L1")

    assert assigned is True
    assert await store.get("locations", "L1") == {"id": "L1", "title": "Library", "tenantId": "T1"}


@pytest.mark.asyncio
async def test_propagate_to_missing_location_is_noop(propagator, store):
    """Test no location document is created for an unknown reference"""
    assigned = await propagator.propagate("T1", "L404")

    assert assigned is False
    assert await store.get("locations", "L404") is None


@pytest.mark.asyncio
async def test_propagate_twice_is_idempotent(propagator, store):
    """Test repeating the cascade leaves the same tenant id"""
    await store.set("locations", "L1", {"id": "L1"})

    await propagator.propagate("T1", "L1")
    await propagator.propagate("T1", "L1")

    assert (await store.get("locations", "L1"))["tenantId"] == "T1"


@pytest.mark.asyncio
async def test_propagate_all_mixed_references(propagator, store):
    """Test every reference is visited and missing ones are skipped"""
    for location_id in ("L1", "L2", "L3"):
        await store.set("locations", location_id, {"id": location_id})

    report = await propagator.propagate_all("T1", ["L1", "L2", "L404", "L3"])

    assert report.ok
    assert report.total == 4
    for location_id in ("L1", "L2", "L3"):
        assert (await store.get("locations", location_id))["tenantId"] == "T1"
    assert await store.get("locations", "L404") is None


@pytest.mark.asyncio
async def test_propagate_all_reports_write_failure(propagator, store):
    """Test a failed location write surfaces as a store error after all refs ran"""
    await store.set("locations", "L1", {"id": "L1"})
    await store.set("locations", "L2", {"id": "L2"})

    original_set = store.set

    async def flaky_set(collection, doc_id, data, merge=False):
        if doc_id == "L1":
            raise RuntimeError("write conflict")
        await original_set(collection, doc_id, data, merge=merge)

    store.set = flaky_set

    with pytest.raises(StoreError, match="L1 \\(write conflict\\)"):
        await propagator.propagate_all("T1", ["L1", "L2"])

    assert (await store.get("locations", "L2"))["tenantId"] == "T1"
