"""
Unit tests for the reconciliation scanner
"""

import pytest

from cms_sync.models import EntityKind


@pytest.fixture
def seeded_content(content, location_payload, tenant_payload, translation_payload):
    content.documents[EntityKind.LOCATION] = [
        location_payload,
        {"_id": "L2", "_type": "location", "name": "Annex"},
    ]
    content.documents[EntityKind.TENANT] = [tenant_payload]
    content.documents[EntityKind.TRANSLATION] = [translation_payload]
    return content


@pytest.mark.asyncio
async def test_reconcile_all_kinds(services, store, seeded_content):
    """Test every CMS document of every kind ends up in the store"""
    report = await services.reconciler.reconcile_all()

    assert report.ok
    assert report.total == 4
    assert {doc["id"] for doc in await store.list_all("locations")} == {"L1", "L2"}
    assert await store.get("tenants", "T1") is not None
    assert await store.get("translations", "TR1") is not None


@pytest.mark.asyncio
async def test_reconcile_empty_dataset(services):
    """Test an empty CMS is a successful no-op"""
    report = await services.reconciler.reconcile_all()

    assert report.ok
    assert report.total == 0


@pytest.mark.asyncio
async def test_reconcile_repairs_drift(services, store, seeded_content):
    """Test a locally deleted field is restored from the CMS"""
    await services.reconciler.reconcile_all()
    await store.set("locations", "L1", {"id": "L1", "title": "stale"}, merge=False)

    await services.reconciler.reconcile_all()

    document = await store.get("locations", "L1")
    assert document["title"] == "Main Library"
    assert document["location"]["city"] == "Zurich"


@pytest.mark.asyncio
async def test_failing_record_is_reported(services, store, seeded_content):
    """Test one bad record is listed while the rest still persist"""
    seeded_content.documents[EntityKind.LOCATION].append({
        "_id": "L3",
        "_type": "location",
        "image": {"asset": {"_ref": "not-an-image"}},
    })

    report = await services.reconciler.reconcile_all()

    assert not report.ok
    assert [(o.key, o.kind) for o in report.failed] == [("L3", "location")]
    assert "Malformed image reference" in report.failed[0].error
    assert await store.get("locations", "L3") is None
    assert await store.get("locations", "L2") is not None
    assert await store.get("tenants", "T1") is not None


@pytest.mark.asyncio
async def test_fetch_failure_is_reported(services, store, seeded_content):
    """Test a kind that cannot be fetched is reported without blocking the others"""
    seeded_content.failing_kinds.add(EntityKind.TRANSLATION)

    report = await services.reconciler.reconcile_all()

    assert not report.ok
    assert [o.to_dict() for o in report.failed] == [{
        "id": "*",
        "kind": "translation",
        "error": "Sanity query failed for translation",
    }]
    assert await store.get("locations", "L1") is not None
    assert await store.get("translations", "TR1") is None
