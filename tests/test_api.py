import uuid
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from logiscan.db.base import get_db
from logiscan.domain.scanning.session import ScanThrottle
from logiscan.main import app

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def client(async_session_maker) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db():
        async with async_session_maker() as sess:
            yield sess

    app.dependency_overrides[get_db] = override_get_db
    app.state.scan_throttles = {}
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def _prepare(client, sku="CHR-01", units=2, required=2):
    resp = await client.post("/api/v1/stock-items", json={"sku": sku, "name": "Chair", "total_quantity": 5})
    assert resp.status_code == 200, resp.text
    resp = await client.post(f"/api/v1/stock-items/{sku}/assets", json={"count": units})
    assert resp.status_code == 200, resp.text

    resp = await client.post(
        "/api/v1/events",
        json={
            "event_id": "EVT-1",
            "name": "Gala",
            "assigned_truck_id": "TRUCK-1",
            "selected_scan_directions": ["stock_to_truck"],
            "quote_items": [{"sku": sku, "name": "Chair", "quantity": required}],
        },
    )
    assert resp.status_code == 200, resp.text
    resp = await client.post("/api/v1/events/EVT-1/finalize")
    assert resp.status_code == 200, resp.text
    assert resp.json()["quote_status"] == "finalized"

    resp = await client.post("/api/v1/events/EVT-1/scan-lists")
    assert resp.status_code == 200, resp.text
    (scan_list,) = resp.json()
    return scan_list


async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


async def test_load_a_truck_over_http(client):
    scan_list = await _prepare(client)
    list_id = scan_list["scan_list_id"]
    assert scan_list["total_items"] == 1
    assert scan_list["status"] == "pending"
    app.state.scan_throttles[uuid.UUID(list_id)] = ScanThrottle(min_interval=0)

    resp = await client.post(f"/api/v1/scan-lists/{list_id}/scans", json={"code": "CHR-01-001"})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["triggered_completion"] is False
    assert body["item"]["quantity_scanned"] == 1
    assert body["movement"]["type"] == "LOAD"
    assert body["asset"]["current_location_id"] == "TRUCK-1"

    resp = await client.post(
        f"/api/v1/scan-lists/{list_id}/scans",
        json={"code": "CHR-01", "performed_by": "op-1"},
    )
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["asset"]["asset_id"] == "CHR-01-002"
    assert body["triggered_completion"] is True
    assert body["assets_affected"] == 2
    assert body["scan_list"]["status"] == "completed"

    resp = await client.get(f"/api/v1/scan-lists/{list_id}/next-item")
    assert resp.status_code == 200
    assert resp.json() is None

    resp = await client.get("/api/v1/events/EVT-1/movements")
    assert sorted(m["asset_id"] for m in resp.json()) == ["CHR-01-001", "CHR-01-002"]

    resp = await client.get("/api/v1/stock-items/CHR-01/availability")
    assert resp.json()["in_use_quantity"] == 2


async def test_rejected_scan_is_a_problem_document(client):
    scan_list = await _prepare(client)
    list_id = scan_list["scan_list_id"]
    app.state.scan_throttles[uuid.UUID(list_id)] = ScanThrottle(min_interval=0)

    resp = await client.post(f"/api/v1/scan-lists/{list_id}/scans", json={"code": "NOPE-1"})

    assert resp.status_code == 404
    problem = resp.json()
    assert problem["error_code"] == "asset_not_found"
    assert problem["context"]["code"] == "NOPE-1"
    assert problem["context"]["path"] == f"/api/v1/scan-lists/{list_id}/scans"
    assert problem["context"]["method"] == "POST"


async def test_ambiguous_sku_code_lists_candidates(client):
    scan_list = await _prepare(client, units=3, required=2)
    list_id = scan_list["scan_list_id"]
    app.state.scan_throttles[uuid.UUID(list_id)] = ScanThrottle(min_interval=0)

    resp = await client.post(f"/api/v1/scan-lists/{list_id}/scans", json={"code": "CHR-01"})
    assert resp.status_code == 409
    assert resp.json()["context"]["candidates"] == ["CHR-01-001", "CHR-01-002", "CHR-01-003"]

    resp = await client.post(
        f"/api/v1/scan-lists/{list_id}/scans",
        json={"code": "CHR-01", "pick_first_available": True},
    )
    assert resp.status_code == 200, resp.text
    assert resp.json()["asset"]["asset_id"] == "CHR-01-001"


async def test_rapid_second_scan_is_throttled(client):
    scan_list = await _prepare(client)
    list_id = scan_list["scan_list_id"]

    first = await client.post(f"/api/v1/scan-lists/{list_id}/scans", json={"code": "CHR-01-001"})
    second = await client.post(f"/api/v1/scan-lists/{list_id}/scans", json={"code": "CHR-01-002"})

    assert first.status_code == 200, first.text
    assert second.status_code == 429
    assert second.json()["error_code"] == "too_fast"

    resp = await client.get(f"/api/v1/scan-lists/{list_id}")
    assert resp.json()["items"][0]["scanned_assets"] == ["CHR-01-001"]


async def test_stale_version_conflicts(client):
    scan_list = await _prepare(client)
    list_id = scan_list["scan_list_id"]
    app.state.scan_throttles[uuid.UUID(list_id)] = ScanThrottle(min_interval=0)

    resp = await client.post(
        f"/api/v1/scan-lists/{list_id}/scans",
        json={"code": "CHR-01-001", "expected_version": scan_list["version"] + 5},
    )
    assert resp.status_code == 409
    assert resp.json()["error_code"] == "concurrent_modification"


async def test_undo_reset_cancel_delete(client):
    scan_list = await _prepare(client)
    list_id = scan_list["scan_list_id"]
    app.state.scan_throttles[uuid.UUID(list_id)] = ScanThrottle(min_interval=0)
    await client.post(f"/api/v1/scan-lists/{list_id}/scans", json={"code": "CHR-01-001"})

    resp = await client.post(f"/api/v1/scan-lists/{list_id}/undo", json={"asset_id": "CHR-01-001"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "pending"

    resp = await client.post(f"/api/v1/scan-lists/{list_id}/undo", json={"asset_id": "CHR-01-001"})
    assert resp.status_code == 409
    assert resp.json()["error_code"] == "asset_not_scanned"

    await client.post(f"/api/v1/scan-lists/{list_id}/scans", json={"code": "CHR-01-002"})
    resp = await client.post(f"/api/v1/scan-lists/{list_id}/reset")
    assert resp.json()["items"][0]["quantity_scanned"] == 0

    resp = await client.post(f"/api/v1/scan-lists/{list_id}/cancel")
    assert resp.json()["status"] == "cancelled"
    resp = await client.post(f"/api/v1/scan-lists/{list_id}/scans", json={"code": "CHR-01-001"})
    assert resp.json()["error_code"] == "list_not_active"

    resp = await client.delete(f"/api/v1/scan-lists/{list_id}")
    assert resp.status_code == 204
    assert uuid.UUID(list_id) not in app.state.scan_throttles
    resp = await client.get(f"/api/v1/scan-lists/{list_id}")
    assert resp.status_code == 404
    assert resp.json()["error_code"] == "scan_list_not_found"


async def test_generation_before_finalize_is_refused(client):
    resp = await client.post(
        "/api/v1/events",
        json={"event_id": "EVT-2", "name": "Draft", "quote_items": [{"sku": "LED-01", "name": "Par", "quantity": 1}]},
    )
    assert resp.status_code == 200

    resp = await client.post("/api/v1/events/EVT-2/scan-lists")
    assert resp.status_code == 422
    assert resp.json()["error_code"] == "event_not_finalized"


async def test_movement_sync_endpoints(client):
    scan_list = await _prepare(client)
    list_id = scan_list["scan_list_id"]
    await client.post(f"/api/v1/scan-lists/{list_id}/scans", json={"code": "CHR-01-001"})

    unsynced = (await client.get("/api/v1/movements/unsynced")).json()
    assert len(unsynced) == 1

    resp = await client.post(f"/api/v1/movements/{unsynced[0]['movement_id']}/synced")
    assert resp.json()["is_synced"] is True
    assert (await client.get("/api/v1/movements/unsynced")).json() == []

    resp = await client.post(f"/api/v1/movements/{uuid.uuid4()}/synced")
    assert resp.status_code == 404
