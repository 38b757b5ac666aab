import json

import pytest

from logiscan.core.errors import AssetNotFound, DuplicateStockItem, InsufficientStock, StockItemNotFound
from logiscan.db.models.assets import AssetStatus
from logiscan.domain.catalog.schemas import AssetsCreate, StockItemCreate
from logiscan.domain.catalog.service import (
    add_assets,
    create_stock_item,
    get_availability,
    parse_scan_code,
    resolve,
)

from factories import make_stock

pytestmark = pytest.mark.asyncio


async def test_parse_bare_code_is_sku_and_asset_id_candidate():
    code = parse_scan_code("  LED-01 ")
    assert code.kind == "bare"
    assert code.sku == "LED-01"
    assert code.asset_id == "LED-01"


async def test_parse_json_payload():
    raw = json.dumps({"v": 1, "type": "asset", "id": "A1", "sku": "LED-01", "sn": "SN-9"})
    code = parse_scan_code(raw)
    assert code.kind == "json"
    assert (code.asset_id, code.sku, code.serial_number) == ("A1", "LED-01", "SN-9")


async def test_parse_batch_payload_keeps_sku_list():
    raw = json.dumps({"v": 1, "type": "box", "id": "BOX-1", "skus": [{"sku": "LED-01", "qty": 4}]})
    code = parse_scan_code(raw)
    assert code.type == "box"
    assert [(b.sku, b.qty) for b in code.batch] == [("LED-01", 4)]


async def test_parse_colon_fallback():
    code = parse_scan_code("ASSET:A1:LED-01")
    assert code.kind == "colon"
    assert code.asset_id == "A1"
    assert code.sku == "LED-01"

    sku_code = parse_scan_code("SKU:CHR-01")
    assert sku_code.asset_id is None
    assert sku_code.sku == "CHR-01"


async def test_parse_broken_json_falls_back():
    code = parse_scan_code('{"type": "asset", "id"')
    # still structured (contains ':'), the colon rule takes over
    assert code.kind == "colon"


async def test_parse_empty_code_is_not_found():
    with pytest.raises(AssetNotFound):
        parse_scan_code("   ")


async def test_resolve_by_asset_id_first(session):
    await make_stock(session, "LED-01", ["A1", "A2"])

    result = await resolve(session, "A1")
    assert result.matched_by == "id"
    assert [a.asset_id for a in result.candidates] == ["A1"]


async def test_resolve_by_sku_returns_every_unit(session):
    await make_stock(session, "LED-01", ["A1", "A2", "A3"])

    result = await resolve(session, "LED-01")
    assert result.matched_by == "sku"
    assert [a.asset_id for a in result.candidates] == ["A1", "A2", "A3"]


async def test_resolve_unknown_code_is_empty(session):
    await make_stock(session, "LED-01", ["A1"])

    result = await resolve(session, "NOPE-42")
    assert result.candidates == []
    assert result.matched_by is None


async def test_resolve_json_payload_by_serial(session):
    await create_stock_item(session, StockItemCreate(sku="SPK-01", name="Speaker", total_quantity=2))
    await add_assets(session, "SPK-01", AssetsCreate(serial_numbers=["SN-1", "SN-2"]))

    raw = json.dumps({"v": 1, "type": "asset", "id": "UNKNOWN", "sku": "SPK-01", "sn": "SN-2"})
    result = await resolve(session, raw)
    assert result.matched_by == "id"
    assert [a.serial_number for a in result.candidates] == ["SN-2"]


async def test_add_assets_copies_stock_attributes(session):
    await create_stock_item(
        session,
        StockItemCreate(sku="TRS-01", name="Truss 2m", category="structure", unit_weight=12.5, total_quantity=3),
    )
    assets = await add_assets(session, "TRS-01", AssetsCreate(count=2))

    assert [a.asset_id for a in assets] == ["TRS-01-001", "TRS-01-002"]
    assert all(a.weight == 12.5 and a.category == "structure" for a in assets)
    assert all(a.status == AssetStatus.AVAILABLE and a.current_location_id == "STOCK" for a in assets)
    payload = json.loads(assets[0].qr_payload)
    assert payload == {"v": 1, "type": "asset", "id": "TRS-01-001", "sku": "TRS-01"}


async def test_add_assets_cannot_exceed_total_quantity(session):
    await create_stock_item(session, StockItemCreate(sku="TRS-01", name="Truss", total_quantity=2))
    await add_assets(session, "TRS-01", AssetsCreate(count=2))

    with pytest.raises(InsufficientStock):
        await add_assets(session, "TRS-01", AssetsCreate(count=1))


async def test_add_assets_unknown_sku(session):
    with pytest.raises(StockItemNotFound):
        await add_assets(session, "GHOST", AssetsCreate(count=1))


async def test_duplicate_stock_item_rejected(session):
    await create_stock_item(session, StockItemCreate(sku="LED-01", name="Par LED"))
    with pytest.raises(DuplicateStockItem):
        await create_stock_item(session, StockItemCreate(sku="LED-01", name="Par LED"))


async def test_availability_counts_units_out(session):
    await create_stock_item(
        session,
        StockItemCreate(sku="LED-01", name="Par LED", total_quantity=10, maintenance_quantity=2),
    )
    assets = await add_assets(session, "LED-01", AssetsCreate(count=4))
    assets[0].status = AssetStatus.IN_USE
    assets[1].status = AssetStatus.RESERVED
    await session.commit()

    availability = await get_availability(session, "LED-01")
    assert availability.in_use_quantity == 2
    assert availability.available_quantity == 10 - 2 - 2
