# logiscan/domain/scanning/engine.py
"""Reconciliation of one scan against the scan list it was made for.

The list is always passed in by the caller; the engine keeps no notion of a
"current" list. Every rejection below is raised before anything is changed,
and the accepted path (item, list counters, asset, movement) is committed as
a single transaction.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple, Union
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from logiscan.core.errors import (
    AmbiguousMatch,
    AssetAlreadyScanned,
    AssetNotExpected,
    AssetNotFound,
    AssetNotScanned,
    AssetUnavailable,
    CompletionEffectError,
    ConcurrentModification,
    EventNotFound,
    InvariantViolation,
    ListNotActive,
    PersistenceError,
)
from logiscan.db.models.assets import Asset, AssetStatus
from logiscan.db.models.common import utcnow
from logiscan.db.models.events import Event
from logiscan.db.models.movements import Movement
from logiscan.db.models.scan_lists import PreparationListItem, ScanList, ScanListStatus
from logiscan.db.repositories.events import get_event_by_id
from logiscan.domain.catalog.service import resolve
from logiscan.domain.movements.directions import move_for_direction
from logiscan.domain.movements.service import record_movement
from logiscan.domain.scan_lists.completion import (
    apply_completion_effects,
    mark_completed,
    refresh_progress,
    scanned_asset_ids,
)

logger = logging.getLogger(__name__)


@dataclass
class ScanOutcome:
    scan_list: ScanList
    item: PreparationListItem
    asset: Asset
    movement: Movement
    triggered_completion: bool = False
    assets_affected: int = 0
    side_effect_error: Optional[str] = None


def check_invariants(scan_list: ScanList) -> None:
    """Raise InvariantViolation if the stored counters disagree with the items."""
    seen = set()
    for item in scan_list.items:
        if not 0 <= item.quantity_scanned <= item.quantity_required:
            raise InvariantViolation(
                f"{item.sku}: {item.quantity_scanned} scanned for {item.quantity_required} required",
                sku=item.sku,
            )
        if len(item.scanned_assets) != item.quantity_scanned:
            raise InvariantViolation(
                f"{item.sku}: {len(item.scanned_assets)} asset ids for {item.quantity_scanned} scanned units",
                sku=item.sku,
            )
        duplicates = seen.intersection(item.scanned_assets)
        if duplicates:
            raise InvariantViolation(
                f"asset(s) {sorted(duplicates)} counted twice in the list",
                assets=sorted(duplicates),
            )
        seen.update(item.scanned_assets)

    complete = sum(1 for item in scan_list.items if item.is_complete)
    if scan_list.scanned_items != complete:
        raise InvariantViolation(
            f"list counts {scan_list.scanned_items} complete lines, items say {complete}",
            scan_list_id=str(scan_list.scan_list_id),
        )


def _is_eligible(scan_list: ScanList, asset: Asset) -> bool:
    if asset.status == AssetStatus.MAINTENANCE:
        return False
    return asset.frozen_event_id is None or asset.frozen_event_id == scan_list.event_id


def _check_eligibility(scan_list: ScanList, asset: Asset) -> None:
    if asset.status == AssetStatus.MAINTENANCE:
        raise AssetUnavailable(f"Asset {asset.asset_id} is in maintenance", asset_id=asset.asset_id)
    if asset.frozen_event_id is not None and asset.frozen_event_id != scan_list.event_id:
        raise AssetUnavailable(
            f"Asset {asset.asset_id} is committed to event {asset.frozen_event_id}",
            asset_id=asset.asset_id,
            frozen_event_id=asset.frozen_event_id,
        )


def match_item(scan_list: ScanList, asset: Asset) -> PreparationListItem:
    """Pick the line the asset counts for, or raise why it cannot count."""
    for item in scan_list.items:
        if asset.asset_id in item.scanned_assets:
            raise AssetAlreadyScanned(asset.asset_id, asset.sku)

    sku_items = [item for item in scan_list.items if item.sku == asset.sku]
    if not sku_items:
        raise AssetNotExpected(asset.asset_id, asset.sku)
    for item in sku_items:
        if not item.is_complete:
            return item
    raise AssetAlreadyScanned(asset.asset_id, asset.sku)


def _pick_candidate(
    scan_list: ScanList,
    code: str,
    candidates: List[Asset],
    pick_first_available: bool
) -> Asset:
    if len(candidates) == 1:
        return candidates[0]

    open_skus = {item.sku for item in scan_list.items if not item.is_complete}
    if not any(c.sku in open_skus for c in candidates):
        raise AssetAlreadyScanned(None, candidates[0].sku)

    already = set(scanned_asset_ids(scan_list))
    remaining = [c for c in candidates if c.sku in open_skus and c.asset_id not in already]
    if not remaining:
        # every known unit is counted, the line still waits for more
        raise AssetAlreadyScanned(None, candidates[0].sku)
    if len(remaining) == 1:
        return remaining[0]

    if pick_first_available:
        eligible = [c for c in remaining if _is_eligible(scan_list, c)] or remaining
        eligible.sort(key=lambda c: c.status != AssetStatus.AVAILABLE)
        return eligible[0]

    raise AmbiguousMatch(code, remaining)


async def resolve_asset(
    db: AsyncSession,
    scan_list: ScanList,
    scanned: Union[str, Asset],
    pick_first_available: bool = False
) -> Tuple[Asset, Optional[str]]:
    if isinstance(scanned, Asset):
        return scanned, scanned.qr_payload or None

    lookup = await resolve(db, scanned)
    candidates = lookup.candidates
    if not candidates:
        raise AssetNotFound(lookup.code.raw)

    expected_skus = {item.sku for item in scan_list.items}
    if not any(c.sku in expected_skus for c in candidates):
        only = candidates[0].asset_id if len(candidates) == 1 else None
        raise AssetNotExpected(only, candidates[0].sku)

    asset = _pick_candidate(scan_list, lookup.code.raw, candidates, pick_first_available)
    return asset, lookup.code.raw


async def record_scan(
    db: AsyncSession,
    scan_list: ScanList,
    scanned: Union[str, Asset],
    *,
    event: Optional[Event] = None,
    pick_first_available: bool = False,
    performed_by: Optional[str] = None,
    expected_version: Optional[int] = None,
    now: Optional[datetime] = None
) -> ScanOutcome:
    """Count one scanned asset against ``scan_list``.

    ``scanned`` is either the decoded label string or an already resolved
    Asset. When a SKU code matches several units the scan is refused with
    AmbiguousMatch, unless ``pick_first_available`` lets the engine choose.

    On success the item, the list counters, the asset status/location and a
    new movement are saved together. If the scan completes the list, the
    freeze/release side effects run afterwards in their own transaction; a
    failure there is logged and reported in the outcome, the scan stays
    recorded.
    """
    if scan_list.status == ScanListStatus.CANCELLED:
        raise ListNotActive(scan_list.scan_list_id, scan_list.status.value)
    if expected_version is not None and expected_version != scan_list.version:
        raise ConcurrentModification(scan_list.scan_list_id, expected_version, scan_list.version)

    asset, payload = await resolve_asset(db, scan_list, scanned, pick_first_available)
    _check_eligibility(scan_list, asset)
    item = match_item(scan_list, asset)

    check_invariants(scan_list)
    if item.quantity_scanned + 1 > item.quantity_required:
        raise InvariantViolation(
            f"{item.sku}: scanning {asset.asset_id} would exceed {item.quantity_required}",
            sku=item.sku,
            asset_id=asset.asset_id,
        )

    if event is None or event.event_id != scan_list.event_id:
        event = await get_event_by_id(db, scan_list.event_id)
        if event is None:
            raise EventNotFound(scan_list.event_id)
    move = move_for_direction(scan_list.scan_direction, event.event_id, event.assigned_truck_id)
    now = now or utcnow()
    # a rollback expires every loaded object, keep what the messages need
    asset_id = asset.asset_id
    scan_list_id = scan_list.scan_list_id

    try:
        item.scanned_assets = [*item.scanned_assets, asset_id]
        item.quantity_scanned = len(item.scanned_assets)
        item.last_scanned_at = now
        item.refresh_status()
        refresh_progress(scan_list, now)

        asset.status = move.asset_status
        asset.current_location_id = move.to_location
        asset.updated_at = now

        movement = await record_movement(
            db,
            move.movement_type,
            asset_id,
            move.from_location,
            move.to_location,
            timestamp=now,
            sku=asset.sku,
            event_id=event.event_id,
            scan_list_id=scan_list_id,
            scan_payload=payload,
            performed_by=performed_by,
        )
        triggered = mark_completed(scan_list, now)
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise PersistenceError(f"Scan of {asset_id} not recorded: {exc}", asset_id=asset_id) from exc

    logger.info(
        "scan %s -> %s %s (%d/%d), list %d/%d",
        asset.asset_id, scan_list.scan_direction.value, item.sku,
        item.quantity_scanned, item.quantity_required,
        scan_list.scanned_items, scan_list.total_items,
    )

    outcome = ScanOutcome(
        scan_list=scan_list,
        item=item,
        asset=asset,
        movement=movement,
        triggered_completion=triggered,
    )
    if triggered:
        try:
            outcome.assets_affected = await apply_completion_effects(db, scan_list, now)
        except CompletionEffectError as exc:
            logger.error("scan list %s completed but side effects failed: %s", scan_list_id, exc)
            outcome.side_effect_error = exc.message
            # the rollback expired everything loaded in the session
            await db.refresh(scan_list)
            await db.refresh(asset)
            await db.refresh(movement)
    return outcome


async def undo_scan(
    db: AsyncSession,
    scan_list: ScanList,
    asset_id: str,
    now: Optional[datetime] = None
) -> PreparationListItem:
    """Take one asset back out of the list.

    Only the checklist is rewound: the asset keeps its status and the ledger
    keeps the movement that was written for the scan.
    """
    if scan_list.status == ScanListStatus.CANCELLED:
        raise ListNotActive(scan_list.scan_list_id, scan_list.status.value)

    item = next((i for i in scan_list.items if asset_id in i.scanned_assets), None)
    if item is None:
        raise AssetNotScanned(asset_id)

    now = now or utcnow()
    try:
        item.scanned_assets = [a for a in item.scanned_assets if a != asset_id]
        item.quantity_scanned = len(item.scanned_assets)
        item.refresh_status()
        refresh_progress(scan_list, now)
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise PersistenceError(f"Undo of {asset_id} not recorded: {exc}") from exc

    logger.info("scan of %s undone on list %s", asset_id, scan_list.scan_list_id)
    return item
