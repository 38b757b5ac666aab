# logiscan/api/v1/routes_scan_lists.py
from typing import Dict, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from logiscan.db.base import get_db
from logiscan.domain.scan_lists.completion import apply_completion_effects
from logiscan.domain.scan_lists.generator import (
    cancel_scan_list,
    delete_scan_list,
    load_scan_list,
    next_item_to_scan,
    reset_scan_list,
)
from logiscan.domain.scan_lists.schemas import PreparationListItemOut, ScanListOut
from logiscan.domain.scanning.engine import record_scan, undo_scan
from logiscan.domain.scanning.schemas import ScanOutcomeOut, ScanRequest, UndoRequest
from logiscan.domain.scanning.session import ScanThrottle


router = APIRouter(prefix="/api/v1/scan-lists", tags=["scan-lists"])


def get_throttles(request: Request) -> Dict[UUID, ScanThrottle]:
    # one debounce window per scan list, kept for the lifetime of the app
    return request.app.state.scan_throttles


@router.get("/{scan_list_id}", response_model=ScanListOut)
async def get_scan_list_endpoint(
    scan_list_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    return await load_scan_list(db, scan_list_id)

@router.get("/{scan_list_id}/next-item", response_model=Optional[PreparationListItemOut])
async def next_item_endpoint(
    scan_list_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    scan_list = await load_scan_list(db, scan_list_id)
    return await next_item_to_scan(db, scan_list)

@router.post("/{scan_list_id}/scans", response_model=ScanOutcomeOut)
async def record_scan_endpoint(
    scan_list_id: UUID,
    payload: ScanRequest,
    db: AsyncSession = Depends(get_db),
    throttles: Dict[UUID, ScanThrottle] = Depends(get_throttles),
):
    scan_list = await load_scan_list(db, scan_list_id)
    throttles.setdefault(scan_list_id, ScanThrottle()).check()
    outcome = await record_scan(
        db,
        scan_list,
        payload.code,
        pick_first_available=payload.pick_first_available,
        performed_by=payload.performed_by,
        expected_version=payload.expected_version,
    )
    return ScanOutcomeOut.model_validate(outcome)

@router.post("/{scan_list_id}/undo", response_model=ScanListOut)
async def undo_scan_endpoint(
    scan_list_id: UUID,
    payload: UndoRequest,
    db: AsyncSession = Depends(get_db),
):
    scan_list = await load_scan_list(db, scan_list_id)
    await undo_scan(db, scan_list, payload.asset_id)
    return scan_list

@router.post("/{scan_list_id}/reset", response_model=ScanListOut)
async def reset_scan_list_endpoint(
    scan_list_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    scan_list = await load_scan_list(db, scan_list_id)
    return await reset_scan_list(db, scan_list)

@router.post("/{scan_list_id}/cancel", response_model=ScanListOut)
async def cancel_scan_list_endpoint(
    scan_list_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    scan_list = await load_scan_list(db, scan_list_id)
    return await cancel_scan_list(db, scan_list)

@router.post("/{scan_list_id}/completion-effects")
async def retry_completion_effects_endpoint(
    scan_list_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    scan_list = await load_scan_list(db, scan_list_id)
    changed = await apply_completion_effects(db, scan_list)
    return {"scan_list_id": str(scan_list_id), "assets_affected": changed}

@router.delete("/{scan_list_id}", status_code=204)
async def delete_scan_list_endpoint(
    scan_list_id: UUID,
    db: AsyncSession = Depends(get_db),
    throttles: Dict[UUID, ScanThrottle] = Depends(get_throttles),
):
    scan_list = await load_scan_list(db, scan_list_id)
    await delete_scan_list(db, scan_list)
    throttles.pop(scan_list_id, None)
    return Response(status_code=204)
