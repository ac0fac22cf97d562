"""Equipment catalog endpoints.

The catalog is shared by every practitioner; the identity header is
still required.
"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from otassess_db.models.enums import EquipmentCategory

from otassess_core.context import RequestContext
from otassess_core.equipment import EquipmentService
from otassess_core.models import EquipmentCreate, EquipmentUpdate, EquipmentView

from otassess_server.config import MAX_PAGE_LIMIT
from otassess_server.dependencies import get_db, get_equipment_service, get_request_context

router = APIRouter(prefix="/equipment", tags=["equipment"])


@router.get("")
async def list_equipment(
    category: EquipmentCategory | None = Query(None),
    limit: int | None = Query(None, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: EquipmentService = Depends(get_equipment_service),
) -> list[EquipmentView]:
    items = await service.list(db, category=category, limit=limit, offset=offset)
    return [EquipmentView.model_validate(i) for i in items]


@router.post("", status_code=201)
async def create_equipment(
    body: EquipmentCreate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: EquipmentService = Depends(get_equipment_service),
) -> EquipmentView:
    return EquipmentView.model_validate(await service.create(db, body))


@router.get("/{equipment_id}")
async def get_equipment(
    equipment_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: EquipmentService = Depends(get_equipment_service),
) -> EquipmentView:
    return EquipmentView.model_validate(await service.get(db, equipment_id))


@router.put("/{equipment_id}")
async def update_equipment(
    equipment_id: uuid.UUID,
    body: EquipmentUpdate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: EquipmentService = Depends(get_equipment_service),
) -> EquipmentView:
    return EquipmentView.model_validate(await service.update(db, equipment_id, body))


@router.delete("/{equipment_id}", status_code=204)
async def delete_equipment(
    equipment_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    service: EquipmentService = Depends(get_equipment_service),
) -> None:
    await service.delete(db, equipment_id)
