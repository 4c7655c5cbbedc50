from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from storefront.auth.dependencies import require_admin
from storefront.auth.models import Privileged
from storefront.cashflow.models import CashMovementIn
from storefront.cashflow.services import month_report, movement_out, record_manual_movement
from storefront.common.utils import success_response
from storefront.db.dependencies import get_session

cashflow_router = APIRouter()


@cashflow_router.post("/", status_code=status.HTTP_201_CREATED)
async def add_movement(payload: CashMovementIn,
                       session: AsyncSession = Depends(get_session),
                       admin: Privileged = Depends(require_admin)):
    movement = await record_manual_movement(session, payload, admin.subject_id)
    await session.commit()
    return success_response({"movement": movement_out(movement)}, status_code=status.HTTP_201_CREATED)


@cashflow_router.get("/")
async def list_movements(month: Optional[str] = Query(default=None),
                         session: AsyncSession = Depends(get_session),
                         admin: Privileged = Depends(require_admin)):
    return success_response(await month_report(session, month))
