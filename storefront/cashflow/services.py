import re
from datetime import datetime, time, timezone
from typing import Any, Dict, Optional, Tuple
from storefront.cashflow.constants import MANUAL_IN_CATEGORY, logger
from storefront.cashflow.models import CashMovementIn
from storefront.cashflow.repository import insert_movement, movements_between, summarize
from storefront.common.custom_exceptions import StorefrontError
from storefront.common.utils import isoformat_or_none, now
from storefront.schema.full_schema import CashMovement, MovementType

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


class InvalidMovement(StorefrontError):
    code = "INVALID_MOVEMENT"
    default_message = "Invalid cash movement"


def month_bounds(month: Optional[str]) -> Tuple[str, datetime, datetime]:
    if not month:
        current = now()
        year, mon = current.year, current.month
    else:
        match = _MONTH_RE.match(month.strip())
        if not match or not 1 <= int(match.group(2)) <= 12:
            raise InvalidMovement("month must be YYYY-MM")
        year, mon = int(match.group(1)), int(match.group(2))
    start = datetime(year, mon, 1, tzinfo=timezone.utc)
    end = datetime(year + (mon == 12), 1 if mon == 12 else mon + 1, 1, tzinfo=timezone.utc)
    return f"{year:04d}-{mon:02d}", start, end


def movement_out(m: CashMovement) -> Dict[str, Any]:
    return {
        "id": m.id,
        "type": m.type.value,
        "category": m.category,
        "amount": m.amount,
        "note": m.note,
        "itemsSummary": m.items_summary,
        "orderId": m.order_id,
        "occurredAt": isoformat_or_none(m.occurred_at),
        "createdAt": isoformat_or_none(m.created_at),
    }


async def record_manual_movement(session, payload: CashMovementIn, subject_id: str) -> CashMovement:
    if payload.category == "sale":
        raise InvalidMovement("Sales are recorded when an order is marked paid")
    if payload.type == MovementType.IN and payload.category != MANUAL_IN_CATEGORY:
        raise InvalidMovement("Manual income must use category 'other'")

    movement = CashMovement(
        type=payload.type,
        category=payload.category,
        amount=round(payload.amount),
        note=(payload.note or "").strip(),
        occurred_at=datetime.combine(payload.occurredOn, time(12, 0), tzinfo=timezone.utc),
        created_at=now(),
    )
    await insert_movement(session, movement)
    logger.info("cashflow.movement.recorded", extra={"movement_id": movement.id, "type": movement.type.value,
                                                     "category": movement.category, "subject_id": subject_id})
    return movement


async def month_report(session, month: Optional[str]) -> Dict[str, Any]:
    label, start, end = month_bounds(month)
    movements = await movements_between(session, start, end)
    return {
        "month": label,
        "movements": [movement_out(m) for m in movements],
        "monthSummary": await summarize(session, start, end),
        "allTimeSummary": await summarize(session),
    }
