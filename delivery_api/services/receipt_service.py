# delivery_api/services/receipt_service.py
"""Receipt lookups needed before a delivery can be removed."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from delivery_api.models.delivery import DeliveryReceipt


async def has_attached_receipt(db: AsyncSession, delivery_id: int) -> bool:
    result = await db.execute(
        select(func.count(DeliveryReceipt.id)).where(
            DeliveryReceipt.delivery_note_id == delivery_id
        )
    )
    return (result.scalar() or 0) > 0
