from typing import Optional

from sqlmodel import Session as DbSession, select

from .models import Slot


def find_free_slot(db: DbSession) -> Optional[Slot]:
    # Lowest numbered free slot wins
    return db.exec(select(Slot).where(Slot.occupied == False).order_by(Slot.id)).first()  # noqa: E712


def find_parked_slot(db: DbSession, vehicle_number: str) -> Optional[Slot]:
    return db.exec(
        select(Slot)
        .where(Slot.occupied == True, Slot.vehicle_number == vehicle_number)  # noqa: E712
        .order_by(Slot.id)
    ).first()
