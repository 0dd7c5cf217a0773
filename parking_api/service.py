import logging
import threading
import time
from typing import Callable, List, Optional

from sqlalchemy import func
from sqlmodel import Session as DbSession, select

from .allocator import find_free_slot, find_parked_slot
from .billing import RATE_PER_HOUR, calculate_fee
from .errors import MissingVehicleNumber, NoFreeSlot, VehicleAlreadyParked, VehicleNotFound
from .models import LogEntry, Slot, create_db_and_tables, seed_slots
from .schemas import EntryResult, ExitResult, Summary

logger = logging.getLogger("ParkingLot")

TOTAL_SLOTS_DEFAULT = 20
LOGS_LIMIT = 200


def now_ms() -> int:
    return int(time.time() * 1000)


def _clean_plate(vehicle_number) -> str:
    if not isinstance(vehicle_number, str) or not vehicle_number.strip():
        raise MissingVehicleNumber()
    return vehicle_number.strip()


class ParkingLot:
    """Slot occupancy and session log on top of one store.

    Entry and exit each read a slot and then write it, so they are serialised
    through ``self.lock``; two parallel entries never get the same slot.
    """

    def __init__(
        self,
        engine,
        rate_per_hour: int = RATE_PER_HOUR,
        total_slots: int = TOTAL_SLOTS_DEFAULT,
        logs_limit: int = LOGS_LIMIT,
        clock: Callable[[], int] = now_ms,
    ):
        self.engine = engine
        self.rate_per_hour = rate_per_hour
        self.total_slots = total_slots
        self.logs_limit = logs_limit
        self.clock = clock
        self.lock = threading.Lock()

    def init_storage(self):
        create_db_and_tables(self.engine)
        seeded = seed_slots(self.engine, self.total_slots)
        if seeded:
            logger.info(f"Seeded {seeded} slots")
        else:
            logger.info("Slots already present, skipping seed")

    def list_slots(self) -> List[Slot]:
        with DbSession(self.engine) as db:
            return list(db.exec(select(Slot).order_by(Slot.id)).all())

    def list_logs(self, limit: Optional[int] = None) -> List[LogEntry]:
        limit = self.logs_limit if limit is None else limit
        with DbSession(self.engine) as db:
            return list(db.exec(select(LogEntry).order_by(LogEntry.id.desc()).limit(limit)).all())

    def summary(self) -> Summary:
        with DbSession(self.engine) as db:
            total = db.exec(select(func.count()).select_from(Slot)).one()
            occupied = db.exec(
                select(func.count()).select_from(Slot).where(Slot.occupied == True)  # noqa: E712
            ).one()
        return Summary(total=total, occupied=occupied, free=total - occupied)

    def record_entry(self, vehicle_number) -> EntryResult:
        plate = _clean_plate(vehicle_number)
        with self.lock, DbSession(self.engine) as db:
            parked = find_parked_slot(db, plate)
            if parked:
                logger.warning(f"Entry rejected: {plate} already in slot {parked.id}")
                raise VehicleAlreadyParked(plate, parked.id)

            slot = find_free_slot(db)
            if not slot:
                logger.warning(f"Entry rejected: no free slot for {plate}")
                raise NoFreeSlot()

            entry_time = self.clock()
            slot.occupied = True
            slot.vehicle_number = plate
            slot.entry_time = entry_time
            slot.exit_time = None
            slot.fee = 0
            db.add(slot)
            db.add(LogEntry(vehicle_number=plate, slot_id=slot.id, entry_time=entry_time))

            # slot and log row land together or not at all
            slot_id = slot.id
            db.commit()

        logger.info(f"Entry: {plate} -> slot {slot_id}")
        return EntryResult(message="Vehicle parked", slot_id=slot_id, entry_time=entry_time)

    def record_exit(self, vehicle_number) -> ExitResult:
        plate = _clean_plate(vehicle_number)
        with self.lock, DbSession(self.engine) as db:
            slot = find_parked_slot(db, plate)
            if not slot:
                logger.warning(f"Exit rejected: {plate} not parked")
                raise VehicleNotFound(plate)

            exit_time = self.clock()
            fee = calculate_fee(slot.entry_time, exit_time, self.rate_per_hour)
            slot.occupied = False
            slot.vehicle_number = None
            slot.entry_time = None
            slot.exit_time = exit_time
            slot.fee = fee
            db.add(slot)

            log = db.exec(
                select(LogEntry)
                .where(
                    LogEntry.slot_id == slot.id,
                    LogEntry.vehicle_number == plate,
                    LogEntry.exit_time == None,  # noqa: E711
                )
                .order_by(LogEntry.id.desc())
            ).first()
            if log:
                log.exit_time = exit_time
                log.fee = fee
                db.add(log)
            else:
                logger.warning(f"No open log entry for {plate} in slot {slot.id}")

            slot_id = slot.id
            db.commit()

        logger.info(f"Exit: {plate} <- slot {slot_id}, fee {fee}")
        return ExitResult(message="Vehicle exited", slot_id=slot_id, exit_time=exit_time, fee=fee)
