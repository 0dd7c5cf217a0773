from typing import Optional

from sqlalchemy import func
from sqlalchemy.pool import StaticPool
from sqlmodel import Field, SQLModel, Session as DbSession, create_engine, select


class Slot(SQLModel, table=True):
    __tablename__ = "slots"

    id: Optional[int] = Field(default=None, primary_key=True)
    occupied: bool = Field(default=False)
    vehicle_number: Optional[str] = Field(default=None)
    entry_time: Optional[int] = Field(default=None)  # ms since epoch
    exit_time: Optional[int] = Field(default=None)
    fee: int = Field(default=0)


class LogEntry(SQLModel, table=True):
    __tablename__ = "logs"

    id: Optional[int] = Field(default=None, primary_key=True)
    vehicle_number: str = Field(index=True)
    slot_id: int = Field(foreign_key="slots.id")
    entry_time: int
    exit_time: Optional[int] = None
    fee: Optional[int] = None


# Database Setup
sqlite_file_name = "parking.db"


def make_engine(url: str = f"sqlite:///{sqlite_file_name}"):
    """Engine for the slot store. ``sqlite://`` gives a private in-memory store."""
    if url in ("sqlite://", "sqlite:///:memory:"):
        # one shared connection, otherwise every checkout sees an empty database
        return create_engine(url, connect_args={"check_same_thread": False}, poolclass=StaticPool)
    return create_engine(url, connect_args={"check_same_thread": False})


def create_db_and_tables(engine):
    SQLModel.metadata.create_all(engine)


def seed_slots(engine, total: int) -> int:
    """Insert slots 1..total when the table is empty. Returns rows inserted."""
    with DbSession(engine) as db:
        existing = db.exec(select(func.count()).select_from(Slot)).one()
        if existing:
            return 0
        for i in range(1, total + 1):
            db.add(Slot(id=i))
        db.commit()
    return total
