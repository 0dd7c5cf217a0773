from typing import Optional

from pydantic import BaseModel


class VehicleRequest(BaseModel):
    vehicle_number: Optional[str] = None


class EntryResult(BaseModel):
    message: str
    slot_id: int
    entry_time: int


class ExitResult(BaseModel):
    message: str
    slot_id: int
    exit_time: int
    fee: int


class Summary(BaseModel):
    total: int
    occupied: int
    free: int


class ErrorResponse(BaseModel):
    error: str
