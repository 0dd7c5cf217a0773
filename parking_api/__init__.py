from .main import create_app
from .service import ParkingLot

__all__ = ["create_app", "ParkingLot"]
