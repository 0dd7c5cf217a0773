class ParkingError(Exception):
    """Request rejected by the parking rules; nothing was written."""

    status_code = 400


class MissingVehicleNumber(ParkingError):
    def __init__(self):
        super().__init__("vehicle_number is required")


class VehicleAlreadyParked(ParkingError):
    def __init__(self, vehicle_number: str, slot_id: int):
        super().__init__(f"Vehicle {vehicle_number} is already parked in slot {slot_id}")
        self.slot_id = slot_id


class NoFreeSlot(ParkingError):
    def __init__(self):
        super().__init__("No free slots available")


class VehicleNotFound(ParkingError):
    def __init__(self, vehicle_number: str):
        super().__init__(f"Vehicle {vehicle_number} not found in any occupied slot")
