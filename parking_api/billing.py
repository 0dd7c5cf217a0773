import math

MS_PER_HOUR = 3600 * 1000
RATE_PER_HOUR = 20


def calculate_fee(entry_time: int, exit_time: int, rate_per_hour: int = RATE_PER_HOUR) -> int:
    """Fee for a stay, billed per started hour.

    A zero-length stay costs nothing. Exit before entry is not rejected and
    yields a non-positive fee.
    """
    hours = math.ceil((exit_time - entry_time) / MS_PER_HOUR)
    return hours * rate_per_hour
