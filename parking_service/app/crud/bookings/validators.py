import re

from ...core.exceptions import InvalidVehicleNumberError

# state code, district number, series, four digit number: KA01AB1234
VEHICLE_NUMBER_PATTERN = re.compile(r"^[A-Z]{2}\d{1,2}[A-Z]{1,2}\d{4}$")


def normalize_vehicle_number(value: str) -> str:
    normalized = (value or "").replace(" ", "").replace("-", "").upper()
    if not VEHICLE_NUMBER_PATTERN.match(normalized):
        raise InvalidVehicleNumberError(
            f"Invalid vehicle number '{value}', expected a format like KA01AB1234")
    return normalized
