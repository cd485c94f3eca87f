import math
import re
from typing import Optional, Tuple

from config import settings, logger
from models.schemas import ParsedDosing, ComplexDosing
from services.errors import InvalidCalculationInputError, require_days_supply

SINGLE_DAY_PATTERN = re.compile(r"day\s+(\d+)")
DAY_SPAN_PATTERN = re.compile(r"days?\s+(\d+)\s*-\s*(\d+)")
DAYS_ONWARD_PATTERN = re.compile(r"days?\s+(\d+)\s*\+")


def resolve_day_range(day_range: str, days_supply: int) -> Tuple[int, int]:
    """Turn "day 1" / "days 2-5" / "days 2+" into an inclusive (start, end).

    Unrecognised text covers the whole supply. The result is clamped to
    [1, days_supply]; an empty interval comes back with end < start.
    """
    normalized = (day_range or "").lower().strip()

    single_match = SINGLE_DAY_PATTERN.search(normalized)
    span_match = DAY_SPAN_PATTERN.search(normalized)
    onward_match = DAYS_ONWARD_PATTERN.search(normalized)

    if single_match:
        start = end = int(single_match.group(1))
    elif span_match:
        start, end = int(span_match.group(1)), int(span_match.group(2))
    elif onward_match:
        start, end = int(onward_match.group(1)), days_supply
    else:
        logger.debug(f"Unrecognised day range '{day_range}', applying to all days")
        start, end = 1, days_supply

    return max(start, 1), min(end, days_supply)


def _days_covered(day_range: Optional[str], days_supply: int) -> int:
    if not day_range:
        return days_supply
    start, end = resolve_day_range(day_range, days_supply)
    return max(end - start + 1, 0)


def project_prn_quantity(parsed: ParsedDosing, days_supply: int) -> float:
    """Conservative estimate for as-needed dosing: half the stated frequency."""
    average_dose = parsed.average_daily_dose if parsed.average_daily_dose is not None else parsed.dose
    if parsed.frequency > 0:
        estimated_frequency = parsed.frequency * settings.prn_frequency_factor
    else:
        estimated_frequency = settings.prn_default_frequency
    estimate = average_dose * estimated_frequency * days_supply
    if not math.isfinite(estimate):
        raise InvalidCalculationInputError("total_quantity", estimate, "must be finite")
    # Drop float noise so an exact product is not pushed up a whole unit
    return float(math.ceil(round(estimate, 9)))


def project_schedule_quantity(parsed: ComplexDosing, days_supply: int) -> float:
    total = 0.0
    for entry in parsed.schedule:
        total += entry.dose * entry.frequency * _days_covered(entry.day_range, days_supply)
    return total


def project_quantity(parsed: ParsedDosing, days_supply: int) -> float:
    """Total quantity needed to cover days_supply days of the given dosing."""
    days_supply = require_days_supply(days_supply)

    if parsed.prn:
        return project_prn_quantity(parsed, days_supply)
    if isinstance(parsed, ComplexDosing):
        return project_schedule_quantity(parsed, days_supply)
    return parsed.dose * parsed.frequency * days_supply
