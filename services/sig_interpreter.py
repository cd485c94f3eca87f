import math
import re
from typing import Callable, List, Optional

from config import logger
from db.dosing_vocabulary import (
    UNIT_KEYWORDS, DEFAULT_UNIT, PRN_KEYWORDS,
    MULTI_DOSE_FREQUENCIES, ONCE_DAILY_KEYWORDS,
    MORNING_WORDS, EVENING_WORDS, TAPER_CONNECTORS, MAINTENANCE_WORDS,
    FIRST_MEAL_WORDS, LATER_MEAL_WORDS, MEAL_TIMES, normalize_unit,
)
from models.schemas import (
    ParsedDosing, SimpleDosing, RangeDosing, ComplexDosing, ScheduleEntry,
)

_UNITS = "|".join(UNIT_KEYWORDS)
_TIER_UNIT = rf"({_UNITS})"

UNIT_PATTERN = re.compile(rf"({_UNITS})")
RANGE_PATTERN = re.compile(rf"(\d+)\s*-\s*(\d+)\s*({_UNITS})")
MULTI_TIME_PATTERN = re.compile(
    rf"(?:take\s+)?(\d+)\s*{_TIER_UNIT}\s+(?:in\s+)?(?:the\s+)?({'|'.join(MORNING_WORDS)})"
    rf".*?(?:and|,)\s*(\d+)\s*(?:{_TIER_UNIT}\s+)?(?:at|in|with)\s+(?:the\s+)?"
    rf"({'|'.join(EVENING_WORDS)})"
)
TAPERING_PATTERN = re.compile(
    rf"(?:take\s+)?(\d+)\s*{_TIER_UNIT}\s+(?:on\s+)?(?:day\s+)?(\d+)"
    rf".*?(?:{'|'.join(TAPER_CONNECTORS)})\s+(\d+)\s*{_TIER_UNIT}\s+"
    rf"(?:{'|'.join(MAINTENANCE_WORDS)})"
)
MEAL_TIMES_PATTERN = re.compile(
    rf"(?:take\s+)?(\d+)\s*{_TIER_UNIT}\s+with\s+({'|'.join(FIRST_MEAL_WORDS)})"
    rf".*?(?:and|,)\s+({'|'.join(LATER_MEAL_WORDS)})"
)
DOSE_PATTERN = re.compile(rf"(\d+(?:\.\d+)?)\s*({_UNITS})")
EVERY_HOURS_PATTERN = re.compile(r"every\s*(\d+)\s*(hour|hr|h)")


def extract_unit(text: str) -> str:
    match = UNIT_PATTERN.search(text)
    return normalize_unit(match.group(1)) if match else DEFAULT_UNIT


def is_prn(text: str) -> bool:
    return any(keyword in text for keyword in PRN_KEYWORDS)


def keyword_frequency(text: str) -> Optional[int]:
    """Doses per day named by a multi-dose keyword (twice, tid, 4x ...)."""
    for keywords, frequency in MULTI_DOSE_FREQUENCIES:
        if any(keyword in text for keyword in keywords):
            return frequency
    return None


def simple_frequency(text: str) -> int:
    """Doses per day for a simple SIG, defaulting to once daily."""
    frequency = keyword_frequency(text)
    if frequency is not None:
        return frequency
    if any(keyword in text for keyword in ONCE_DAILY_KEYWORDS):
        return 1

    every_match = EVERY_HOURS_PATTERN.search(text)
    if every_match:
        hours = int(every_match.group(1))
        if hours > 0:
            # Round half up
            return int(math.floor(24 / hours + 0.5))
    return 1


def usable_dose(value: float) -> bool:
    """Positive and finite."""
    return value > 0 and math.isfinite(value)


def default_dosing(instructions: str = "") -> SimpleDosing:
    """Fallback used when nothing in the SIG can be recognised."""
    return SimpleDosing(dose=1, unit=DEFAULT_UNIT, frequency=1, instructions=instructions)


def match_range(text: str, unit: str, prn: bool, original: str) -> Optional[ParsedDosing]:
    """"1-2 tablets ..." style dose ranges."""
    match = RANGE_PATTERN.search(text)
    if not match:
        return None

    min_dose = float(match.group(1))
    max_dose = float(match.group(2))
    if not (usable_dose(min_dose) and usable_dose(max_dose)):
        return None

    frequency = keyword_frequency(text) or 1
    return RangeDosing(
        dose=min_dose,
        max_dose=max_dose,
        unit=unit,
        frequency=frequency,
        prn=prn,
        average_daily_dose=(min_dose + max_dose) / 2 * frequency,
        instructions=original,
    )


def match_multiple_times(text: str, unit: str, prn: bool, original: str) -> Optional[ParsedDosing]:
    """"1 tablet in the morning and 1 at bedtime" style split doses."""
    match = MULTI_TIME_PATTERN.search(text)
    if not match:
        return None

    morning_dose = float(match.group(1))
    evening_dose = float(match.group(4))
    if not (usable_dose(morning_dose) and usable_dose(evening_dose)):
        return None

    return ComplexDosing(
        dose=morning_dose,
        unit=unit,
        frequency=2,
        schedule=[
            ScheduleEntry(dose=morning_dose, frequency=1, time_of_day="morning"),
            ScheduleEntry(dose=evening_dose, frequency=1, time_of_day="bedtime"),
        ],
        average_daily_dose=morning_dose + evening_dose,
        instructions=original,
    )


def match_tapering(text: str, unit: str, prn: bool, original: str) -> Optional[ParsedDosing]:
    """"2 tablets on day 1, then 1 tablet daily" style loading doses."""
    match = TAPERING_PATTERN.search(text)
    if not match:
        return None

    initial_dose = float(match.group(1))
    initial_day = int(match.group(3))
    maintenance_dose = float(match.group(4))
    if not (usable_dose(initial_dose) and usable_dose(maintenance_dose)):
        return None

    return ComplexDosing(
        dose=maintenance_dose,
        unit=unit,
        frequency=1,
        schedule=[
            ScheduleEntry(dose=initial_dose, frequency=1, day_range=f"day {initial_day}"),
            ScheduleEntry(dose=maintenance_dose, frequency=1, day_range=f"days {initial_day + 1}+"),
        ],
        # Only the first-day dose; totals come from the schedule, not from this value
        average_daily_dose=initial_dose,
        instructions=original,
    )


def match_meal_times(text: str, unit: str, prn: bool, original: str) -> Optional[ParsedDosing]:
    """"1 tablet with breakfast, lunch, and dinner" style meal dosing."""
    match = MEAL_TIMES_PATTERN.search(text)
    if not match:
        return None

    dose = float(match.group(1))
    if not usable_dose(dose):
        return None

    frequency = len(MEAL_TIMES)
    return ComplexDosing(
        dose=dose,
        unit=unit,
        frequency=frequency,
        schedule=[ScheduleEntry(dose=dose, frequency=1, time_of_day=meal) for meal in MEAL_TIMES],
        average_daily_dose=dose * frequency,
        instructions=original,
    )


def match_simple(text: str, unit: str, prn: bool, original: str) -> ParsedDosing:
    """Generic "N unit ..." extraction. Always succeeds."""
    dose_match = DOSE_PATTERN.search(text)
    dose = float(dose_match.group(1)) if dose_match else 1.0
    if not usable_dose(dose):
        logger.debug(f"Unusable dose in SIG '{original}', using 1")
        dose = 1.0

    return SimpleDosing(
        dose=dose,
        unit=unit,
        frequency=simple_frequency(text),
        prn=prn,
        instructions=original,
    )


# Tried in order; the first non-None result wins
TIER_MATCHERS: List[Callable[[str, str, bool, str], Optional[ParsedDosing]]] = [
    match_range,
    match_multiple_times,
    match_tapering,
    match_meal_times,
]


def interpret(text) -> ParsedDosing:
    """Parse free-text dosing instructions into a structured dosing.

    Never raises: input that no tier recognises, or that breaks a tier,
    comes back as the default once-daily single-unit dosing.
    """
    original = ""
    try:
        if text is not None:
            original = text if isinstance(text, str) else str(text)
        normalized = original.lower().strip()

        unit = extract_unit(normalized)
        prn = is_prn(normalized)

        for matcher in TIER_MATCHERS:
            parsed = matcher(normalized, unit, prn, original)
            if parsed is not None:
                logger.debug(f"SIG '{original}' matched {matcher.__name__}")
                return parsed

        return match_simple(normalized, unit, prn, original)
    except Exception:
        logger.exception(f"Failed to interpret SIG '{original}', using default dosing")
        return default_dosing(original)
