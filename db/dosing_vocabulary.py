# Unit keywords recognised in SIG text, in match priority order
UNIT_KEYWORDS = ["tablet", "tab", "capsule", "cap", "ml", "mg", "g",
                 "unit", "units", "puff", "puffs", "dose", "doses"]

# Synonym -> canonical unit name
UNIT_SYNONYMS = {
    "tablet": "tablet",
    "tab": "tablet",
    "tablets": "tablet",
    "capsule": "capsule",
    "cap": "capsule",
    "capsules": "capsule",
    "ml": "ml",
    "mg": "mg",
    "g": "g",
    "unit": "unit",
    "units": "unit",
    "puff": "puff",
    "puffs": "puff",
    "dose": "dose",
    "doses": "dose",
}

DEFAULT_UNIT = "unit"

PRN_KEYWORDS = ["as needed", "prn", "when needed", "if needed"]

# Frequency keywords checked in order; first group with a hit wins
MULTI_DOSE_FREQUENCIES = [
    (("twice", "2x", "bid"), 2),
    (("three times", "3x", "tid"), 3),
    (("four times", "4x", "qid"), 4),
]

ONCE_DAILY_KEYWORDS = ("once", "daily", "qd")

MORNING_WORDS = ["morning", "am", "breakfast", "daytime"]
EVENING_WORDS = ["bedtime", "night", "pm", "evening", "dinner"]
TAPER_CONNECTORS = ["then", "after", "followed by"]
MAINTENANCE_WORDS = ["daily", "once daily", "qd"]
FIRST_MEAL_WORDS = ["breakfast", "meals?", "food"]
LATER_MEAL_WORDS = ["lunch", "dinner", "meals?"]
MEAL_TIMES = ["breakfast", "lunch", "dinner"]


def normalize_unit(unit):
    """Map a unit keyword or synonym to its canonical name."""
    normalized = (unit or "").lower().strip()
    return UNIT_SYNONYMS.get(normalized, normalized)
