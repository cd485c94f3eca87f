from typing import Any


class InvalidCalculationInputError(ValueError):
    """Raised when a caller passes an out-of-contract value into the pipeline."""

    def __init__(self, field: str, value: Any, message: str):
        super().__init__(f"{field}: {message} (got {value!r})")
        self.field = field
        self.value = value
        self.message = message


def require_days_supply(days_supply: Any) -> int:
    """Days' supply must be a positive whole number of days."""
    if isinstance(days_supply, bool) or not isinstance(days_supply, int):
        raise InvalidCalculationInputError("days_supply", days_supply, "must be a whole number")
    if days_supply <= 0:
        raise InvalidCalculationInputError("days_supply", days_supply, "must be greater than 0")
    return days_supply


def require_target_quantity(target_quantity: Any) -> float:
    """Target quantity must be a finite number above zero."""
    if isinstance(target_quantity, bool) or not isinstance(target_quantity, (int, float)):
        raise InvalidCalculationInputError("target_quantity", target_quantity, "must be a number")
    if target_quantity != target_quantity or target_quantity in (float("inf"), float("-inf")):
        raise InvalidCalculationInputError("target_quantity", target_quantity, "must be finite")
    if target_quantity <= 0:
        raise InvalidCalculationInputError("target_quantity", target_quantity, "must be greater than 0")
    return float(target_quantity)
