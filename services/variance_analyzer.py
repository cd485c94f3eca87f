from typing import List, Optional

from config import settings
from models.schemas import (
    DispensePlanItem, DispenseWarning, DosageForm, Package, ParsedDosing,
    Severity, WarningType,
)

# Dosage form -> (accepted SIG units, severity, message) for forms measured in a fixed unit
DOSAGE_FORM_UNITS = {
    DosageForm.LIQUID: (("ml",), Severity.MEDIUM, "Liquid medication detected - ensure quantity is in ml"),
    DosageForm.INHALER: (("puff", "puffs"), Severity.MEDIUM, "Inhaler detected - ensure quantity is in puffs"),
    DosageForm.INSULIN: (("unit", "units"), Severity.HIGH, "Insulin detected - ensure quantity is in units"),
}


def variance_severity(variance_percent: float) -> Severity:
    """Thresholds are strict: exactly 20% is medium, exactly 10% is low."""
    variance_percent = abs(variance_percent)
    if variance_percent > settings.high_severity_percent:
        return Severity.HIGH
    if variance_percent > settings.medium_severity_percent:
        return Severity.MEDIUM
    return Severity.LOW


def _variance_percent(amount: float, item: DispensePlanItem, target_quantity: float) -> float:
    if item.variance_percentage is not None:
        return abs(item.variance_percentage)
    if target_quantity > 0:
        return amount * 100 / target_quantity
    return 0.0


def analyze_variance(plan: List[DispensePlanItem], target_quantity: float) -> List[DispenseWarning]:
    """Overfill and underfill warnings for each item of a dispense plan."""
    warnings = []

    for item in plan:
        if item.overfill is not None and item.overfill > 0:
            percent = _variance_percent(item.overfill, item, target_quantity)
            warnings.append(DispenseWarning(
                type=WarningType.OVERFILL,
                message=f"Overfill detected: {item.overfill:g} {item.unit} ({percent:.1f}% more than needed)",
                severity=variance_severity(percent),
                details={
                    "identifier": item.package.identifier,
                    "overfill_amount": item.overfill,
                    "overfill_percent": percent,
                    "target_quantity": target_quantity,
                },
            ))

        if item.underfill is not None and item.underfill > 0:
            percent = _variance_percent(item.underfill, item, target_quantity)
            warnings.append(DispenseWarning(
                type=WarningType.UNDERFILL,
                message=f"Underfill detected: {item.underfill:g} {item.unit} ({percent:.1f}% less than needed)",
                severity=variance_severity(percent),
                details={
                    "identifier": item.package.identifier,
                    "underfill_amount": item.underfill,
                    "underfill_percent": percent,
                    "target_quantity": target_quantity,
                },
            ))

    return warnings


def inactive_package_warning(packages: List[Package]) -> Optional[DispenseWarning]:
    inactive = [package.identifier for package in packages if not package.active]
    if not inactive:
        return None
    return DispenseWarning(
        type=WarningType.INACTIVE_NDC,
        message=f"{len(inactive)} inactive NDC(s) found in results",
        severity=Severity.HIGH,
        details={"inactive_ndcs": inactive},
    )


def unusual_quantity_warning(total_quantity: float, unit: str,
                             ceiling: Optional[float] = None) -> Optional[DispenseWarning]:
    if ceiling is None:
        ceiling = settings.unusual_quantity_threshold
    if total_quantity <= ceiling:
        return None
    return DispenseWarning(
        type=WarningType.UNUSUAL_QUANTITY,
        message=f"Unusually large quantity detected: {total_quantity:g} {unit}",
        severity=Severity.MEDIUM,
        details={"quantity": total_quantity, "unit": unit, "ceiling": ceiling},
    )


def no_package_warning(total_quantity: float, unit: str) -> DispenseWarning:
    return DispenseWarning(
        type=WarningType.PACKAGE_MISMATCH,
        message=f"No NDC packages found. Quantity calculated: {total_quantity:g} {unit}",
        severity=Severity.MEDIUM,
        details={"quantity": total_quantity, "unit": unit},
    )


def dosage_form_warnings(dosage_form: Optional[DosageForm], parsed: ParsedDosing) -> List[DispenseWarning]:
    """Flag SIG units that do not fit liquids, inhalers or insulin."""
    if dosage_form not in DOSAGE_FORM_UNITS:
        return []

    expected_units, severity, message = DOSAGE_FORM_UNITS[dosage_form]
    if parsed.unit in expected_units:
        return []
    return [DispenseWarning(
        type=WarningType.PACKAGE_MISMATCH,
        message=message,
        severity=severity,
        details={"dosage_form": dosage_form.value, "unit": parsed.unit},
    )]
