from typing import Callable, Optional

from config import settings, logger
from models.schemas import CalculationRequest, CalculationResult, ParsedDosing
from services.sig_interpreter import interpret
from services.quantity_projector import project_quantity
from services.package_selector import select_packages
from services.variance_analyzer import (
    analyze_variance, dosage_form_warnings, inactive_package_warning,
    no_package_warning, unusual_quantity_warning,
)


def calculate(request: CalculationRequest,
              interpreter: Optional[Callable[[str], ParsedDosing]] = None) -> CalculationResult:
    """Run the full SIG -> quantity -> packages -> warnings pipeline for one request."""
    interpreter = interpreter or interpret

    parsed = interpreter(request.sig)
    total_quantity = project_quantity(parsed, request.days_supply)

    if total_quantity > 0:
        dispense_plan = select_packages(total_quantity, parsed.unit, request.packages)
    else:
        logger.warning(f"SIG '{request.sig}' projects to zero quantity, skipping package selection")
        dispense_plan = []

    warnings = analyze_variance(dispense_plan, total_quantity)
    warnings.extend(dosage_form_warnings(request.dosage_form, parsed))
    if not dispense_plan:
        warnings.append(no_package_warning(total_quantity, parsed.unit))

    inactive_warning = inactive_package_warning(request.packages)
    if inactive_warning:
        warnings.append(inactive_warning)

    unusual_warning = unusual_quantity_warning(total_quantity, parsed.unit, settings.unusual_quantity_threshold)
    if unusual_warning:
        warnings.append(unusual_warning)

    logger.info(
        f"Calculated {total_quantity:g} {parsed.unit} for {request.days_supply} days "
        f"({len(dispense_plan)} plan item(s), {len(warnings)} warning(s))"
    )

    return CalculationResult(
        drug_name=request.drug_name or request.ndc or "Unknown",
        parsed_dosing=parsed,
        total_quantity=total_quantity,
        unit=parsed.unit,
        days_supply=request.days_supply,
        dispense_plan=dispense_plan,
        available_packages=request.packages,
        warnings=warnings,
        success=True,
    )
