import math
from typing import List, Optional

from config import settings, logger
from models.schemas import Package, DispensePlanItem
from services.errors import require_target_quantity
from db.dosing_vocabulary import normalize_unit


def matching_packages(unit: str, packages: List[Package]) -> List[Package]:
    """Active packages of known size whose unit matches, smallest first."""
    target_unit = normalize_unit(unit)
    candidates = [
        package for package in packages
        if package.active
        and package.quantity_per_package is not None
        and normalize_unit(package.unit) == target_unit
    ]
    return sorted(candidates, key=lambda package: package.quantity_per_package)


def find_exact_package(target_quantity: float, candidates: List[Package]) -> Optional[DispensePlanItem]:
    for package in candidates:
        if package.quantity_per_package == target_quantity:
            return DispensePlanItem(
                package=package,
                count=1,
                total_quantity=package.quantity_per_package,
                unit=package.unit,
                exact_match=True,
                variance_percentage=0,
            )
    return None


def find_best_single_package(target_quantity: float, candidates: List[Package]) -> Optional[DispensePlanItem]:
    """Single package type with the least overfill; never one that underfills."""
    best_match = None
    best_variance = math.inf

    for package in candidates:
        package_size = package.quantity_per_package
        packages_needed = math.ceil(target_quantity / package_size)
        total_from_packages = packages_needed * package_size
        variance = total_from_packages - target_quantity
        variance_percent = variance * 100 / target_quantity

        # Strict comparison: on ties the smaller package seen first wins
        if variance >= 0 and variance_percent < best_variance:
            best_variance = variance_percent
            best_match = DispensePlanItem(
                package=package,
                count=packages_needed,
                total_quantity=total_from_packages,
                unit=package.unit,
                exact_match=variance == 0,
                overfill=variance if variance > 0 else None,
                variance_percentage=variance_percent,
            )

    return best_match


def find_package_combination(target_quantity: float, candidates: List[Package]) -> List[DispensePlanItem]:
    """Greedy largest-first combination of package sizes.

    Each size contributes as many whole packages as fit in what is still
    needed. The last item carries any shortfall left when no remaining size
    fits; this is an approximation, not an optimal packing.
    """
    plan = []
    remaining = target_quantity

    for package in sorted(candidates, key=lambda package: package.quantity_per_package, reverse=True):
        if remaining <= 0:
            break

        package_size = package.quantity_per_package
        packages_needed = math.floor(remaining / package_size)
        if packages_needed > 0:
            plan.append(DispensePlanItem(
                package=package,
                count=packages_needed,
                total_quantity=packages_needed * package_size,
                unit=package.unit,
            ))
            remaining -= packages_needed * package_size

    if plan:
        last_item = plan[-1]
        if remaining > 0:
            last_item.underfill = remaining
            last_item.variance_percentage = -remaining * 100 / target_quantity
        else:
            last_item.variance_percentage = 0.0

    return plan


def select_packages(target_quantity: float, unit: str, packages: List[Package],
                    combination_threshold: Optional[float] = None) -> List[DispensePlanItem]:
    """Choose packages to dispense target_quantity of unit.

    An empty list means no active package of that unit could be used.
    """
    target_quantity = require_target_quantity(target_quantity)
    if combination_threshold is None:
        combination_threshold = settings.combination_variance_threshold

    candidates = matching_packages(unit, packages)
    if not candidates:
        logger.info(f"No active packages in '{normalize_unit(unit)}' among {len(packages)} candidates")
        return []

    exact_match = find_exact_package(target_quantity, candidates)
    if exact_match:
        return [exact_match]

    best_match = find_best_single_package(target_quantity, candidates)

    # If no single package works well, try combinations
    if best_match is None or best_match.variance_percentage > combination_threshold:
        combination = find_package_combination(target_quantity, candidates)
        if combination:
            logger.debug(f"Using {len(combination)}-item package combination for {target_quantity:g} {unit}")
            return combination

    return [best_match] if best_match else []
