import math

import pytest

from models.schemas import Package
from services.errors import InvalidCalculationInputError
from services.package_selector import select_packages


def test_exact_count_with_smaller_package(make_package):
    plan = select_packages(60, "tablet", [make_package(30), make_package(90)])

    assert len(plan) == 1
    item = plan[0]
    assert item.package.quantity_per_package == 30
    assert item.count == 2
    assert item.total_quantity == 60
    assert item.exact_match is True
    assert item.variance_percentage == 0
    assert item.overfill is None


def test_single_package_of_exact_size(make_package):
    plan = select_packages(90, "tablet", [make_package(30), make_package(90)])

    assert len(plan) == 1
    assert plan[0].package.quantity_per_package == 90
    assert plan[0].count == 1
    assert plan[0].exact_match is True
    assert plan[0].variance_percentage == 0


def test_exact_size_tie_goes_to_first_listed(make_package):
    packages = [make_package(90, "big"), make_package(30, "first"), make_package(30, "second")]

    plan = select_packages(30, "tablet", packages)

    assert plan[0].package.identifier == "first"


def test_overfill_at_threshold_keeps_single_package(make_package):
    plan = select_packages(100, "tablet", [make_package(30)])

    assert len(plan) == 1
    item = plan[0]
    assert item.count == 4
    assert item.total_quantity == 120
    assert item.overfill == 20
    assert item.variance_percentage == 20
    assert item.exact_match is False


def test_variance_tie_goes_to_smaller_package(make_package):
    # 3 x 4 and 2 x 6 both overfill by 20%
    plan = select_packages(10, "tablet", [make_package(6, "six"), make_package(4, "four")])

    assert plan[0].package.identifier == "four"
    assert plan[0].count == 3


def test_single_package_never_underfills(make_package):
    plan = select_packages(100, "tablet", [make_package(30), make_package(200)])

    assert plan[0].package.quantity_per_package == 30
    assert plan[0].total_quantity >= 100


def test_greedy_combination_when_single_overfills_too_much(make_package):
    plan = select_packages(145, "tablet", [make_package(45), make_package(100)])

    assert [(item.package.quantity_per_package, item.count) for item in plan] == [(100, 1), (45, 1)]
    assert sum(item.total_quantity for item in plan) == 145
    assert plan[-1].variance_percentage == 0
    assert all(item.underfill is None and item.overfill is None for item in plan)


def test_greedy_combination_reports_shortfall_on_last_item(make_package):
    plan = select_packages(70, "tablet", [make_package(30), make_package(50)])

    assert len(plan) == 1
    item = plan[0]
    assert item.package.quantity_per_package == 50
    assert item.count == 1
    assert item.underfill == 20
    assert math.isclose(item.variance_percentage, -20 * 100 / 70)


def test_combination_threshold_is_configurable(make_package):
    plan = select_packages(70, "tablet", [make_package(30), make_package(50)], combination_threshold=50)

    assert len(plan) == 1
    assert plan[0].package.quantity_per_package == 30
    assert plan[0].count == 3


def test_falls_back_to_single_when_no_combination_fits(make_package):
    plan = select_packages(10, "tablet", [make_package(30)])

    assert len(plan) == 1
    assert plan[0].count == 1
    assert plan[0].overfill == 20
    assert plan[0].variance_percentage == 200


def test_only_active_matching_known_size_packages_are_used(make_package):
    packages = [
        make_package(60, "inactive", active=False),
        make_package(60, "wrong-unit", unit="capsule"),
        Package(identifier="unknown-size", unit="tablet", quantity_per_package=None),
        make_package(30, "usable"),
    ]

    plan = select_packages(60, "tablet", packages)

    assert [item.package.identifier for item in plan] == ["usable"]
    assert plan[0].count == 2


@pytest.mark.parametrize("package_unit", ["TABLET", "tablets", "Tab"])
def test_unit_synonyms_match(make_package, package_unit):
    plan = select_packages(30, "tablet", [make_package(30, unit=package_unit)])

    assert len(plan) == 1


def test_no_matching_package_gives_empty_plan(make_package):
    assert select_packages(30, "ml", [make_package(30)]) == []
    assert select_packages(30, "tablet", []) == []


@pytest.mark.parametrize("target", [0, -5, float("nan"), float("inf"), "60", True, None])
def test_invalid_target_is_rejected(make_package, target):
    with pytest.raises(InvalidCalculationInputError):
        select_packages(target, "tablet", [make_package(30)])


@pytest.mark.parametrize("raw, expected", [
    (30, 30),
    ("30", 30),
    (" 90 ", 90),
    (30.0, 30),
    (30.5, None),
    ("abc", None),
    ("", None),
    (0, None),
    (-10, None),
    (None, None),
])
def test_package_size_coercion(raw, expected):
    assert Package(identifier="x", unit="tablet", quantity_per_package=raw).quantity_per_package == expected
