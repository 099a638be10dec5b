"""
Permit Policy Engine: Axle Policy Checks
===========================================
Engineering checks over a vehicle configuration and its axle units.

Each check has the same signature:

    check(definition, configuration, axle_units) -> List[PolicyCheckResult]

and returns at least one result. Checks are pure: they read the
policy definition and never mutate their inputs.

    bridge-formula             → every axle group within maxBridge
    number-of-wheels           → tires per axle unit are 2, 4 or 8 per axle
    check-permittable-weight   → each axle unit within permittable weight
    minimum-steer-axle-weight  → 1 steer / 3 drive: steer >= 27% of drive
    minimum-drive-axle-weight  → tandem/tridem drive >= 20% of GVCW (capped)
    max-tire-load              → axle weight within tire load limits

POLICY_CHECKS maps ids to checks; the policyCheckPassed rule fact
and run_axle_calculation both dispatch through it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from permit_policy.bridge import calculate_bridge
from permit_policy.dimensions import get_default_weights, select_weight_dimension
from permit_policy.models import AxleUnit, PolicyDefinition, SingleAxleDimension


class PolicyCheckId:
    BRIDGE_FORMULA = "bridge-formula"
    CHECK_PERMITTABLE_WEIGHT = "check-permittable-weight"
    MAX_TIRE_LOAD = "max-tire-load"
    MIN_DRIVE_AXLE_WEIGHT = "minimum-drive-axle-weight"
    MIN_STEER_AXLE_WEIGHT = "minimum-steer-axle-weight"
    NUMBER_OF_WHEELS = "number-of-wheels"


class PolicyCheckResultType:
    PASS = "pass"
    FAIL = "fail"


STEER_TO_TRIDEM_DRIVE_RATIO = 0.27
DRIVE_TO_GVCW_RATIO = 0.2
TANDEM_DRIVE_MIN_CAP = 23000
TRIDEM_DRIVE_MIN_CAP = 28000
MAX_STEER_TIRE_SIZE = 455
LARGE_TIRE_SIZE = 445
LARGE_TIRE_STEER_MAX_WEIGHT = 9100
LARGE_TIRE_LOAD = 3850
MEDIUM_TIRE_SIZE = 300
MEDIUM_TIRE_LOAD = 3000


@dataclass(frozen=True)
class PolicyCheckResult:
    """
    Outcome of one check for one axle unit or axle group.

    Single-unit results set axle_unit; group results set
    start_axle_unit / end_axle_unit. Unit numbers are 1-based.
    """

    id: str
    result: str
    message: str
    axle_unit: Optional[int] = None
    start_axle_unit: Optional[int] = None
    end_axle_unit: Optional[int] = None
    actual_weight: Optional[float] = None
    threshold_weight: Optional[float] = None

    @property
    def passed(self) -> bool:
        return self.result == PolicyCheckResultType.PASS

    def to_dict(self) -> dict:
        data = {"id": self.id, "result": self.result, "message": self.message}
        optional = {
            "axleUnit": self.axle_unit,
            "startAxleUnit": self.start_axle_unit,
            "endAxleUnit": self.end_axle_unit,
            "actualWeight": self.actual_weight,
            "thresholdWeight": self.threshold_weight,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        return data


def _outcome(passed: bool) -> str:
    return PolicyCheckResultType.PASS if passed else PolicyCheckResultType.FAIL


def _gvcw(axle_units: Sequence[AxleUnit]) -> float:
    return sum(unit.axle_unit_weight or 0 for unit in axle_units)


# ══════════════════════════════════════════════════════════════
# CHECKS
# ══════════════════════════════════════════════════════════════

def check_bridge_formula(definition, configuration, axle_units) -> List[PolicyCheckResult]:
    results = []
    for group in calculate_bridge(axle_units, definition.bridge_calculation_constants):
        verdict = "passes" if group.success else "does not pass"
        results.append(
            PolicyCheckResult(
                id=PolicyCheckId.BRIDGE_FORMULA,
                result=_outcome(group.success),
                message=(
                    f"Axle group {group.start_axle_unit} to "
                    f"{group.end_axle_unit} {verdict} bridge formula."
                ),
                start_axle_unit=group.start_axle_unit,
                end_axle_unit=group.end_axle_unit,
            )
        )
    return results


def check_number_of_wheels(definition, configuration, axle_units) -> List[PolicyCheckResult]:
    results = []
    for number, unit in enumerate(axle_units, start=1):
        axles = unit.number_of_axles
        tires = unit.number_of_tires or 0
        if not axles:
            passed = False
            message = f"Number of axles for axle unit {number} is not permittable."
        else:
            passed = tires in (axles * 2, axles * 4, axles * 8)
            message = (
                f"Number of wheels for axle unit {number} is "
                f"{'' if passed else 'not '}permittable."
            )
        results.append(
            PolicyCheckResult(
                id=PolicyCheckId.NUMBER_OF_WHEELS,
                result=_outcome(passed),
                message=message,
                axle_unit=number,
            )
        )
    return results


def _select(definition, candidates, configuration, axle_units, axle_index) -> SingleAxleDimension:
    if not candidates:
        return SingleAxleDimension()
    selected = select_weight_dimension(
        definition, candidates, configuration, axle_units, axle_index
    )
    return selected or SingleAxleDimension()


def permittable_axle_dimensions(
    definition: PolicyDefinition,
    configuration: Sequence[str],
    axle_units: Sequence[AxleUnit],
) -> List[SingleAxleDimension]:
    """
    Selected weight dimension per axle unit, in axle unit order.

    Vehicles flagged ignoreForAxleCalculation own no axle unit and
    are left out of the lookup.
    """
    vehicles = []
    for vehicle_id in configuration:
        vehicle = definition.vehicle_type(vehicle_id)
        if vehicle is None or not vehicle.ignore_for_axle_calculation:
            vehicles.append(vehicle_id)

    dimensions: List[SingleAxleDimension] = []
    for i, vehicle_id in enumerate(vehicles):
        if i == 0:
            axles = axle_units[0].number_of_axles * 10 + axle_units[1].number_of_axles
            candidates = get_default_weights(definition, vehicle_id, axles, power_unit=True)
            for axle_index in (0, 1):
                dimensions.append(
                    _select(definition, candidates, vehicles, axle_units, axle_index)
                )
        elif i + 1 < len(axle_units):
            candidates = get_default_weights(
                definition, vehicle_id, axle_units[i + 1].number_of_axles,
                power_unit=False,
            )
            dimensions.append(
                _select(definition, candidates, vehicles, axle_units, i + 1)
            )
    return dimensions


def check_permittable_weight(definition, configuration, axle_units) -> List[PolicyCheckResult]:
    dimensions = permittable_axle_dimensions(definition, configuration, axle_units)

    results = []
    for i, unit in enumerate(axle_units):
        number = i + 1
        threshold = (dimensions[i].permittable if i < len(dimensions) else None) or 0
        actual = unit.axle_unit_weight
        passed = actual is not None and actual <= threshold
        if passed:
            message = f"Weight for axle unit {number} is permittable"
        else:
            message = f"Weight for axle unit {number} must not exceed {threshold} kgs"
        results.append(
            PolicyCheckResult(
                id=PolicyCheckId.CHECK_PERMITTABLE_WEIGHT,
                result=_outcome(passed),
                message=message,
                axle_unit=number,
                actual_weight=actual,
                threshold_weight=threshold,
            )
        )
    return results


def check_min_steer_axle_weight(definition, configuration, axle_units) -> List[PolicyCheckResult]:
    steer, drive = axle_units[0], axle_units[1]
    if steer.number_of_axles == 1 and drive.number_of_axles == 3:
        passed = steer.axle_unit_weight >= drive.axle_unit_weight * STEER_TO_TRIDEM_DRIVE_RATIO
        message = (
            "Steer axle meets minimum weight requirements"
            if passed
            else "Steer axle must be a minimum of 27% of tridem drive axle weight"
        )
    else:
        passed = True
        message = "Policy check does not apply to this configuration"

    return [
        PolicyCheckResult(
            id=PolicyCheckId.MIN_STEER_AXLE_WEIGHT,
            result=_outcome(passed),
            message=message,
            start_axle_unit=1,
            end_axle_unit=2,
        )
    ]


def check_min_drive_axle_weight(definition, configuration, axle_units) -> List[PolicyCheckResult]:
    drive = axle_units[1]
    if drive.number_of_axles in (2, 3):
        cap = TANDEM_DRIVE_MIN_CAP if drive.number_of_axles == 2 else TRIDEM_DRIVE_MIN_CAP
        target = min(_gvcw(axle_units) * DRIVE_TO_GVCW_RATIO, cap)
        passed = drive.axle_unit_weight >= target
        message = (
            "Drive axle meets minimum weight requirements"
            if passed
            else "Drive axle must be a minimum 20% of the GVCW"
        )
    else:
        passed = True
        message = "Policy check does not apply to this configuration"

    return [
        PolicyCheckResult(
            id=PolicyCheckId.MIN_DRIVE_AXLE_WEIGHT,
            result=_outcome(passed),
            message=message,
            start_axle_unit=1,
            end_axle_unit=len(axle_units),
        )
    ]


def _tire_failure(number: int, message: str) -> PolicyCheckResult:
    return PolicyCheckResult(
        id=PolicyCheckId.MAX_TIRE_LOAD,
        result=PolicyCheckResultType.FAIL,
        message=message,
        axle_unit=number,
    )


def check_max_tire_load(definition, configuration, axle_units) -> List[PolicyCheckResult]:
    results = []

    steer = axle_units[0]
    steer_size = steer.tire_size
    if not steer_size:
        results.append(_tire_failure(1, "Steer axle tire size is invalid"))
    elif steer_size > MAX_STEER_TIRE_SIZE:
        results.append(
            _tire_failure(1, f"Steer axle tire size must not exceed {MAX_STEER_TIRE_SIZE}mm")
        )
    elif steer_size >= LARGE_TIRE_SIZE:
        if steer.axle_unit_weight > LARGE_TIRE_STEER_MAX_WEIGHT:
            results.append(
                _tire_failure(
                    1,
                    f"Steer axle weight exceeds maximum of "
                    f"{LARGE_TIRE_STEER_MAX_WEIGHT}kg for {steer_size}mm tire size",
                )
            )
    else:
        max_weight = (steer.number_of_tires or 0) * steer_size * 10
        if steer.axle_unit_weight > max_weight:
            results.append(
                _tire_failure(
                    1,
                    f"Steer axle weight exceeds maximum of {max_weight}kg "
                    f"for {steer_size}mm tire size",
                )
            )

    for number, unit in enumerate(axle_units[1:], start=2):
        size, tires = unit.tire_size, unit.number_of_tires
        if not size:
            results.append(_tire_failure(number, f"Axle unit {number} tire size is invalid"))
            continue
        if not tires:
            results.append(
                _tire_failure(number, f"Axle unit {number} number of wheels is invalid")
            )
            continue

        if size >= LARGE_TIRE_SIZE:
            max_weight = tires * LARGE_TIRE_LOAD
        elif size > MEDIUM_TIRE_SIZE:
            max_weight = tires * MEDIUM_TIRE_LOAD
        else:
            max_weight = tires * size * 10
        if unit.axle_unit_weight > max_weight:
            results.append(
                _tire_failure(
                    number,
                    f"Axle unit {number} weight exceeds maximum of {max_weight}kg "
                    f"for {tires} {size}mm tires",
                )
            )

    if not results:
        results.append(
            PolicyCheckResult(
                id=PolicyCheckId.MAX_TIRE_LOAD,
                result=PolicyCheckResultType.PASS,
                message="Max tire load check passed for all axle units",
                start_axle_unit=1,
                end_axle_unit=len(axle_units),
            )
        )
    return results


PolicyCheck = Callable[
    [PolicyDefinition, Sequence[str], Sequence[AxleUnit]], List[PolicyCheckResult]
]

POLICY_CHECKS: Dict[str, PolicyCheck] = {
    PolicyCheckId.BRIDGE_FORMULA: check_bridge_formula,
    PolicyCheckId.CHECK_PERMITTABLE_WEIGHT: check_permittable_weight,
    PolicyCheckId.MAX_TIRE_LOAD: check_max_tire_load,
    PolicyCheckId.MIN_DRIVE_AXLE_WEIGHT: check_min_drive_axle_weight,
    PolicyCheckId.MIN_STEER_AXLE_WEIGHT: check_min_steer_axle_weight,
    PolicyCheckId.NUMBER_OF_WHEELS: check_number_of_wheels,
}


# ══════════════════════════════════════════════════════════════
# AXLE CALCULATION
# ══════════════════════════════════════════════════════════════

@dataclass
class AxleCalcResults:
    """All check results plus the summed overload of failing axle units."""

    results: List[PolicyCheckResult] = field(default_factory=list)
    total_overload: float = 0

    @property
    def passed(self) -> bool:
        return all(r.passed for r in self.results)

    def to_dict(self) -> dict:
        return {
            "results": [r.to_dict() for r in self.results],
            "totalOverload": self.total_overload,
        }


def run_axle_calculation(
    definition: PolicyDefinition,
    configuration: Sequence[str],
    axle_units: Sequence[AxleUnit],
) -> AxleCalcResults:
    """Run every policy check, in POLICY_CHECKS order."""
    calc = AxleCalcResults()
    for check in POLICY_CHECKS.values():
        calc.results.extend(check(definition, configuration, axle_units))

    calc.total_overload = sum(
        r.actual_weight - r.threshold_weight
        for r in calc.results
        if r.id == PolicyCheckId.CHECK_PERMITTABLE_WEIGHT
        and not r.passed
        and r.actual_weight is not None
    )
    return calc
