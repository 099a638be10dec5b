"""
Permit Policy Engine: Bridge Formula Calculator
==================================================
Checks every contiguous group of axle units against the bridge
formula:

    maxBridge = multiplier * wheelbase + minWeight

where the wheelbase of units i..j is the spread of unit i plus,
for every later unit k in the group, its spacing from unit k-1
and its own spread.

For N axle units there are N*(N-1)/2 groups.

The axle configuration is validated in full BEFORE any group is
calculated; the first invalid field raises AxleConfigurationError.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from permit_policy.exceptions import AxleConfigurationError, PolicyConfigurationError
from permit_policy.models import AxleUnit, BridgeCalculationConstants


@dataclass(frozen=True)
class BridgeCalculationResult:
    """One axle group. Unit numbers are 1-based and inclusive."""

    start_axle_unit: int
    end_axle_unit: int
    max_bridge: float
    actual_weight: float
    success: bool

    def to_dict(self) -> dict:
        return {
            "startAxleUnit": self.start_axle_unit,
            "endAxleUnit": self.end_axle_unit,
            "maxBridge": self.max_bridge,
            "actualWeight": self.actual_weight,
            "success": self.success,
        }


def _positive(value) -> bool:
    return isinstance(value, (int, float)) and value > 0


def validate_axle_configuration(axle_units: Sequence[AxleUnit]) -> None:
    """Raise AxleConfigurationError for the first invalid unit field."""
    if axle_units is None or len(axle_units) < 2:
        raise AxleConfigurationError(
            "Invalid axle configuration, bridge formula requires "
            "a minimum of two axle units"
        )

    for number, unit in enumerate(axle_units, start=1):
        if not _positive(unit.number_of_axles):
            raise AxleConfigurationError(
                f"Invalid or missing number of axles for axle unit number {number}",
                number,
            )
        if not _positive(unit.axle_unit_weight):
            raise AxleConfigurationError(
                f"Invalid or missing weight for axle unit number {number}",
                number,
            )

        spread = unit.axle_spread
        if unit.number_of_axles > 1 and not _positive(spread):
            raise AxleConfigurationError(
                f"Invalid or missing axle spread for axle unit number {number}",
                number,
            )
        if spread is not None and spread < 0:
            raise AxleConfigurationError(
                f"Invalid axle spread for single axle unit number {number}, "
                f"cannot be a negative number",
                number,
            )

        if number > 1 and not _positive(unit.interaxle_spacing):
            raise AxleConfigurationError(
                f"Invalid or missing axle spacing between axle units "
                f"{number - 1} and {number}",
                number,
            )


def calculate_bridge(
    axle_units: Sequence[AxleUnit],
    constants: Optional[BridgeCalculationConstants],
) -> List[BridgeCalculationResult]:
    """
    Bridge formula results for every axle group, ordered by start
    unit then end unit.
    """
    if constants is None:
        raise PolicyConfigurationError(
            "Bridge calculation constants are not configured in the policy definition"
        )
    validate_axle_configuration(axle_units)

    results: List[BridgeCalculationResult] = []
    for start in range(len(axle_units)):
        first = axle_units[start]
        total_weight = first.axle_unit_weight
        wheelbase = first.axle_spread or 0

        for end in range(start + 1, len(axle_units)):
            unit = axle_units[end]
            total_weight += unit.axle_unit_weight
            wheelbase += (unit.axle_spread or 0) + unit.interaxle_spacing
            max_bridge = constants.multiplier * wheelbase + constants.min_weight

            results.append(
                BridgeCalculationResult(
                    start_axle_unit=start + 1,
                    end_axle_unit=end + 1,
                    max_bridge=max_bridge,
                    actual_weight=total_weight,
                    success=total_weight <= max_bridge,
                )
            )

    return results
