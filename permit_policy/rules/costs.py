"""
Permit Policy Engine: Cost Facts
===================================
Fee calculations referenced by a permit type's costRules.

Every cost fact has the runtime fact signature fact(params, almanac)
and returns a number. Missing or unusable application data yields 0
rather than an error wherever the fee is simply not applicable.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict

from permit_policy.models import PolicyDefinition
from permit_policy.rules.facts import PermitPath

logger = logging.getLogger("permit_policy.rules")

DAYS_PER_MONTH = 30


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive fees (2.5 → 3, not 2)."""
    return math.floor(value + 0.5)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def fixed_cost(params, almanac):
    return params.get("cost", 0)


def conditional_fixed_cost(params, almanac):
    value = almanac.permit_value(params.get("fact"))
    if value and value == params.get("value"):
        return params.get("cost", 0)
    return 0


def cost_per_month(params, almanac):
    """
    Whole months of duration, rounding a partial month up unless the
    duration is exactly one permit year.
    """
    duration = almanac.permit_value(PermitPath.PERMIT_DURATION)
    days_in_year = almanac.fact_value("daysInPermitYear")

    months, extra_days = divmod(duration, DAYS_PER_MONTH)
    if extra_days > 0 and duration != days_in_year:
        months += 1
    return months * params.get("cost", 0)


def cost_per_kilometre(params, almanac):
    distance = almanac.permit_value(PermitPath.TOTAL_DISTANCE)
    cost = distance * params.get("cost", 0)

    if _is_number(params.get("minValue")):
        cost = max(cost, params["minValue"])
    if _is_number(params.get("maxValue")):
        cost = min(cost, params["maxValue"])
    return round_half_up(cost)


def build_cost_facts(definition: PolicyDefinition) -> Dict[str, Any]:
    """Cost facts keyed by fact id."""

    def range_matrix_cost_lookup(params, almanac):
        lookup_key = almanac.permit_value(params.get("rangeLookupKey"))

        matrix_ref = None
        for entry in params.get("matrixMap") or ():
            if entry.get("key") == lookup_key:
                matrix_ref = entry
                break
        if matrix_ref is None:
            return 0

        matrix = definition.range_matrix(matrix_ref.get("value"))
        if matrix is None:
            logger.warning(
                f"No range matrix with id '{matrix_ref.get('value')}' found "
                f"in the policy configuration"
            )
            return 0

        row = matrix.lookup(almanac.permit_value(params.get("matrixFactValue")))
        if row is None:
            return 0

        cost = row.value
        divisor = params.get("divisor")
        if _is_number(divisor) and divisor > 0:
            cost = round_half_up(cost / divisor)
        return cost

    return {
        "fixedCost": fixed_cost,
        "conditionalFixedCost": conditional_fixed_cost,
        "costPerMonth": cost_per_month,
        "costPerKilometre": cost_per_kilometre,
        "rangeMatrixCostLookup": range_matrix_cost_lookup,
    }
