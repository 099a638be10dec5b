"""
Permit Policy Engine: Facts & Almanac
========================================
The Almanac is the fact store for ONE validate() call.

Facts are either static values (the top-level fields of the permit
application: permitType, permitData, ...) or callables:

    fact(params, almanac) -> value

Callable facts are computed lazily and memoised per (fact, params)
for the lifetime of the almanac. A fresh almanac is built for every
call, so nothing computed for one application leaks into the next.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, Mapping, Optional

from dateutil.relativedelta import relativedelta

from permit_policy.checks import POLICY_CHECKS
from permit_policy.configuration import ConfigurationValidator
from permit_policy.exceptions import PermitPolicyError
from permit_policy.models import PolicyDefinition, SpecialAuthorizations, as_axle_units
from permit_policy.rules.conditions import resolve_path
from permit_policy.rules.operators import parse_date

logger = logging.getLogger("permit_policy.rules")

PERMIT_DATE_FORMAT = "%Y-%m-%d"


class PermitPath:
    """permitData paths read by runtime and cost facts."""
    PERMIT_DURATION = "$.permitDuration"
    START_DATE = "$.startDate"
    VEHICLE_DETAILS = "$.vehicleDetails"
    POWER_UNIT_TYPE = "$.vehicleDetails.vehicleSubType"
    VEHICLE_CONFIGURATION = "$.vehicleConfiguration"
    TRAILER_LIST = "$.vehicleConfiguration.trailers"
    AXLE_CONFIGURATION = "$.vehicleConfiguration.axleConfiguration"
    COMMODITY = "$.permittedCommodity.commodityType"
    TOTAL_DISTANCE = "$.permittedRoute.manualRoute.totalDistance"


class UndefinedFactError(PermitPolicyError):
    """A rule referenced a fact the almanac does not know."""

    def __init__(self, fact_id: str):
        self.fact_id = fact_id
        super().__init__(f"Undefined fact: '{fact_id}'")


Fact = Callable[[Mapping[str, Any], "Almanac"], Any]


def _cache_key(fact_id: str, params: Optional[Mapping[str, Any]]) -> str:
    return json.dumps([fact_id, params or {}], sort_keys=True, default=str)


class Almanac:
    """
    Call-scoped fact store.

    Usage:
        almanac = Almanac(permit)
        almanac.add_fact("validationDate", "2025-01-15")
        almanac.fact_value("permitData", path="$.startDate")
    """

    def __init__(self, static_facts: Optional[Mapping[str, Any]] = None):
        self._facts: Dict[str, Any] = dict(static_facts or {})
        self._cache: Dict[str, Any] = {}

    def add_fact(self, fact_id: str, fact: Any) -> None:
        self._facts[fact_id] = fact

    def has_fact(self, fact_id: str) -> bool:
        return fact_id in self._facts

    def fact_value(
        self,
        fact_id: str,
        params: Optional[Mapping[str, Any]] = None,
        path: Optional[str] = None,
    ) -> Any:
        """
        Value of a fact, optionally narrowed by a JSON path.

        Raises UndefinedFactError for an unknown fact id.
        """
        if fact_id not in self._facts:
            raise UndefinedFactError(fact_id)

        fact = self._facts[fact_id]
        if callable(fact):
            key = _cache_key(fact_id, params)
            if key not in self._cache:
                self._cache[key] = fact(params or {}, self)
            value = self._cache[key]
        else:
            value = fact

        return resolve_path(value, path)

    def permit_value(self, path: str) -> Any:
        return self.fact_value("permitData", path=path)


# ══════════════════════════════════════════════════════════════
# DATE HELPERS
# ══════════════════════════════════════════════════════════════

def days_in_permit_year(start: date) -> int:
    return ((start + relativedelta(years=1)) - start).days


def end_of_quarter(day: date) -> date:
    quarter_start_month = 3 * ((day.month - 1) // 3) + 1
    quarter_start = date(day.year, quarter_start_month, 1)
    return quarter_start + relativedelta(months=3, days=-1)


# ══════════════════════════════════════════════════════════════
# RUNTIME FACTS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class FactContext:
    """Everything runtime facts may read besides the application."""

    definition: PolicyDefinition
    validator: ConfigurationValidator
    today: date
    authorizations: Optional[SpecialAuthorizations] = None

    @property
    def lcv_allowed(self) -> bool:
        return bool(self.authorizations and self.authorizations.is_lcv_allowed)


def simplified_vehicle_configuration(vehicle_details, vehicle_configuration):
    """[power unit, *trailer subtypes] from permit vehicle fields."""
    power_unit = (vehicle_details or {}).get("vehicleSubType")
    if not power_unit:
        return []
    trailers = (vehicle_configuration or {}).get("trailers") or []
    return [power_unit] + [t.get("vehicleSubType") for t in trailers]


def build_runtime_facts(context: FactContext) -> Dict[str, Any]:
    """Facts computed per validate() call, keyed by fact id."""

    def validation_date(params, almanac):
        return context.today.strftime(PERMIT_DATE_FORMAT)

    def start_date(almanac) -> date:
        value = almanac.permit_value(PermitPath.START_DATE)
        parsed = parse_date(value)
        if parsed is None:
            raise ValueError(f"Invalid permit start date: {value!r}")
        return parsed

    def days_in_year(params, almanac):
        return days_in_permit_year(start_date(almanac))

    def end_of_permit_quarter(params, almanac):
        return end_of_quarter(start_date(almanac)).strftime(PERMIT_DATE_FORMAT)

    def configuration_is_valid(params, almanac):
        try:
            power_unit = almanac.permit_value(PermitPath.POWER_UNIT_TYPE)
            trailers = almanac.permit_value(PermitPath.TRAILER_LIST) or []
            configuration = [power_unit] + [t.get("vehicleSubType") for t in trailers]
            return context.validator.is_configuration_valid(
                almanac.fact_value("permitType"),
                almanac.permit_value(PermitPath.COMMODITY),
                configuration,
                lcv_allowed=context.lcv_allowed,
            )
        except (PermitPolicyError, TypeError, AttributeError) as e:
            logger.info(f"Error validating vehicle configuration: '{e}'")
            return False

    def allowed_vehicles(params, almanac):
        permit_type = context.definition.permit_type(almanac.fact_value("permitType"))
        if permit_type is None or not permit_type.allowed_vehicles:
            return []
        if context.lcv_allowed:
            return list(permit_type.allowed_vehicles)
        return context.validator.filter_out_lcv(permit_type.allowed_vehicles)

    def vehicle_configuration(params, almanac):
        return simplified_vehicle_configuration(
            almanac.permit_value(PermitPath.VEHICLE_DETAILS),
            almanac.permit_value(PermitPath.VEHICLE_CONFIGURATION),
        )

    def gvcw(params, almanac):
        axle_units = as_axle_units(almanac.permit_value(PermitPath.AXLE_CONFIGURATION))
        return sum(unit.axle_unit_weight or 0 for unit in axle_units)

    def policy_check_passed(params, almanac):
        check = POLICY_CHECKS.get(params.get("policyId"))
        if check is None:
            return False
        results = check(
            context.definition,
            almanac.fact_value("vehicleConfiguration"),
            as_axle_units(almanac.permit_value(PermitPath.AXLE_CONFIGURATION)),
        )
        if not results:
            return False
        return all(r.passed for r in results)

    def days_between(params, almanac):
        date_from = params.get("dateFrom") or {}
        date_to = params.get("dateTo") or {}
        start = parse_date(almanac.fact_value(date_from.get("fact"), {}, date_from.get("path")))
        end = parse_date(almanac.fact_value(date_to.get("fact"), {}, date_to.get("path")))
        if start is None or end is None:
            return None
        return (end - start).days

    return {
        "validationDate": validation_date,
        "daysInPermitYear": days_in_year,
        "endOfPermitQuarter": end_of_permit_quarter,
        "configurationIsValid": configuration_is_valid,
        "allowedVehicles": allowed_vehicles,
        "vehicleConfiguration": vehicle_configuration,
        "gvcw": gvcw,
        "policyCheckPassed": policy_check_passed,
        "daysBetween": days_between,
    }
