"""
Permit Policy Engine: Policy Facade
======================================
Single entry point over one policy configuration document.

Construction:
    1. Parse the document into an immutable PolicyDefinition
    2. Check minPEVersion compatibility (raises PolicyVersionError)
    3. Compile one rule set per permit type

After construction the Policy holds no mutable state besides the
current special authorizations, which every call reads once at
its start. validate() builds a fresh Almanac per call.

Usage:
    policy = Policy(policy_document, clock=FixedClock(date(2025, 1, 15)))
    results = policy.validate(permit_application)
    if results.has_violations:
        ...
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from permit_policy import bridge, checks, display_code
from permit_policy.clock import Clock, SystemClock
from permit_policy.configuration import ConfigurationValidator
from permit_policy.dimensions import (
    get_default_weights,
    get_size_dimension,
    select_weight_dimension,
)
from permit_policy.models import (
    Commodity,
    PermitCondition,
    PermitType,
    PolicyDefinition,
    PowerUnitType,
    PowerUnitWeightDimension,
    SingleAxleDimension,
    SizeDimension,
    SpecialAuthorizations,
    TrailerType,
    TrailerWeightDimension,
    VehicleCategory,
    VehicleType,
    WeightDimension,
    as_axle_units,
)
from permit_policy.results import (
    ValidationResult,
    ValidationResultCode,
    ValidationResultType,
    ValidationResults,
)
from permit_policy.rules import (
    Almanac,
    FactContext,
    RuleEngine,
    build_cost_facts,
    build_runtime_facts,
    compile_rule_sets,
    simplified_vehicle_configuration,
)
from permit_policy.version import ENGINE_VERSION, check_compatibility

logger = logging.getLogger("permit_policy.policy")


class Policy:
    """
    Permit policy evaluation over one policy configuration document.

    All query operations are synchronous and side-effect free.
    """

    def __init__(
        self,
        definition,
        authorizations=None,
        clock: Optional[Clock] = None,
    ):
        self._definition = PolicyDefinition.coerce(definition)
        min_version = self._definition.min_pe_version
        check_compatibility(min_version, ENGINE_VERSION)

        self._clock: Clock = clock or SystemClock()
        self._validator = ConfigurationValidator(self._definition)
        self._rule_sets = compile_rule_sets(
            self._definition.permit_types, self._definition.common_rules
        )
        self._cost_facts = build_cost_facts(self._definition)
        self._engine = RuleEngine()
        self._authorizations: Optional[SpecialAuthorizations] = None
        self.set_special_authorizations(authorizations)

        logger.info(
            f"Policy loaded: minPEVersion={min_version}, "
            f"{len(self._rule_sets)} permit type rule sets compiled"
        )

    # ══════════════════════════════════════════════════════════
    # AUTHORIZATIONS
    # ══════════════════════════════════════════════════════════

    @property
    def definition(self) -> PolicyDefinition:
        return self._definition

    @property
    def special_authorizations(self) -> Optional[SpecialAuthorizations]:
        return self._authorizations

    def set_special_authorizations(self, authorizations=None) -> None:
        """Replace (or clear, with None) the client's special authorizations."""
        self._authorizations = SpecialAuthorizations.coerce(authorizations)

    def _lcv_allowed(self) -> bool:
        authorizations = self._authorizations
        return bool(authorizations and authorizations.is_lcv_allowed)

    # ══════════════════════════════════════════════════════════
    # VALIDATION
    # ══════════════════════════════════════════════════════════

    def validate(self, permit: Mapping[str, Any]) -> ValidationResults:
        """
        Validate a permit application.

        Non-compliance is reported as findings; this method does not
        raise for malformed application data.
        """
        authorizations = self._authorizations
        permit_type_id = permit.get("permitType") if isinstance(permit, Mapping) else None

        rule_set = None
        if isinstance(permit_type_id, str):
            rule_set = self._rule_sets.get(permit_type_id)
        if rule_set is None:
            results = ValidationResults()
            results.add(
                ValidationResult(
                    type=ValidationResultType.VIOLATION,
                    code=ValidationResultCode.PERMIT_TYPE_UNKNOWN,
                    message=f"Permit type {permit_type_id} unknown",
                )
            )
            return results

        almanac = self._build_almanac(permit, authorizations)
        results = self._engine.run(rule_set, almanac)

        if authorizations and authorizations.is_lcv_allowed:
            results.add(
                ValidationResult(
                    type=ValidationResultType.INFORMATION,
                    code=ValidationResultCode.LCV_CARRIER,
                    message=(
                        f"Policy validation allowing long combination vehicle "
                        f"permitting for client '{authorizations.company_id}'"
                    ),
                )
            )

        if authorizations and authorizations.has_no_fee:
            original_total = results.waive_cost()
            results.add(
                ValidationResult(
                    type=ValidationResultType.INFORMATION,
                    code=ValidationResultCode.NO_FEE_CLIENT,
                    message=(
                        f"Client '{authorizations.company_id}' has no fee flag, "
                        f"original permit cost would otherwise be '{original_total}'"
                    ),
                )
            )

        return results

    def _build_almanac(
        self, permit: Mapping[str, Any], authorizations: Optional[SpecialAuthorizations]
    ) -> Almanac:
        almanac = Almanac(permit)
        context = FactContext(
            definition=self._definition,
            validator=self._validator,
            today=self._clock.today(),
            authorizations=authorizations,
        )
        for fact_id, fact in build_runtime_facts(context).items():
            almanac.add_fact(fact_id, fact)
        for fact_id, fact in self._cost_facts.items():
            almanac.add_fact(fact_id, fact)
        return almanac

    def get_conditions_for_permit(self, permit: Mapping[str, Any]) -> List[PermitCondition]:
        """
        Permit conditions for the permit type and its power unit, each
        merged with its definition. Requirements with no definition
        are dropped.
        """
        permit_type = self._definition.permit_type(permit.get("permitType"))
        if permit_type is None:
            return []

        requirements = list(permit_type.conditions)
        power_unit_id = (
            (permit.get("permitData") or {}).get("vehicleDetails") or {}
        ).get("vehicleSubType")
        if power_unit_id:
            vehicle = self._definition.vehicle_type(power_unit_id)
            if vehicle is not None:
                requirements.extend(vehicle.conditions)

        conditions = []
        for requirement in requirements:
            definition = self._definition.condition_definition(requirement.condition)
            if definition is None:
                continue
            conditions.append(
                PermitCondition(
                    condition=definition.condition,
                    description=definition.description,
                    condition_link=definition.condition_link,
                    mandatory=requirement.mandatory,
                )
            )
        return conditions

    # ══════════════════════════════════════════════════════════
    # CATALOGUE QUERIES
    # ══════════════════════════════════════════════════════════

    def get_permit_types(self) -> Dict[str, str]:
        return {p.id: p.name for p in self._definition.permit_types}

    def get_geographic_regions(self) -> Dict[str, str]:
        return {g.id: g.name for g in self._definition.geographic_regions}

    def get_power_unit_types(self) -> Dict[str, str]:
        return {v.id: v.name for v in self._definition.power_unit_types}

    def get_trailer_types(self, include_pseudo: bool = False) -> Dict[str, str]:
        return {
            v.id: v.name
            for v in self._definition.trailer_types
            if include_pseudo or v.category != VehicleCategory.PSEUDO
        }

    def get_standard_tire_sizes(self) -> List[dict]:
        return [t.to_dict() for t in self._definition.standard_tire_sizes or ()]

    def get_global_size_defaults(self) -> Optional[SizeDimension]:
        return self._definition.global_size_defaults

    def get_permit_type_definition(self, permit_type_id) -> Optional[PermitType]:
        return self._definition.permit_type(permit_type_id)

    def get_vehicle_definition(self, type_id) -> Optional[VehicleType]:
        return self._definition.vehicle_type(type_id)

    def get_power_unit_definition(self, type_id) -> Optional[PowerUnitType]:
        return self._definition.power_unit_type(type_id)

    def get_trailer_definition(self, type_id) -> Optional[TrailerType]:
        return self._definition.trailer_type(type_id)

    def get_commodity_definition(self, commodity_id) -> Optional[Commodity]:
        return self._definition.commodity(commodity_id)

    def filter_out_long_combination_vehicles(self, vehicle_ids: Sequence[str]) -> List[str]:
        return self._validator.filter_out_lcv(vehicle_ids)

    @staticmethod
    def get_simplified_vehicle_configuration(vehicle_details, vehicle_configuration) -> List[str]:
        return simplified_vehicle_configuration(vehicle_details, vehicle_configuration)

    # ══════════════════════════════════════════════════════════
    # VEHICLE CONFIGURATION
    # ══════════════════════════════════════════════════════════

    def get_commodities(self, permit_type_id=None) -> Dict[str, str]:
        return self._validator.get_commodities(permit_type_id)

    def get_allowed_vehicles(self, permit_type_id) -> Dict[str, Dict[str, str]]:
        return self._validator.get_allowed_vehicles(permit_type_id, self._lcv_allowed())

    def get_permittable_vehicle_types(
        self, permit_type_id, commodity_id=None
    ) -> Dict[str, Dict[str, str]]:
        return self._validator.get_permittable_vehicle_types(
            permit_type_id, commodity_id, self._lcv_allowed()
        )

    def get_permittable_power_unit_types(self, permit_type_id, commodity_id) -> Dict[str, str]:
        return self._validator.get_permittable_power_unit_types(
            permit_type_id, commodity_id, self._lcv_allowed()
        )

    def is_configuration_valid(
        self,
        permit_type_id,
        commodity_id,
        configuration: Sequence[str],
        allow_partial: bool = False,
    ) -> bool:
        return self._validator.is_configuration_valid(
            permit_type_id, commodity_id, configuration,
            allow_partial=allow_partial, lcv_allowed=self._lcv_allowed(),
        )

    def is_self_issuable(self, commodity_id, power_unit_type: str, trailer_type: str) -> bool:
        return self._validator.is_self_issuable(commodity_id, power_unit_type, trailer_type)

    def get_next_permittable_vehicles(
        self, permit_type_id, commodity_id, configuration: Sequence[str]
    ) -> Dict[str, str]:
        return self._validator.get_next_permittable_vehicles(
            permit_type_id, commodity_id, configuration, self._lcv_allowed()
        )

    # ══════════════════════════════════════════════════════════
    # DIMENSIONS
    # ══════════════════════════════════════════════════════════

    def get_size_dimension(
        self,
        permit_type_id,
        commodity_id,
        configuration: Sequence[str],
        regions: Optional[List[str]] = None,
    ) -> Optional[SizeDimension]:
        return get_size_dimension(
            self._definition, self._validator,
            permit_type_id, commodity_id, configuration,
            regions=regions, lcv_allowed=self._lcv_allowed(),
        )

    def get_default_power_unit_weight(self, type_id, axles: int) -> List[PowerUnitWeightDimension]:
        return get_default_weights(self._definition, type_id, axles, power_unit=True)

    def get_default_trailer_weight(self, type_id, axles: int) -> List[TrailerWeightDimension]:
        return get_default_weights(self._definition, type_id, axles, power_unit=False)

    def select_correct_weight_dimension(
        self,
        candidates: Sequence[WeightDimension],
        configuration: Sequence[str],
        axle_configuration,
        axle_index: int,
    ) -> Optional[SingleAxleDimension]:
        return select_weight_dimension(
            self._definition, candidates, configuration,
            as_axle_units(axle_configuration), axle_index,
        )

    # ══════════════════════════════════════════════════════════
    # AXLE CALCULATIONS
    # ══════════════════════════════════════════════════════════

    def calculate_bridge(self, axle_configuration) -> List[bridge.BridgeCalculationResult]:
        return bridge.calculate_bridge(
            as_axle_units(axle_configuration),
            self._definition.bridge_calculation_constants,
        )

    def run_axle_calculation(self, configuration: Sequence[str], axle_configuration) -> checks.AxleCalcResults:
        return checks.run_axle_calculation(
            self._definition, configuration, as_axle_units(axle_configuration)
        )

    def get_vehicle_display_code(self, configuration: Sequence[str], axle_configuration) -> str:
        return display_code.get_vehicle_display_code(
            self._definition, configuration, as_axle_units(axle_configuration)
        )
