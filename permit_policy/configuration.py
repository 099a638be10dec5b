"""
Permit Policy Engine: Vehicle Configuration Validator
========================================================
Answers which vehicles may be combined for a permit type and
commodity, and whether a given combination is acceptable.

A vehicle configuration is an ordered list of vehicle type ids:
    [power unit, (jeep)*, trailer, (additional axle)*, (booster)*]

The sequencing rules are walked as a finite-state automaton:

    AWAITING_JEEP_OR_TRAILER ──jeep──→ AWAITING_TRAILER ──jeep──→ (same)
            │                                   │
            └──────────trailer──────────────────┴──→ AWAITING_BOOSTER_OR_DONE
                                                            │
                                                 booster ───┘ (if permitted)

Any token that does not fit the current state moves the walk to
REJECTED. The additional-axle pseudo trailer of the most recently
placed vehicle is accepted any number of times without a state change.

Long combination vehicles (LCVs) are removed from every answer,
and reject every configuration, unless the caller passes
lcv_allowed=True.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from permit_policy.exceptions import (
    CommodityNotRequiredError,
    ConfigurationQueryError,
    PolicyConfigurationError,
    UnknownCommodityError,
    UnknownPermitTypeError,
)
from permit_policy.models import (
    AccessoryVehicleType,
    Commodity,
    PermitType,
    PolicyDefinition,
    PowerUnitEntry,
    TrailerEntry,
)

logger = logging.getLogger("permit_policy.configuration")

POWER_UNITS = "powerUnits"
TRAILERS = "trailers"


def id_name_map(records: Iterable, ids: Optional[Iterable[str]] = None) -> Dict[str, str]:
    """
    Ordered {id: name} map of records, in definition order.

    When ids is given, only records whose id is listed are kept.
    """
    wanted = None if ids is None else set(ids)
    return {
        record.id: record.name
        for record in records
        if wanted is None or record.id in wanted
    }


def is_trailer_permittable(permit_type: PermitType, trailer: TrailerEntry) -> bool:
    """
    A trailer is permittable when it satisfies the dimension
    requirements of the permit type: both, when both are required.
    """
    if permit_type.size_dimension_required and permit_type.weight_dimension_required:
        return trailer.size_permittable and trailer.weight_permittable
    return (
        (trailer.size_permittable and permit_type.size_dimension_required)
        or (trailer.weight_permittable and permit_type.weight_dimension_required)
    )


# ══════════════════════════════════════════════════════════════
# SEQUENCING AUTOMATON
# ══════════════════════════════════════════════════════════════

class ConfigurationState:
    AWAITING_JEEP_OR_TRAILER = "AWAITING_JEEP_OR_TRAILER"
    AWAITING_TRAILER = "AWAITING_TRAILER"
    AWAITING_BOOSTER_OR_DONE = "AWAITING_BOOSTER_OR_DONE"
    REJECTED = "REJECTED"


@dataclass(frozen=True)
class _Walk:
    """Immutable automaton position after consuming some tokens."""

    state: str
    candidates: Tuple[str, ...]
    pending_axle_type: Optional[str] = None
    booster_allowed: bool = False

    @property
    def rejected(self) -> bool:
        return self.state == ConfigurationState.REJECTED

    def reject(self) -> "_Walk":
        return replace(self, state=ConfigurationState.REJECTED)


class ConfigurationValidator:
    """
    Commodity-driven vehicle queries over one PolicyDefinition.

    Stateless: the LCV authorization is passed into each call so a
    single validator can serve every client of a Policy.
    """

    def __init__(self, definition: PolicyDefinition):
        self._definition = definition

    # ══════════════════════════════════════════════════════════
    # LOOKUP HELPERS
    # ══════════════════════════════════════════════════════════

    def _permit_type(self, permit_type_id) -> PermitType:
        if not permit_type_id:
            raise ConfigurationQueryError("Missing permitTypeId")
        permit_type = self._definition.permit_type(permit_type_id)
        if permit_type is None:
            raise UnknownPermitTypeError(permit_type_id)
        return permit_type

    def _commodity_permit_type(self, permit_type_id) -> PermitType:
        permit_type = self._permit_type(permit_type_id)
        if not permit_type.commodity_required:
            raise CommodityNotRequiredError(permit_type_id)
        return permit_type

    def _commodity(self, commodity_id) -> Commodity:
        commodity = self._definition.commodity(commodity_id)
        if commodity is None:
            raise UnknownCommodityError(commodity_id)
        return commodity

    def filter_out_lcv(self, vehicle_ids: Iterable[str]) -> List[str]:
        """Drop long combination vehicles and ids with no vehicle type."""
        kept = []
        for vehicle_id in vehicle_ids:
            vehicle_type = self._definition.vehicle_type(vehicle_id)
            if vehicle_type is None:
                logger.warning(f"No configured vehicle type matching '{vehicle_id}'")
                continue
            if not vehicle_type.is_lcv:
                kept.append(vehicle_id)
        return kept

    def _filter_lcv_unless(self, vehicle_ids: Iterable[str], lcv_allowed: bool) -> List[str]:
        if lcv_allowed:
            return list(vehicle_ids)
        return self.filter_out_lcv(vehicle_ids)

    # ══════════════════════════════════════════════════════════
    # COMMODITIES & PERMITTABLE VEHICLES
    # ══════════════════════════════════════════════════════════

    def get_commodities(self, permit_type_id=None) -> Dict[str, str]:
        """
        Commodities selectable for a permit type.

        With no permit type, every commodity. A permit type that does
        not take a commodity yields an empty map.
        """
        commodities = self._definition.commodities
        if not permit_type_id:
            return id_name_map(commodities)

        permit_type = self._definition.permit_type(permit_type_id)
        if permit_type is None:
            raise UnknownPermitTypeError(permit_type_id)
        if not permit_type.commodity_required:
            return {}

        size = permit_type.size_dimension_required
        weight = permit_type.weight_dimension_required
        if not (size or weight):
            return id_name_map(commodities, permit_type.allowed_commodities)
        if permit_type.allowed_commodities:
            allowed = set(permit_type.allowed_commodities)
            commodities = [c for c in commodities if c.id in allowed]

        def offers(commodity: Commodity, attribute: str) -> bool:
            return any(
                getattr(trailer, attribute)
                for power_unit in commodity.power_units
                for trailer in power_unit.trailers
            )

        selected = [
            c for c in commodities
            if (not size or offers(c, "size_permittable"))
            and (not weight or offers(c, "weight_permittable"))
        ]
        return id_name_map(selected)

    def get_allowed_vehicles(self, permit_type_id, lcv_allowed: bool = False) -> Dict[str, Dict[str, str]]:
        """
        Power units and trailers from the permit type's allow-list.

        Only meaningful for permit types that do not take a commodity.
        """
        permit_type = self._permit_type(permit_type_id)
        if permit_type.commodity_required:
            raise ConfigurationQueryError(
                f"Allowed vehicles not configured for permit type "
                f"requiring commodity: '{permit_type.id}'"
            )
        return self._allowed_vehicles(permit_type, lcv_allowed)

    def _allowed_vehicles(self, permit_type: PermitType, lcv_allowed: bool) -> Dict[str, Dict[str, str]]:
        allowed = self._filter_lcv_unless(permit_type.allowed_vehicles, lcv_allowed)
        return {
            POWER_UNITS: id_name_map(self._definition.power_unit_types, allowed),
            TRAILERS: id_name_map(self._definition.trailer_types, allowed),
        }

    def get_permittable_vehicle_types(
        self, permit_type_id, commodity_id=None, lcv_allowed: bool = False
    ) -> Dict[str, Dict[str, str]]:
        """
        {"powerUnits": {id: name}, "trailers": {id: name}} permittable
        for the permit type and commodity.
        """
        permit_type = self._permit_type(permit_type_id)
        if not permit_type.commodity_required:
            return self._allowed_vehicles(permit_type, lcv_allowed)

        if not commodity_id:
            raise ConfigurationQueryError(
                "Missing commodityId, permit type requires it"
            )

        if commodity_id not in self.get_commodities(permit_type_id):
            return {POWER_UNITS: {}, TRAILERS: {}}

        commodity = self._definition.commodity(commodity_id)
        if commodity is None:
            raise PolicyConfigurationError(
                f"Commodity id '{commodity_id}' is not correctly configured "
                f"in the policy definition"
            )

        power_unit_ids: List[str] = []
        trailer_ids: List[str] = []
        for power_unit in commodity.power_units:
            trailers = [
                t.type for t in power_unit.trailers
                if is_trailer_permittable(permit_type, t)
            ]
            if not trailers:
                continue
            power_unit_ids.append(power_unit.type)
            for trailer_id in trailers:
                if trailer_id not in trailer_ids:
                    trailer_ids.append(trailer_id)

        power_unit_ids = self._filter_lcv_unless(power_unit_ids, lcv_allowed)
        trailer_ids = self._filter_lcv_unless(trailer_ids, lcv_allowed)

        if not (permit_type.size_dimension_required or permit_type.weight_dimension_required):
            # Commodity-driven but dimension-free: the allow-list decides.
            power_unit_ids = list(permit_type.allowed_vehicles)
            trailer_ids = list(permit_type.allowed_vehicles)

        return {
            POWER_UNITS: id_name_map(self._definition.power_unit_types, power_unit_ids),
            TRAILERS: id_name_map(self._definition.trailer_types, trailer_ids),
        }

    def get_permittable_power_unit_types(
        self, permit_type_id, commodity_id, lcv_allowed: bool = False
    ) -> Dict[str, str]:
        vehicle_types = self.get_permittable_vehicle_types(
            permit_type_id, commodity_id, lcv_allowed
        )
        return vehicle_types.get(POWER_UNITS, {})

    # ══════════════════════════════════════════════════════════
    # CONFIGURATION VALIDITY
    # ══════════════════════════════════════════════════════════

    def _check_query_args(self, permit_type_id, commodity_id, configuration):
        if not permit_type_id or not commodity_id or configuration is None:
            raise ConfigurationQueryError(
                "Missing permitTypeId and/or commodityId and/or "
                "currentConfiguration"
            )

    def is_configuration_valid(
        self,
        permit_type_id,
        commodity_id,
        configuration: Sequence[str],
        allow_partial: bool = False,
        lcv_allowed: bool = False,
    ) -> bool:
        """
        True when the configuration is acceptable for the permit type
        and commodity.

        A complete configuration must end with a trailer placed. With
        allow_partial, any valid prefix (including empty) is accepted.

        Raises:
            ConfigurationQueryError: arguments missing, unknown permit
                type or commodity, or permit type takes no commodity.
        """
        self._check_query_args(permit_type_id, commodity_id, configuration)
        permit_type = self._commodity_permit_type(permit_type_id)
        commodity = self._commodity(commodity_id)

        if len(configuration) == 0:
            return allow_partial

        if not lcv_allowed:
            if len(self.filter_out_lcv(configuration)) != len(configuration):
                return False

        permittable_power_units = self.get_permittable_power_unit_types(
            permit_type_id, commodity_id, lcv_allowed
        )
        if configuration[0] not in permittable_power_units:
            return False

        power_unit = commodity.power_unit(configuration[0])
        walk = self._walk(permit_type, power_unit, configuration[1:])
        if walk.rejected:
            return False
        return walk.state == ConfigurationState.AWAITING_BOOSTER_OR_DONE or allow_partial

    def _walk(
        self,
        permit_type: PermitType,
        power_unit: Optional[PowerUnitEntry],
        tokens: Sequence[str],
    ) -> _Walk:
        trailers = power_unit.trailers if power_unit else ()
        permittable = [t for t in trailers if is_trailer_permittable(permit_type, t)]
        power_unit_type = self._definition.power_unit_type(
            power_unit.type if power_unit else None
        )

        walk = _Walk(
            state=ConfigurationState.AWAITING_JEEP_OR_TRAILER,
            candidates=tuple(t.type for t in permittable),
            pending_axle_type=(
                power_unit_type.additional_axle_sub_type if power_unit_type else None
            ),
        )
        for token in tokens:
            walk = self._step(walk, token, power_unit, permittable)
            if walk.rejected:
                break
        return walk

    def _step(
        self,
        walk: _Walk,
        token: str,
        power_unit: Optional[PowerUnitEntry],
        permittable: List[TrailerEntry],
    ) -> _Walk:
        if token == AccessoryVehicleType.JEEP:
            if walk.state not in (
                ConfigurationState.AWAITING_JEEP_OR_TRAILER,
                ConfigurationState.AWAITING_TRAILER,
            ):
                return walk.reject()
            candidates = tuple(t.type for t in permittable if t.jeep)
            if not candidates:
                return walk.reject()
            return replace(
                walk,
                state=ConfigurationState.AWAITING_TRAILER,
                candidates=candidates,
                pending_axle_type=None,
            )

        if token == AccessoryVehicleType.BOOSTER:
            if walk.state != ConfigurationState.AWAITING_BOOSTER_OR_DONE:
                return walk.reject()
            if not walk.booster_allowed:
                return walk.reject()
            return replace(walk, pending_axle_type=None)

        if walk.pending_axle_type and token == walk.pending_axle_type:
            return walk

        if walk.state == ConfigurationState.AWAITING_BOOSTER_OR_DONE:
            return walk.reject()
        if token not in walk.candidates:
            return walk.reject()

        trailer = power_unit.trailer(token)
        trailer_type = self._definition.trailer_type(token)
        return replace(
            walk,
            state=ConfigurationState.AWAITING_BOOSTER_OR_DONE,
            pending_axle_type=(
                trailer_type.additional_axle_sub_type if trailer_type else None
            ),
            booster_allowed=bool(trailer and trailer.booster),
        )

    def is_self_issuable(self, commodity_id, power_unit_type: str, trailer_type: str) -> bool:
        """
        Whether the commodity's power unit / trailer pairing carries
        the selfIssue flag. An unlisted pairing is not self issuable.
        """
        commodity = self._definition.commodity(commodity_id)
        if commodity is None:
            raise UnknownCommodityError(commodity_id)
        for power_unit in commodity.power_units:
            if power_unit.type == power_unit_type:
                entry = power_unit.trailer(trailer_type)
                return entry is not None and entry.self_issue
        return False

    # ══════════════════════════════════════════════════════════
    # NEXT PERMITTABLE VEHICLES
    # ══════════════════════════════════════════════════════════

    def get_next_permittable_vehicles(
        self,
        permit_type_id,
        commodity_id,
        configuration: Sequence[str],
        lcv_allowed: bool = False,
    ) -> Dict[str, str]:
        """
        Ordered {id: name} of vehicles that may be appended to the
        (partial) configuration. Empty when the configuration is not a
        valid prefix.
        """
        self._check_query_args(permit_type_id, commodity_id, configuration)
        permit_type = self._commodity_permit_type(permit_type_id)
        commodity = self._commodity(commodity_id)

        if not self.is_configuration_valid(
            permit_type_id, commodity_id, configuration,
            allow_partial=True, lcv_allowed=lcv_allowed,
        ):
            return {}

        if len(configuration) == 0:
            next_ids = list(
                self.get_permittable_power_unit_types(
                    permit_type_id, commodity_id, lcv_allowed
                )
            )
        else:
            next_ids = self._next_after(permit_type, commodity, configuration)

        next_ids = self._filter_lcv_unless(next_ids, lcv_allowed)
        return id_name_map(self._definition.vehicle_types, next_ids)

    def _next_after(
        self,
        permit_type: PermitType,
        commodity: Commodity,
        configuration: Sequence[str],
    ) -> List[str]:
        power_unit = commodity.power_unit(configuration[0])
        all_trailers = power_unit.trailers if power_unit else ()

        if AccessoryVehicleType.JEEP in configuration:
            candidates = [t for t in all_trailers if t.jeep]
        else:
            candidates = list(all_trailers)
        trailer_ids = [
            t.type for t in candidates if is_trailer_permittable(permit_type, t)
        ]

        last = configuration[-1]
        power_unit_type = self._definition.power_unit_type(configuration[0])
        power_unit_axle = (
            power_unit_type.additional_axle_sub_type if power_unit_type else None
        )

        if len(configuration) == 1 or (power_unit_axle and last == power_unit_axle):
            if any(t.jeep for t in all_trailers):
                trailer_ids.append(AccessoryVehicleType.JEEP)
            return trailer_ids

        if last == AccessoryVehicleType.JEEP:
            return trailer_ids + [AccessoryVehicleType.JEEP]

        if last == AccessoryVehicleType.BOOSTER:
            return [AccessoryVehicleType.BOOSTER]

        # Last entry is the trailer or one of its additional axles.
        trailer = None
        for vehicle_id in reversed(configuration[1:]):
            trailer = power_unit.trailer(vehicle_id) if power_unit else None
            if trailer is not None:
                break

        if trailer is not None and trailer.booster:
            return [AccessoryVehicleType.BOOSTER]
        return []
