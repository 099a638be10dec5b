"""
Permit Policy Engine: Weight Dimension Resolver
==================================================
Default weight tables and modifier-based weight selection.

Axle index convention (one index per axle unit):
    0 → power unit steer unit
    1 → power unit drive unit
    n → configuration[n - 1] for n >= 2

so the axle configuration always has one more unit than the
vehicle configuration has vehicles.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from permit_policy.exceptions import AxleConfigurationError, PolicyConfigurationError
from permit_policy.models import (
    AxleUnit,
    DimensionModifier,
    PolicyDefinition,
    RelativePosition,
    SingleAxleDimension,
    WeightDimension,
)

logger = logging.getLogger("permit_policy.dimensions")


# ══════════════════════════════════════════════════════════════
# DEFAULT WEIGHTS (type → category → global)
# ══════════════════════════════════════════════════════════════

def _for_axles(dimensions, axles: int) -> List[WeightDimension]:
    return [d for d in dimensions or () if d.axles == axles]


def get_default_weights(
    definition: PolicyDefinition,
    vehicle_type_id: str,
    axles: int,
    power_unit: bool,
) -> List[WeightDimension]:
    """
    Default weight candidates for a vehicle type and axle count.

    For power units, axles is steer axles * 10 + drive axles. The
    first non-empty tier wins:
        1. the vehicle type's own defaults
        2. the vehicle category's defaults
        3. the global defaults

    Raises PolicyConfigurationError for an unknown vehicle type.
    """
    if power_unit:
        vehicle = definition.power_unit_type(vehicle_type_id)
    else:
        vehicle = definition.trailer_type(vehicle_type_id)
    if vehicle is None:
        raise PolicyConfigurationError(
            f"No definition found for vehicle type '{vehicle_type_id}'"
        )

    weights = _for_axles(vehicle.default_weight_dimensions, axles)
    if weights:
        return weights

    if power_unit:
        category = definition.power_unit_category(vehicle.category)
    else:
        category = definition.trailer_category(vehicle.category)
    if category is not None:
        weights = _for_axles(category.default_weight_dimensions, axles)
        if weights:
            return weights

    if power_unit:
        return _for_axles(definition.global_power_unit_weights, axles)
    return _for_axles(definition.global_trailer_weights, axles)


# ══════════════════════════════════════════════════════════════
# RELATIVES
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class VehicleRelatives:
    """Types and categories around the vehicle owning an axle unit."""

    first_type: Optional[str]
    first_category: Optional[str]
    last_type: Optional[str]
    last_category: Optional[str]
    prev_type: Optional[str] = None
    prev_category: Optional[str] = None
    next_type: Optional[str] = None
    next_category: Optional[str] = None

    def at(self, position: str, by_type: bool) -> Optional[str]:
        if position == RelativePosition.FIRST:
            return self.first_type if by_type else self.first_category
        if position == RelativePosition.LAST:
            return self.last_type if by_type else self.last_category
        if position == RelativePosition.BEFORE:
            return self.prev_type if by_type else self.prev_category
        if position == RelativePosition.AFTER:
            return self.next_type if by_type else self.next_category
        return None


def get_vehicle_relatives(
    definition: PolicyDefinition,
    configuration: Sequence[str],
    axle_index: int,
) -> VehicleRelatives:
    def category(vehicle_id) -> Optional[str]:
        vehicle = definition.vehicle_type(vehicle_id)
        return vehicle.category if vehicle else None

    first_type = configuration[0]
    last_type = configuration[-1]

    prev_type = None
    if axle_index > 1:
        # The power unit owns axle units 0 and 1.
        prev_type = configuration[axle_index - 2]

    next_type = None
    if len(configuration) > 1 and axle_index < len(configuration):
        next_type = configuration[axle_index]

    return VehicleRelatives(
        first_type=first_type,
        first_category=category(first_type),
        last_type=last_type,
        last_category=category(last_type),
        prev_type=prev_type,
        prev_category=category(prev_type) if prev_type else None,
        next_type=next_type,
        next_category=category(next_type) if next_type else None,
    )


# ══════════════════════════════════════════════════════════════
# SELECTION
# ══════════════════════════════════════════════════════════════

def _axle_unit(axle_units: Sequence[AxleUnit], index: int) -> Optional[AxleUnit]:
    if 0 <= index < len(axle_units):
        return axle_units[index]
    return None


def _modifier_matches(
    modifier: DimensionModifier,
    relatives: VehicleRelatives,
    axle_units: Sequence[AxleUnit],
    axle_index: int,
) -> bool:
    matcher = modifier.type or modifier.category
    if not matcher:
        return False

    position = modifier.position
    if position not in RelativePosition.ALL:
        return False

    if matcher != relatives.at(position, by_type=bool(modifier.type)):
        return False

    if position in (RelativePosition.FIRST, RelativePosition.LAST):
        return True

    if position == RelativePosition.BEFORE:
        neighbour = _axle_unit(axle_units, axle_index - 1)
        spaced = _axle_unit(axle_units, axle_index)
    else:
        neighbour = _axle_unit(axle_units, axle_index + 1)
        spaced = neighbour

    if modifier.axles:
        if neighbour is None or neighbour.number_of_axles != modifier.axles:
            return False

    spacing = spaced.interaxle_spacing if spaced else None
    if not spacing:
        logger.info("Axle configuration incorrect, missing interaxle spacing")
        return False
    if modifier.min_interaxle_spacing is not None and spacing < modifier.min_interaxle_spacing:
        return False
    if modifier.max_interaxle_spacing is not None and spacing > modifier.max_interaxle_spacing:
        return False
    return True


def select_weight_dimension(
    definition: PolicyDefinition,
    candidates: Sequence[WeightDimension],
    configuration: Sequence[str],
    axle_units: Sequence[AxleUnit],
    axle_index: int,
) -> Optional[SingleAxleDimension]:
    """
    Legal / permittable weight for one axle unit.

    The first candidate without a modifier is the default; the first
    candidate whose modifier matches wins outright.

    Raises:
        AxleConfigurationError: missing inputs, axle index out of
            range, or axle units not matching the configuration.
    """
    if not candidates:
        raise AxleConfigurationError("Missing weight dimensions")
    if not configuration:
        raise AxleConfigurationError("Missing configuration")
    if not axle_units:
        raise AxleConfigurationError("Missing axle configuration")
    if axle_index > len(configuration):
        raise AxleConfigurationError("Invalid axle index value", axle_index)
    if len(configuration) != len(axle_units) - 1:
        raise AxleConfigurationError(
            "Wrong number of axles configured for vehicle configuration"
        )

    relatives = get_vehicle_relatives(definition, configuration, axle_index)
    default: Optional[SingleAxleDimension] = None

    for candidate in candidates:
        if candidate.modifier is None:
            if default is None:
                default = candidate.for_axle_unit(axle_index)
            continue
        if _modifier_matches(candidate.modifier, relatives, axle_units, axle_index):
            return candidate.for_axle_unit(axle_index)

    return default
