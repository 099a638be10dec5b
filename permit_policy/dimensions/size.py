"""
Permit Policy Engine: Size Dimension Resolver
================================================
Finds the size limits (fp, rp, w, h, l) for a complete vehicle
configuration and the regions it travels through.

Candidate selection is first-match-wins over the trailer's list:
    - the first candidate WITHOUT modifiers is remembered as default
    - the first candidate whose modifiers ALL match is returned
    - otherwise the default (or None)

Region adjustment takes, per axis, the most restrictive value over
every region travelled. A region without an override contributes
the candidate's base values.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from permit_policy.configuration import ConfigurationValidator
from permit_policy.exceptions import PolicyConfigurationError
from permit_policy.models import (
    DimensionModifier,
    PolicyDefinition,
    RelativePosition,
    SizeDimension,
)

logger = logging.getLogger("permit_policy.dimensions")

_AXES = ("w", "h", "l")


def _modifier_matches(
    modifier: DimensionModifier,
    configuration: Sequence[str],
    size_trailer_index: int,
) -> bool:
    if not modifier.type:
        return False

    position = modifier.position
    if position == RelativePosition.FIRST:
        return configuration[0] == modifier.type
    if position == RelativePosition.LAST:
        return configuration[-1] == modifier.type
    if position == RelativePosition.BEFORE:
        index = size_trailer_index - 1
    elif position == RelativePosition.AFTER:
        index = size_trailer_index + 1
    else:
        return False

    if index < 0 or index >= len(configuration):
        return False
    return configuration[index] == modifier.type


def select_size_dimension(
    candidates: Sequence[SizeDimension],
    configuration: Sequence[str],
    size_trailer: str,
) -> Optional[SizeDimension]:
    """Pick the size candidate for the trailer at size_trailer."""
    if not candidates or not configuration:
        logger.info(
            "No size dimensions or empty configuration, "
            "no matching dimension returned"
        )
        return None

    size_trailer_index = list(configuration).index(size_trailer)
    default: Optional[SizeDimension] = None

    for candidate in candidates:
        if not candidate.has_modifiers:
            if default is None:
                default = candidate
            continue
        if all(
            _modifier_matches(m, configuration, size_trailer_index)
            for m in candidate.modifiers
        ):
            return candidate

    return default


def apply_region_limits(
    dimension: SizeDimension, regions: Iterable[str]
) -> SizeDimension:
    """
    Most restrictive w/h/l across regions; fp and rp unchanged.

    Missing values are skipped, so an axis defined in no region
    stays None.
    """
    minimums = dict.fromkeys(_AXES)
    for region in regions:
        override = dimension.region_override(region)
        for axis in _AXES:
            value = getattr(override, axis, None) if override else None
            if value is None:
                value = getattr(dimension, axis)
            if value is None:
                continue
            current = minimums[axis]
            minimums[axis] = value if current is None else min(current, value)

    return SizeDimension(fp=dimension.fp, rp=dimension.rp, **minimums)


def _size_trailer(definition: PolicyDefinition, configuration: Sequence[str]) -> Optional[str]:
    # The last vehicle that is not a trailer type flagged as ignorable.
    for vehicle_id in reversed(configuration):
        trailer_type = definition.trailer_type(vehicle_id)
        if trailer_type is None or not trailer_type.ignore_for_size_dimensions:
            return vehicle_id
    return None


def get_size_dimension(
    definition: PolicyDefinition,
    validator: ConfigurationValidator,
    permit_type_id,
    commodity_id,
    configuration: Sequence[str],
    regions: Optional[List[str]] = None,
    lcv_allowed: bool = False,
) -> Optional[SizeDimension]:
    """
    Size limits for a complete configuration, or None.

    Raises:
        ConfigurationQueryError: invalid permit type / commodity ids.
        PolicyConfigurationError: the power unit is missing from the
            commodity's size table.
    """
    if not validator.is_configuration_valid(
        permit_type_id, commodity_id, configuration, lcv_allowed=lcv_allowed
    ):
        logger.info("Configuration is invalid, returning null size dimension")
        return None

    commodity = definition.commodity(commodity_id)
    power_unit = commodity.size_power_unit(configuration[0])
    if power_unit is None:
        raise PolicyConfigurationError(
            f"Configuration error: could not find power unit '{configuration[0]}'"
        )

    size_trailer = _size_trailer(definition, configuration)
    if size_trailer is None:
        logger.info("Could not locate trailer to use for size dimension")
        return None

    trailer = power_unit.trailer(size_trailer)
    candidates = trailer.size_dimensions if trailer else ()

    chosen = select_size_dimension(candidates, configuration, size_trailer)
    if chosen is None:
        logger.info(f"Size dimension not configured for trailer '{size_trailer}'")
        return None

    if regions is None:
        regions = list(definition.region_ids)
        logger.debug("Assuming all regions for size dimension lookup")

    return apply_region_limits(chosen, regions)
