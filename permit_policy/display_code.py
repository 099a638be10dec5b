"""
Permit Policy Engine: Vehicle Display Code
=============================================
Compact textual diagram of a vehicle combination, used on issued
permits.

Two encodings:
    standard   → per-vehicle glyphs, e.g. 'TT1S12D2-1T3'
    universal  → per-axle-unit glyphs only, e.g. '=1U1MU2U2=SU1U3'

The standard encoding is used whenever every vehicle has glyphs
and the axle units line up with the vehicles; otherwise the code
falls back to universal.
"""

from __future__ import annotations

from typing import List, Sequence

from permit_policy.exceptions import PolicyConfigurationError
from permit_policy.models import AxleUnit, PolicyDefinition, VehicleDisplayCodeDefaults

# Axle unit numbers from this 0-based index on are multi-digit.
_MULTI_DIGIT_INDEX = 9


def _defaults(definition: PolicyDefinition) -> VehicleDisplayCodeDefaults:
    defaults = definition.vehicle_display_code_defaults
    if defaults is None:
        raise PolicyConfigurationError(
            "Unable to construct vehicle display code; missing "
            "vehicleDisplayCodeDefaults in policy configuration"
        )
    return defaults


def _unit_label(defaults: VehicleDisplayCodeDefaults, index: int) -> str:
    prefix = defaults.multi_digit_prefix if index >= _MULTI_DIGIT_INDEX else ""
    return f"{prefix}{index + 1}"


# ══════════════════════════════════════════════════════════════
# STANDARD
# ══════════════════════════════════════════════════════════════

def can_create_standard_code(
    definition: PolicyDefinition,
    configuration: Sequence[str],
    axle_units: Sequence[AxleUnit],
) -> bool:
    power_unit = definition.power_unit_type(configuration[0])
    if (
        power_unit is None
        or not power_unit.display_code_prefix
        or not power_unit.display_code_steer_axle
        or not power_unit.display_code_drive_axle
    ):
        return False

    for vehicle_id in configuration[1:]:
        trailer = definition.trailer_type(vehicle_id)
        if trailer is None:
            return False
        if not trailer.display_code and not trailer.ignore_for_axle_calculation:
            return False

    max_axles = _defaults(definition).max_axles_standard or 0
    if any((unit.number_of_axles or 0) > max_axles for unit in axle_units):
        return False

    vehicle_count = 0
    for vehicle_id in configuration:
        vehicle = definition.vehicle_type(vehicle_id)
        if vehicle is not None and not vehicle.ignore_for_axle_calculation:
            vehicle_count += 1
    return len(axle_units) == vehicle_count + 1


def standard_display_code(
    definition: PolicyDefinition,
    configuration: Sequence[str],
    axle_units: Sequence[AxleUnit],
) -> str:
    defaults = _defaults(definition)
    padding = defaults.padding_standard
    power_unit = definition.power_unit_type(configuration[0])

    steer = axle_units[0].number_of_axles
    drive = axle_units[1].number_of_axles
    tokens: List[str] = [
        defaults.prefix_standard,
        power_unit.display_code_prefix,
        f"{steer}{power_unit.display_code_steer_axle}1",
        padding * (steer - 1),
        f"{drive}{power_unit.display_code_drive_axle}2",
    ]
    if len(axle_units) > 2:
        tokens.append(padding * (drive - 1))

    index = 2
    for vehicle_id in configuration[1:]:
        trailer = definition.trailer_type(vehicle_id)
        if trailer.ignore_for_axle_calculation:
            continue
        axles = axle_units[index].number_of_axles
        tokens.append(f"{axles}{trailer.display_code}")
        tokens.append(_unit_label(defaults, index))
        if len(axle_units) > index + 1:
            tokens.append(padding * (axles - 1))
        index += 1

    return "".join(tokens)


# ══════════════════════════════════════════════════════════════
# UNIVERSAL
# ══════════════════════════════════════════════════════════════

def _spacing_glyph(defaults: VehicleDisplayCodeDefaults, spacing) -> str:
    if spacing and spacing <= defaults.spacing_universal_small_max:
        return defaults.spacing_universal_small
    if spacing and spacing >= defaults.spacing_universal_large_min:
        return defaults.spacing_universal_large
    return defaults.spacing_universal_default


def universal_display_code(
    definition: PolicyDefinition, axle_units: Sequence[AxleUnit]
) -> str:
    defaults = _defaults(definition)
    if len(axle_units) == 0:
        return ""

    threshold = defaults.threshold_axles_universal
    padding = defaults.padding_universal
    tokens: List[str] = [defaults.prefix_universal]

    for index, unit in enumerate(axle_units):
        if index > 0:
            tokens.append(_spacing_glyph(defaults, unit.interaxle_spacing))

        axles = unit.number_of_axles
        label = _unit_label(defaults, index)
        if axles > threshold:
            tokens.append(
                f"{threshold}{defaults.over_axles_code_universal}"
                f"{defaults.universal_axle_code}{label}"
            )
            tokens.append(padding * (threshold - 1))
            tokens.append(defaults.extra_axle_universal * (axles - threshold - 1))
            tokens.append(defaults.end_axle_universal)
        else:
            tokens.append(f"{axles}{defaults.universal_axle_code}{label}")
            if len(axle_units) > index + 1:
                tokens.append(padding * (axles - 1))

    return "".join(tokens)


def get_vehicle_display_code(
    definition: PolicyDefinition,
    configuration: Sequence[str],
    axle_units: Sequence[AxleUnit],
) -> str:
    """
    Display code for a configuration and its axle units.

    Raises PolicyConfigurationError when the policy document has no
    vehicleDisplayCodeDefaults.
    """
    _defaults(definition)
    if len(configuration) == 0:
        return ""
    if can_create_standard_code(definition, configuration, axle_units):
        return standard_display_code(definition, configuration, axle_units)
    return universal_display_code(definition, axle_units)
