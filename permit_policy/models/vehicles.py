"""
Permit Policy Engine: Vehicle Taxonomy & Commodities
=======================================================
Vehicle types (power units, trailers, accessories, pseudo units),
vehicle categories, and the commodity combination tables that
decide which trailers may follow which power units.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Mapping, Optional, Tuple

from permit_policy.models.dimensions import (
    PowerUnitWeightDimension,
    SizeDimension,
    TrailerWeightDimension,
)


# ══════════════════════════════════════════════════════════════
# WELL-KNOWN IDS
# ══════════════════════════════════════════════════════════════

class VehicleCategory:
    """Top-level vehicle categories used by the validator."""
    POWER_UNIT = "powerunit"
    TRAILER = "trailer"
    ACCESSORY = "accessory"
    PSEUDO = "pseudo"


class AccessoryVehicleType:
    """Accessory vehicle ids with sequencing rules of their own."""
    JEEP = "JEEPSRG"
    BOOSTER = "BOOSTER"


# ══════════════════════════════════════════════════════════════
# CONDITION REQUIREMENTS (referenced by permit & vehicle types)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ConditionRequirement:
    """Reference to a permit condition, optionally mandatory."""

    condition: str
    mandatory: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConditionRequirement":
        return cls(
            condition=data.get("condition", ""),
            mandatory=data.get("mandatory"),
        )


def _conditions(data: Mapping[str, Any]) -> Tuple[ConditionRequirement, ...]:
    return tuple(
        ConditionRequirement.from_dict(c) for c in data.get("conditions") or ()
    )


# ══════════════════════════════════════════════════════════════
# VEHICLE TYPES
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class VehicleType:
    """
    Common fields of power unit and trailer types.

    additional_axle_sub_type names a pseudo vehicle id representing
    an extra axle group attached to this vehicle. It may follow this
    vehicle any number of times and is not a distinct unit of the
    combination.
    """

    _weight_dimension_type: ClassVar[type] = TrailerWeightDimension

    id: str
    name: str
    category: str
    is_lcv: bool = False
    ignore_for_size_dimensions: bool = False
    ignore_for_axle_calculation: bool = False
    additional_axle_sub_type: Optional[str] = None
    default_size_dimensions: Optional[SizeDimension] = None
    default_weight_dimensions: Tuple[Any, ...] = ()
    conditions: Tuple[ConditionRequirement, ...] = ()

    @classmethod
    def _common_fields(cls, data: Mapping[str, Any]) -> dict:
        size = data.get("defaultSizeDimensions")
        return {
            "id": data.get("id"),
            "name": data.get("name", ""),
            "category": data.get("category", ""),
            "is_lcv": bool(data.get("isLcv", False)),
            "ignore_for_size_dimensions": bool(
                data.get("ignoreForSizeDimensions", False)
            ),
            "ignore_for_axle_calculation": bool(
                data.get("ignoreForAxleCalculation", False)
            ),
            "additional_axle_sub_type": data.get("additionalAxleSubType"),
            "default_size_dimensions": (
                SizeDimension.from_dict(size) if size else None
            ),
            "default_weight_dimensions": tuple(
                cls._weight_dimension_type.from_dict(w)
                for w in data.get("defaultWeightDimensions") or ()
            ),
            "conditions": _conditions(data),
        }


@dataclass(frozen=True)
class PowerUnitType(VehicleType):
    """Power unit type, with display glyphs for the steer/drive units."""

    _weight_dimension_type: ClassVar[type] = PowerUnitWeightDimension

    display_code_prefix: Optional[str] = None
    display_code_steer_axle: Optional[str] = None
    display_code_drive_axle: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PowerUnitType":
        return cls(
            display_code_prefix=data.get("displayCodePrefix"),
            display_code_steer_axle=data.get("displayCodeSteerAxle"),
            display_code_drive_axle=data.get("displayCodeDriveAxle"),
            **cls._common_fields(data),
        )


@dataclass(frozen=True)
class TrailerType(VehicleType):
    """Trailer, accessory or pseudo trailer type."""

    display_code: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TrailerType":
        return cls(
            display_code=data.get("displayCode"),
            **cls._common_fields(data),
        )


@dataclass(frozen=True)
class VehicleCategoryDefinition:
    """Category-level default weights (second lookup tier)."""

    id: str
    name: str = ""
    default_weight_dimensions: Tuple[Any, ...] = ()

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], weight_type: type
    ) -> "VehicleCategoryDefinition":
        return cls(
            id=data.get("id"),
            name=data.get("name", ""),
            default_weight_dimensions=tuple(
                weight_type.from_dict(w)
                for w in data.get("defaultWeightDimensions") or ()
            ),
        )


# ══════════════════════════════════════════════════════════════
# COMMODITY COMBINATION TABLES
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TrailerEntry:
    """
    A trailer permitted behind a power unit for a commodity.

    jeep / booster: whether those accessories may precede / follow it.
    size_permittable / weight_permittable: whether the combination is
    permittable for oversize / overweight permit types.
    self_issue: whether the applicant may issue the permit without review.
    """

    type: str
    jeep: bool = False
    booster: bool = False
    self_issue: bool = False
    size_permittable: bool = False
    weight_permittable: bool = False
    size_dimensions: Tuple[SizeDimension, ...] = ()
    weight_dimensions: Tuple[TrailerWeightDimension, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TrailerEntry":
        return cls(
            type=data.get("type"),
            jeep=bool(data.get("jeep", False)),
            booster=bool(data.get("booster", False)),
            self_issue=bool(data.get("selfIssue", False)),
            size_permittable=bool(data.get("sizePermittable", False)),
            weight_permittable=bool(data.get("weightPermittable", False)),
            size_dimensions=tuple(
                SizeDimension.from_dict(s)
                for s in data.get("sizeDimensions") or ()
            ),
            weight_dimensions=tuple(
                TrailerWeightDimension.from_dict(w)
                for w in data.get("weightDimensions") or ()
            ),
        )


@dataclass(frozen=True)
class PowerUnitEntry:
    """A power unit and the trailers it may pull for a commodity."""

    type: str
    trailers: Tuple[TrailerEntry, ...] = ()
    weight_dimensions: Tuple[PowerUnitWeightDimension, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PowerUnitEntry":
        return cls(
            type=data.get("type"),
            trailers=tuple(
                TrailerEntry.from_dict(t) for t in data.get("trailers") or ()
            ),
            weight_dimensions=tuple(
                PowerUnitWeightDimension.from_dict(w)
                for w in data.get("weightDimensions") or ()
            ),
        )

    def trailer(self, trailer_type: str) -> Optional[TrailerEntry]:
        for entry in self.trailers:
            if entry.type == trailer_type:
                return entry
        return None


def _power_units(data: Mapping[str, Any]) -> Tuple[PowerUnitEntry, ...]:
    return tuple(
        PowerUnitEntry.from_dict(p) for p in data.get("powerUnits") or ()
    )


@dataclass(frozen=True)
class Commodity:
    """
    A commodity and its permitted vehicle combinations.

    power_units is the combination table used for configuration
    validation. size / weight are optional dimension-specific tables;
    when size is absent, size lookups read power_units.
    """

    id: str
    name: str
    power_units: Tuple[PowerUnitEntry, ...] = ()
    size: Optional[Tuple[PowerUnitEntry, ...]] = None
    weight: Optional[Tuple[PowerUnitEntry, ...]] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Commodity":
        size = data.get("size")
        weight = data.get("weight")
        return cls(
            id=data.get("id"),
            name=data.get("name", ""),
            power_units=_power_units(data),
            size=_power_units(size) if size else None,
            weight=_power_units(weight) if weight else None,
        )

    def power_unit(self, power_unit_type: str) -> Optional[PowerUnitEntry]:
        return _find_power_unit(self.power_units, power_unit_type)

    def size_power_unit(self, power_unit_type: str) -> Optional[PowerUnitEntry]:
        table = self.size if self.size is not None else self.power_units
        return _find_power_unit(table, power_unit_type)


def _find_power_unit(table, power_unit_type) -> Optional[PowerUnitEntry]:
    for entry in table:
        if entry.type == power_unit_type:
            return entry
    return None
