"""
Permit Policy Engine: Axle Configuration
===========================================
One AxleUnit per physical axle unit in a vehicle combination.

A power unit contributes two axle units (steer, drive), every
non-ignorable trailer contributes one.

interaxle_spacing is the distance from the PREVIOUS axle unit to
this one, exactly as carried by permit applications
(interaxleSpacing). The first unit has no spacing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Union


@dataclass(frozen=True)
class AxleUnit:
    """
    One axle unit of a vehicle combination.

    Values are kept as supplied (possibly None or negative) so that
    calculations can report exactly which unit and field is invalid.
    """

    number_of_axles: Optional[int]
    axle_unit_weight: Optional[float] = None
    axle_spread: Optional[float] = None
    interaxle_spacing: Optional[float] = None
    number_of_tires: Optional[int] = None
    tire_size: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AxleUnit":
        return cls(
            number_of_axles=data.get("numberOfAxles"),
            axle_unit_weight=data.get("axleUnitWeight"),
            axle_spread=data.get("axleSpread"),
            interaxle_spacing=data.get("interaxleSpacing"),
            number_of_tires=data.get("numberOfTires"),
            tire_size=data.get("tireSize"),
        )

    def to_dict(self) -> dict:
        return {
            "numberOfAxles": self.number_of_axles,
            "axleUnitWeight": self.axle_unit_weight,
            "axleSpread": self.axle_spread,
            "interaxleSpacing": self.interaxle_spacing,
            "numberOfTires": self.number_of_tires,
            "tireSize": self.tire_size,
        }


def as_axle_units(
    axle_configuration: Iterable[Union[AxleUnit, Mapping[str, Any]]],
) -> List[AxleUnit]:
    """Normalize a permit's axleConfiguration (dicts or AxleUnits)."""
    if axle_configuration is None:
        return []
    return [
        unit if isinstance(unit, AxleUnit) else AxleUnit.from_dict(unit)
        for unit in axle_configuration
    ]
