"""
Permit Policy Engine: Vehicle Configuration Tests
====================================================
Commodity lists, permittable vehicles, configuration validity and
next-vehicle suggestions.

Covers:
1. Commodities per permit type (size, weight, both, allow-list)
2. Permittable vehicles with and without LCV authorization
3. Jeep / trailer / additional axle / booster sequencing
4. Order sensitivity (same vehicles, different order)
5. Next permittable vehicles for partial configurations
6. Query errors for bad ids and non-commodity permit types
"""

from __future__ import annotations

import pytest

from permit_policy import (
    CommodityNotRequiredError,
    ConfigurationQueryError,
    UnknownCommodityError,
    UnknownPermitTypeError,
)


# ══════════════════════════════════════════════════════════════
# COMMODITIES
# ══════════════════════════════════════════════════════════════

class TestCommodities:
    """get_commodities() by permit type."""

    def test_all_commodities_without_permit_type(self, policy):
        assert policy.get_commodities() == {
            "LAMBEAM": "Laminated Beams",
            "BRGBEAM": "Bridge Beams",
        }

    def test_oversize_needs_size_permittable_trailer(self, policy):
        assert list(policy.get_commodities("STOS")) == ["LAMBEAM"]

    def test_overweight_needs_weight_permittable_trailer(self, policy):
        assert list(policy.get_commodities("STOW")) == ["LAMBEAM", "BRGBEAM"]

    def test_size_and_weight_needs_both(self, policy):
        assert list(policy.get_commodities("STWS")) == ["LAMBEAM"]

    def test_dimension_free_uses_allowed_commodities(self, policy):
        assert policy.get_commodities("NRSCV") == {"LAMBEAM": "Laminated Beams"}

    def test_non_commodity_permit_type_is_empty(self, policy):
        assert policy.get_commodities("TROS") == {}

    def test_unknown_permit_type_raises(self, policy):
        with pytest.raises(UnknownPermitTypeError):
            policy.get_commodities("NOPE")


# ══════════════════════════════════════════════════════════════
# PERMITTABLE VEHICLES
# ══════════════════════════════════════════════════════════════

class TestPermittableVehicles:
    """get_permittable_vehicle_types() and get_allowed_vehicles()."""

    def test_commodity_permit_type(self, policy):
        vehicles = policy.get_permittable_vehicle_types("STOS", "LAMBEAM")
        assert list(vehicles["powerUnits"]) == ["TRKTRAC", "CRANEAT"]
        assert list(vehicles["trailers"]) == ["POLETRL", "HIBOEXP", "XXXXXXX"]

    def test_lcv_trailer_included_when_authorized(self, lcv_policy):
        vehicles = lcv_policy.get_permittable_vehicle_types("STOS", "LAMBEAM")
        assert "LCVTRPL" in vehicles["trailers"]

    def test_size_and_weight_intersection(self, policy):
        vehicles = policy.get_permittable_vehicle_types("STWS", "LAMBEAM")
        assert list(vehicles["trailers"]) == ["HIBOEXP", "XXXXXXX"]

    def test_commodity_not_offered_for_permit_type(self, policy):
        vehicles = policy.get_permittable_vehicle_types("STOS", "BRGBEAM")
        assert vehicles == {"powerUnits": {}, "trailers": {}}

    def test_dimension_free_commodity_permit_uses_allow_list(self, policy):
        vehicles = policy.get_permittable_vehicle_types("NRSCV", "LAMBEAM")
        assert vehicles == {
            "powerUnits": {"TRKTRAC": "Truck Tractors"},
            "trailers": {"SEMITRL": "Semi-Trailers"},
        }

    def test_non_commodity_permit_type_uses_allow_list(self, policy):
        vehicles = policy.get_permittable_vehicle_types("TROS")
        assert list(vehicles["powerUnits"]) == ["TRKTRAC", "CRANEAT"]
        assert list(vehicles["trailers"]) == ["SEMITRL"]

    def test_missing_commodity_raises(self, policy):
        with pytest.raises(ConfigurationQueryError):
            policy.get_permittable_vehicle_types("STOS")

    def test_power_unit_types_only(self, policy):
        assert list(policy.get_permittable_power_unit_types("STOW", "BRGBEAM")) == [
            "TRKTRAC"
        ]

    def test_allowed_vehicles_filters_lcv(self, policy):
        vehicles = policy.get_allowed_vehicles("TROS")
        assert "LCVRMDB" not in vehicles["powerUnits"]

    def test_allowed_vehicles_keeps_lcv_when_authorized(self, lcv_policy):
        vehicles = lcv_policy.get_allowed_vehicles("TROS")
        assert list(vehicles["powerUnits"]) == ["TRKTRAC", "CRANEAT", "LCVRMDB"]

    def test_allowed_vehicles_rejects_commodity_permit_type(self, policy):
        with pytest.raises(ConfigurationQueryError):
            policy.get_allowed_vehicles("STOS")

    def test_filter_out_long_combination_vehicles(self, policy):
        kept = policy.filter_out_long_combination_vehicles(
            ["TRKTRAC", "LCVRMDB", "UNKNOWN", "SEMITRL"]
        )
        assert kept == ["TRKTRAC", "SEMITRL"]


# ══════════════════════════════════════════════════════════════
# CONFIGURATION VALIDITY
# ══════════════════════════════════════════════════════════════

class TestConfigurationValidity:
    """is_configuration_valid() walks the sequencing rules."""

    def test_power_unit_and_trailer(self, policy):
        assert policy.is_configuration_valid("STOS", "LAMBEAM", ["TRKTRAC", "POLETRL"])

    def test_jeep_trailer_booster(self, policy):
        assert policy.is_configuration_valid(
            "STOS", "LAMBEAM", ["TRKTRAC", "JEEPSRG", "POLETRL", "BOOSTER"]
        )

    def test_repeated_jeeps_and_boosters(self, policy):
        configuration = [
            "TRKTRAC", "JEEPSRG", "JEEPSRG", "JEEPSRG",
            "POLETRL", "BOOSTER", "BOOSTER",
        ]
        assert policy.is_configuration_valid("STOS", "LAMBEAM", configuration)

    def test_order_matters(self, policy):
        assert not policy.is_configuration_valid(
            "STOS", "LAMBEAM", ["TRKTRAC", "POLETRL", "JEEPSRG", "BOOSTER"]
        )

    def test_two_trailers_rejected(self, policy):
        assert not policy.is_configuration_valid(
            "STOS", "LAMBEAM", ["TRKTRAC", "POLETRL", "POLETRL"]
        )

    def test_trailer_not_in_commodity_table(self, policy):
        assert not policy.is_configuration_valid("STOS", "LAMBEAM", ["TRKTRAC", "SEMITRL"])

    def test_trailer_not_size_permittable(self, policy):
        assert not policy.is_configuration_valid("STOS", "LAMBEAM", ["TRKTRAC", "PLATFRM"])

    def test_jeep_requires_jeep_capable_trailer(self, policy):
        assert not policy.is_configuration_valid(
            "STOW", "LAMBEAM", ["TRKTRAC", "JEEPSRG", "PLATFRM"]
        )

    def test_booster_requires_booster_capable_trailer(self, policy):
        assert not policy.is_configuration_valid(
            "STOW", "LAMBEAM", ["TRKTRAC", "PLATFRM", "BOOSTER"]
        )

    def test_trailer_additional_axles(self, policy):
        assert policy.is_configuration_valid(
            "STOW", "LAMBEAM", ["TRKTRAC", "PLATFRM", "PFMAXLE", "PFMAXLE", "PFMAXLE"]
        )

    def test_power_unit_additional_axles(self, policy):
        assert policy.is_configuration_valid(
            "STOS", "LAMBEAM", ["CRANEAT", "ATCAXLE", "ATCAXLE", "XXXXXXX"]
        )

    def test_power_unit_axle_after_trailer_rejected(self, policy):
        assert not policy.is_configuration_valid(
            "STOS", "LAMBEAM", ["CRANEAT", "XXXXXXX", "ATCAXLE"]
        )

    def test_power_unit_alone_is_incomplete(self, policy):
        assert not policy.is_configuration_valid("STOS", "LAMBEAM", ["TRKTRAC"])
        assert policy.is_configuration_valid(
            "STOS", "LAMBEAM", ["TRKTRAC"], allow_partial=True
        )

    def test_empty_configuration(self, policy):
        assert not policy.is_configuration_valid("STOS", "LAMBEAM", [])
        assert policy.is_configuration_valid("STOS", "LAMBEAM", [], allow_partial=True)

    def test_trailer_first_rejected(self, policy):
        assert not policy.is_configuration_valid("STOS", "LAMBEAM", ["POLETRL"])

    def test_lcv_requires_authorization(self, policy, lcv_policy):
        configuration = ["TRKTRAC", "LCVTRPL"]
        assert not policy.is_configuration_valid("STOS", "LAMBEAM", configuration)
        assert lcv_policy.is_configuration_valid("STOS", "LAMBEAM", configuration)

    def test_non_commodity_permit_type_raises(self, policy):
        with pytest.raises(CommodityNotRequiredError):
            policy.is_configuration_valid("TROS", "LAMBEAM", ["TRKTRAC"])

    def test_unknown_commodity_raises(self, policy):
        with pytest.raises(UnknownCommodityError):
            policy.is_configuration_valid("STOS", "NOPE", ["TRKTRAC"])

    def test_missing_arguments_raise(self, policy):
        with pytest.raises(ConfigurationQueryError):
            policy.is_configuration_valid("STOS", None, ["TRKTRAC"])


# ══════════════════════════════════════════════════════════════
# NEXT PERMITTABLE VEHICLES
# ══════════════════════════════════════════════════════════════

class TestNextPermittableVehicles:
    """get_next_permittable_vehicles() for partial configurations."""

    def test_empty_configuration_offers_power_units(self, policy):
        assert list(policy.get_next_permittable_vehicles("STOS", "LAMBEAM", [])) == [
            "TRKTRAC", "CRANEAT",
        ]

    def test_after_power_unit(self, policy):
        assert list(
            policy.get_next_permittable_vehicles("STOS", "LAMBEAM", ["TRKTRAC"])
        ) == ["POLETRL", "HIBOEXP", "JEEPSRG"]

    def test_after_jeep(self, policy):
        assert list(
            policy.get_next_permittable_vehicles("STOS", "LAMBEAM", ["TRKTRAC", "JEEPSRG"])
        ) == ["POLETRL", "HIBOEXP", "JEEPSRG"]

    def test_after_booster_capable_trailer(self, policy):
        assert policy.get_next_permittable_vehicles(
            "STOS", "LAMBEAM", ["TRKTRAC", "POLETRL"]
        ) == {"BOOSTER": "Booster"}

    def test_after_booster(self, policy):
        assert list(
            policy.get_next_permittable_vehicles(
                "STOS", "LAMBEAM", ["TRKTRAC", "HIBOEXP", "BOOSTER"]
            )
        ) == ["BOOSTER"]

    def test_after_trailer_without_booster(self, policy):
        assert policy.get_next_permittable_vehicles(
            "STOW", "LAMBEAM", ["TRKTRAC", "PLATFRM", "PFMAXLE", "PFMAXLE"]
        ) == {}

    def test_invalid_prefix_offers_nothing(self, policy):
        assert policy.get_next_permittable_vehicles(
            "STOS", "LAMBEAM", ["TRKTRAC", "SEMITRL"]
        ) == {}

    def test_lcv_offered_when_authorized(self, policy, lcv_policy):
        assert "LCVTRPL" not in policy.get_next_permittable_vehicles(
            "STOS", "LAMBEAM", ["TRKTRAC"]
        )
        assert "LCVTRPL" in lcv_policy.get_next_permittable_vehicles(
            "STOS", "LAMBEAM", ["TRKTRAC"]
        )


# ══════════════════════════════════════════════════════════════
# SELF ISSUE
# ══════════════════════════════════════════════════════════════

class TestSelfIssue:
    """selfIssue flag of a commodity's power unit / trailer pairing."""

    def test_flagged_pairing(self, policy):
        assert policy.is_self_issuable("LAMBEAM", "TRKTRAC", "POLETRL") is True

    def test_unflagged_pairing(self, policy):
        assert policy.is_self_issuable("LAMBEAM", "TRKTRAC", "LCVTRPL") is False

    def test_unlisted_pairing(self, policy):
        assert policy.is_self_issuable("LAMBEAM", "CRANEAT", "POLETRL") is False
        assert policy.is_self_issuable("LAMBEAM", "GRADERS", "POLETRL") is False

    def test_unknown_commodity(self, policy):
        with pytest.raises(UnknownCommodityError):
            policy.is_self_issuable("NOPE", "TRKTRAC", "POLETRL")
