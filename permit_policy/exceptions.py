"""
Permit Policy Engine: Exceptions
===================================
Structured errors for caller and programmer misuse.

These are engine errors, NOT applicant rejections.
A non-compliant permit application flows through
ValidationResult → ValidationResults, never through an exception.
"""

from __future__ import annotations

from typing import Optional


class PermitPolicyError(Exception):
    """Base error for permit policy engine operations."""
    pass


class PolicyVersionError(PermitPolicyError):
    """Policy document is not compatible with this engine version."""

    def __init__(self, engine_version: str, min_version, reason: str):
        self.engine_version = engine_version
        self.min_version = min_version
        super().__init__(
            f"Policy document requires engine '{min_version}', "
            f"running '{engine_version}': {reason}"
        )


class PolicyConfigurationError(PermitPolicyError):
    """The policy document is missing something an operation needs."""
    pass


class ConfigurationQueryError(PermitPolicyError):
    """A vehicle or commodity query was made with invalid arguments."""
    pass


class UnknownPermitTypeError(ConfigurationQueryError):
    """Permit type id is not configured in the policy document."""

    def __init__(self, permit_type_id):
        self.permit_type_id = permit_type_id
        super().__init__(f"Invalid permit type: '{permit_type_id}'")


class UnknownCommodityError(ConfigurationQueryError):
    """Commodity id is not configured in the policy document."""

    def __init__(self, commodity_id):
        self.commodity_id = commodity_id
        super().__init__(f"Invalid commodity type: '{commodity_id}'")


class CommodityNotRequiredError(ConfigurationQueryError):
    """Commodity-driven query made against a non-commodity permit type."""

    def __init__(self, permit_type_id: str):
        self.permit_type_id = permit_type_id
        super().__init__(
            f"Permit type '{permit_type_id}' does not require a commodity"
        )


class AxleConfigurationError(PermitPolicyError):
    """Axle configuration is malformed for the requested calculation."""

    def __init__(self, message: str, axle_unit: Optional[int] = None):
        self.axle_unit = axle_unit
        super().__init__(message)
