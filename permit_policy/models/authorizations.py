"""
Permit Policy Engine: Special Authorizations
===============================================
Per-client overrides applied to every validate() call made while
they are set on a Policy instance.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class SpecialAuthorizations:
    """
    Fields:
        company_id:     Client the authorizations belong to.
        is_lcv_allowed: Long combination vehicles may be permitted.
        no_fee_type:    Non-empty when the client is exempt from fees.
    """

    company_id: Any
    is_lcv_allowed: bool = False
    no_fee_type: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SpecialAuthorizations":
        return cls(
            company_id=data.get("companyId"),
            is_lcv_allowed=bool(data.get("isLcvAllowed", False)),
            no_fee_type=data.get("noFeeType"),
        )

    @classmethod
    def coerce(cls, authorizations) -> Optional["SpecialAuthorizations"]:
        if authorizations is None:
            return None
        if isinstance(authorizations, SpecialAuthorizations):
            return authorizations
        if isinstance(authorizations, Mapping):
            return cls.from_dict(authorizations)
        raise TypeError(
            f"Expected SpecialAuthorizations or mapping, "
            f"got {type(authorizations).__name__}."
        )

    @property
    def has_no_fee(self) -> bool:
        return bool(self.no_fee_type)
