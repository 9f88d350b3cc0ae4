from __future__ import annotations

from datetime import datetime
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from pcfi.model.codes import LanguageDistributionCode, Parity, PostalCodeType

# -----------------------------
# Decoded records
# -----------------------------


class PostalCodeFields(BaseModel):
    """Postal code columns present in both files."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    running_date: Optional[datetime] = None
    postal_code: str = Field(..., pattern=r"^\d{5}$")
    postal_name_fi: str = ""
    postal_name_sv: str = ""
    postal_abbr_fi: str = ""
    postal_abbr_sv: str = ""
    entry_into_force: Optional[datetime] = None
    type_code: Optional[PostalCodeType] = None


class PostalCodeRecord(PostalCodeFields):
    """One PONOT line: a postal code with its municipality and region."""

    region_code: str = Field(..., min_length=1, max_length=5)
    region_name_fi: str = ""
    region_name_sv: str = ""
    municipality_code: str = Field(..., min_length=1, max_length=3)
    municipality_name_fi: str = ""
    municipality_name_sv: str = ""
    language_distribution: Optional[LanguageDistributionCode] = None


class BasicAddressRecord(PostalCodeFields):
    """One KATUN line: a street address range within a postal code."""

    street_name_fi: str = ""
    street_name_sv: str = ""
    parity: Parity = Parity.NONE
    smallest: int = Field(0, ge=0)
    highest: int = Field(0, ge=0)
    address_range: Tuple[str, ...] = ()
    municipality_code: str = Field(..., min_length=1, max_length=3)
    municipality_name_fi: str = ""
    municipality_name_sv: str = ""

    @model_validator(mode="after")
    def _range_tokens(self) -> "BasicAddressRecord":
        if len(self.address_range) > 2:
            raise ValueError("address range has at most two tokens")
        if any(not t.strip() for t in self.address_range):
            raise ValueError("empty address range token")
        return self
