from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple, Union

from pcfi.model.address_range import normalize_address_range
from pcfi.model.codes import LanguageDistributionCode, Parity, PostalCodeType

# -----------------------------
# Administrative hierarchy
# -----------------------------


@dataclass(frozen=True, eq=False)
class AdministrativeRegion:
    """NUTS 3 level region."""

    code: str
    name_fi: str
    name_sv: str
    running_date: Optional[datetime] = None


@dataclass(frozen=True)
class UnknownRegion:
    """Municipality seen only in the basic address file."""


@dataclass(frozen=True)
class KnownRegion:
    region: AdministrativeRegion


RegionRef = Union[UnknownRegion, KnownRegion]

UNKNOWN_REGION = UnknownRegion()


@dataclass(frozen=True, eq=False)
class Municipality:
    code: str
    name_fi: str
    name_sv: str
    running_date: Optional[datetime] = None
    region_ref: RegionRef = UNKNOWN_REGION
    language_distribution: Optional[LanguageDistributionCode] = None

    @property
    def region(self) -> Optional[AdministrativeRegion]:
        if isinstance(self.region_ref, KnownRegion):
            return self.region_ref.region
        return None

    @property
    def is_finnish_majority(self) -> bool:
        """True when display names put the Finnish name first."""
        # The postal data does not carry the language order of bilingual
        # municipalities, so BILINGUAL counts as Finnish first.
        return self.language_distribution in (
            None,
            LanguageDistributionCode.FINNISH,
            LanguageDistributionCode.BILINGUAL,
        )


# -----------------------------
# Postal codes and address ranges
# -----------------------------


@dataclass(frozen=True, eq=False)
class StreetAddressRange:
    """
    One run of odd or even numbers on a street, or a named location without
    numbers, inside one postal code and one municipality.

    Build instances with `StreetAddressRange.create`, which applies the
    parity correction and computes `potential_count`.
    """

    postal_code: str
    municipality: Municipality
    name_fi: str
    name_sv: str
    address_range: Tuple[str, ...]
    parity: Parity
    smallest: int
    highest: int
    potential_count: int
    running_date: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        *,
        postal_code: str,
        municipality: Municipality,
        name_fi: str,
        name_sv: str,
        address_range: Tuple[str, ...] = (),
        parity: Parity = Parity.NONE,
        smallest: int = 0,
        highest: int = 0,
        running_date: Optional[datetime] = None,
    ) -> "StreetAddressRange":
        smallest, highest, count = normalize_address_range(
            parity, smallest, highest, name_fi, name_sv
        )
        return cls(
            postal_code=postal_code,
            municipality=municipality,
            name_fi=name_fi,
            name_sv=name_sv,
            address_range=tuple(address_range),
            parity=parity,
            smallest=smallest,
            highest=highest,
            potential_count=count,
            running_date=running_date,
        )


@dataclass(eq=False)
class PostalCodeLocation:
    code: str  # 5 digits, leading zeros significant
    name_fi: str
    name_sv: str
    abbreviation_fi: str = ""
    abbreviation_sv: str = ""
    running_date: Optional[datetime] = None
    entry_into_force: Optional[datetime] = None
    type_code: Optional[PostalCodeType] = None
    street_addresses_by_municipality: Dict[str, List[StreetAddressRange]] = field(
        default_factory=dict, init=False
    )
    address_count_by_municipality: Dict[str, int] = field(
        default_factory=dict, init=False
    )
    _municipalities: Dict[str, Municipality] = field(
        default_factory=dict, init=False, repr=False
    )

    @property
    def municipalities(self) -> List[Municipality]:
        """Attached municipalities in attachment order."""
        return list(self._municipalities.values())

    def add_to_municipality(self, municipality: Municipality) -> None:
        """Attach this postal code to a municipality; repeated calls are no-ops."""
        self._municipalities.setdefault(municipality.code, municipality)
        self.street_addresses_by_municipality.setdefault(municipality.code, [])
        self.address_count_by_municipality.setdefault(municipality.code, 0)

    def add_street_address_range(
        self,
        municipality: Municipality,
        name_fi: str,
        name_sv: str,
        address_range: Tuple[str, ...] = (),
        parity: Parity = Parity.NONE,
        smallest: int = 0,
        highest: int = 0,
        running_date: Optional[datetime] = None,
    ) -> StreetAddressRange:
        self.add_to_municipality(municipality)
        rng = StreetAddressRange.create(
            postal_code=self.code,
            municipality=municipality,
            name_fi=name_fi,
            name_sv=name_sv,
            address_range=address_range,
            parity=parity,
            smallest=smallest,
            highest=highest,
            running_date=running_date,
        )
        self.street_addresses_by_municipality[municipality.code].append(rng)
        self.address_count_by_municipality[municipality.code] += rng.potential_count
        return rng

    def address_count_in(self, municipality: Municipality) -> int:
        return self.address_count_by_municipality.get(municipality.code, 0)
