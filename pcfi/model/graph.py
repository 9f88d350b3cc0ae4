from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict, Hashable, List, Mapping, Optional, Tuple

from pcfi.model.codes import LanguageDistributionCode, PostalCodeType
from pcfi.model.entities import (
    UNKNOWN_REGION,
    AdministrativeRegion,
    KnownRegion,
    Municipality,
    PostalCodeLocation,
)


class EntityGraph:
    """
    Deduplicating stores for regions, municipalities and postal codes.

    Every get-or-create returns (entity, created). An existing entity is
    returned untouched: attributes come from whichever record registered the
    code first.
    """

    def __init__(self) -> None:
        self._regions: Dict[str, AdministrativeRegion] = {}
        self._municipalities: Dict[str, Municipality] = {}
        self._postal_codes: Dict[str, PostalCodeLocation] = {}
        self._memo: Dict[Hashable, Any] = {}

    # ---------- registry ----------

    def get_or_create_region(
        self,
        code: str,
        running_date: Optional[datetime],
        name_fi: str,
        name_sv: str,
    ) -> Tuple[AdministrativeRegion, bool]:
        region = self._regions.get(code)
        if region is not None:
            return region, False
        region = AdministrativeRegion(
            code=code, name_fi=name_fi, name_sv=name_sv, running_date=running_date
        )
        self._regions[code] = region
        return region, True

    def get_or_create_municipality(
        self,
        code: str,
        running_date: Optional[datetime],
        region: Optional[AdministrativeRegion],
        name_fi: str,
        name_sv: str,
        language_distribution: Optional[LanguageDistributionCode] = None,
    ) -> Tuple[Municipality, bool]:
        municipality = self._municipalities.get(code)
        if municipality is not None:
            # never re-pointed to another region, even if this record disagrees
            return municipality, False
        municipality = Municipality(
            code=code,
            name_fi=name_fi,
            name_sv=name_sv,
            running_date=running_date,
            region_ref=KnownRegion(region) if region is not None else UNKNOWN_REGION,
            language_distribution=language_distribution,
        )
        self._municipalities[code] = municipality
        return municipality, True

    def get_or_create_postal_code(
        self,
        code: str,
        running_date: Optional[datetime],
        name_fi: str,
        name_sv: str,
        abbreviation_fi: str,
        abbreviation_sv: str,
        entry_into_force: Optional[datetime] = None,
        type_code: Optional[PostalCodeType] = None,
    ) -> Tuple[PostalCodeLocation, bool]:
        postal_code = self._postal_codes.get(code)
        if postal_code is not None:
            return postal_code, False
        postal_code = PostalCodeLocation(
            code=code,
            name_fi=name_fi,
            name_sv=name_sv,
            abbreviation_fi=abbreviation_fi,
            abbreviation_sv=abbreviation_sv,
            running_date=running_date,
            entry_into_force=entry_into_force,
            type_code=type_code,
        )
        self._postal_codes[code] = postal_code
        return postal_code, True

    def attach(self, postal_code: PostalCodeLocation, municipality: Municipality) -> None:
        """Link a registered postal code to a registered municipality."""
        if self._municipalities.get(municipality.code) is not municipality:
            raise ValueError(f"municipality {municipality.code} is not registered")
        if self._postal_codes.get(postal_code.code) is not postal_code:
            raise ValueError(f"postal code {postal_code.code} is not registered")
        postal_code.add_to_municipality(municipality)

    # ---------- read accessors ----------

    @property
    def regions(self) -> Mapping[str, AdministrativeRegion]:
        return self._regions

    @property
    def municipalities(self) -> Mapping[str, Municipality]:
        return self._municipalities

    @property
    def postal_codes(self) -> Mapping[str, PostalCodeLocation]:
        return self._postal_codes

    def region(self, code: str) -> Optional[AdministrativeRegion]:
        return self._regions.get(code)

    def municipality(self, code: str) -> Optional[Municipality]:
        return self._municipalities.get(code)

    def postal_code(self, code: str) -> Optional[PostalCodeLocation]:
        return self._postal_codes.get(code)

    def postal_codes_of(self, municipality: Municipality) -> List[PostalCodeLocation]:
        """Postal codes attached to the municipality, in registration order."""
        return [
            pc
            for pc in self._postal_codes.values()
            if municipality.code in pc.address_count_by_municipality
        ]

    def is_empty(self) -> bool:
        return not (self._regions or self._municipalities or self._postal_codes)

    # ---------- memo ----------

    def memoized(self, key: Hashable, compute: Callable[[], Any]) -> Any:
        """Return the cached value for key, computing it on first use."""
        if key not in self._memo:
            self._memo[key] = compute()
        return self._memo[key]

    def __repr__(self) -> str:
        return (
            f"EntityGraph(regions={len(self._regions)}, "
            f"municipalities={len(self._municipalities)}, "
            f"postal_codes={len(self._postal_codes)})"
        )
