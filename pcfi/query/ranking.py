from __future__ import annotations

from typing import List, Optional

from pcfi.model.entities import Municipality, PostalCodeLocation
from pcfi.model.graph import EntityGraph


def _prefix_match(a: str, b: str) -> bool:
    # Names are padded with one space so "Vihtijärvi" does not match "Vihti"
    # while "Laukaa As" does match "Laukaa".
    a = f"{a} ".casefold()
    b = f"{b} ".casefold()
    if not a.strip() or not b.strip():
        return False
    return a.startswith(b) or b.startswith(a)


def is_name_similar(postal_code: PostalCodeLocation, municipality: Municipality) -> bool:
    """True if the postal code name and municipality name share a prefix in
    Finnish or in Swedish."""
    return _prefix_match(postal_code.name_fi, municipality.name_fi) or _prefix_match(
        postal_code.name_sv, municipality.name_sv
    )


def ranked_municipalities_for(postal_code: PostalCodeLocation) -> List[Municipality]:
    """
    Municipalities of a postal code, most representative first: name match,
    then number of potential addresses. Ties keep attachment order.
    """
    return sorted(
        postal_code.municipalities,
        key=lambda m: (
            not is_name_similar(postal_code, m),
            -postal_code.address_count_in(m),
        ),
    )


def primary_municipality(
    graph: EntityGraph, postal_code: PostalCodeLocation
) -> Optional[Municipality]:
    """Top-ranked municipality, computed once per graph and postal code."""

    def compute() -> Optional[Municipality]:
        ranked = ranked_municipalities_for(postal_code)
        return ranked[0] if ranked else None

    return graph.memoized(("primary_municipality", postal_code.code), compute)


def ranked_postal_codes_for(
    graph: EntityGraph, municipality: Municipality
) -> List[PostalCodeLocation]:
    """
    Postal codes of a municipality: those whose primary municipality it is
    first, then name match, then potential addresses here, then code.
    """

    def key(pc: PostalCodeLocation):
        primary = primary_municipality(graph, pc)
        return (
            primary is None or primary.code != municipality.code,
            not is_name_similar(pc, municipality),
            -pc.address_count_in(municipality),
            pc.code,
        )

    return sorted(graph.postal_codes_of(municipality), key=key)


def ordered_postal_codes(graph: EntityGraph) -> List[PostalCodeLocation]:
    """All postal codes by primary region, primary municipality and code."""

    def key(pc: PostalCodeLocation):
        primary = primary_municipality(graph, pc)
        region = primary.region if primary is not None else None
        return (
            region.code if region is not None else "",
            primary.code if primary is not None else "",
            pc.code,
        )

    return sorted(graph.postal_codes.values(), key=key)
