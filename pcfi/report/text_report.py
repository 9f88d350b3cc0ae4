"""
text_report.py

Region / municipality / postal code listing of an entity graph:

    Uusimaa - Nyland [FI1B1]
    ========================
    Helsinki - Helsingfors [091]:
      00100 Helsinki - Helsingfors (1234)
      ...

Municipalities without a known region are left out of the listing and only
counted in `Report.unassigned_municipalities`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Set

from pcfi.model.codes import PostalCodeType
from pcfi.model.entities import AdministrativeRegion, Municipality, PostalCodeLocation
from pcfi.model.graph import EntityGraph
from pcfi.query.ranking import (
    ordered_postal_codes,
    primary_municipality,
    ranked_municipalities_for,
    ranked_postal_codes_for,
)
from pcfi.report.collation import display_name, finnish_sort_key

logger = logging.getLogger(__name__)

# Normal area codes end in 0, 5 or 7; the few "normal" codes ending otherwise
# (e.g. Eduskunta, Korvatunturi) are special-purpose.
NORMAL_CODE_ENDINGS = ("0", "5", "7")


@dataclass
class ReportPostalCode:
    code: str
    name: str
    address_count: int


@dataclass
class ReportMunicipality:
    code: str
    name: str
    postal_codes: List[ReportPostalCode] = field(default_factory=list)


@dataclass
class ReportRegion:
    code: str
    name: str
    municipalities: List[ReportMunicipality] = field(default_factory=list)


@dataclass
class Report:
    regions: List[ReportRegion] = field(default_factory=list)
    unassigned_municipalities: int = 0


def is_reportable(postal_code: PostalCodeLocation, include_special: bool = False) -> bool:
    if include_special:
        return True
    return postal_code.type_code == PostalCodeType.NORMAL and postal_code.code.endswith(
        NORMAL_CODE_ENDINGS
    )


def _region_name(region: AdministrativeRegion) -> str:
    name = region.name_fi
    if name != region.name_sv:
        name += f" - {region.name_sv}"
    return f"{name} [{region.code}]"


def _postal_code_line(
    graph: EntityGraph, pc: PostalCodeLocation, municipality: Municipality
) -> ReportPostalCode:
    primary = primary_municipality(graph, pc)
    finnish_first = primary.is_finnish_majority if primary is not None else True
    return ReportPostalCode(
        code=pc.code,
        name=display_name(pc.name_fi, pc.name_sv, finnish_first),
        address_count=pc.address_count_in(municipality),
    )


def build_report(graph: EntityGraph, include_special: bool = False) -> Report:
    reportable: Set[str] = set()
    municipalities: Dict[str, Municipality] = {}
    by_region: Dict[str, List[str]] = {}
    regions: Dict[str, AdministrativeRegion] = {}
    unassigned: Set[str] = set()

    for pc in ordered_postal_codes(graph):
        if not is_reportable(pc, include_special):
            continue
        reportable.add(pc.code)
        for m in ranked_municipalities_for(pc):
            if m.code in municipalities:
                continue
            municipalities[m.code] = m
            region = m.region
            if region is None:
                unassigned.add(m.code)
                continue
            regions.setdefault(region.code, region)
            by_region.setdefault(region.code, []).append(m.code)

    if unassigned:
        logger.warning(
            "%d municipalities without region left out of report: %s",
            len(unassigned),
            ", ".join(sorted(unassigned)),
        )

    report = Report(unassigned_municipalities=len(unassigned))
    for region_code in sorted(regions):
        region = regions[region_code]
        section = ReportRegion(code=region.code, name=_region_name(region))
        members = sorted(
            (municipalities[c] for c in by_region[region_code]),
            key=lambda m: finnish_sort_key(
                m.name_fi if m.is_finnish_majority else m.name_sv
            ),
        )
        for m in members:
            entry = ReportMunicipality(
                code=m.code,
                name=display_name(m.name_fi, m.name_sv, m.is_finnish_majority),
            )
            for pc in ranked_postal_codes_for(graph, m):
                if pc.code in reportable:
                    entry.postal_codes.append(_postal_code_line(graph, pc, m))
            section.municipalities.append(entry)
        report.regions.append(section)
    return report


def render_report(report: Report) -> str:
    lines: List[str] = []
    for i, region in enumerate(report.regions):
        if i:
            lines.append("")
        lines.append(region.name)
        lines.append("=" * len(region.name))
        for j, m in enumerate(region.municipalities):
            if j:
                lines.append("")
            lines.append(f"{m.name} [{m.code}]:")
            for pc in m.postal_codes:
                line = f"  {pc.code} {pc.name}"
                if pc.address_count > 0:
                    line += f" ({pc.address_count})"
                lines.append(line)
    return "\n".join(lines) + ("\n" if lines else "")
