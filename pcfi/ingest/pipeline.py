"""
pipeline.py

Builds the entity graph from the two postal code data files:

1. the postal code file (PCF) creates regions, municipalities with their
   region, and postal codes attached to municipalities;
2. the basic address file (BAF) adds street address ranges, creating any
   municipality or postal code the PCF did not mention.

Malformed content never raises out of this module: bad lines are skipped and
counted, a missing file skips its pass.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, Optional, Tuple, TypeVar

from pcfi.config import get_settings
from pcfi.ingest.decode import (
    MalformedRecordError,
    decode_basic_address_line,
    decode_postal_code_line,
)
from pcfi.ingest.layout import BASIC_ADDRESS_FILE, POSTAL_CODE_FILE, RecordLayout
from pcfi.ingest.schema import BasicAddressRecord, PostalCodeRecord
from pcfi.model.graph import EntityGraph

logger = logging.getLogger(__name__)

R = TypeVar("R")


@dataclass
class IngestStats:
    path: Optional[Path] = None
    lines_read: int = 0
    records: int = 0
    skipped: int = 0
    truncated: bool = False  # stopped at an empty or short line


# -----------------------------
# File discovery
# -----------------------------


def latest_file(directory: Path, pattern: str) -> Optional[Path]:
    """Newest matching file; the date in the name makes name order = age order."""
    if not directory.is_dir():
        return None
    files = sorted(
        (p for p in directory.glob(pattern) if p.is_file()),
        key=lambda p: p.name,
        reverse=True,
    )
    return files[0] if files else None


# -----------------------------
# Line reading
# -----------------------------


def _records(
    path: Path,
    layout: RecordLayout,
    decode: Callable[[str], Optional[R]],
    stats: IngestStats,
    encoding: str,
) -> Iterator[R]:
    with path.open("r", encoding=encoding, newline="") as f:
        for raw in f:
            line = raw.rstrip("\r\n")
            stats.lines_read += 1
            if not line or len(line) < layout.length:
                # end of data: trailer, truncated file or blank line
                stats.truncated = True
                logger.debug("%s:%d: stop at short line", path.name, stats.lines_read)
                break
            try:
                record = decode(line)
            except MalformedRecordError as e:
                stats.skipped += 1
                logger.debug("%s:%d: skipped: %s", path.name, stats.lines_read, e)
                continue
            if record is None:
                stats.skipped += 1
                continue
            stats.records += 1
            yield record


# -----------------------------
# Passes
# -----------------------------


def ingest_postal_code_record(graph: EntityGraph, rec: PostalCodeRecord) -> None:
    region, _ = graph.get_or_create_region(
        rec.region_code, rec.running_date, rec.region_name_fi, rec.region_name_sv
    )
    municipality, _ = graph.get_or_create_municipality(
        rec.municipality_code,
        rec.running_date,
        region,
        rec.municipality_name_fi,
        rec.municipality_name_sv,
        rec.language_distribution,
    )
    postal_code, _ = graph.get_or_create_postal_code(
        rec.postal_code,
        rec.running_date,
        rec.postal_name_fi,
        rec.postal_name_sv,
        rec.postal_abbr_fi,
        rec.postal_abbr_sv,
        rec.entry_into_force,
        rec.type_code,
    )
    graph.attach(postal_code, municipality)


def ingest_basic_address_record(graph: EntityGraph, rec: BasicAddressRecord) -> None:
    # Region only comes from the postal code file.
    municipality, created = graph.get_or_create_municipality(
        rec.municipality_code,
        rec.running_date,
        None,
        rec.municipality_name_fi,
        rec.municipality_name_sv,
    )
    if created:
        logger.info(
            "municipality %s only in basic address file; region unknown",
            rec.municipality_code,
        )
    postal_code, _ = graph.get_or_create_postal_code(
        rec.postal_code,
        rec.running_date,
        rec.postal_name_fi,
        rec.postal_name_sv,
        rec.postal_abbr_fi,
        rec.postal_abbr_sv,
        rec.entry_into_force,
        rec.type_code,
    )
    graph.attach(postal_code, municipality)
    postal_code.add_street_address_range(
        municipality,
        rec.street_name_fi,
        rec.street_name_sv,
        address_range=rec.address_range,
        parity=rec.parity,
        smallest=rec.smallest,
        highest=rec.highest,
        running_date=rec.running_date,
    )


def ingest_postal_code_file(
    graph: EntityGraph, path: Optional[Path], encoding: str = "latin-1"
) -> IngestStats:
    stats = IngestStats(path=path)
    if path is None or not path.is_file():
        logger.warning("postal code file not found: %s", path)
        return stats
    for rec in _records(path, POSTAL_CODE_FILE, decode_postal_code_line, stats, encoding):
        ingest_postal_code_record(graph, rec)
    logger.info(
        "%s: %d records, %d skipped", path.name, stats.records, stats.skipped
    )
    return stats


def ingest_basic_address_file(
    graph: EntityGraph, path: Optional[Path], encoding: str = "latin-1"
) -> IngestStats:
    stats = IngestStats(path=path)
    if path is None or not path.is_file():
        logger.warning("basic address file not found: %s", path)
        return stats
    for rec in _records(
        path, BASIC_ADDRESS_FILE, decode_basic_address_line, stats, encoding
    ):
        ingest_basic_address_record(graph, rec)
    logger.info(
        "%s: %d records, %d skipped", path.name, stats.records, stats.skipped
    )
    return stats


# -----------------------------
# Graph builders
# -----------------------------


def build_graph(
    postal_code_file: Optional[Path],
    basic_address_file: Optional[Path],
    encoding: str = "latin-1",
) -> Tuple[EntityGraph, Tuple[IngestStats, IngestStats]]:
    """Fresh graph from explicit files; the postal code file always goes first."""
    graph = EntityGraph()
    pcf_stats = ingest_postal_code_file(graph, postal_code_file, encoding)
    baf_stats = ingest_basic_address_file(graph, basic_address_file, encoding)
    return graph, (pcf_stats, baf_stats)


_graph_cache: Optional[Tuple[EntityGraph, Tuple[IngestStats, IngestStats]]] = None


def load_graph_with_stats(
    directory: Optional[Path] = None,
) -> Tuple[EntityGraph, Tuple[IngestStats, IngestStats]]:
    global _graph_cache
    if _graph_cache is None:
        cfg = get_settings()
        directory = (directory or cfg.data_dir).resolve()
        pcf = latest_file(directory, cfg.postal_code_pattern)
        baf = latest_file(directory, cfg.basic_address_pattern)
        logger.info("building postal code graph from %s and %s", pcf, baf)
        _graph_cache = build_graph(pcf, baf, cfg.encoding)
    elif directory is not None:
        logger.debug("graph already built; ignoring directory %s", directory)
    return _graph_cache


def load_graph(directory: Optional[Path] = None) -> EntityGraph:
    """
    Graph built from the newest files in directory (defaults to the configured
    data dir). Built on the first call and reused for the rest of the process;
    later calls get the same graph whatever directory they name.
    """
    return load_graph_with_stats(directory)[0]


def reset_graph_cache() -> None:
    global _graph_cache
    _graph_cache = None
