from __future__ import annotations

from pathlib import Path
from typing import List

import pytest

from pcfi.config import get_settings, reset_settings
from pcfi.ingest.pipeline import (
    build_graph,
    ingest_basic_address_file,
    ingest_postal_code_file,
    latest_file,
    load_graph,
    load_graph_with_stats,
    reset_graph_cache,
)
from pcfi.ingest.tests.record_lines import baf_line, pcf_line
from pcfi.model.address_range import normalize_address_range
from pcfi.model.codes import Parity
from pcfi.model.entities import UNKNOWN_REGION
from pcfi.model.graph import EntityGraph

# ---------------------------
# Test helpers
# ---------------------------


def _pcf(postal_code="13100", municipality="109", region="FI1C2", **kw) -> str:
    return pcf_line(
        postal_code=postal_code, municipality_code=municipality, region_code=region, **kw
    )


def _baf(street, parity="0", smallest="", highest="", postal_code="13100", municipality="109", **kw) -> str:
    return baf_line(
        street_name_fi=street,
        street_name_sv="",
        parity=parity,
        smallest_number=smallest,
        highest_number=highest,
        postal_code=postal_code,
        municipality_code=municipality,
        **kw,
    )


def _write(path: Path, lines: List[str]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n", encoding="latin-1")
    return path


@pytest.fixture(autouse=True)
def _fresh_caches():
    reset_graph_cache()
    reset_settings()
    yield
    reset_graph_cache()
    reset_settings()


# ---------------------------
# End to end
# ---------------------------


def test_end_to_end_one_of_each(tmp_path):
    pcf = _write(tmp_path / "PCF_20240315.dat", [_pcf(), _pcf()])
    ranges = [
        ("Raatihuoneenkatu", "1", "1", "9"),
        ("Linnankatu", "2", "2", "11"),
        ("Torikatu", "0", "", ""),
    ]
    baf = _write(
        tmp_path / "BAF_20240315.dat",
        [_baf(s, parity=p, smallest=lo, highest=hi) for s, p, lo, hi in ranges],
    )

    graph, (pcf_stats, baf_stats) = build_graph(pcf, baf)

    assert len(graph.regions) == 1
    assert len(graph.municipalities) == 1
    assert len(graph.postal_codes) == 1
    pc = graph.postal_code("13100")
    m = graph.municipality("109")
    assert m.region is graph.region("FI1C2")
    assert pc.municipalities == [m]

    expected = sum(
        normalize_address_range(Parity(int(p)), int(lo or 0), int(hi or 0), s)[2]
        for s, p, lo, hi in ranges
    )
    assert expected == 5 + 5 + 1
    assert pc.address_count_by_municipality == {"109": expected}
    assert len(pc.street_addresses_by_municipality["109"]) == 3
    assert pcf_stats.records == 2 and baf_stats.records == 3


def test_latin1_names(tmp_path):
    pcf = _write(tmp_path / "PCF_1.dat", [_pcf()])
    graph, _ = build_graph(pcf, None)
    assert graph.region("FI1C2").name_fi == "Kanta-Häme"
    assert graph.postal_code("13100").name_fi == "HÄMEENLINNA"


# ---------------------------
# Malformed input
# ---------------------------


def test_short_line_ingests_only_good_line(tmp_path):
    pcf = _write(tmp_path / "PCF_1.dat", [_pcf(), _pcf(postal_code="13200")[:219]])
    graph = EntityGraph()
    stats = ingest_postal_code_file(graph, pcf)
    assert list(graph.postal_codes) == ["13100"]
    assert stats.records == 1
    assert stats.truncated


def test_short_line_ends_the_pass(tmp_path):
    pcf = _write(
        tmp_path / "PCF_1.dat",
        [_pcf(), "", _pcf(postal_code="13200")],
    )
    graph = EntityGraph()
    ingest_postal_code_file(graph, pcf)
    assert list(graph.postal_codes) == ["13100"]


def test_bad_lines_are_skipped(tmp_path):
    pcf = _write(
        tmp_path / "PCF_1.dat",
        [
            _pcf(),
            "XXXXX" + _pcf(postal_code="13200")[5:],  # wrong tag
            _pcf(postal_code="13210") + "!",  # too long
            _pcf(postal_code="13220", running_month="13"),  # impossible date
            _pcf(postal_code="1323X"),  # bad code
            _pcf(postal_code="13300"),
        ],
    )
    graph = EntityGraph()
    stats = ingest_postal_code_file(graph, pcf)
    assert list(graph.postal_codes) == ["13100", "13300"]
    assert stats.records == 2
    assert stats.skipped == 4
    assert not stats.truncated


def test_missing_files_give_empty_graph(tmp_path):
    graph, (a, b) = build_graph(tmp_path / "PCF_none.dat", None)
    assert graph.is_empty()
    assert a.records == 0 and b.records == 0


def test_crlf_line_endings(tmp_path):
    path = tmp_path / "PCF_1.dat"
    path.write_bytes((_pcf() + "\r\n" + _pcf(postal_code="13200") + "\r\n").encode("latin-1"))
    graph, _ = build_graph(path, None)
    assert list(graph.postal_codes) == ["13100", "13200"]


# ---------------------------
# Cross-linking
# ---------------------------


def test_municipality_region_never_reassigned(tmp_path):
    pcf = _write(
        tmp_path / "PCF_1.dat",
        [_pcf(region="FI1C2"), _pcf(postal_code="13200", region="FI1B1", region_name_fi="Uusimaa")],
    )
    graph, _ = build_graph(pcf, None)
    assert set(graph.regions) == {"FI1C2", "FI1B1"}
    assert graph.municipality("109").region.code == "FI1C2"


def test_address_only_municipality_has_no_region(tmp_path):
    baf = _write(tmp_path / "BAF_1.dat", [_baf("Kuja", municipality="999")])
    graph = EntityGraph()
    ingest_basic_address_file(graph, baf)
    # a later postal code file does not give it a region
    pcf = _write(tmp_path / "PCF_1.dat", [_pcf(municipality="999")])
    ingest_postal_code_file(graph, pcf)

    m = graph.municipality("999")
    assert m.region is None
    assert m.region_ref is UNKNOWN_REGION
    assert "FI1C2" in graph.regions


def test_address_file_creates_postal_code(tmp_path):
    baf = _write(
        tmp_path / "BAF_1.dat",
        [_baf("Kuja", parity="1", smallest="1", highest="3", postal_code="13500")],
    )
    graph, _ = build_graph(None, baf)
    pc = graph.postal_code("13500")
    assert pc is not None
    assert pc.name_fi == "HÄMEENLINNA"
    assert pc.address_count_by_municipality == {"109": 2}


def test_postal_code_in_two_municipalities(tmp_path):
    pcf = _write(
        tmp_path / "PCF_1.dat",
        [_pcf(), _pcf(municipality="165", municipality_name_fi="Janakkala")],
    )
    graph, _ = build_graph(pcf, None)
    pc = graph.postal_code("13100")
    assert [m.code for m in pc.municipalities] == ["109", "165"]
    assert pc.address_count_by_municipality == {"109": 0, "165": 0}


# ---------------------------
# Discovery and caching
# ---------------------------


def test_latest_file(tmp_path):
    for name in ("PCF_20231231.dat", "PCF_20240301.dat", "PCF_20240101.dat", "BAF_20250101.dat"):
        (tmp_path / name).write_text("", encoding="latin-1")
    assert latest_file(tmp_path, "PCF_*.dat").name == "PCF_20240301.dat"
    assert latest_file(tmp_path, "XYZ_*.dat") is None
    assert latest_file(tmp_path / "missing", "PCF_*.dat") is None


def test_load_graph_uses_newest_files_once(tmp_path):
    _write(tmp_path / "PCF_20240101.dat", [_pcf(postal_code="13200")])
    _write(tmp_path / "PCF_20240315.dat", [_pcf()])
    _write(tmp_path / "BAF_20240315.dat", [_baf("Kuja")])

    graph = load_graph(tmp_path)
    assert list(graph.postal_codes) == ["13100"]

    # new data on disk is not picked up by an already built graph
    _write(tmp_path / "PCF_20240401.dat", [_pcf(postal_code="13300")])
    assert load_graph(tmp_path) is graph

    reset_graph_cache()
    assert list(load_graph(tmp_path).postal_codes) == ["13300", "13100"]


def test_first_load_wins_across_directories(tmp_path):
    _write(tmp_path / "a" / "PCF_20240315.dat", [_pcf()])
    _write(tmp_path / "b" / "PCF_20240315.dat", [_pcf(postal_code="13300")])

    first, (first_stats, _) = load_graph_with_stats(tmp_path / "a")
    assert load_graph(tmp_path / "b") is first
    assert load_graph() is first
    assert list(first.postal_codes) == ["13100"]
    assert first_stats.path.parent.name == "a"


def test_load_graph_default_dir_from_env(tmp_path, monkeypatch):
    _write(tmp_path / "PCF_20240315.dat", [_pcf()])
    monkeypatch.setenv("PCFI_DATA", str(tmp_path))
    reset_settings()
    assert get_settings().data_dir.resolve() == tmp_path.resolve()
    graph, (pcf_stats, _) = load_graph_with_stats()
    assert pcf_stats.path.name == "PCF_20240315.dat"
    assert "13100" in graph.postal_codes
