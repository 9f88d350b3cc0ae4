from __future__ import annotations

import re
from datetime import datetime
from typing import Dict, Optional, Tuple

from pydantic import ValidationError

from pcfi.ingest.layout import BASIC_ADDRESS_FILE, POSTAL_CODE_FILE
from pcfi.ingest.schema import BasicAddressRecord, PostalCodeRecord
from pcfi.model.codes import (
    LanguageDistributionCode,
    Parity,
    PostalCodeType,
    enum_or_none,
)

INT_RE = re.compile(r"^[+-]?\d+$")


class MalformedRecordError(ValueError):
    """A line has the right shape but a mandatory field cannot be used."""


# -----------------------------
# Field parsing
# -----------------------------


def parse_int(text: Optional[str]) -> Optional[int]:
    """Lenient integer parse: None instead of an exception."""
    if text is None:
        return None
    s = text.strip()
    if not INT_RE.match(s):
        return None
    return int(s)


def parse_building_number(text: Optional[str]) -> int:
    n = parse_int(text)
    if n is None or n < 0:
        return 0
    return n


def parse_date(year: str, month: str, day: str) -> Optional[datetime]:
    """
    Midnight (naive, local) of the given day, or None if any component is
    not a number. Numbers that do not form a calendar date are an error.
    """
    y, m, d = parse_int(year), parse_int(month), parse_int(day)
    if y is None or m is None or d is None:
        return None
    try:
        return datetime(y, m, d)
    except ValueError as e:
        raise MalformedRecordError(f"invalid date {year}-{month}-{day}: {e}") from e


def parse_parity(text: str) -> Parity:
    return enum_or_none(Parity, parse_int(text)) or Parity.NONE


def _postal_code_fields(f: Dict[str, str]) -> Dict[str, object]:
    return {
        "running_date": parse_date(
            f["running_year"], f["running_month"], f["running_day"]
        ),
        "postal_code": f["postal_code"],
        "postal_name_fi": f["postal_name_fi"],
        "postal_name_sv": f["postal_name_sv"],
        "postal_abbr_fi": f["postal_abbr_fi"],
        "postal_abbr_sv": f["postal_abbr_sv"],
        "entry_into_force": parse_date(
            f["entry_year"], f["entry_month"], f["entry_day"]
        ),
        "type_code": enum_or_none(PostalCodeType, parse_int(f["type_code"])),
    }


# -----------------------------
# Address numbers
# -----------------------------


def address_range_tokens(f: Dict[str, str]) -> Tuple[str, ...]:
    """
    Raw start and end of the range as printed, e.g. ("1", "15") or ("2a-4",).
    """
    start = "".join(
        f[k]
        for k in (
            "smallest_number",
            "smallest_letter",
            "smallest_punctuation",
            "smallest_number2",
            "smallest_letter2",
        )
    )
    end = "".join(
        f[k]
        for k in (
            "highest_number",
            "highest_letter",
            "highest_punctuation",
            "highest_number2",
            "highest_letter2",
        )
    )
    if not start.strip():
        return ()
    if not end.strip() or end == start:
        return (start,)
    return (start, end)


def effective_highest(f: Dict[str, str]) -> int:
    """
    Highest building number of the range. For a hyphenated end ("13-15") the
    second number is the highest one.
    """
    highest = 0
    if f["highest_punctuation"] == "-":
        highest = parse_building_number(f["highest_number2"])
    if highest == 0:
        highest = parse_building_number(f["highest_number"])
    return highest


# -----------------------------
# Line decoders
# -----------------------------


def decode_postal_code_line(line: str) -> Optional[PostalCodeRecord]:
    """
    Decode one PONOT line. Returns None when the line is not a postal code
    record; raises MalformedRecordError when a mandatory field is unusable.
    """
    if not POSTAL_CODE_FILE.is_record(line):
        return None
    f = POSTAL_CODE_FILE.split(line)
    try:
        return PostalCodeRecord(
            **_postal_code_fields(f),
            region_code=f["region_code"],
            region_name_fi=f["region_name_fi"],
            region_name_sv=f["region_name_sv"],
            municipality_code=f["municipality_code"],
            municipality_name_fi=f["municipality_name_fi"],
            municipality_name_sv=f["municipality_name_sv"],
            language_distribution=enum_or_none(
                LanguageDistributionCode, parse_int(f["language_distribution"])
            ),
        )
    except ValidationError as e:
        raise MalformedRecordError(str(e)) from e


def decode_basic_address_line(line: str) -> Optional[BasicAddressRecord]:
    """Decode one KATUN line; same contract as decode_postal_code_line."""
    if not BASIC_ADDRESS_FILE.is_record(line):
        return None
    f = BASIC_ADDRESS_FILE.split(line)
    try:
        return BasicAddressRecord(
            **_postal_code_fields(f),
            street_name_fi=f["street_name_fi"],
            street_name_sv=f["street_name_sv"],
            parity=parse_parity(f["parity"]),
            smallest=parse_building_number(f["smallest_number"]),
            highest=effective_highest(f),
            address_range=address_range_tokens(f),
            municipality_code=f["municipality_code"],
            municipality_name_fi=f["municipality_name_fi"],
            municipality_name_sv=f["municipality_name_sv"],
        )
    except ValidationError as e:
        raise MalformedRecordError(str(e)) from e
