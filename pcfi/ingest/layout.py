"""
layout.py

Column layouts of the two fixed-width files published with the Finnish
postal code data:

- PCF_<date>.dat   postal code file, record tag PONOT, 220 characters
- BAF_<date>.dat   basic address file, record tag KATUN, 256 characters

Offsets are 0-based, end-exclusive character positions of a Latin-1 line.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class Column:
    name: str
    start: int
    end: int
    strip: bool = True

    def take(self, line: str) -> str:
        raw = line[self.start : self.end]
        return raw.strip() if self.strip else raw


@dataclass(frozen=True)
class RecordLayout:
    tag: str
    length: int
    columns: Tuple[Column, ...]

    def is_record(self, line: str) -> bool:
        return (
            bool(line)
            and not line.isspace()
            and len(line) == self.length
            and line[: len(self.tag)] == self.tag
        )

    def split(self, line: str) -> Dict[str, str]:
        return {c.name: c.take(line) for c in self.columns}

    def column(self, name: str) -> Column:
        for c in self.columns:
            if c.name == name:
                return c
        raise KeyError(name)


# Postal code fields are shared by both files.
_POSTAL_CODE_COLUMNS: Tuple[Column, ...] = (
    Column("tag", 0, 5),
    Column("running_year", 5, 9),
    Column("running_month", 9, 11),
    Column("running_day", 11, 13),
    Column("postal_code", 13, 18),
    Column("postal_name_fi", 18, 48),
    Column("postal_name_sv", 48, 78),
    Column("postal_abbr_fi", 78, 90),
    Column("postal_abbr_sv", 90, 102),
    Column("entry_year", 102, 106),
    Column("entry_month", 106, 108),
    Column("entry_day", 108, 110),
    Column("type_code", 110, 111),
)

POSTAL_CODE_FILE = RecordLayout(
    tag="PONOT",
    length=220,
    columns=_POSTAL_CODE_COLUMNS
    + (
        Column("region_code", 111, 116),
        Column("region_name_fi", 116, 146),
        Column("region_name_sv", 146, 176),
        Column("municipality_code", 176, 179),
        Column("municipality_name_fi", 179, 199),
        Column("municipality_name_sv", 199, 219),
        Column("language_distribution", 219, 220),
    ),
)

# The street name overlaps the entry date and type code columns; postal codes
# first seen in this file get whatever those characters parse to.
BASIC_ADDRESS_FILE = RecordLayout(
    tag="KATUN",
    length=256,
    columns=_POSTAL_CODE_COLUMNS
    + (
        Column("street_name_fi", 102, 132),
        Column("street_name_sv", 132, 162),
        Column("parity", 186, 187),
        Column("smallest_number", 187, 192),
        Column("smallest_letter", 192, 193),
        Column("smallest_punctuation", 193, 194),
        Column("smallest_number2", 194, 199),
        Column("smallest_letter2", 199, 200),
        Column("highest_number", 200, 205),
        Column("highest_letter", 205, 206),
        Column("highest_punctuation", 206, 207),
        Column("highest_number2", 207, 212),
        Column("highest_letter2", 212, 213),
        Column("municipality_code", 213, 216),
        # kept as delivered, padding included
        Column("municipality_name_fi", 216, 236, strip=False),
        Column("municipality_name_sv", 236, 256, strip=False),
    ),
)
