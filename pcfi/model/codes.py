from __future__ import annotations

from enum import IntEnum
from typing import Optional, Type, TypeVar

E = TypeVar("E", bound=IntEnum)


class PostalCodeType(IntEnum):
    NORMAL = 1  # covers a physical area on a map
    PO_BOX = 2
    CORPORATE = 3
    COMPILATION = 4
    REPLY_MAIL = 5
    PARCEL_MACHINE = 6
    PICK_UP_POINT = 7
    TECHNICAL = 8


class LanguageDistributionCode(IntEnum):
    """
    Official languages of a municipality.

    BILINGUAL is used for both bilingual orders in the postal data;
    BILINGUAL_SWEDISH_FIRST only appears when supplied from another source.
    """

    FINNISH = 1
    BILINGUAL = 2
    BILINGUAL_SWEDISH_FIRST = 3
    SWEDISH = 4


class Parity(IntEnum):
    """Street numbers are odd on one side of a road and even on the other."""

    NONE = 0
    ODD = 1
    EVEN = 2

    def matches(self, number: int) -> bool:
        if self is Parity.ODD:
            return number % 2 == 1
        if self is Parity.EVEN:
            return number % 2 == 0
        return True


def enum_or_none(enum_cls: Type[E], value: Optional[int]) -> Optional[E]:
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        return None
