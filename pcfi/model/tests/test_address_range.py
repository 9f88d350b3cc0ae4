import pytest

from pcfi.model.address_range import normalize_address_range
from pcfi.model.codes import Parity
from pcfi.model.entities import Municipality, StreetAddressRange


@pytest.mark.parametrize(
    "parity,smallest,highest,name,expected",
    [
        # even start on an odd side moves up, even end moves down
        (Parity.ODD, 100, 108, "", (101, 107, 4)),
        (Parity.ODD, 1, 1, "", (1, 1, 1)),
        # no numbers, but a named location
        (Parity.NONE, 0, 0, "Keskustie", (0, 0, 1)),
        # highest below smallest
        (Parity.ODD, 5, 3, "", (5, 3, 0)),
        (Parity.EVEN, 2, 11, "", (2, 10, 5)),
        # single number with wrong parity empties the range
        (Parity.EVEN, 1, 1, "", (0, 0, 0)),
        (Parity.ODD, 6, 6, "", (0, 0, 0)),
        (Parity.EVEN, 1, 1, "Rantatie", (0, 0, 1)),
        # only a smallest number
        (Parity.ODD, 3, 0, "", (3, 0, 1)),
        (Parity.NONE, 4, 9, "", (4, 9, 3)),
        (Parity.NONE, 0, 0, "", (0, 0, 0)),
    ],
)
def test_normalize_address_range(parity, smallest, highest, name, expected):
    assert normalize_address_range(parity, smallest, highest, name, "") == expected


def test_swedish_name_alone_counts():
    assert normalize_address_range(Parity.NONE, 0, 0, "", "Strandvägen")[2] == 1
    assert normalize_address_range(Parity.NONE, 0, 0, "  ", "   ")[2] == 0


def test_negative_numbers_rejected():
    with pytest.raises(ValueError):
        normalize_address_range(Parity.ODD, -1, 5)


def test_street_address_range_create_applies_correction():
    m = Municipality(code="091", name_fi="Helsinki", name_sv="Helsingfors")
    rng = StreetAddressRange.create(
        postal_code="00100",
        municipality=m,
        name_fi="Mannerheimintie",
        name_sv="Mannerheimvägen",
        address_range=["100", "108"],
        parity=Parity.ODD,
        smallest=100,
        highest=108,
    )
    assert (rng.smallest, rng.highest, rng.potential_count) == (101, 107, 4)
    assert rng.address_range == ("100", "108")
    assert rng.municipality is m
    assert rng.smallest <= rng.highest
