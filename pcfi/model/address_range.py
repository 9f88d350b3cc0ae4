from __future__ import annotations

from typing import Tuple

from pcfi.model.codes import Parity


def normalize_address_range(
    parity: Parity,
    smallest: int,
    highest: int,
    name_fi: str = "",
    name_sv: str = "",
) -> Tuple[int, int, int]:
    """
    Correct the building numbers of one range to its declared parity and
    estimate how many street addresses the range may hold.

    Returns (smallest, highest, potential_count). The count is only an
    estimate: outside town centres numbers are often assigned by distance
    from the start of the road rather than consecutively.

    Negative numbers raise ValueError. Decoded records never carry them
    (unparseable numbers become 0), so this only catches direct misuse.
    """
    if smallest < 0 or highest < 0:
        raise ValueError("building numbers must be non-negative")

    if parity is not Parity.NONE and not parity.matches(smallest):
        if highest > smallest:
            smallest += 1
        else:
            smallest = 0
            highest = 0

    if highest > smallest and not parity.matches(highest):
        highest -= 1

    if highest == smallest or highest == 0:
        count = 1 if smallest > 0 else 0
    elif highest > smallest:
        count = (highest - smallest) // 2 + 1
    else:
        count = 0

    if count == 0 and ((name_fi or "").strip() or (name_sv or "").strip()):
        # a named street or location without numbers is one delivery point
        count = 1

    return smallest, highest, count
