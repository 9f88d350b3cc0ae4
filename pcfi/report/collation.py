from __future__ import annotations

import unicodedata
from typing import Tuple

# Finnish alphabet: ... x y z å ä ö; w sorts with v and ü with y.
_SPECIAL = {
    "å": "{",
    "ä": "|",
    "æ": "|",
    "ö": "}",
    "ø": "}",
    "ü": "y",
    "w": "v",
}


def finnish_sort_key(text: str) -> Tuple[str, str]:
    """Display ordering key approximating Finnish collation."""
    s = (text or "").strip().casefold()
    out = []
    for ch in s:
        if ch in _SPECIAL:
            out.append(_SPECIAL[ch])
            continue
        # drop other accents: é -> e
        out.append(unicodedata.normalize("NFD", ch)[0])
    return "".join(out), s


def display_name(name_fi: str, name_sv: str, finnish_first: bool = True) -> str:
    fi = (name_fi or "").strip()
    sv = (name_sv or "").strip()
    if fi == sv or not sv:
        return fi
    if not fi:
        return sv
    return f"{fi} - {sv}" if finnish_first else f"{sv} - {fi}"
