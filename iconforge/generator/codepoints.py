"""
Codepoint assignment for glyph names.
"""

from __future__ import annotations

from typing import Dict, Iterable, Mapping


def assign_codepoints(
    names: Iterable[str],
    fixed: Mapping[str, int],
    start: int,
) -> Dict[str, int]:
    """Return ``{name: codepoint}`` for every name.

    Names listed in ``fixed`` keep their codepoint; the others get the next
    free value counting up from ``start``, in name order.
    """
    names = sorted(set(names))
    taken = {cp for n, cp in fixed.items() if n in names}
    used_by: Dict[int, str] = {}
    for n in names:
        if n in fixed:
            cp = fixed[n]
            if cp in used_by:
                raise ValueError(f"codepoint {cp:#x} assigned to both '{used_by[cp]}' and '{n}'")
            used_by[cp] = n

    out: Dict[str, int] = {}
    nxt = start
    for n in names:
        if n in fixed:
            out[n] = fixed[n]
            continue
        while nxt in taken:
            nxt += 1
        if nxt > 0x10FFFF:
            raise ValueError("ran out of codepoints")
        out[n] = nxt
        taken.add(nxt)
        nxt += 1
    return out
