"""Glyph resolution: maps an accumulated cell bitmask to one box-drawing character."""

from __future__ import annotations

from functools import lru_cache
from types import MappingProxyType
from typing import Mapping, Optional

from asciidraw.common import (
    ALL_BITS,
    ARC_MASK,
    BACK_DIAGONAL_MASK,
    FORWARD_DIAGONAL_MASK,
    HORIZONTAL_MASK,
    VERTICAL_MASK,
    AdCellBits,
)

###############################################################################
# Glyphs
###############################################################################

GLYPH_HORIZONTAL = "─"
GLYPH_VERTICAL = "│"
GLYPH_DOUBLE_HORIZONTAL = "═"
GLYPH_DOUBLE_VERTICAL = "║"
GLYPH_BACK_DIAGONAL = "╲"
GLYPH_FORWARD_DIAGONAL = "╱"
GLYPH_CROSS = "┼"
GLYPH_DIAGONAL_CROSS = "╳"
GLYPH_ARC_DOWN_RIGHT = "╭"
GLYPH_ARC_DOWN_LEFT = "╮"
GLYPH_ARC_UP_LEFT = "╯"
GLYPH_ARC_UP_RIGHT = "╰"
GLYPH_TEE_RIGHT = "├"
GLYPH_TEE_LEFT = "┤"
GLYPH_TEE_DOWN = "┬"
GLYPH_TEE_UP = "┴"
GLYPH_TICK_LEFT = "╴"
GLYPH_TICK_UP = "╵"
GLYPH_TICK_RIGHT = "╶"
GLYPH_TICK_DOWN = "╷"

_B = AdCellBits

# Tier 1: exact bitmask matches for single strokes and simple combinations.
EXACT_GLYPHS: Mapping[int, str] = MappingProxyType(
    {
        # straight lines
        _B.ARM_W | _B.ARM_E: GLYPH_HORIZONTAL,
        _B.EDGE_N: GLYPH_HORIZONTAL,
        _B.EDGE_S: GLYPH_HORIZONTAL,
        _B.EDGE_N | _B.EDGE_S: GLYPH_DOUBLE_HORIZONTAL,
        _B.ARM_N | _B.ARM_S: GLYPH_VERTICAL,
        _B.EDGE_W: GLYPH_VERTICAL,
        _B.EDGE_E: GLYPH_VERTICAL,
        _B.EDGE_W | _B.EDGE_E: GLYPH_DOUBLE_VERTICAL,
        # quarter ticks
        _B.ARM_W: GLYPH_TICK_LEFT,
        _B.ARM_N: GLYPH_TICK_UP,
        _B.ARM_E: GLYPH_TICK_RIGHT,
        _B.ARM_S: GLYPH_TICK_DOWN,
        # diagonals
        _B.ARM_NW | _B.ARM_SE: GLYPH_BACK_DIAGONAL,
        _B.ARM_NW: GLYPH_BACK_DIAGONAL,
        _B.ARM_SE: GLYPH_BACK_DIAGONAL,
        _B.STEEP_BACK: GLYPH_BACK_DIAGONAL,
        _B.SHALLOW_BACK: GLYPH_BACK_DIAGONAL,
        _B.ARM_NE | _B.ARM_SW: GLYPH_FORWARD_DIAGONAL,
        _B.ARM_NE: GLYPH_FORWARD_DIAGONAL,
        _B.ARM_SW: GLYPH_FORWARD_DIAGONAL,
        _B.STEEP_FWD: GLYPH_FORWARD_DIAGONAL,
        _B.SHALLOW_FWD: GLYPH_FORWARD_DIAGONAL,
        # rounded corners: arcs
        _B.ARC_SE: GLYPH_ARC_DOWN_RIGHT,
        _B.ARC_SW: GLYPH_ARC_DOWN_LEFT,
        _B.ARC_NW: GLYPH_ARC_UP_LEFT,
        _B.ARC_NE: GLYPH_ARC_UP_RIGHT,
        # rounded corners: two arms meeting in the center
        _B.ARM_E | _B.ARM_S: GLYPH_ARC_DOWN_RIGHT,
        _B.ARM_W | _B.ARM_S: GLYPH_ARC_DOWN_LEFT,
        _B.ARM_W | _B.ARM_N: GLYPH_ARC_UP_LEFT,
        _B.ARM_E | _B.ARM_N: GLYPH_ARC_UP_RIGHT,
        # rounded corners: two edges meeting in a cell corner
        _B.EDGE_N | _B.EDGE_W: GLYPH_ARC_DOWN_RIGHT,
        _B.EDGE_N | _B.EDGE_E: GLYPH_ARC_DOWN_LEFT,
        _B.EDGE_S | _B.EDGE_E: GLYPH_ARC_UP_LEFT,
        _B.EDGE_S | _B.EDGE_W: GLYPH_ARC_UP_RIGHT,
        # T-junctions
        _B.ARM_N | _B.ARM_S | _B.ARM_E: GLYPH_TEE_RIGHT,
        _B.ARM_N | _B.ARM_S | _B.ARM_W: GLYPH_TEE_LEFT,
        _B.ARM_W | _B.ARM_E | _B.ARM_S: GLYPH_TEE_DOWN,
        _B.ARM_W | _B.ARM_E | _B.ARM_N: GLYPH_TEE_UP,
    }
)


def _popcount(value: int) -> int:
    return bin(value).count("1")


###############################################################################
# GlyphResolver
###############################################################################
class GlyphResolver:
    """
    Resolves cell bitmasks to glyphs.

    Tier 1 looks the bitmask up in EXACT_GLYPHS. Tier 2 classifies dense
    cells by category: horizontal and vertical components give a cross,
    both diagonal directions a diagonal cross, a single category its line
    glyph. Arcs count as horizontal and vertical at once. A mix of one
    orthogonal and one diagonal category goes to the category with more
    bits, a tie to the cross. An empty bitmask, or one with bits outside
    the 20 known flags, gives no glyph.
    """

    @staticmethod
    @lru_cache(maxsize=4096)
    def resolve(bits: int) -> Optional[str]:
        """Return the glyph for _bits_ or None if the cell stays blank."""
        bits = int(bits)
        if bits <= 0 or bits & ~ALL_BITS:
            return None

        glyph = EXACT_GLYPHS.get(bits)
        if glyph is not None:
            return glyph

        arcs = bits & ARC_MASK
        horizontal = _popcount(bits & HORIZONTAL_MASK) + _popcount(arcs)
        vertical = _popcount(bits & VERTICAL_MASK) + _popcount(arcs)
        back = _popcount(bits & BACK_DIAGONAL_MASK)
        forward = _popcount(bits & FORWARD_DIAGONAL_MASK)

        if horizontal and vertical:
            return GLYPH_CROSS
        if back and forward:
            return GLYPH_DIAGONAL_CROSS

        # at most one orthogonal and one diagonal category are left
        candidates = [
            (count, glyph)
            for count, glyph in (
                (horizontal, GLYPH_HORIZONTAL),
                (vertical, GLYPH_VERTICAL),
                (back, GLYPH_BACK_DIAGONAL),
                (forward, GLYPH_FORWARD_DIAGONAL),
            )
            if count
        ]
        if len(candidates) == 1:
            return candidates[0][1]
        (count_a, glyph_a), (count_b, glyph_b) = candidates
        if count_a == count_b:
            return GLYPH_CROSS
        return glyph_a if count_a > count_b else glyph_b


def resolve(bits: int) -> Optional[str]:
    """Module-level shortcut for GlyphResolver.resolve."""
    return GlyphResolver.resolve(bits)
