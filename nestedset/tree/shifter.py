"""Interval Shifter: the update primitives every structural change is built from.

A shift moves every left/right value past a boundary by ``delta``; a range
shift moves one self-contained subtree. Both run inside a transaction, so
callers composing several of them inside their own ``transaction()`` block
get a single atomic unit.

Which values count as "past" the boundary depends on the mode:

========== ======================= =========================
mode       left values moved       right values moved
========== ======================= =========================
reparent   left > boundary         right >= boundary
up         left > boundary - 1     right >= boundary
down       left > boundary         right > boundary
========== ======================= =========================

``up`` opens a gap at the boundary and ``down`` opens one just behind it.
With ``reparent`` the row whose left value is the boundary stays put while
its right edge moves, which opens a gap inside that node.
"""

import logging
from typing import Literal

from nestedset.db.table import NodeTable

logger = logging.getLogger(__name__)

ShiftMode = Literal["reparent", "up", "down"]


def thresholds(boundary: int, mode: ShiftMode) -> tuple[int, int]:
    """Return (left_floor, right_floor): values strictly above a floor are moved."""
    if mode == "reparent":
        return boundary, boundary - 1
    if mode == "up":
        return boundary - 1, boundary - 1
    if mode == "down":
        return boundary, boundary
    raise ValueError(f"unknown shift mode: {mode!r}")


class IntervalShifter:
    def __init__(self, table: NodeTable) -> None:
        self._table = table

    async def shift(self, boundary: int, delta: int, mode: ShiftMode = "reparent") -> None:
        """Add ``delta`` to every left/right value past ``boundary`` (see module doc)."""
        left_floor, right_floor = thresholds(boundary, mode)
        async with self._table.transaction():
            await self._table.update("{lft} = {lft} + ?", "{lft} > ?", (delta, left_floor))
            await self._table.update("{rgt} = {rgt} + ?", "{rgt} > ?", (delta, right_floor))
        logger.debug("shift boundary=%d delta=%+d mode=%s", boundary, delta, mode)

    async def shift_range(self, left: int, right: int, delta: int) -> int:
        """Add ``delta`` to both values of every node lying within [left, right].

        Rows straddling the range (ancestors of the subtree) are untouched.
        Returns the number of rows moved.
        """
        async with self._table.transaction():
            moved = await self._table.update(
                "{lft} = {lft} + ?, {rgt} = {rgt} + ?",
                "{lft} >= ? AND {rgt} <= ?",
                (delta, delta, left, right),
            )
        logger.debug("shift_range [%d, %d] delta=%+d rows=%d", left, right, delta, moved)
        return moved
