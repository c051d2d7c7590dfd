"""Tree Mutator: insert, move, reorder and delete, composed from Locator, Reader and Shifter.

Each public operation runs in exactly one transaction. The shifts it issues
join that transaction, so a failure at any step leaves the table as it was.

Intervals are tracked as plain values between phases. When a shift has just
moved the node being operated on, the new position is computed from the
shift arithmetic rather than re-read from the table.
"""

import logging
from typing import Literal

from nestedset.db.table import NodeTable
from nestedset.errors import (
    InvalidDeleteError,
    InvalidMoveError,
    NodeNotFoundError,
    StructuralAnomalyError,
)
from nestedset.models import Node, NodeRef, Notice, Outcome, Resolution, Resolved
from nestedset.tree.locator import NodeLocator
from nestedset.tree.reader import TreeReader
from nestedset.tree.shifter import IntervalShifter

logger = logging.getLogger(__name__)

Direction = Literal["up", "down"]


class TreeMutator:
    def __init__(
        self,
        table: NodeTable,
        locator: NodeLocator,
        reader: TreeReader,
        shifter: IntervalShifter,
    ) -> None:
        self._table = table
        self._locator = locator
        self._reader = reader
        self._shifter = shifter

    async def _load(self, ref: NodeRef) -> Resolution:
        """Resolve ``ref``, re-reading caller-held nodes so their interval is current."""
        if isinstance(ref, Resolved):
            node = await self._locator.by_id(ref.node.id)
            if node is None:
                raise NodeNotFoundError(ref.node.id)
            return Resolution(node=node)
        return await self._locator.resolve(ref)

    # ------------------------------------------------------------------
    # Insert
    # ------------------------------------------------------------------

    async def insert(self, name: str, parent: NodeRef, position: int | None = None) -> Outcome:
        """Create a leaf named ``name`` under ``parent``.

        ``position`` is the 0-based index among the parent's children the new
        node will occupy; None or anything past the end appends it.
        """
        if position is not None and position < 0:
            raise ValueError(f"position must be >= 0, got {position}")

        async with self._table.transaction():
            resolution = await self._load(parent)
            boundary = await self._insert_boundary(resolution.node, position)
            await self._shifter.shift(boundary, 2, "up")
            node = await self._table.insert(name, boundary, boundary + 1)

        logger.debug(
            "Inserted %r (id=%s) under %s at (%d, %d)",
            name, node.id, resolution.node.id, node.left, node.right,
        )
        return Outcome(node=node, notices=resolution.notices)

    async def _insert_boundary(self, parent: Node, position: int | None) -> int:
        """Left value the new node will take."""
        if parent.is_leaf:
            return parent.right
        if position == 0:
            return parent.left + 1

        children = (await self._reader.immediate_children_of(parent))[1:]
        if not children:
            raise StructuralAnomalyError(
                parent.id,
                f"interval ({parent.left}, {parent.right}) implies "
                f"{parent.descendant_count} descendants but no children were found",
            )
        if position is None or position > len(children):
            position = len(children)
        return children[position - 1].node.right + 1

    # ------------------------------------------------------------------
    # Move to a new parent
    # ------------------------------------------------------------------

    async def move(self, ref: NodeRef, new_parent: NodeRef) -> Outcome:
        """Re-attach the node and its subtree as the first child of ``new_parent``.

        Moving under the current parent is a no-op (reordering is done with
        move_up/move_down). Moving a node under itself or under one of its
        own descendants raises InvalidMoveError before anything is written.
        """
        async with self._table.transaction():
            node_res = await self._load(ref)
            target_res = await self._load(new_parent)
            node, target = node_res.node, target_res.node
            notices = [*node_res.notices, *target_res.notices]

            if target.id == node.id:
                raise InvalidMoveError(node.id, target.id, "a node cannot be its own parent")
            if node.contains(target):
                raise InvalidMoveError(node.id, target.id, "target is a descendant of the node")

            current_parent = await self._reader.find_parent(node)
            if current_parent is not None and current_parent.id == target.id:
                message = f"node {node.id} is already a child of {target.id}"
                logger.warning("Move skipped: %s", message)
                return Outcome(
                    node=node,
                    changed=False,
                    notices=[*notices, Notice(code="same_parent", message=message)],
                )

            moved = await self._relocate(node, target.left)

        logger.debug("Moved node %s under %s: now (%d, %d)", node.id, target.id, moved.left, moved.right)
        return Outcome(node=moved, notices=notices)

    async def _relocate(self, node: Node, start: int) -> Node:
        """Move ``node``'s subtree so its left value follows ``start``.

        Three phases: open a gap right after ``start``, shift the subtree into
        it, close the hole the subtree left behind.
        """
        width = node.width
        await self._shifter.shift(start, width, "reparent")

        # The opening shift moved the subtree too if it lay past the gap
        if node.left > start:
            left, right = node.left + width, node.right + width
        else:
            left, right = node.left, node.right

        await self._shifter.shift_range(left, right, start + 1 - left)
        await self._shifter.shift(right, -width, "down")

        new_left = start + 1 if node.left > start else start + 1 - width
        return node.model_copy(update={"left": new_left, "right": new_left + width - 1})

    # ------------------------------------------------------------------
    # Reorder among siblings
    # ------------------------------------------------------------------

    async def move_up(self, ref: NodeRef) -> Outcome:
        """Swap the node with its previous sibling."""
        return await self._swap(ref, "up")

    async def move_down(self, ref: NodeRef) -> Outcome:
        """Swap the node with its next sibling."""
        return await self._swap(ref, "down")

    async def _swap(self, ref: NodeRef, direction: Direction) -> Outcome:
        async with self._table.transaction():
            resolution = await self._load(ref)
            node = resolution.node

            if direction == "up":
                sibling = await self._reader.find_previous_sibling(node)
            else:
                sibling = await self._reader.find_next_sibling(node)

            if sibling is None:
                notice = await self._edge_notice(node, direction)
                logger.warning("Reorder skipped: %s", notice.message)
                return Outcome(node=node, changed=False, notices=[*resolution.notices, notice])

            width = node.width
            if direction == "up":
                # Gap at the sibling's left edge; the sibling and the node both slide right
                await self._shifter.shift(sibling.left, width, "up")
                left, right = node.left + width, node.right + width
                target = sibling.left
            else:
                # Gap right behind the sibling; the node stays where it is
                await self._shifter.shift(sibling.right, width, "down")
                left, right = node.left, node.right
                target = sibling.right + 1

            await self._shifter.shift_range(left, right, target - left)
            await self._shifter.shift(right, -width, "down")

        new_left = target if direction == "up" else target - width
        moved = node.model_copy(update={"left": new_left, "right": new_left + width - 1})
        logger.debug(
            "Moved node %s %s past %s: now (%d, %d)",
            node.id, direction, sibling.id, moved.left, moved.right,
        )
        return Outcome(node=moved, notices=resolution.notices)

    async def _edge_notice(self, node: Node, direction: Direction) -> Notice:
        """Explain a missing sibling, or raise if the intervals don't account for it."""
        parent = await self._reader.find_parent(node)
        if direction == "up":
            at_edge = parent is None or parent.left == node.left - 1
            code, where = "already_first", "first"
        else:
            at_edge = parent is None or parent.right == node.right + 1
            code, where = "already_last", "last"
        if not at_edge:
            raise StructuralAnomalyError(
                node.id, f"no {direction} sibling found and node is not at its parent's edge"
            )
        return Notice(code=code, message=f"node {node.id} is already the {where} sibling")

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    async def delete(self, ref: NodeRef, keep_children: bool = True) -> Outcome:
        """Delete a node.

        A leaf is simply removed. A node with descendants either has them
        promoted one level (``keep_children``) or is removed with its whole
        subtree.
        """
        async with self._table.transaction():
            resolution = await self._load(ref)
            node = resolution.node
            if node.is_leaf or not keep_children:
                removed = await self._remove_range(node)
            else:
                removed = await self._remove_promoting_children(node)

        logger.debug("Deleted node %s (%d rows)", node.id, removed)
        return Outcome(node=None, notices=resolution.notices)

    async def delete_subtree(self, ref: NodeRef) -> Outcome:
        """Delete a node together with all of its descendants."""
        return await self.delete(ref, keep_children=False)

    async def _remove_range(self, node: Node) -> int:
        width = node.width
        removed = await self._table.delete("{lft} BETWEEN ? AND ?", (node.left, node.right))
        if removed != width // 2:
            raise StructuralAnomalyError(
                node.id, f"expected {width // 2} rows in ({node.left}, {node.right}), found {removed}"
            )
        await self._shifter.shift(node.right, -width, "down")
        return removed

    async def _remove_promoting_children(self, node: Node) -> int:
        if await self._reader.find_parent(node) is None:
            raise InvalidDeleteError(
                node.id, "the root has children; promoting them would leave several roots"
            )
        removed = await self._table.delete("{id} = ?", (node.id,))
        await self._shifter.shift_range(node.left, node.right, -1)
        await self._shifter.shift(node.right, -2, "down")
        return removed
