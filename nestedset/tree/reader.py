"""Tree Reader: read-only queries over the nested-set intervals.

Reads are not wrapped in transactions. With a single writer per tree (the
only supported mode) they always see a committed structure.
"""

import logging

from nestedset.db.table import NodeTable
from nestedset.errors import NodeNotFoundError, StructuralAnomalyError
from nestedset.models import Node, NodeRef, TreeEntry
from nestedset.tree.locator import NodeLocator

logger = logging.getLogger(__name__)


class TreeReader:
    def __init__(self, table: NodeTable, locator: NodeLocator) -> None:
        self._table = table
        self._locator = locator

    async def full_tree(self) -> list[Node]:
        """Every node of the active tree ordered by left value.

        An empty tree gets its root created first when auto-creation is on.
        """
        nodes = await self._table.fetch_all()
        if not nodes and self._table.config.auto_create_root:
            await self._locator.ensure_root()
            nodes = await self._table.fetch_all()
        return nodes

    async def subtree(self, ref: NodeRef) -> list[Node]:
        """The referenced node followed by all of its descendants, in preorder."""
        node = (await self._locator.resolve(ref)).node
        return await self.subtree_of(node)

    async def subtree_of(self, node: Node) -> list[Node]:
        return await self._table.fetch_all(
            "{lft} BETWEEN ? AND ?", (node.left, node.right)
        )

    async def immediate_children(self, ref: NodeRef) -> list[TreeEntry]:
        """The node (depth 0) followed by its direct children (depth 1), ordered by left."""
        node = (await self._locator.resolve(ref)).node
        return await self.immediate_children_of(node)

    async def immediate_children_of(self, parent: Node) -> list[TreeEntry]:
        # depth = ancestors of the row inside the parent's interval, the parent included
        anc_clause, anc_params = self._table.partition("anc")
        node_clause, node_params = self._table.partition("node")
        rows = await self._table.query(
            "SELECT * FROM ("
            f" SELECT {self._table.select_list('node')},"
            "  (SELECT COUNT(*) FROM {table} AS anc"
            "    WHERE anc.{lft} < node.{lft} AND anc.{rgt} > node.{rgt}"
            f"   AND anc.{{lft}} >= ?{anc_clause}) AS depth"
            " FROM {table} AS node"
            f" WHERE node.{{lft}} BETWEEN ? AND ?{node_clause}"
            ") WHERE depth <= 1 ORDER BY lft ASC",
            (parent.left, *anc_params, parent.left, parent.right, *node_params),
        )
        entries = [TreeEntry(node=self._table.to_node(row), depth=row["depth"]) for row in rows]
        if not entries or entries[0].node.id != parent.id:
            raise StructuralAnomalyError(
                parent.id, f"interval ({parent.left}, {parent.right}) is not stored as given"
            )
        return entries

    async def children(self, ref: NodeRef) -> list[Node]:
        """Direct children only, in sibling order."""
        return [entry.node for entry in (await self.immediate_children(ref))[1:]]

    async def find_parent(self, node: Node) -> Node | None:
        """The tightest enclosing node, or None for the root."""
        return await self._table.fetch_one(
            "{lft} < ? AND {rgt} > ?",
            (node.left, node.right),
            order_by="{lft} DESC",
        )

    async def parent_of(self, ref: NodeRef) -> Node:
        node = (await self._locator.resolve(ref)).node
        parent = await self.find_parent(node)
        if parent is None:
            raise NodeNotFoundError(f"parent of {node.id}")
        return parent

    async def find_previous_sibling(self, node: Node) -> Node | None:
        return await self._table.fetch_one("{rgt} = ?", (node.left - 1,))

    async def find_next_sibling(self, node: Node) -> Node | None:
        return await self._table.fetch_one("{lft} = ?", (node.right + 1,))

    async def previous_sibling(self, ref: NodeRef) -> Node:
        node = (await self._locator.resolve(ref)).node
        sibling = await self.find_previous_sibling(node)
        if sibling is None:
            raise NodeNotFoundError(f"previous sibling of {node.id}")
        return sibling

    async def next_sibling(self, ref: NodeRef) -> Node:
        node = (await self._locator.resolve(ref)).node
        sibling = await self.find_next_sibling(node)
        if sibling is None:
            raise NodeNotFoundError(f"next sibling of {node.id}")
        return sibling

    async def path_to(self, ref: NodeRef) -> list[Node]:
        """Ancestors from the root down to the node itself."""
        node = (await self._locator.resolve(ref)).node
        return await self._table.fetch_all(
            "{lft} <= ? AND {rgt} >= ?", (node.left, node.right)
        )
