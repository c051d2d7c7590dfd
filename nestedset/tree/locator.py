"""Node Locator: resolves a NodeRef to a stored node in the active tree."""

import logging

from nestedset.db.table import NodeTable
from nestedset.errors import NodeNotFoundError
from nestedset.models import ById, ByName, Node, NodeRef, Notice, Resolution, Resolved

logger = logging.getLogger(__name__)


class NodeLocator:
    """Looks nodes up by id or name, creating the root on demand."""

    def __init__(self, table: NodeTable) -> None:
        self._table = table
        self._config = table.config

    async def resolve(self, ref: NodeRef) -> Resolution:
        """Resolve a reference to exactly one node.

        Names are assumed unique but not enforced: with several matches the
        first in store order wins and an ``ambiguous_match`` notice is attached.
        Raises NodeNotFoundError when nothing matches.
        """
        if isinstance(ref, Resolved):
            return Resolution(node=ref.node)
        if isinstance(ref, ById):
            node = await self.by_id(ref.id)
            if node is None:
                raise NodeNotFoundError(ref.id)
            return Resolution(node=node)

        matches = await self.by_name(ref.name)
        if not matches:
            raise NodeNotFoundError(ref.name)
        if len(matches) == 1:
            return Resolution(node=matches[0])

        message = (
            f"{len(matches)} nodes are named {ref.name!r}; using id {matches[0].id}"
        )
        logger.warning("Ambiguous node name: %s", message)
        return Resolution(
            node=matches[0],
            notices=[Notice(code="ambiguous_match", message=message)],
        )

    async def by_id(self, node_id: int) -> Node | None:
        return await self._table.fetch_one("{id} = ?", (node_id,))

    async def by_name(self, name: str) -> list[Node]:
        """All nodes named ``name``, in store order.

        Looking up the root name in an empty tree creates the root first when
        auto-creation is on.
        """
        matches = await self._fetch_named(name)
        if not matches and name == self._config.root_name and self._config.auto_create_root:
            matches = await self.ensure_root()
        return matches

    async def root(self) -> Node:
        """The root of the active tree (auto-created if enabled)."""
        return (await self.resolve(ByName(name=self._config.root_name))).node

    async def ensure_root(self) -> list[Node]:
        """Rows carrying the root name, creating the root when there are none.

        The check runs again inside the transaction so concurrent callers
        create one root between them.
        """
        async with self._table.transaction():
            matches = await self._fetch_named(self._config.root_name)
            if not matches:
                matches = [await self.create_root()]
        return matches

    async def create_root(self) -> Node:
        """Insert the root row at (1, 2) for the active tree."""
        node = await self._table.insert(self._config.root_name, 1, 2)
        logger.info(
            "Created root node %r (id=%s, group=%r)",
            node.name, node.id, self._config.group_value,
        )
        return node

    async def _fetch_named(self, name: str) -> list[Node]:
        return await self._table.fetch_all("{name} = ?", (name,), order_by="{id} ASC")
