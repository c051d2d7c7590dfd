"""Tree service: one nested-set tree wired up from a Database and a TreeConfig."""

from nestedset.config import TreeConfig
from nestedset.db.connection import Database
from nestedset.db.table import NodeTable
from nestedset.models import Node, NodeRef, Outcome, Resolution, TreeEntry, as_ref
from nestedset.tree.locator import NodeLocator
from nestedset.tree.mutator import TreeMutator
from nestedset.tree.reader import TreeReader
from nestedset.tree.shifter import IntervalShifter

RefLike = NodeRef | Node | int | str | None


class NestedSetTree:
    """Coordinates locator, reader, shifter and mutator for one tree.

    Node arguments accept an id, a name, a Node, or an explicit NodeRef;
    ``None`` means the root.
    """

    def __init__(self, db: Database, config: TreeConfig | None = None) -> None:
        self.config = config or TreeConfig()
        self.table = NodeTable(db, self.config)
        self.locator = NodeLocator(self.table)
        self.shifter = IntervalShifter(self.table)
        self.reader = TreeReader(self.table, self.locator)
        self.mutator = TreeMutator(self.table, self.locator, self.reader, self.shifter)
        self._db = db

    def for_group(self, value: str | int) -> "NestedSetTree":
        """The tree identified by ``value`` in the same forest table."""
        return NestedSetTree(self._db, self.config.for_group(value))

    def ref(self, value: RefLike) -> NodeRef:
        return as_ref(value, self.config.root_name)

    # -- Reads --

    async def resolve(self, node: RefLike = None) -> Resolution:
        return await self.locator.resolve(self.ref(node))

    async def get(self, node: RefLike = None) -> Node:
        return (await self.resolve(node)).node

    async def root(self) -> Node:
        return await self.locator.root()

    async def full_tree(self) -> list[Node]:
        return await self.reader.full_tree()

    async def subtree(self, node: RefLike = None) -> list[Node]:
        return await self.reader.subtree(self.ref(node))

    async def immediate_children(self, node: RefLike = None) -> list[TreeEntry]:
        return await self.reader.immediate_children(self.ref(node))

    async def children(self, node: RefLike = None) -> list[Node]:
        return await self.reader.children(self.ref(node))

    async def parent_of(self, node: RefLike) -> Node:
        return await self.reader.parent_of(self.ref(node))

    async def previous_sibling(self, node: RefLike) -> Node:
        return await self.reader.previous_sibling(self.ref(node))

    async def next_sibling(self, node: RefLike) -> Node:
        return await self.reader.next_sibling(self.ref(node))

    async def path_to(self, node: RefLike) -> list[Node]:
        return await self.reader.path_to(self.ref(node))

    # -- Structural changes --

    async def insert(self, name: str, parent: RefLike = None, position: int | None = None) -> Outcome:
        return await self.mutator.insert(name, self.ref(parent), position)

    async def move(self, node: RefLike, new_parent: RefLike) -> Outcome:
        return await self.mutator.move(self.ref(node), self.ref(new_parent))

    async def move_up(self, node: RefLike) -> Outcome:
        return await self.mutator.move_up(self.ref(node))

    async def move_down(self, node: RefLike) -> Outcome:
        return await self.mutator.move_down(self.ref(node))

    async def delete(self, node: RefLike, keep_children: bool = True) -> Outcome:
        return await self.mutator.delete(self.ref(node), keep_children)

    async def delete_subtree(self, node: RefLike) -> Outcome:
        return await self.mutator.delete_subtree(self.ref(node))
