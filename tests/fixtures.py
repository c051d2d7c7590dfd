"""Shared test helpers: tree builders, invariant checks and a reference model."""

from nestedset.config import TreeConfig
from nestedset.models import Node
from nestedset.tree.service import NestedSetTree

FOREST_CONFIG = TreeConfig(group_column="tree_key", group_value="alpha")

# root
# ├── A
# │   ├── A1
# │   └── A2
# ├── B
# │   └── B1
# └── C
STANDARD_LAYOUT: dict = {"A": {"A1": {}, "A2": {}}, "B": {"B1": {}}, "C": {}}

STANDARD_INTERVALS = {
    "root": (1, 14),
    "A": (2, 7),
    "A1": (3, 4),
    "A2": (5, 6),
    "B": (8, 11),
    "B1": (9, 10),
    "C": (12, 13),
}


async def build_tree(tree: NestedSetTree, layout: dict) -> dict[str, Node]:
    """Insert ``layout`` (nested name -> children dicts) under the root, appending in order.

    Returns the stored nodes by name after all inserts.
    """
    root = await tree.root()
    ids = {root.name: root.id}

    async def add(parent: str, children: dict) -> None:
        for name, grandchildren in children.items():
            outcome = await tree.insert(name, ids[parent])
            ids[name] = outcome.node.id
            await add(name, grandchildren)

    await add(root.name, layout)
    return await nodes_by_name(tree)


async def nodes_by_name(tree: NestedSetTree) -> dict[str, Node]:
    rows = await tree.table.fetch_all()
    return {n.name: n for n in rows}


async def intervals(tree: NestedSetTree) -> dict[str, tuple[int, int]]:
    """Current (left, right) of every node in the tree, by name."""
    return {name: (n.left, n.right) for name, n in (await nodes_by_name(tree)).items()}


def assert_valid_nested_set(nodes: list[Node]) -> None:
    """Check every structural invariant of a complete nested set."""
    if not nodes:
        return
    values = sorted(v for n in nodes for v in (n.left, n.right))
    assert values == list(range(1, 2 * len(nodes) + 1)), f"values not contiguous: {values}"

    roots = []
    for a in nodes:
        assert a.left < a.right, f"{a.name}: left >= right"
        assert (a.right - a.left) % 2 == 1, f"{a.name}: even width"
        contained = 0
        enclosing = 0
        for b in nodes:
            if a.id == b.id:
                continue
            disjoint = a.right < b.left or b.right < a.left
            assert disjoint or a.contains(b) or b.contains(a), f"{a.name} overlaps {b.name}"
            contained += a.contains(b)
            enclosing += b.contains(a)
        assert contained == a.descendant_count, f"{a.name}: wrong descendant count"
        if enclosing == 0:
            roots.append(a)
    assert len(roots) == 1, f"expected exactly one root, got {[r.name for r in roots]}"


class TreeModel:
    """Plain parent/children lists mirroring what the nested set should hold."""

    def __init__(self, root: str = "root") -> None:
        self.root = root
        self.children: dict[str, list[str]] = {root: []}

    @classmethod
    def from_layout(cls, layout: dict, root: str = "root") -> "TreeModel":
        model = cls(root)

        def add(parent: str, children: dict) -> None:
            for name, grandchildren in children.items():
                model.insert(name, parent)
                add(name, grandchildren)

        add(root, layout)
        return model

    def names(self) -> list[str]:
        return list(self.children)

    def parent(self, name: str) -> str | None:
        for parent, kids in self.children.items():
            if name in kids:
                return parent
        return None

    def descendants(self, name: str) -> list[str]:
        out = []
        for child in self.children[name]:
            out.append(child)
            out.extend(self.descendants(child))
        return out

    def insert(self, name: str, parent: str, position: int | None = None) -> None:
        kids = self.children[parent]
        index = len(kids) if position is None else min(position, len(kids))
        kids.insert(index, name)
        self.children[name] = []

    def move(self, name: str, new_parent: str) -> None:
        old = self.parent(name)
        if old == new_parent:
            return
        self.children[old].remove(name)
        self.children[new_parent].insert(0, name)

    def move_up(self, name: str) -> None:
        kids = self.children.get(self.parent(name), [])
        i = kids.index(name) if name in kids else 0
        if i > 0:
            kids[i - 1], kids[i] = kids[i], kids[i - 1]

    def move_down(self, name: str) -> None:
        kids = self.children.get(self.parent(name), [])
        i = kids.index(name) if name in kids else len(kids) - 1
        if 0 <= i < len(kids) - 1:
            kids[i + 1], kids[i] = kids[i], kids[i + 1]

    def delete(self, name: str, keep_children: bool = True) -> None:
        parent = self.parent(name)
        kids = self.children[parent]
        i = kids.index(name)
        if keep_children:
            kids[i:i + 1] = self.children.pop(name)
        else:
            for gone in self.descendants(name):
                del self.children[gone]
            del self.children[name]
            kids.pop(i)

    def intervals(self) -> dict[str, tuple[int, int]]:
        """Nested-set numbering of the model by preorder traversal."""
        out: dict[str, tuple[int, int]] = {}
        counter = 0

        def visit(name: str) -> None:
            nonlocal counter
            counter += 1
            left = counter
            for child in self.children[name]:
                visit(child)
            counter += 1
            out[name] = (left, counter)

        visit(self.root)
        return out
