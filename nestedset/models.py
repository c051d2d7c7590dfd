"""Canonical value types for nested-set nodes, node references and operation results.

Everything here is immutable. Operations return fresh values instead of
mutating a shared "current node", so every phase of a structural change hands
the next phase an explicit interval.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


class Node(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    left: int
    right: int
    group: str | None = None

    @property
    def width(self) -> int:
        """Span of the interval, ``2 * (descendants + 1)``."""
        return self.right - self.left + 1

    @property
    def descendant_count(self) -> int:
        return descendant_count(self.left, self.right)

    @property
    def is_leaf(self) -> bool:
        return self.right - self.left == 1

    def contains(self, other: "Node") -> bool:
        """True when ``other`` is a strict descendant of this node."""
        return self.left < other.left and other.right < self.right


def descendant_count(left: int, right: int) -> int:
    """Number of descendants (all depths) of a node with this interval."""
    return (right - left - 1) // 2


class TreeEntry(BaseModel):
    """A node tagged with its depth relative to the node a query started from."""

    model_config = ConfigDict(frozen=True)

    node: Node
    depth: int


# ---------------------------------------------------------------------------
# Node references: ById | ByName | Resolved
# ---------------------------------------------------------------------------


class ById(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["id"] = "id"
    id: int


class ByName(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["name"] = "name"
    name: str


class Resolved(BaseModel):
    """A node the caller already holds. Mutations re-read it by id before use."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["resolved"] = "resolved"
    node: Node


NodeRef = ById | ByName | Resolved


def as_ref(value: "NodeRef | Node | int | str | None", root_name: str) -> NodeRef:
    """Wrap a loose caller value in a NodeRef. ``None`` means the root."""
    if isinstance(value, (ById, ByName, Resolved)):
        return value
    if isinstance(value, Node):
        return Resolved(node=value)
    if value is None:
        return ByName(name=root_name)
    # bool is an int subclass; never a valid id
    if isinstance(value, int) and not isinstance(value, bool):
        return ById(id=value)
    if isinstance(value, str):
        return ByName(name=value)
    raise TypeError(f"cannot reference a node with {type(value).__name__}")


# ---------------------------------------------------------------------------
# Non-fatal outcomes
# ---------------------------------------------------------------------------

NoticeCode = Literal["ambiguous_match", "already_first", "already_last", "same_parent"]


class Notice(BaseModel):
    """A condition worth reporting that does not abort the operation."""

    model_config = ConfigDict(frozen=True)

    code: NoticeCode
    message: str


class Resolution(BaseModel):
    """A resolved node plus any notices raised while resolving it."""

    model_config = ConfigDict(frozen=True)

    node: Node
    notices: list[Notice] = Field(default_factory=list)


class Outcome(BaseModel):
    """Result of a structural operation.

    ``changed`` is False for no-ops (already first/last sibling, move to the
    current parent); the reason is in ``notices``. ``node`` is the affected
    node as it is stored after the operation, or None once deleted.
    """

    model_config = ConfigDict(frozen=True)

    node: Node | None
    changed: bool = True
    notices: list[Notice] = Field(default_factory=list)
