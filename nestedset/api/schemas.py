"""Request and response schemas for the node endpoints."""

from pydantic import BaseModel, Field

from nestedset.models import Node, Notice, Outcome, TreeEntry

# -- Requests --


class InsertNodeRequest(BaseModel):
    name: str = Field(min_length=1)
    parent_id: int | None = None
    position: int | None = Field(default=None, ge=0)


class MoveNodeRequest(BaseModel):
    parent_id: int


# -- Responses --


class NodeResponse(BaseModel):
    id: int
    name: str
    left: int
    right: int
    group: str | None = None
    descendant_count: int

    @classmethod
    def from_node(cls, node: Node) -> "NodeResponse":
        return cls(
            id=node.id,
            name=node.name,
            left=node.left,
            right=node.right,
            group=node.group,
            descendant_count=node.descendant_count,
        )


class TreeEntryResponse(BaseModel):
    node: NodeResponse
    depth: int

    @classmethod
    def from_entry(cls, entry: TreeEntry) -> "TreeEntryResponse":
        return cls(node=NodeResponse.from_node(entry.node), depth=entry.depth)


class OutcomeResponse(BaseModel):
    node: NodeResponse | None = None
    changed: bool
    notices: list[Notice]

    @classmethod
    def from_outcome(cls, outcome: Outcome) -> "OutcomeResponse":
        return cls(
            node=NodeResponse.from_node(outcome.node) if outcome.node is not None else None,
            changed=outcome.changed,
            notices=outcome.notices,
        )
