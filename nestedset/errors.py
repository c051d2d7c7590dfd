"""Exceptions raised by the nested-set engine.

Recoverable lookup failures, rejected operations, corrupted structure and
storage failures each get their own type so the hosting application can map
them separately.
"""


class NestedSetError(Exception):
    """Base class for every error raised by nestedset."""


class NodeNotFoundError(NestedSetError):
    def __init__(self, ref: object) -> None:
        self.ref = ref
        super().__init__(f"Node not found: {ref}")


class InvalidMoveError(NestedSetError):
    def __init__(self, node_id: int, target_id: int, reason: str) -> None:
        self.node_id = node_id
        self.target_id = target_id
        super().__init__(f"Cannot move node {node_id} under {target_id}: {reason}")


class InvalidDeleteError(NestedSetError):
    def __init__(self, node_id: int, reason: str) -> None:
        self.node_id = node_id
        super().__init__(f"Cannot delete node {node_id}: {reason}")


class StructuralAnomalyError(NestedSetError):
    """The stored intervals contradict each other. Not repaired automatically."""

    def __init__(self, node_id: int | None, detail: str) -> None:
        self.node_id = node_id
        super().__init__(f"Structural anomaly at node {node_id}: {detail}")


class StorageFailureError(NestedSetError):
    """A transaction failed and was rolled back. The cause is chained."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Storage failure: {detail}")
