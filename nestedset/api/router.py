"""FastAPI routes exposing one nested-set tree."""

from fastapi import APIRouter, Depends, HTTPException, status

from nestedset.api.schemas import (
    InsertNodeRequest,
    MoveNodeRequest,
    NodeResponse,
    OutcomeResponse,
    TreeEntryResponse,
)
from nestedset.errors import (
    InvalidDeleteError,
    InvalidMoveError,
    NodeNotFoundError,
    StorageFailureError,
    StructuralAnomalyError,
)
from nestedset.models import ById
from nestedset.tree import NestedSetTree

router = APIRouter(prefix="/api", tags=["tree"])


def get_tree_service() -> NestedSetTree:
    """Dependency placeholder, replaced at app startup."""
    raise RuntimeError("NestedSetTree not initialized")


@router.get("/tree")
async def get_full_tree(
    service: NestedSetTree = Depends(get_tree_service),
) -> list[NodeResponse]:
    try:
        nodes = await service.full_tree()
    except StorageFailureError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return [NodeResponse.from_node(n) for n in nodes]


@router.get("/nodes/{node_id}")
async def get_node(
    node_id: int,
    service: NestedSetTree = Depends(get_tree_service),
) -> NodeResponse:
    try:
        return NodeResponse.from_node(await service.get(ById(id=node_id)))
    except NodeNotFoundError:
        raise HTTPException(status_code=404, detail=f"Node not found: {node_id}")


@router.get("/nodes/{node_id}/subtree")
async def get_subtree(
    node_id: int,
    service: NestedSetTree = Depends(get_tree_service),
) -> list[NodeResponse]:
    try:
        return [NodeResponse.from_node(n) for n in await service.subtree(ById(id=node_id))]
    except NodeNotFoundError:
        raise HTTPException(status_code=404, detail=f"Node not found: {node_id}")


@router.get("/nodes/{node_id}/children")
async def get_children(
    node_id: int,
    service: NestedSetTree = Depends(get_tree_service),
) -> list[TreeEntryResponse]:
    try:
        entries = await service.immediate_children(ById(id=node_id))
    except NodeNotFoundError:
        raise HTTPException(status_code=404, detail=f"Node not found: {node_id}")
    except StructuralAnomalyError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return [TreeEntryResponse.from_entry(entry) for entry in entries]


@router.get("/nodes/{node_id}/path")
async def get_path(
    node_id: int,
    service: NestedSetTree = Depends(get_tree_service),
) -> list[NodeResponse]:
    try:
        return [NodeResponse.from_node(n) for n in await service.path_to(ById(id=node_id))]
    except NodeNotFoundError:
        raise HTTPException(status_code=404, detail=f"Node not found: {node_id}")


@router.post("/nodes", status_code=status.HTTP_201_CREATED)
async def insert_node(
    request: InsertNodeRequest,
    service: NestedSetTree = Depends(get_tree_service),
) -> OutcomeResponse:
    parent = ById(id=request.parent_id) if request.parent_id is not None else None
    try:
        outcome = await service.insert(request.name, parent, request.position)
    except NodeNotFoundError:
        raise HTTPException(status_code=404, detail=f"Parent not found: {request.parent_id}")
    except StructuralAnomalyError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except StorageFailureError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return OutcomeResponse.from_outcome(outcome)


@router.post("/nodes/{node_id}/move")
async def move_node(
    node_id: int,
    request: MoveNodeRequest,
    service: NestedSetTree = Depends(get_tree_service),
) -> OutcomeResponse:
    try:
        outcome = await service.move(ById(id=node_id), ById(id=request.parent_id))
    except NodeNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidMoveError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StorageFailureError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return OutcomeResponse.from_outcome(outcome)


@router.post("/nodes/{node_id}/move-up")
async def move_node_up(
    node_id: int,
    service: NestedSetTree = Depends(get_tree_service),
) -> OutcomeResponse:
    try:
        return OutcomeResponse.from_outcome(await service.move_up(ById(id=node_id)))
    except NodeNotFoundError:
        raise HTTPException(status_code=404, detail=f"Node not found: {node_id}")
    except StructuralAnomalyError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except StorageFailureError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/nodes/{node_id}/move-down")
async def move_node_down(
    node_id: int,
    service: NestedSetTree = Depends(get_tree_service),
) -> OutcomeResponse:
    try:
        return OutcomeResponse.from_outcome(await service.move_down(ById(id=node_id)))
    except NodeNotFoundError:
        raise HTTPException(status_code=404, detail=f"Node not found: {node_id}")
    except StructuralAnomalyError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except StorageFailureError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/nodes/{node_id}")
async def delete_node(
    node_id: int,
    keep_children: bool = True,
    service: NestedSetTree = Depends(get_tree_service),
) -> OutcomeResponse:
    try:
        return OutcomeResponse.from_outcome(await service.delete(ById(id=node_id), keep_children))
    except NodeNotFoundError:
        raise HTTPException(status_code=404, detail=f"Node not found: {node_id}")
    except InvalidDeleteError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StructuralAnomalyError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except StorageFailureError as e:
        raise HTTPException(status_code=500, detail=str(e))
