"""Roadmap API routes."""

from fastapi import APIRouter, HTTPException, status

from skillbridge.agent.planner import generate_roadmap
from skillbridge.api.deps import DBDep
from skillbridge.core.exceptions import RoadmapGenerationError
from skillbridge.core.logging import get_logger
from skillbridge.schemas.roadmap import (
    RoadmapCreate,
    RoadmapGenerateRequest,
    RoadmapProgress,
    RoadmapResponse,
    RoadmapUpdate,
)
from skillbridge.services import roadmap_service, user_service

logger = get_logger(__name__)
router = APIRouter(prefix="/roadmaps", tags=["roadmaps"])


def _to_response(roadmap) -> dict:
    return RoadmapResponse.model_validate(roadmap).model_dump(mode="json", by_alias=True)


async def _require_user(db: DBDep, user_id: str) -> None:
    if not await user_service.get_user(db, user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )


@router.post("", response_model=RoadmapResponse, status_code=status.HTTP_201_CREATED)
async def create_roadmap(data: RoadmapCreate, db: DBDep) -> dict:
    """Create a roadmap from an edited or template graph."""
    await _require_user(db, data.user_id)
    roadmap = await roadmap_service.create_roadmap(db, data)
    return _to_response(roadmap)


@router.post("/generate", response_model=RoadmapResponse, status_code=status.HTTP_201_CREATED)
async def generate(data: RoadmapGenerateRequest, db: DBDep) -> dict:
    """Generate a roadmap with the LLM and save it for the user."""
    await _require_user(db, data.user_id)
    try:
        graph = await generate_roadmap(data.prompt)
    except RoadmapGenerationError as e:
        logger.warning("Roadmap generation failed", user_id=data.user_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e),
        ) from e

    roadmap = await roadmap_service.create_roadmap(
        db,
        RoadmapCreate(
            user_id=data.user_id,
            title=graph.title,
            nodes=graph.nodes,
            edges=graph.edges,
        ),
    )
    return _to_response(roadmap)


@router.get("/user/{user_id}", response_model=list[RoadmapResponse])
async def list_user_roadmaps(user_id: str, db: DBDep) -> list[dict]:
    """List a user's roadmaps."""
    roadmaps = await roadmap_service.list_user_roadmaps(db, user_id)
    return [_to_response(r) for r in roadmaps]


@router.get("/{roadmap_id}", response_model=RoadmapResponse)
async def get_roadmap(roadmap_id: str, db: DBDep) -> dict:
    """Get a roadmap by ID."""
    roadmap = await roadmap_service.get_roadmap(db, roadmap_id)
    if not roadmap:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Roadmap not found",
        )
    return _to_response(roadmap)


@router.put("/{roadmap_id}", response_model=RoadmapResponse)
async def update_roadmap(roadmap_id: str, data: RoadmapUpdate, db: DBDep) -> dict:
    """Update a roadmap (user edits)."""
    try:
        roadmap = await roadmap_service.update_roadmap(db, roadmap_id, data)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        ) from e
    if not roadmap:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Roadmap not found",
        )
    return _to_response(roadmap)


@router.delete("/{roadmap_id}")
async def delete_roadmap(roadmap_id: str, db: DBDep) -> dict:
    """Delete a roadmap."""
    if not await roadmap_service.delete_roadmap(db, roadmap_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Roadmap not found",
        )
    return {"success": True}


@router.get("/{roadmap_id}/progress", response_model=RoadmapProgress)
async def get_roadmap_progress(roadmap_id: str, user_id: str, db: DBDep) -> dict:
    """Get the roadmap with the user's quiz results merged in.

    Completion flags on the returned nodes come from the user's latest quiz
    results only.
    """
    roadmap = await roadmap_service.get_roadmap(db, roadmap_id)
    if not roadmap:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Roadmap not found",
        )

    progress = await roadmap_service.get_roadmap_with_progress(db, roadmap, user_id)
    return progress.model_dump(mode="json", by_alias=True)
