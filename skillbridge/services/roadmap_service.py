"""Roadmap service for CRUD operations and progress tracking."""

from pydantic import TypeAdapter
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from skillbridge.core.logging import get_logger
from skillbridge.models.roadmap import Roadmap
from skillbridge.schemas.roadmap import (
    QuizResultSignal,
    RoadmapCreate,
    RoadmapEdge,
    RoadmapGraph,
    RoadmapNode,
    RoadmapProgress,
    RoadmapUpdate,
    validate_graph,
)
from skillbridge.schemas.user import (
    RoadmapProgressSummary,
    UserProgressResponse,
    UserProgressStats,
)
from skillbridge.services import learning_time_service, quiz_service
from skillbridge.services.graph_merge import merge_quiz_results

logger = get_logger(__name__)

_nodes_adapter = TypeAdapter(list[RoadmapNode])
_edges_adapter = TypeAdapter(list[RoadmapEdge])


# ============================================================================
# Graph (de)serialization
# ============================================================================


def dump_nodes(nodes: list[RoadmapNode]) -> list[dict]:
    return [n.model_dump(mode="json", by_alias=True, exclude_none=True) for n in nodes]


def dump_edges(edges: list[RoadmapEdge]) -> list[dict]:
    return [e.model_dump(mode="json", by_alias=True, exclude_none=True) for e in edges]


def load_graph(roadmap: Roadmap) -> RoadmapGraph:
    """Parse the stored JSON graph of a roadmap."""
    return RoadmapGraph(
        title=roadmap.title,
        nodes=_nodes_adapter.validate_python(roadmap.nodes or []),
        edges=_edges_adapter.validate_python(roadmap.edges or []),
    )


# ============================================================================
# Progress Calculation
# ============================================================================


def calc_roadmap_progress(nodes: list[RoadmapNode]) -> tuple[int, int, int]:
    """Count completed nodes of a merged node list.

    Returns:
        (completed_nodes, total_nodes, progress percent 0-100)
    """
    total = len(nodes)
    completed = sum(1 for n in nodes if n.data.is_completed)
    return completed, total, quiz_service.round_percent(completed, total)


async def get_roadmap_with_progress(
    db: AsyncSession,
    roadmap: Roadmap,
    user_id: str,
) -> RoadmapProgress:
    """Merge the user's latest quiz results into the roadmap graph.

    Args:
        db: Database session
        roadmap: Roadmap model
        user_id: Learner whose quiz results are merged

    Returns:
        Graph with derived completion flags and progress counts
    """
    graph = load_graph(roadmap)
    signals = await quiz_service.list_quiz_signals(db, roadmap.id, user_id)
    nodes = merge_quiz_results(graph.nodes, signals)
    completed, total, progress = calc_roadmap_progress(nodes)

    logger.debug(
        "Roadmap progress merged",
        roadmap_id=roadmap.id,
        user_id=user_id,
        signals=len(signals),
        completed=completed,
        total=total,
    )
    return RoadmapProgress(
        roadmap_id=roadmap.id,
        user_id=user_id,
        title=roadmap.title,
        total_nodes=total,
        completed_nodes=completed,
        progress=progress,
        nodes=nodes,
        edges=graph.edges,
    )


async def get_user_progress_summary(
    db: AsyncSession,
    user_id: str,
) -> UserProgressResponse | None:
    """Progress of every roadmap a user owns plus quiz and time totals.

    Returns None if the user does not exist.
    """
    learning_minutes = await learning_time_service.get_learning_minutes(db, user_id)
    if learning_minutes is None:
        return None

    roadmaps = await list_user_roadmaps(db, user_id)
    results = await quiz_service.list_quiz_results(db, user_id)

    signals_by_roadmap: dict[str, list[QuizResultSignal]] = {}
    for r in results:
        signals_by_roadmap.setdefault(r.roadmap_id, []).append(
            QuizResultSignal(node_id=r.node_id, passed=r.passed)
        )

    summaries = []
    for roadmap in roadmaps:
        graph = load_graph(roadmap)
        nodes = merge_quiz_results(graph.nodes, signals_by_roadmap.get(roadmap.id, []))
        completed, total, progress = calc_roadmap_progress(nodes)
        summaries.append(
            RoadmapProgressSummary(
                id=roadmap.id,
                title=roadmap.title,
                total_nodes=total,
                completed_nodes=completed,
                progress=progress,
            )
        )

    total_nodes = sum(s.total_nodes for s in summaries)
    completed_nodes = sum(s.completed_nodes for s in summaries)

    return UserProgressResponse(
        user_id=user_id,
        roadmaps=summaries,
        stats=UserProgressStats(
            total_roadmaps=len(summaries),
            total_nodes=total_nodes,
            completed_nodes=completed_nodes,
            overall_progress=quiz_service.round_percent(completed_nodes, total_nodes),
            total_quizzes_passed=sum(1 for r in results if r.passed),
            total_quizzes_taken=len(results),
            learning_minutes=learning_minutes,
        ),
    )


# ============================================================================
# CRUD Operations
# ============================================================================


async def create_roadmap(
    db: AsyncSession,
    roadmap_data: RoadmapCreate,
) -> Roadmap:
    """Create a new roadmap.

    Note: This function commits the transaction.
    """
    roadmap = Roadmap(
        user_id=roadmap_data.user_id,
        title=roadmap_data.title,
        nodes=dump_nodes(roadmap_data.nodes),
        edges=dump_edges(roadmap_data.edges),
    )
    db.add(roadmap)
    await db.commit()
    await db.refresh(roadmap)

    logger.info(
        "Roadmap created",
        roadmap_id=roadmap.id,
        user_id=roadmap.user_id,
        nodes=len(roadmap_data.nodes),
        edges=len(roadmap_data.edges),
    )
    return roadmap


async def get_roadmap(
    db: AsyncSession,
    roadmap_id: str,
) -> Roadmap | None:
    """Get a roadmap by ID."""
    return await db.get(Roadmap, roadmap_id)


async def list_user_roadmaps(
    db: AsyncSession,
    user_id: str,
) -> list[Roadmap]:
    """List a user's roadmaps, most recently updated first."""
    result = await db.execute(
        select(Roadmap).where(Roadmap.user_id == user_id).order_by(Roadmap.updated_at.desc())
    )
    return list(result.scalars().all())


async def update_roadmap(
    db: AsyncSession,
    roadmap_id: str,
    update_data: RoadmapUpdate,
) -> Roadmap | None:
    """Update a roadmap (user edits).

    Nodes and edges may be replaced separately; the resulting graph must
    still be consistent.

    Returns:
        Updated roadmap or None if not found

    Raises:
        ValueError: If the edited graph has duplicate ids or dangling edges

    Note: This function commits the transaction.
    """
    roadmap = await db.get(Roadmap, roadmap_id)
    if not roadmap:
        return None

    if update_data.nodes is not None or update_data.edges is not None:
        current = load_graph(roadmap)
        nodes = update_data.nodes if update_data.nodes is not None else current.nodes
        edges = update_data.edges if update_data.edges is not None else current.edges
        validate_graph(nodes, edges)
        roadmap.nodes = dump_nodes(nodes)
        roadmap.edges = dump_edges(edges)
    if update_data.title is not None:
        roadmap.title = update_data.title

    await db.commit()
    await db.refresh(roadmap)

    logger.info("Roadmap updated", roadmap_id=roadmap_id)
    return roadmap


async def delete_roadmap(
    db: AsyncSession,
    roadmap_id: str,
) -> bool:
    """Delete a roadmap and its quiz results.

    Note: This function commits the transaction.
    """
    roadmap = await db.get(Roadmap, roadmap_id)
    if not roadmap:
        return False

    for result in await quiz_service.list_roadmap_quiz_results(db, roadmap_id):
        await db.delete(result)
    await db.delete(roadmap)
    await db.commit()

    logger.info("Roadmap deleted", roadmap_id=roadmap_id)
    return True
