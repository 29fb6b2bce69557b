"""Roadmap graph schemas for API requests and responses.

The graph is exchanged with the frontend (and the generation service) using
camelCase field names; Python code uses the snake_case attribute names.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, model_validator
from pydantic.alias_generators import to_camel


class NodeCategory(str, Enum):
    """How essential a step is to the learning path."""

    CORE = "core"
    OPTIONAL = "optional"
    ADVANCED = "advanced"
    PROJECT = "project"


class NodeStatus(str, Enum):
    """Manual progress marker set by the learner."""

    PENDING = "pending"
    DONE = "done"
    IN_PROGRESS = "in-progress"
    SKIPPED = "skipped"


class EdgeType(str, Enum):
    """Main path vs. side branch."""

    MAIN = "main"
    BRANCH = "branch"


class GraphModel(BaseModel):
    """Base for graph records: camelCase on the wire, unknown fields kept."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class NodeData(GraphModel):
    """Learning content and progress flags of a roadmap step."""

    label: str
    description: str = ""
    resources: list[str] = Field(default_factory=list)
    videos: list[str] | None = None
    category: NodeCategory | None = None
    status: NodeStatus | None = None
    quiz_passed: bool = False
    # Derived from quiz_passed by merge_quiz_results, never set on its own
    is_completed: bool = False
    visited_resources: set[str] = Field(default_factory=set)
    step_number: PositiveInt | None = None
    is_start_node: bool | None = None


class NodePosition(BaseModel):
    x: float = 0.0
    y: float = 0.0


class RoadmapNode(GraphModel):
    """A single roadmap step."""

    id: str
    type: str | None = None
    position: NodePosition | None = None
    data: NodeData


class RoadmapEdge(GraphModel):
    """A directed link between two steps."""

    id: str
    source: str
    target: str
    edge_type: EdgeType | None = None
    label: str | None = None


class RoadmapGraph(GraphModel):
    """Nodes and edges of a roadmap.

    Node ids are unique and every edge endpoint names an existing node.
    """

    title: str = ""
    nodes: list[RoadmapNode] = Field(default_factory=list)
    edges: list[RoadmapEdge] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_references(self) -> "RoadmapGraph":
        validate_graph(self.nodes, self.edges)
        return self


def validate_graph(nodes: list[RoadmapNode], edges: list[RoadmapEdge]) -> None:
    """Raise ValueError on duplicate node/edge ids or dangling edges."""
    node_ids: set[str] = set()
    for node in nodes:
        if node.id in node_ids:
            raise ValueError(f"Duplicate node id: {node.id}")
        node_ids.add(node.id)

    edge_ids: set[str] = set()
    for edge in edges:
        if edge.id in edge_ids:
            raise ValueError(f"Duplicate edge id: {edge.id}")
        edge_ids.add(edge.id)
        for endpoint in (edge.source, edge.target):
            if endpoint not in node_ids:
                raise ValueError(f"Edge {edge.id} references unknown node: {endpoint}")


class QuizResultSignal(GraphModel):
    """Pass/fail fact about one node, as recorded for a user."""

    node_id: str
    passed: bool


class RoadmapCreate(GraphModel):
    """Create a new roadmap."""

    user_id: str
    title: str
    nodes: list[RoadmapNode] = Field(default_factory=list)
    edges: list[RoadmapEdge] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_references(self) -> "RoadmapCreate":
        validate_graph(self.nodes, self.edges)
        return self


class RoadmapUpdate(GraphModel):
    """Update an existing roadmap (user edits)."""

    title: str | None = None
    nodes: list[RoadmapNode] | None = None
    edges: list[RoadmapEdge] | None = None


class RoadmapGenerateRequest(GraphModel):
    """Ask the generation service for a new roadmap."""

    user_id: str
    prompt: str = Field(min_length=1)


class RoadmapResponse(GraphModel):
    """Roadmap response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    title: str
    nodes: list[RoadmapNode]
    edges: list[RoadmapEdge]
    created_at: datetime
    updated_at: datetime


class RoadmapProgress(GraphModel):
    """Roadmap with completion flags merged in for one user."""

    roadmap_id: str
    user_id: str
    title: str
    total_nodes: int
    completed_nodes: int
    progress: int  # percent, 0-100
    nodes: list[RoadmapNode]
    edges: list[RoadmapEdge]
