"""Roadmap planner - asks the LLM for a learning roadmap graph."""

from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_core.utils.json import parse_json_markdown
from pydantic import BaseModel, ConfigDict, Field

from skillbridge.agent.llm import get_generation_llm
from skillbridge.core.config import get_settings
from skillbridge.core.exceptions import RoadmapGenerationError
from skillbridge.core.logging import get_logger
from skillbridge.schemas.roadmap import (
    EdgeType,
    NodeCategory,
    NodeData,
    NodeStatus,
    RoadmapEdge,
    RoadmapGraph,
    RoadmapNode,
)

logger = get_logger(__name__)

NODE_TYPES = ("input", "default", "output")


# ============================================================================
# Pydantic Models
# ============================================================================


class GeneratedNodeData(BaseModel):
    description: str = ""
    resources: list[str] = Field(default_factory=list)
    videos: list[str] = Field(default_factory=list)
    category: str | None = None


class GeneratedNode(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    label: str = ""
    type: str = "default"
    data: GeneratedNodeData = Field(default_factory=GeneratedNodeData)


class GeneratedEdge(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True, populate_by_name=True)

    id: str = ""
    source: str
    target: str
    edge_type: str | None = Field(default=None, alias="edgeType")


class RoadmapOutput(BaseModel):
    """Structured output for the roadmap generator."""

    title: str = Field(description="Roadmap title")
    nodes: list[GeneratedNode] = Field(description="Learning steps, beginner to advanced")
    edges: list[GeneratedEdge] = Field(description="Links between steps")


# ============================================================================
# Prompts
# ============================================================================

ROADMAP_SYSTEM_PROMPT = """You are SkillBridge, an AI that creates structured learning roadmaps.

When given a learning goal, generate a roadmap in this EXACT JSON format:
{
  "title": "Roadmap Title",
  "nodes": [
    {
      "id": "1",
      "label": "Step Name",
      "type": "input|default|output",
      "data": {
        "description": "What to learn and why",
        "resources": ["https://resource1.com", "https://resource2.com"],
        "category": "core|optional|advanced|project"
      }
    }
  ],
  "edges": [
    { "id": "e1-2", "source": "1", "target": "2", "edgeType": "main|branch" }
  ]
}

Rules:
- First node should be type "input" (starting point)
- Last node(s) should be type "output" (goal achieved)
- Middle nodes are type "default"
- Maximum {max_nodes} nodes for clarity
- Include real, verified learning resources
- Order nodes from beginner to advanced
- Use edgeType "main" for the core path and "branch" for optional side paths
- Return only JSON, no markdown"""


# ============================================================================
# Normalization
# ============================================================================


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v).strip() for v in value if isinstance(v, str) and v.strip()]


def _enum_value(enum_cls: type, value: Any) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _normalize_nodes(raw_nodes: list, max_nodes: int) -> list[RoadmapNode]:
    nodes: list[RoadmapNode] = []
    seen: set[str] = set()

    for i, raw in enumerate(raw_nodes):
        if not isinstance(raw, dict):
            logger.warning(f"Skipping invalid node at index {i}: not a dict")
            continue
        if raw.get("id") in (None, ""):
            logger.warning(f"Skipping node at index {i}: missing id")
            continue
        node_id = str(raw["id"])
        if node_id in seen:
            logger.warning("Skipping duplicate node", node_id=node_id)
            continue

        data = raw.get("data") if isinstance(raw.get("data"), dict) else {}
        label = raw.get("label") or data.get("label") or f"Step {len(nodes) + 1}"
        videos = _string_list(data.get("videos"))
        node_type = raw.get("type") if raw.get("type") in NODE_TYPES else "default"

        nodes.append(
            RoadmapNode(
                id=node_id,
                type=node_type,
                data=NodeData(
                    label=str(label),
                    description=str(data.get("description") or raw.get("description") or ""),
                    resources=_string_list(data.get("resources")),
                    videos=videos or None,
                    category=_enum_value(NodeCategory, data.get("category")),
                    status=NodeStatus.PENDING,
                ),
            )
        )
        seen.add(node_id)

    if len(nodes) > max_nodes:
        logger.warning("Truncating generated roadmap", nodes=len(nodes), max_nodes=max_nodes)
        nodes = nodes[:max_nodes]

    for step, node in enumerate(nodes, start=1):
        node.data.step_number = step
        node.data.is_start_node = step == 1
    return nodes


def _normalize_edges(raw_edges: Any, node_ids: set[str]) -> list[RoadmapEdge]:
    if not isinstance(raw_edges, list):
        return []

    edges: list[RoadmapEdge] = []
    edge_ids: set[str] = set()
    links: set[tuple[str, str]] = set()

    for raw in raw_edges:
        if not isinstance(raw, dict):
            continue
        source, target = str(raw.get("source", "")), str(raw.get("target", ""))
        if source not in node_ids or target not in node_ids or source == target:
            logger.debug("Dropping edge with unknown endpoint", source=source, target=target)
            continue
        if (source, target) in links:
            continue

        edge_id = str(raw.get("id") or "")
        if not edge_id or edge_id in edge_ids:
            edge_id = f"e{source}-{target}"
        if edge_id in edge_ids:
            continue

        edges.append(
            RoadmapEdge(
                id=edge_id,
                source=source,
                target=target,
                edge_type=_enum_value(EdgeType, raw.get("edgeType") or raw.get("edge_type")),
            )
        )
        edge_ids.add(edge_id)
        links.add((source, target))
    return edges


def normalize_roadmap_payload(payload: Any, max_nodes: int | None = None) -> RoadmapGraph:
    """Turn a generation response into a consistent roadmap graph.

    Invalid, duplicate and surplus nodes are dropped, as are edges touching
    dropped nodes. The first kept node is the start node and steps are
    numbered in order.

    Raises:
        RoadmapGenerationError: If there is no title or no usable node
    """
    if max_nodes is None:
        max_nodes = get_settings().ROADMAP_MAX_NODES

    if not isinstance(payload, dict):
        raise RoadmapGenerationError(f"Roadmap payload must be an object, got {type(payload)}")

    title = payload.get("title")
    if not isinstance(title, str) or not title.strip():
        raise RoadmapGenerationError("Roadmap payload must contain a non-empty 'title' string")

    raw_nodes = payload.get("nodes")
    if not isinstance(raw_nodes, list):
        raise RoadmapGenerationError("'nodes' must be a list")

    nodes = _normalize_nodes(raw_nodes, max_nodes)
    if not nodes:
        raise RoadmapGenerationError("Roadmap payload contains no valid nodes")

    edges = _normalize_edges(payload.get("edges"), {n.id for n in nodes})
    return RoadmapGraph(title=title.strip(), nodes=nodes, edges=edges)


# ============================================================================
# Generation
# ============================================================================


async def generate_roadmap(prompt: str, llm: BaseChatModel | None = None) -> RoadmapGraph:
    """Generate a roadmap graph for a learning goal.

    Tries structured output first and falls back to parsing the raw reply.

    Raises:
        RoadmapGenerationError: If neither attempt yields a usable roadmap
    """
    llm = llm or get_generation_llm()
    max_nodes = get_settings().ROADMAP_MAX_NODES
    messages = [
        SystemMessage(content=ROADMAP_SYSTEM_PROMPT.replace("{max_nodes}", str(max_nodes))),
        HumanMessage(content=f'Create a learning roadmap for: "{prompt}"'),
    ]

    try:
        structured_llm = llm.with_structured_output(RoadmapOutput, method="json_mode")
        result: RoadmapOutput = await structured_llm.ainvoke(messages)
        graph = normalize_roadmap_payload(result.model_dump(by_alias=True), max_nodes)
        logger.info("Roadmap generated", title=graph.title, nodes=len(graph.nodes))
        return graph
    except Exception as structured_error:
        logger.warning(
            "Structured output failed, falling back to manual JSON parsing",
            error=str(structured_error),
        )

    try:
        resp = await llm.ainvoke(messages)
        payload = parse_json_markdown(str(resp.content))
        graph = normalize_roadmap_payload(payload, max_nodes)
    except RoadmapGenerationError:
        raise
    except Exception as e:
        logger.error("Roadmap generation failed", error=str(e), exc_info=True)
        raise RoadmapGenerationError(f"Failed to generate roadmap: {e}") from e

    logger.info("Roadmap generated (fallback)", title=graph.title, nodes=len(graph.nodes))
    return graph
