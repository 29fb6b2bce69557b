"""Tests for roadmap and quiz request schemas."""

import pytest
from pydantic import ValidationError

from skillbridge.schemas.quiz import QuizSubmitRequest
from skillbridge.schemas.roadmap import NodeStatus, RoadmapCreate, RoadmapGraph, RoadmapNode


def _graph(nodes, edges):
    return {"title": "G", "nodes": nodes, "edges": edges}


def _raw_node(node_id):
    return {"id": node_id, "data": {"label": node_id}}


def test_node_parses_camel_case():
    node = RoadmapNode.model_validate(
        {
            "id": "n1",
            "data": {
                "label": "Basics",
                "quizPassed": True,
                "isCompleted": True,
                "visitedResources": ["a", "a", "b"],
                "stepNumber": 2,
                "status": "in-progress",
            },
        }
    )

    assert node.data.quiz_passed is True
    assert node.data.visited_resources == {"a", "b"}
    assert node.data.step_number == 2
    assert node.data.status is NodeStatus.IN_PROGRESS


def test_node_dumps_camel_case_and_keeps_extras():
    node = RoadmapNode.model_validate(
        {"id": "n1", "data": {"label": "Basics", "color": "red"}, "selected": True}
    )

    dumped = node.model_dump(mode="json", by_alias=True, exclude_none=True)

    assert dumped["selected"] is True
    assert dumped["data"]["color"] == "red"
    assert dumped["data"]["quizPassed"] is False
    assert "quiz_passed" not in dumped["data"]


def test_step_number_must_be_positive():
    with pytest.raises(ValidationError):
        RoadmapNode.model_validate({"id": "n1", "data": {"label": "x", "stepNumber": 0}})


def test_graph_rejects_duplicate_node_ids():
    with pytest.raises(ValidationError, match="Duplicate node id"):
        RoadmapGraph.model_validate(_graph([_raw_node("a"), _raw_node("a")], []))


def test_graph_rejects_duplicate_edge_ids():
    edges = [
        {"id": "e", "source": "a", "target": "b"},
        {"id": "e", "source": "b", "target": "a"},
    ]
    with pytest.raises(ValidationError, match="Duplicate edge id"):
        RoadmapGraph.model_validate(_graph([_raw_node("a"), _raw_node("b")], edges))


def test_graph_rejects_dangling_edges():
    edges = [{"id": "e", "source": "a", "target": "ghost"}]
    with pytest.raises(ValidationError, match="unknown node: ghost"):
        RoadmapCreate.model_validate({"userId": "u1", **_graph([_raw_node("a")], edges)})


def test_quiz_submit_rejects_out_of_range_correct_index():
    with pytest.raises(ValidationError, match="Invalid correctIndex"):
        QuizSubmitRequest.model_validate(
            {
                "roadmapId": "r",
                "nodeId": "n",
                "userId": "u",
                "answers": [0],
                "questions": [{"question": "Q", "options": ["A", "B"], "correctIndex": 2}],
            }
        )


def test_quiz_submit_requires_questions():
    with pytest.raises(ValidationError):
        QuizSubmitRequest(roadmap_id="r", node_id="n", user_id="u", answers=[], questions=[])
