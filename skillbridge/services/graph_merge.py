"""Merge recorded quiz results into a roadmap's nodes."""

from collections.abc import Iterable, Sequence

from skillbridge.schemas.roadmap import QuizResultSignal, RoadmapNode


def passed_node_ids(signals: Iterable[QuizResultSignal]) -> set[str]:
    """Ids with at least one passing signal (OR across duplicates)."""
    return {signal.node_id for signal in signals if signal.passed}


def merge_quiz_results(
    nodes: Sequence[RoadmapNode],
    signals: Iterable[QuizResultSignal],
) -> list[RoadmapNode]:
    """Derive completion flags of ``nodes`` from the full set of ``signals``.

    Every node comes back as a new object with ``quiz_passed`` and
    ``is_completed`` both set to whether its id has a passing signal; all
    other fields are kept. The signal set replaces any flags already on the
    nodes, so a node passed in an earlier merge is reset when the new set no
    longer passes it. Signals for unknown node ids are ignored and output
    order follows ``nodes``.
    """
    passed = passed_node_ids(signals)

    merged = []
    for node in nodes:
        completed = node.id in passed
        data = node.data.model_copy(
            update={"quiz_passed": completed, "is_completed": completed},
            deep=True,
        )
        merged.append(node.model_copy(update={"data": data}, deep=True))
    return merged
