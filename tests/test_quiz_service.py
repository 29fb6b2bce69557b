"""Tests for quiz grading and result storage."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from skillbridge.models import Roadmap, User
from skillbridge.schemas.quiz import QuizQuestion, QuizSubmitRequest
from skillbridge.schemas.roadmap import QuizResultSignal
from skillbridge.services import quiz_service


def _questions(n: int = 5) -> list[QuizQuestion]:
    return [
        QuizQuestion(
            question=f"Question {i}?",
            options=["A", "B", "C", "D"],
            correct_index=i % 4,
            explanation="Because.",
        )
        for i in range(n)
    ]


def _all_correct(n: int = 5) -> list[int]:
    return [i % 4 for i in range(n)]


class TestScoreQuiz:
    def test_all_correct_passes(self):
        score = quiz_service.score_quiz(_all_correct(), _questions())
        assert score.score == 5
        assert score.total_questions == 5
        assert score.percentage == 100
        assert score.passed is True
        assert "passed" in score.message

    def test_four_of_five_fails(self):
        answers = _all_correct()
        answers[0] = 3
        score = quiz_service.score_quiz(answers, _questions())
        assert score.score == 4
        assert score.percentage == 80
        assert score.passed is False
        assert score.message == "You need 5 correct answers to pass."

    def test_exactly_ninety_percent_passes(self):
        answers = _all_correct(10)
        answers[9] = (answers[9] + 1) % 4
        score = quiz_service.score_quiz(answers, _questions(10))
        assert score.score == 9
        assert score.passed is True

    def test_missing_answers_count_as_wrong(self):
        score = quiz_service.score_quiz([0, 1], _questions())
        assert score.score == 2
        assert score.percentage == 40

    def test_custom_passing_percentage(self):
        answers = _all_correct()
        answers[0] = 3
        assert quiz_service.score_quiz(answers, _questions(), passing_percentage=0.8).passed

    def test_no_questions(self):
        with pytest.raises(ValueError):
            quiz_service.score_quiz([], [])

    def test_round_percent(self):
        assert quiz_service.round_percent(1, 3) == 33
        assert quiz_service.round_percent(2, 3) == 67
        assert quiz_service.round_percent(1, 8) == 13
        assert quiz_service.round_percent(0, 0) == 0


def _submission(roadmap: Roadmap, user: User, node_id: str, answers: list[int]) -> QuizSubmitRequest:
    return QuizSubmitRequest(
        roadmap_id=roadmap.id,
        node_id=node_id,
        user_id=user.id,
        answers=answers,
        questions=_questions(),
    )


@pytest.fixture
def wrong_answers() -> list[int]:
    return [(a + 1) % 4 for a in _all_correct()]


@pytest.mark.asyncio
async def test_submit_and_get_result(
    test_session: AsyncSession, seed_user: User, seed_roadmap: Roadmap
) -> None:
    record, score = await quiz_service.submit_quiz_result(
        test_session, _submission(seed_roadmap, seed_user, "n1", _all_correct())
    )
    assert record.id is not None
    assert record.passed is True
    assert score.passed is True

    fetched = await quiz_service.get_quiz_result(test_session, seed_roadmap.id, "n1", seed_user.id)
    assert fetched is not None
    assert fetched.score == 5
    assert fetched.questions[0]["correctIndex"] == 0


@pytest.mark.asyncio
async def test_resubmit_replaces_result(
    test_session: AsyncSession, seed_user: User, seed_roadmap: Roadmap, wrong_answers: list[int]
) -> None:
    first, _ = await quiz_service.submit_quiz_result(
        test_session, _submission(seed_roadmap, seed_user, "n1", _all_correct())
    )
    second, score = await quiz_service.submit_quiz_result(
        test_session, _submission(seed_roadmap, seed_user, "n1", wrong_answers)
    )

    assert second.id == first.id
    assert score.passed is False
    results = await quiz_service.list_quiz_results(test_session, seed_user.id, seed_roadmap.id)
    assert len(results) == 1
    assert results[0].passed is False


@pytest.mark.asyncio
async def test_list_quiz_signals(
    test_session: AsyncSession, seed_user: User, seed_roadmap: Roadmap, wrong_answers: list[int]
) -> None:
    await quiz_service.submit_quiz_result(
        test_session, _submission(seed_roadmap, seed_user, "n1", _all_correct())
    )
    await quiz_service.submit_quiz_result(
        test_session, _submission(seed_roadmap, seed_user, "n2", wrong_answers)
    )

    signals = await quiz_service.list_quiz_signals(test_session, seed_roadmap.id, seed_user.id)
    assert sorted(signals, key=lambda s: s.node_id) == [
        QuizResultSignal(node_id="n1", passed=True),
        QuizResultSignal(node_id="n2", passed=False),
    ]

    other = await quiz_service.list_quiz_signals(test_session, seed_roadmap.id, "someone-else")
    assert other == []
