"""Quiz grading and result storage."""

import math

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from skillbridge.core.config import get_settings
from skillbridge.core.logging import get_logger
from skillbridge.models.quiz import QuizResult
from skillbridge.schemas.quiz import QuizQuestion, QuizScore, QuizSubmitRequest
from skillbridge.schemas.roadmap import QuizResultSignal

logger = get_logger(__name__)


# ============================================================================
# Grading
# ============================================================================


def round_percent(part: int, total: int) -> int:
    """Whole percentage, halves rounded up (0 when total is 0)."""
    if total <= 0:
        return 0
    return math.floor(part * 100 / total + 0.5)


def score_quiz(
    answers: list[int],
    questions: list[QuizQuestion],
    passing_percentage: float | None = None,
) -> QuizScore:
    """Grade answers against questions.

    Unanswered questions count as wrong. Passing needs a correct ratio of at
    least ``passing_percentage`` (default from settings, 0.9).
    """
    if not questions:
        raise ValueError("A quiz needs at least one question")
    if passing_percentage is None:
        passing_percentage = get_settings().QUIZ_PASSING_PERCENTAGE

    correct = sum(
        1 for i, q in enumerate(questions) if i < len(answers) and answers[i] == q.correct_index
    )
    total = len(questions)
    ratio = correct / total
    passed = ratio >= passing_percentage

    if passed:
        message = "Congratulations! You passed the quiz!"
    else:
        required = math.ceil(total * passing_percentage)
        message = f"You need {required} correct answers to pass."

    return QuizScore(
        score=correct,
        total_questions=total,
        percentage=round_percent(correct, total),
        passed=passed,
        message=message,
    )


# ============================================================================
# Storage
# ============================================================================


async def get_quiz_result(
    db: AsyncSession,
    roadmap_id: str,
    node_id: str,
    user_id: str,
) -> QuizResult | None:
    result = await db.execute(
        select(QuizResult).where(
            QuizResult.roadmap_id == roadmap_id,
            QuizResult.node_id == node_id,
            QuizResult.user_id == user_id,
        )
    )
    return result.scalar_one_or_none()


async def submit_quiz_result(
    db: AsyncSession,
    submission: QuizSubmitRequest,
) -> tuple[QuizResult, QuizScore]:
    """Grade a submission and store it as the user's result for the node.

    A later attempt replaces the earlier one, so the stored result is always
    the latest attempt (and may turn a pass into a fail).

    Note: This function commits the transaction.
    """
    score = score_quiz(submission.answers, submission.questions)
    questions = [q.model_dump(by_alias=True) for q in submission.questions]

    existing = await get_quiz_result(
        db, submission.roadmap_id, submission.node_id, submission.user_id
    )
    if existing:
        existing.score = score.score
        existing.total_questions = score.total_questions
        existing.passed = score.passed
        existing.answers = list(submission.answers)
        existing.questions = questions
        record = existing
    else:
        record = QuizResult(
            roadmap_id=submission.roadmap_id,
            node_id=submission.node_id,
            user_id=submission.user_id,
            score=score.score,
            total_questions=score.total_questions,
            passed=score.passed,
            answers=list(submission.answers),
            questions=questions,
        )
        db.add(record)

    await db.commit()
    await db.refresh(record)

    logger.info(
        "Quiz result saved",
        roadmap_id=submission.roadmap_id,
        node_id=submission.node_id,
        user_id=submission.user_id,
        score=score.score,
        passed=score.passed,
        replaced=existing is not None,
    )
    return record, score


async def list_quiz_results(
    db: AsyncSession,
    user_id: str,
    roadmap_id: str | None = None,
) -> list[QuizResult]:
    """List a user's quiz results, optionally for one roadmap."""
    query = select(QuizResult).where(QuizResult.user_id == user_id)
    if roadmap_id is not None:
        query = query.where(QuizResult.roadmap_id == roadmap_id)
    result = await db.execute(query.order_by(QuizResult.id))
    return list(result.scalars().all())


async def list_quiz_signals(
    db: AsyncSession,
    roadmap_id: str,
    user_id: str,
) -> list[QuizResultSignal]:
    """Fetch the pass/fail signals of a user on a roadmap."""
    result = await db.execute(
        select(QuizResult.node_id, QuizResult.passed).where(
            QuizResult.roadmap_id == roadmap_id,
            QuizResult.user_id == user_id,
        )
    )
    return [QuizResultSignal(node_id=node_id, passed=passed) for node_id, passed in result.all()]


async def list_roadmap_quiz_results(db: AsyncSession, roadmap_id: str) -> list[QuizResult]:
    """All users' results on a roadmap."""
    result = await db.execute(select(QuizResult).where(QuizResult.roadmap_id == roadmap_id))
    return list(result.scalars().all())
