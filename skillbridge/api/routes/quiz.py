"""Quiz API routes."""

from fastapi import APIRouter, HTTPException, status

from skillbridge.agent.quiz import generate_quiz
from skillbridge.api.deps import DBDep
from skillbridge.core.exceptions import QuizGenerationError
from skillbridge.core.logging import get_logger
from skillbridge.schemas.quiz import (
    QuizGenerateRequest,
    QuizGenerateResponse,
    QuizResultResponse,
    QuizSubmitRequest,
    QuizSubmitResponse,
)
from skillbridge.schemas.roadmap import QuizResultSignal
from skillbridge.services import quiz_service, roadmap_service, user_service

logger = get_logger(__name__)
router = APIRouter(prefix="/quiz", tags=["quiz"])


@router.post("/generate", response_model=QuizGenerateResponse)
async def generate(data: QuizGenerateRequest) -> dict:
    """Generate multiple choice questions for a roadmap step."""
    try:
        questions = await generate_quiz(data.topic, data.description)
    except QuizGenerationError as e:
        logger.warning("Quiz generation failed", topic=data.topic, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e),
        ) from e
    return QuizGenerateResponse(questions=questions).model_dump(by_alias=True)


@router.post("/submit", response_model=QuizSubmitResponse)
async def submit_quiz(data: QuizSubmitRequest, db: DBDep) -> dict:
    """Grade a quiz and save it as the user's latest result for the node."""
    if not await roadmap_service.get_roadmap(db, data.roadmap_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Roadmap not found",
        )
    if not await user_service.get_user(db, data.user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    record, score = await quiz_service.submit_quiz_result(db, data)
    return QuizSubmitResponse(id=record.id, **score.model_dump()).model_dump(by_alias=True)


@router.get("/result/{roadmap_id}/{node_id}/{user_id}", response_model=QuizResultResponse)
async def get_quiz_result(roadmap_id: str, node_id: str, user_id: str, db: DBDep) -> dict:
    """Get the user's quiz result for a node."""
    result = await quiz_service.get_quiz_result(db, roadmap_id, node_id, user_id)
    if not result:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Quiz result not found",
        )
    return QuizResultResponse.model_validate(result).model_dump(mode="json", by_alias=True)


@router.get("/results/{roadmap_id}/{user_id}", response_model=list[QuizResultSignal])
async def list_quiz_results(roadmap_id: str, user_id: str, db: DBDep) -> list[dict]:
    """Pass/fail signals of the user on every node of a roadmap."""
    signals = await quiz_service.list_quiz_signals(db, roadmap_id, user_id)
    return [s.model_dump(by_alias=True) for s in signals]
