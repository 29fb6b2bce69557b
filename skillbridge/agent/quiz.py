"""Quiz generator - asks the LLM for multiple choice questions on a step."""

from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_core.utils.json import parse_json_markdown
from pydantic import BaseModel, ConfigDict, Field

from skillbridge.agent.llm import get_generation_llm
from skillbridge.core.exceptions import QuizGenerationError
from skillbridge.core.logging import get_logger
from skillbridge.schemas.quiz import QuizQuestion

logger = get_logger(__name__)

QUESTION_COUNT = 5
OPTION_COUNT = 4
DEFAULT_EXPLANATION = "No explanation provided"


class GeneratedQuestion(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question: str = ""
    options: list[str] = Field(default_factory=list)
    correct_index: int | None = Field(default=None, alias="correctIndex")
    explanation: str = ""


class QuizOutput(BaseModel):
    """Structured output for the quiz generator."""

    questions: list[GeneratedQuestion] = Field(
        description=f"Exactly {QUESTION_COUNT} multiple choice questions"
    )


QUIZ_SYSTEM_PROMPT = f"""You are an expert quiz generator. Generate exactly {QUESTION_COUNT} multiple choice questions to test understanding of the given topic.

Rules:
1. Each question has exactly {OPTION_COUNT} options
2. Only ONE option is correct
3. Test understanding, not memorization
4. Give a brief explanation of why the correct answer is right
5. Order questions from easy to hard

Return only JSON in this EXACT format:
{{
  "questions": [
    {{
      "question": "The question text?",
      "options": ["Option A", "Option B", "Option C", "Option D"],
      "correctIndex": 0,
      "explanation": "Why this is correct"
    }}
  ]
}}

correctIndex is 0-based. No markdown."""


def normalize_quiz_payload(payload: Any) -> list[QuizQuestion]:
    """Check a generation response and turn it into quiz questions.

    Extra questions beyond the first five are dropped. A missing explanation
    gets a placeholder.

    Raises:
        QuizGenerationError: If there are too few questions or any question
            is malformed
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("questions"), list):
        raise QuizGenerationError("Quiz payload must contain a 'questions' list")

    raw_questions = payload["questions"]
    if len(raw_questions) < QUESTION_COUNT:
        raise QuizGenerationError(
            f"Expected {QUESTION_COUNT} questions, got {len(raw_questions)}"
        )
    if len(raw_questions) > QUESTION_COUNT:
        logger.warning("Truncating generated quiz", questions=len(raw_questions))

    questions: list[QuizQuestion] = []
    for i, raw in enumerate(raw_questions[:QUESTION_COUNT]):
        if not isinstance(raw, dict) or not raw.get("question"):
            raise QuizGenerationError(f"Invalid question at index {i}")

        options = raw.get("options")
        if not isinstance(options, list) or len(options) != OPTION_COUNT:
            raise QuizGenerationError(f"Question {i} must have exactly {OPTION_COUNT} options")

        correct_index = raw.get("correctIndex", raw.get("correct_index"))
        # bool is an int subclass
        if isinstance(correct_index, bool) or not isinstance(correct_index, int):
            raise QuizGenerationError(f"Invalid correctIndex at question {i}")
        if not 0 <= correct_index < OPTION_COUNT:
            raise QuizGenerationError(f"Invalid correctIndex at question {i}")

        questions.append(
            QuizQuestion(
                question=str(raw["question"]),
                options=[str(o) for o in options],
                correct_index=correct_index,
                explanation=str(raw.get("explanation") or DEFAULT_EXPLANATION),
            )
        )
    return questions


async def generate_quiz(
    topic: str,
    description: str | None = None,
    llm: BaseChatModel | None = None,
) -> list[QuizQuestion]:
    """Generate quiz questions for a roadmap step.

    Raises:
        QuizGenerationError: If neither structured output nor the raw reply
            yields a valid quiz
    """
    llm = llm or get_generation_llm()
    user_prompt = f'Generate a quiz about "{topic}"'
    if description:
        user_prompt += f". Context: {description}"
    messages = [SystemMessage(content=QUIZ_SYSTEM_PROMPT), HumanMessage(content=user_prompt)]

    try:
        structured_llm = llm.with_structured_output(QuizOutput, method="json_mode")
        result: QuizOutput = await structured_llm.ainvoke(messages)
        questions = normalize_quiz_payload(result.model_dump(by_alias=True))
        logger.info("Quiz generated", topic=topic, questions=len(questions))
        return questions
    except Exception as structured_error:
        logger.warning(
            "Structured output failed, falling back to manual JSON parsing",
            topic=topic,
            error=str(structured_error),
        )

    try:
        resp = await llm.ainvoke(messages)
        questions = normalize_quiz_payload(parse_json_markdown(str(resp.content)))
    except QuizGenerationError:
        raise
    except Exception as e:
        logger.error("Quiz generation failed", topic=topic, error=str(e), exc_info=True)
        raise QuizGenerationError(f"Failed to generate quiz: {e}") from e

    logger.info("Quiz generated (fallback)", topic=topic, questions=len(questions))
    return questions
