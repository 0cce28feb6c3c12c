"""
Quiz generation and submission API endpoints
"""
from fastapi import APIRouter, Depends, Request, Response
import logging
from typing import List

from mintquiz.schemas.quiz import (
    ErrorResponse,
    QuizQuestion,
    QuizSubmission,
    SubmissionResult,
)
from mintquiz.services.quiz_service import QuizService


router = APIRouter(prefix="/api/quiz", tags=["quiz"])
logger = logging.getLogger(__name__)

QUIZ_VERSION_HEADER = "X-Quiz-Version"


def get_quiz_service(request: Request) -> QuizService:
    """Shared QuizService built by create_app"""
    return request.app.state.quiz_service


@router.get(
    "",
    response_model=List[QuizQuestion],
    response_model_exclude_none=True,
    responses={500: {"model": ErrorResponse}},
)
async def get_quiz(response: Response, service: QuizService = Depends(get_quiz_service)):
    """
    Fetch a new 5-question quiz

    - Pulls a pool of questions from OpenTDB and picks 5 at random
    - Shuffles each question's answers
    - Replaces the active quiz; the new version is sent in X-Quiz-Version
    """
    logger.info("GET /api/quiz")

    questions = await service.get_quiz()
    include_correct = service.settings.EXPOSE_CORRECT_ANSWER

    response.headers[QUIZ_VERSION_HEADER] = service.session.version or ""
    return [q.to_public(include_correct=include_correct) for q in questions]


@router.post(
    "/submit",
    response_model=SubmissionResult,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def submit_quiz(submission: QuizSubmission, service: QuizService = Depends(get_quiz_service)):
    """
    Submit answers for the active quiz

    Rules:
    - Every question must be answered
    - A wallet that passed in the last 24 hours is rejected before scoring
    - 80% or more is a pass and starts the wallet's 24 hour cooldown
    """
    wallet = submission.wallet
    logger.info(f"POST /api/quiz/submit - wallet: {wallet[:6] if wallet else None}")

    result = await service.submit(wallet, submission.answers, submission.quiz_version)
    return SubmissionResult(**result)
