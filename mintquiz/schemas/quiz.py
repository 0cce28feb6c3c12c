"""
Pydantic schemas for quiz-related requests and responses
"""
from pydantic import BaseModel, Field
from typing import List, Dict, Any, Optional, Union


class TriviaItem(BaseModel):
    """One question as returned by OpenTDB"""
    question: str
    correct_answer: str
    incorrect_answers: List[str] = Field(..., min_length=1)
    category: Optional[str] = None
    difficulty: Optional[str] = None
    type: Optional[str] = None


class TriviaResponse(BaseModel):
    """OpenTDB api.php envelope"""
    response_code: int
    results: List[TriviaItem] = []


class QuizQuestion(BaseModel):
    """Individual quiz question as sent to the client"""
    id: int
    question: str
    answers: List[str]
    correct: Optional[str] = None


class QuizSubmission(BaseModel):
    """
    Schema for quiz submission

    Fields are optional here so the service can answer a missing wallet or
    missing answers with its own 400 message instead of a validation error.
    """
    wallet: Optional[str] = None
    answers: Optional[Union[List[Any], Dict[str, Any]]] = None
    quiz_version: Optional[str] = None


class SubmissionResult(BaseModel):
    """Response after quiz scoring"""
    success: bool
    score: float


class ErrorResponse(BaseModel):
    """Error body shared by every failing endpoint"""
    error: str
