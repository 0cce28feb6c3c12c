"""
Domain models package
"""
from mintquiz.models.question import Question
from mintquiz.models.quiz_session import QuizSession, SessionSnapshot

__all__ = ["Question", "QuizSession", "SessionSnapshot"]
