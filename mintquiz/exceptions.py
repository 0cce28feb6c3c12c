"""
Domain errors raised by the quiz services

Each error carries the HTTP status it maps to; the exception handlers in
mintquiz.main turn them into ``{"error": message}`` responses.
"""
from typing import Optional


class QuizError(Exception):
    """Base class for all errors surfaced to API clients"""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class UpstreamUnavailable(QuizError):
    """Trivia provider unreachable, timed out, or reported a failure"""
    status_code = 500


class InvalidRequest(QuizError):
    """Malformed submission (missing wallet, bad body)"""
    status_code = 400


class IncompleteSubmission(InvalidRequest):
    """Not every question in the active quiz has an answer"""


class StaleQuiz(InvalidRequest):
    """Submission references a quiz that has since been replaced"""
    status_code = 409


class RateLimited(QuizError):
    """Wallet already passed within the cooldown window"""
    status_code = 403


class NoActiveQuiz(QuizError):
    """Submission arrived before any quiz was generated"""
    status_code = 400


class InternalFailure(QuizError):
    """Persistence failure or other unexpected error"""
    status_code = 500


class TooManyRequests(QuizError):
    """Client exceeded the per-IP request throttle"""
    status_code = 429

    def __init__(self, message: str, retry_after: int):
        super().__init__(message)
        self.retry_after = retry_after
