"""
QuizSession model - the single in-memory slot for the active question set
"""
import uuid
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from mintquiz.models.question import Question


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable view of the session taken at one point in time"""
    version: Optional[str]
    questions: Tuple[Question, ...]


class QuizSession:
    """
    Holds the most recently generated questions

    Every ``replace`` call swaps the whole set and issues a new version
    token; there is no history, so only the latest quiz can be scored.
    """

    def __init__(self):
        self._questions: Tuple[Question, ...] = ()
        self._version: Optional[str] = None

    @property
    def version(self) -> Optional[str]:
        return self._version

    def replace(self, questions: Sequence[Question]) -> str:
        self._questions = tuple(questions)
        self._version = uuid.uuid4().hex
        return self._version

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(version=self._version, questions=self._questions)

    def clear(self) -> None:
        self._questions = ()
        self._version = None

    def __len__(self) -> int:
        return len(self._questions)
