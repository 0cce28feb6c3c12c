"""
Question model - one formatted multiple-choice question
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class Question:
    """
    A question as served to the client

    ``text`` is passed through verbatim from the provider (it may hold HTML
    entities). ``answers`` is already shuffled and contains
    ``correct_answer`` exactly once.
    """
    id: int
    text: str
    answers: List[str] = field(default_factory=list)
    correct_answer: str = ""

    def to_public(self, include_correct: bool = False) -> Dict[str, Any]:
        """Client-facing payload; the correct answer is withheld unless asked for"""
        payload: Dict[str, Any] = {
            "id": self.id,
            "question": self.text,
            "answers": list(self.answers),
        }
        if include_correct:
            payload["correct"] = self.correct_answer
        return payload

    def __repr__(self):
        return f"<Question(id={self.id}, text={self.text[:30]!r})>"
