"""
Quiz grading service
Exact string match against the answers kept in the quiz session
"""
import logging
from typing import Any, Dict, Mapping, Sequence, Union

from mintquiz.exceptions import IncompleteSubmission
from mintquiz.models import Question

logger = logging.getLogger(__name__)

Answers = Union[Sequence[Any], Mapping[Any, Any]]


class GradingService:
    """
    Normalizes and scores submissions

    Strategy:
    - Sequence answers: position i answers question i
    - Mapping answers: keys parsed as integers, unparseable keys ignored
    - A question is correct when the stringified answer equals its
      correct answer
    """

    def __init__(self, quiz_size: int = 5):
        self.quiz_size = quiz_size

    def normalize_answers(self, answers: Answers) -> Dict[int, Any]:
        """
        Map every question id to the submitted answer

        Raises:
            IncompleteSubmission: if any id in 0..quiz_size-1 has no answer
        """
        normalized: Dict[int, Any] = {}

        if isinstance(answers, Mapping):
            for key, value in answers.items():
                try:
                    normalized[int(key)] = value
                except (TypeError, ValueError):
                    logger.debug(f"Ignoring non-numeric answer key: {key!r}")
        elif isinstance(answers, Sequence) and not isinstance(answers, (str, bytes)):
            normalized = {i: value for i, value in enumerate(answers)}

        required = range(self.quiz_size)
        if any(normalized.get(q_id) is None for q_id in required):
            logger.error(f"Invalid answers: {answers!r}")
            raise IncompleteSubmission(f"All {self.quiz_size} questions must be answered")

        return {q_id: normalized[q_id] for q_id in required}

    def grade(self, questions: Sequence[Question], answers: Dict[int, Any]) -> float:
        """
        Score normalized answers against the session questions

        Returns:
            Percentage score (correct / quiz_size * 100)
        """
        correct = 0
        for q_id, answer in sorted(answers.items()):
            question = questions[q_id] if 0 <= q_id < len(questions) else None
            is_correct = self._grade_answer(question, answer)
            expected = question.correct_answer if question else None
            if is_correct:
                correct += 1
            logger.debug(
                f"Question {q_id}: User={answer!r}, "
                f"Correct={expected!r}, Match={is_correct}"
            )

        logger.info(f"Graded submission: {correct}/{self.quiz_size} correct")
        return correct / self.quiz_size * 100

    def _grade_answer(self, question: Any, answer: Any) -> bool:
        if question is None or answer is None or answer == "":
            return False
        return as_text(answer) == as_text(question.correct_answer)


def as_text(value: Any) -> str:
    """
    Stringify an answer so that numeric JSON values compare like text

    ``4`` and ``4.0`` both become ``"4"``; booleans follow JSON spelling.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


