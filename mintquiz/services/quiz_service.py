"""
Quiz orchestration service
Fetch -> select -> format -> cache in session, then gate -> score -> record
"""
import asyncio
import logging
import random
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

from mintquiz.config import Settings
from mintquiz.exceptions import (
    InternalFailure,
    InvalidRequest,
    NoActiveQuiz,
    RateLimited,
    StaleQuiz,
    UpstreamUnavailable,
)
from mintquiz.models import Question, QuizSession
from mintquiz.schemas.quiz import TriviaItem
from mintquiz.services.grading_service import Answers, GradingService
from mintquiz.services.trivia_service import TriviaService
from mintquiz.utils.attempt_store import AttemptStore

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


class QuizService:
    """
    Owns the quiz session and the attempt store for one application

    Submissions for the same wallet are serialized so two concurrent passes
    cannot both get through the daily gate while the first one is still
    writing its record.
    """

    def __init__(
        self,
        settings: Settings,
        trivia_service: TriviaService,
        attempt_store: AttemptStore,
        grading_service: Optional[GradingService] = None,
        clock: Callable[[], int] = now_ms,
        rng: Optional[random.Random] = None
    ):
        self.settings = settings
        self.trivia_service = trivia_service
        self.attempt_store = attempt_store
        self.grading_service = grading_service or GradingService(settings.QUIZ_SIZE)
        self.session = QuizSession()
        self.clock = clock
        self.rng = rng or random.Random()
        self._wallet_locks: Dict[str, asyncio.Lock] = {}
        self._wallet_lock_users: Dict[str, int] = {}

    @property
    def cooldown_ms(self) -> int:
        return self.settings.ATTEMPT_COOLDOWN_HOURS * 60 * 60 * 1000

    async def get_quiz(self) -> List[Question]:
        """
        Generate a fresh quiz and make it the active session

        Raises:
            UpstreamUnavailable: provider failure or too few questions
        """
        pool = await self.trivia_service.fetch_questions()
        selected = self.select_questions(pool)
        questions = [self.format_question(i, item) for i, item in enumerate(selected)]

        version = self.session.replace(questions)
        logger.info(f"Questions fetched (version {version}): {[q.text for q in questions]}")
        return questions

    def select_questions(self, pool: List[TriviaItem]) -> List[TriviaItem]:
        """
        Draw QUIZ_SIZE distinct items at random, in draw order

        Raises:
            UpstreamUnavailable: if the pool is smaller than QUIZ_SIZE
        """
        remaining = list(pool)
        selected: List[TriviaItem] = []
        while len(selected) < self.settings.QUIZ_SIZE and remaining:
            index = self.rng.randrange(len(remaining))
            selected.append(remaining.pop(index))

        if len(selected) < self.settings.QUIZ_SIZE:
            logger.error(
                f"OpenTDB returned only {len(pool)} questions, "
                f"need {self.settings.QUIZ_SIZE}"
            )
            raise UpstreamUnavailable("Not enough quiz questions available")
        return selected

    def format_question(self, q_id: int, item: TriviaItem) -> Question:
        answers = [*item.incorrect_answers, item.correct_answer]
        self.rng.shuffle(answers)
        return Question(
            id=q_id,
            text=item.question,
            answers=answers,
            correct_answer=item.correct_answer,
        )

    async def submit(
        self,
        wallet: Optional[str],
        answers: Optional[Answers],
        quiz_version: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Score a submission against the active quiz

        Returns:
            ``{"success": bool, "score": float}``

        Raises:
            InvalidRequest: wallet missing
            IncompleteSubmission: an answer is missing
            RateLimited: wallet passed within the cooldown window
            NoActiveQuiz: no quiz generated yet
            StaleQuiz: quiz_version no longer matches the session
            InternalFailure: the pass could not be persisted
        """
        if not wallet:
            logger.error("Missing wallet")
            raise InvalidRequest("Wallet address required")

        normalized = self.grading_service.normalize_answers(answers or {})
        logger.debug(f"Normalized answers: {normalized}")

        async with self._wallet_lock(wallet):
            return await self._score_locked(wallet, normalized, quiz_version)

    @asynccontextmanager
    async def _wallet_lock(self, wallet: str) -> AsyncIterator[None]:
        """Per-wallet lock, forgotten once no submission holds or waits on it"""
        lock = self._wallet_locks.get(wallet)
        if lock is None:
            lock = self._wallet_locks[wallet] = asyncio.Lock()
        self._wallet_lock_users[wallet] = self._wallet_lock_users.get(wallet, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._wallet_lock_users[wallet] -= 1
            if not self._wallet_lock_users[wallet]:
                del self._wallet_lock_users[wallet]
                del self._wallet_locks[wallet]

    async def _score_locked(
        self,
        wallet: str,
        normalized: Dict[int, Any],
        quiz_version: Optional[str]
    ) -> Dict[str, Any]:
        now = self.clock()

        last_attempt = self.attempt_store.get(wallet)
        if last_attempt is not None and now - last_attempt < self.cooldown_ms:
            logger.warning(f"Wallet {wallet[:6]}... blocked: last attempt at {last_attempt}")
            raise RateLimited("One attempt per day allowed")

        snapshot = self.session.snapshot()
        if len(snapshot.questions) < self.settings.QUIZ_SIZE:
            logger.error("No quiz questions available")
            raise NoActiveQuiz("No active quiz. Start a new quiz")

        if quiz_version is not None and quiz_version != snapshot.version:
            logger.warning(f"Wallet {wallet[:6]}... submitted against replaced quiz {quiz_version}")
            raise StaleQuiz("Quiz has been replaced. Start a new quiz")

        score = self.grading_service.grade(snapshot.questions, normalized)
        logger.info(f"Score for {wallet[:6]}...: {score}%")

        if score < self.settings.PASSING_SCORE:
            return {"success": False, "score": score}

        try:
            # File write runs off the event loop; the wallet lock covers the gap
            await asyncio.to_thread(self.attempt_store.record_pass, wallet, now)
        except OSError as e:
            logger.error(f"Failed to persist attempt for {wallet[:6]}...: {str(e)}")
            raise InternalFailure("Failed to process quiz") from e

        return {"success": True, "score": score}
