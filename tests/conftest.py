"""
Shared fixtures: isolated settings, a fake OpenTDB and a test client
"""
import json
import httpx
import pytest
from fastapi.testclient import TestClient

from mintquiz.config import Settings
from mintquiz.main import create_app
from mintquiz.services.quiz_service import QuizService
from mintquiz.services.trivia_service import TriviaService
from mintquiz.utils.attempt_store import AttemptStore

DAY_MS = 24 * 60 * 60 * 1000
START_MS = 1_700_000_000_000

TRIVIA_RESULTS = [
    {
        "category": "Science: Computers",
        "type": "multiple",
        "difficulty": "medium",
        "question": f"Question number {i}?",
        "correct_answer": f"right {i}",
        "incorrect_answers": [f"wrong {i}a", f"wrong {i}b", f"wrong {i}c"],
    }
    for i in range(10)
]


def trivia_payload(results=None, response_code=0):
    return {"response_code": response_code, "results": TRIVIA_RESULTS if results is None else results}


class FakeOpenTDB:
    """httpx handler standing in for opentdb.com"""

    def __init__(self, payload=None, status_code=200):
        self.payload = trivia_payload() if payload is None else payload
        self.status_code = status_code
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, content=json.dumps(self.payload).encode())

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


class FakeClock:
    def __init__(self, start=START_MS):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


def answers_for(questions, correct=5):
    """Mapping answers with the first ``correct`` questions right"""
    answers = {}
    for q in questions:
        if q.id < correct:
            answers[str(q.id)] = q.correct_answer
        else:
            answers[str(q.id)] = next(a for a in q.answers if a != q.correct_answer)
    return answers


@pytest.fixture
def settings(tmp_path):
    return Settings(
        ATTEMPTS_FILE=str(tmp_path / "attempts.json"),
        RATE_LIMIT_PER_MINUTE=0,
        RATE_LIMIT_PER_HOUR=0,
    )


@pytest.fixture
def opentdb():
    return FakeOpenTDB()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def attempt_store(settings):
    store = AttemptStore(settings.ATTEMPTS_FILE)
    store.load()
    return store


@pytest.fixture
def quiz_service(settings, opentdb, attempt_store, clock):
    return QuizService(
        settings=settings,
        trivia_service=TriviaService(settings, transport=opentdb.transport),
        attempt_store=attempt_store,
        clock=clock,
    )


@pytest.fixture
def client(settings, opentdb, clock):
    service = QuizService(
        settings=settings,
        trivia_service=TriviaService(settings, transport=opentdb.transport),
        attempt_store=AttemptStore(settings.ATTEMPTS_FILE),
        clock=clock,
    )
    app = create_app(settings, quiz_service=service)
    with TestClient(app) as test_client:
        yield test_client
