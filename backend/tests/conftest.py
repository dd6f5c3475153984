import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

backend_dir = Path(__file__).resolve().parents[1]
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from quizkey.main import create_app
from quizkey.schemas.quiz import Option, Question, QuestionType, QuizSet
from quizkey.services.library import QuizLibrary


class _MemoryRedis:
    def __init__(self):
        self._data: dict[str, str] = {}

    def ping(self):
        return True

    def get(self, key: str):
        return self._data.get(key)

    def set(self, key: str, value: str, ex: int | None = None):
        self._data[key] = value
        return True

    def delete(self, key: str):
        self._data.pop(key, None)
        return 1

    def flushall(self):
        self._data.clear()
        return True


# Stub Redis at import time (library slot + readiness probe).
_mem_redis = _MemoryRedis()
import quizkey.core.redis_client as redis_client_module

redis_client_module.get_redis = lambda: _mem_redis

import quizkey.routers.quizzes as quizzes_router_module
quizzes_router_module.get_redis = lambda: _mem_redis

import quizkey.routers.health as health_router_module
health_router_module.get_redis = lambda: _mem_redis


@pytest.fixture(autouse=True)
def _clean_redis():
    _mem_redis.flushall()
    yield
    _mem_redis.flushall()


@pytest.fixture(scope="session")
def client():
    return TestClient(create_app())


@pytest.fixture()
def memory_redis():
    return _mem_redis


@pytest.fixture()
def library():
    return QuizLibrary(_mem_redis)


@pytest.fixture()
def sample_quiz() -> QuizSet:
    return QuizSet(
        id="quiz-1",
        title="Capitals",
        description="European capitals",
        created_at=1700000000000,
        questions=[
            Question(
                id="q1",
                type=QuestionType.SINGLE_CHOICE,
                text="Capital of France?",
                points=5,
                options=[Option(id="1", text="Paris"), Option(id="2", text="Rome"), Option(id="3", text="Berlin")],
                correct_answers=["1"],
                explanation="Paris has been the capital since 987.",
            ),
            Question(
                id="q2",
                type=QuestionType.MULTIPLE_CHOICE,
                text="Which are in Italy?",
                points=10,
                options=[Option(id="1", text="Rome"), Option(id="2", text="Lyon"), Option(id="3", text="Milan")],
                correct_answers=["1", "3"],
            ),
            Question(
                id="q3",
                type=QuestionType.FILL_IN_THE_BLANK,
                text="The capital of Germany is ___.",
                points=3,
                correct_answers=["Berlin"],
            ),
            Question(
                id="q4",
                type=QuestionType.TRUE_FALSE,
                text="Madrid is the capital of Portugal.",
                points=2,
                correct_answers=["false"],
            ),
            Question(
                id="q5",
                type=QuestionType.SUBJECTIVE,
                text="Why do capitals move?",
                points=0,
                subjective_reference="Politics, trade routes, defence.",
            ),
        ],
    )
