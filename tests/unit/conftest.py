"""Fixtures specific to unit tests.

Provides controllable random sources and response doubles for isolated
unit testing.
"""

import json
import random

import pytest


class ConstantRandom(random.Random):
    """Random source whose ``random()`` always returns the same value.

    Integer draws (randrange, randint, choice) still come from the seeded
    generator.
    """

    def __init__(self, value: float, seed: int = 0):
        super().__init__(seed)
        self.value = value

    def random(self) -> float:
        return self.value


class ScriptedRandom(random.Random):
    """Random source replaying scripted ``random()`` draws, then a fallback."""

    def __init__(self, draws, fallback: float = 0.99, seed: int = 0):
        super().__init__(seed)
        self._draws = list(draws)
        self._fallback = fallback

    def random(self) -> float:
        if self._draws:
            return self._draws.pop(0)
        return self._fallback


class FakeQueryResponse:
    """requests-style response double for query results."""

    def __init__(self, status_code: int = 200, payload=None, text: str | None = None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else json.dumps(payload)

    def json(self):
        if self._payload is None:
            return json.loads(self.text)
        return self._payload


@pytest.fixture
def constant_random():
    """Factory for ConstantRandom instances."""
    return ConstantRandom


@pytest.fixture
def scripted_random():
    """Factory for ScriptedRandom instances."""
    return ScriptedRandom


@pytest.fixture
def query_response():
    """Factory for FakeQueryResponse instances."""
    return FakeQueryResponse


@pytest.fixture
def vector_payload() -> dict:
    """A successful instant vector query result."""
    return {
        "status": "success",
        "data": {
            "resultType": "vector",
            "result": [
                {
                    "metric": {"__name__": "windows_system_system_up_time"},
                    "value": [1700000000, "1700000000"],
                }
            ],
        },
    }
