"""Shared fixtures: settings and stub grading clients (no network)."""

import copy

import pytest

from grading_relay.config import Settings

ALLOWED_ORIGIN = "https://learn.example.org"

VALID_VERDICT = {
    "verdict": "Not quite right",
    "summary": "You named photosynthesis but did not explain the role of light.",
    "criteria_feedback": [
        {"criterion": "Names the process", "met": True, "comment": "Correctly named."},
        {"criterion": "Explains the energy source", "met": False, "comment": "Light is not mentioned."},
    ],
    "next_step": "Add one sentence on where the plant gets its energy.",
}

VALID_BODY = {
    "response_text": "Plants make food through photosynthesis using water and CO2.",
    "learning_objective": "Explain how plants produce glucose.",
    "criteria": ["Names the process", "Explains the energy source"],
}


class StubGradingClient:
    """Records calls and returns (or raises) a fixed result."""

    def __init__(self, result=None, error=None):
        self.result = VALID_VERDICT if result is None else result
        self.error = error
        self.calls = []

    async def grade(self, system_instruction, user_instruction):
        self.calls.append((system_instruction, user_instruction))
        if self.error is not None:
            raise self.error
        return copy.deepcopy(self.result)

    async def close(self):
        pass


class FakeResponse:
    """Stands in for openai.types.responses.Response."""

    def __init__(self, output_text=None, output=None):
        self.output_text = output_text
        self._output = output or []

    def model_dump(self):
        return {"id": "resp_test", "output": copy.deepcopy(self._output)}


class FakeResponses:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


class FakeOpenAI:
    """Minimal AsyncOpenAI stand-in exposing `.responses.create`."""

    def __init__(self, response=None, error=None):
        self.responses = FakeResponses(response, error)
        self.closed = False

    async def close(self):
        self.closed = True


@pytest.fixture
def settings():
    return Settings(api_key="sk-test", allowed_origins=(ALLOWED_ORIGIN,))


@pytest.fixture
def stub_client():
    return StubGradingClient()
