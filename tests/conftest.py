"""
Shared pytest fixtures for swarmone tests.
"""

import json

import httpx
import pytest

from swarmone.config import API_BASE_ENV, ORIGIN_ENV, ClientConfig
from swarmone.models import ConsensusResult


_UNSET = object()


def make_result_payload(
    answer: str = "Dear team, thanks for the invite.",
    winner_index: int = 0,
    runners: int = 3,
    scores=_UNSET,
    included_indices=_UNSET,
    consensus_id: str = "cons-123",
    **extra,
) -> dict:
    """Helper to build a /v1/ask response body. Pass None to drop an optional field."""
    payload = {
        "answer": answer,
        "winner_index": winner_index,
        "runners": runners,
        "scores": [0.91, 0.40, 0.77] if scores is _UNSET else scores,
        "included_indices": [0, 1, 2] if included_indices is _UNSET else included_indices,
        "consensus_id": consensus_id,
        **extra,
    }
    return {k: v for k, v in payload.items() if v is not None}


def make_result(**kwargs) -> ConsensusResult:
    """Helper to create a ConsensusResult with defaults."""
    return ConsensusResult.from_dict(make_result_payload(**kwargs))


def json_handler(body, status_code: int = 200, seen: list | None = None):
    """MockTransport handler answering every request with `body` as JSON."""

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, json=body)

    return handler


def sent_json(request: httpx.Request) -> dict:
    return json.loads(request.content)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the caller's SWARMONE_* variables out of every test."""
    monkeypatch.delenv(API_BASE_ENV, raising=False)
    monkeypatch.delenv(ORIGIN_ENV, raising=False)


@pytest.fixture
def client_config():
    """Config pointing at an absolute test base URL."""
    return ClientConfig(api_base="http://swarm.test")


@pytest.fixture
def sample_result():
    """Scenario with three runners, all scored."""
    return make_result()


@pytest.fixture
def partial_result():
    """Runner 1 did not participate; runner 2 participated without a score."""
    return make_result(
        runners=3,
        scores=[0.91],
        included_indices=[0, 2],
        runner_errors=["", "blocked by safety filter", ""],
    )
