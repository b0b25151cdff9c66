"""
Data model for the swarm consensus API.

Wire shapes for the /v1/ask request and response, the /health probe, and
the per-runner view produced by the score reconciler.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _optional_list(data: dict[str, Any], key: str, accepts, what: str) -> Optional[list]:
    """Read an optional list member, checking every item with `accepts`."""
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list):
        raise ValueError(f"'{key}' must be a list, got {type(value).__name__}")
    for i, item in enumerate(value):
        if not accepts(item):
            raise ValueError(f"'{key}[{i}]' must be {what}, got {item!r}")
    return list(value)


@dataclass
class AskRequest:
    """Body of a POST /v1/ask call."""

    instruction: str
    template_id: Optional[str] = None

    def to_payload(self) -> dict[str, Any]:
        """Serialize for the wire, leaving template_id out when unset or empty."""
        payload: dict[str, Any] = {}
        if self.template_id:
            payload["template_id"] = self.template_id
        payload["instruction"] = self.instruction
        return payload


@dataclass
class ConsensusResult:
    """
    Judge verdict for one instruction.

    Attributes:
        answer: Text of the judge-selected response (may be empty)
        winner_index: Zero-based runner index of the selected response
        runners: Number of runners invoked for the request
        consensus_id: Opaque server-side correlation id
        scores: Per-runner judge scores; may be shorter than `runners` or
                contain None holes
        included_indices: Runners that produced a usable answer
        votes_per_candidate: Legacy field, kept only for wire compatibility
        runner_errors: Per-runner error strings reported by the server
    """

    answer: str
    winner_index: int
    runners: int
    consensus_id: str
    scores: Optional[list[Optional[float]]] = None
    included_indices: Optional[list[int]] = None
    votes_per_candidate: Optional[list[float]] = None
    runner_errors: Optional[list[Optional[str]]] = None

    @classmethod
    def from_dict(cls, data: Any) -> "ConsensusResult":
        """Build a result from decoded JSON, raising ValueError on a bad shape."""
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, got {type(data).__name__}")

        answer = data.get("answer")
        if answer is None:
            answer = ""
        if not isinstance(answer, str):
            raise ValueError("'answer' must be a string")

        if "winner_index" not in data:
            raise ValueError("Missing required field 'winner_index'")
        winner_index = data["winner_index"]
        if not _is_int(winner_index):
            raise ValueError("'winner_index' must be an integer")

        runners = data.get("runners")
        if runners is None:
            runners = 0
        if not _is_int(runners):
            raise ValueError("'runners' must be an integer")

        consensus_id = data.get("consensus_id")
        if not isinstance(consensus_id, str):
            raise ValueError("Missing or non-string 'consensus_id'")

        return cls(
            answer=answer,
            winner_index=winner_index,
            runners=runners,
            consensus_id=consensus_id,
            scores=_optional_list(
                data, "scores", lambda v: v is None or _is_number(v), "a number or null"
            ),
            included_indices=_optional_list(
                data, "included_indices", _is_int, "an integer"
            ),
            votes_per_candidate=_optional_list(
                data, "votes_per_candidate", _is_number, "a number"
            ),
            runner_errors=_optional_list(
                data, "runner_errors", lambda v: v is None or isinstance(v, str), "a string or null"
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert back to the wire shape, omitting absent optional members."""
        data: dict[str, Any] = {
            "answer": self.answer,
            "winner_index": self.winner_index,
            "runners": self.runners,
        }
        if self.scores is not None:
            data["scores"] = list(self.scores)
        if self.votes_per_candidate is not None:
            data["votes_per_candidate"] = list(self.votes_per_candidate)
        if self.included_indices is not None:
            data["included_indices"] = list(self.included_indices)
        if self.runner_errors is not None:
            data["runner_errors"] = list(self.runner_errors)
        data["consensus_id"] = self.consensus_id
        return data


@dataclass
class HealthStatus:
    """Reply of GET /health."""

    ok: bool
    runners: int

    @classmethod
    def from_dict(cls, data: Any) -> "HealthStatus":
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
        ok = data.get("ok")
        if not isinstance(ok, bool):
            raise ValueError("'ok' must be a boolean")
        runners = data.get("runners", 0)
        if not _is_int(runners):
            raise ValueError("'runners' must be an integer")
        return cls(ok=ok, runners=runners)


class RunnerState(Enum):
    """How a runner shows up in the reconciled view."""

    SCORED = "scored"  # participated, finite score
    UNSCORED = "unscored"  # participated, no usable score
    ABSENT = "absent"  # empty or blocked answer


@dataclass(frozen=True)
class RunnerView:
    """One display row of the reconciled score view."""

    index: int
    label: str
    display_value: str
    state: RunnerState

    @property
    def participated(self) -> bool:
        return self.state is not RunnerState.ABSENT
