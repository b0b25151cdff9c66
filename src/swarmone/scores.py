"""
Score reconciliation for consensus results.

Turns the server's variable-length, partially populated score report into
one display row per runner.
"""

import math

from .models import ConsensusResult, RunnerState, RunnerView


NOT_PARTICIPATED = "N/A"
# Participated but the judge gave no usable score. Should not happen when the
# backend is correct; kept as-is for compatibility.
MISSING_SCORE = "0.0000"


def runner_label(index: int) -> str:
    return f"Runner #{index}"


def format_score(value: float) -> str:
    """Fixed-point with exactly four fractional digits."""
    return f"{value:.4f}"


def _usable_score(scores: list | None, index: int) -> float | None:
    if not scores or index >= len(scores):
        return None
    value = scores[index]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        value = float(value)
    except OverflowError:
        return None
    if not math.isfinite(value):
        return None
    return value


def reconcile(result: ConsensusResult) -> list[RunnerView]:
    """
    Build the per-runner view for a consensus result.

    Rows are ordered by runner index and there is exactly one per runner.
    Runners outside `included_indices` show "N/A" whatever their score; when
    the server omits `included_indices` no runner counts as participating.
    A participating runner without a finite score shows "0.0000".

    `votes_per_candidate` is never consulted, even when `scores` is absent.
    `winner_index` is not looked at either.
    """
    n = result.runners if result.runners and result.runners > 0 else 0
    included = set(result.included_indices or ())

    views = []
    for i in range(n):
        if i not in included:
            value, state = NOT_PARTICIPATED, RunnerState.ABSENT
        else:
            score = _usable_score(result.scores, i)
            if score is None:
                value, state = MISSING_SCORE, RunnerState.UNSCORED
            else:
                value, state = format_score(score), RunnerState.SCORED
        views.append(RunnerView(index=i, label=runner_label(i), display_value=value, state=state))

    return views
