"""Frecency scoring -- rank servers by how recently and how often they run.

Uses the exponential-decay scheme described at
https://wiki.mozilla.org/User:Jesse/NewFrecency.  A score is stored as the
logarithm of its "raw strength" shifted by the decay accumulated since the
epoch, so two scores can be compared directly without re-evaluating them at
the same instant::

    now_decay     = now_micros * DECAY
    score         = exp(frecency - now_decay)
    new_frecency  = ln(score + SCORE_INCREASE_PER_RUN) + now_decay

Every run adds one unit of strength; that strength halves every
:data:`HALF_LIFE_MICROS` (30 days).

The module is pure apart from :func:`system_clock`.  Callers pass the
current time in, which keeps tests deterministic.
"""

from __future__ import annotations

import math
import time
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from server_room.models.server import Server

# One month, in microseconds.
HALF_LIFE_MICROS = 30 * 24 * 60 * 60 * 1_000_000

DECAY = math.log(2) / HALF_LIFE_MICROS

SCORE_INCREASE_PER_RUN = 1.0

# Largest argument math.exp accepts without overflowing.
_MAX_EXP_ARG = 709.0

Clock = Callable[[], int]


def system_clock() -> int:
    """Return the current wall-clock time in microseconds since the epoch."""
    return time.time_ns() // 1000


def update_frecency(frecency: float, now_micros: int) -> float:
    """Return the frecency after one more run at *now_micros*.

    Raises
    ------
    ValueError
        If *frecency* is not finite or the result would not be.
    """
    if not math.isfinite(frecency):
        raise ValueError(f"frecency must be finite, got {frecency!r}")

    now_decay = now_micros * DECAY
    exponent = frecency - now_decay
    if exponent > _MAX_EXP_ARG:
        # ln(exp(x) + 1) == x + ln(1 + exp(-x)); avoids overflowing exp().
        new_frecency = frecency + math.log1p(SCORE_INCREASE_PER_RUN * math.exp(-exponent))
    else:
        score = math.exp(exponent)
        new_frecency = math.log(score + SCORE_INCREASE_PER_RUN) + now_decay

    if not math.isfinite(new_frecency):
        raise ValueError(
            f"frecency update produced a non-finite value from {frecency!r}"
        )
    return new_frecency


def rank_key(server: "Server") -> tuple[float, str]:
    """Sort key putting the highest weight first and breaking ties by name."""
    return (-server.get_weight(), server.name)
