"""Tests for the frecency scorer.

Time is always passed in explicitly, so every expectation is exact.
"""

import math
import time

import pytest

from server_room.frecency import (
    DECAY,
    HALF_LIFE_MICROS,
    SCORE_INCREASE_PER_RUN,
    rank_key,
    system_clock,
    update_frecency,
)
from server_room.models.server import Server

# 2023-11-14T22:13:20Z in microseconds.
NOW = 1_700_000_000_000_000
DAY = 24 * 60 * 60 * 1_000_000


class TestConstants:
    def test_half_life_is_thirty_days(self):
        assert HALF_LIFE_MICROS == 30 * DAY

    def test_decay(self):
        assert DECAY == pytest.approx(math.log(2) / HALF_LIFE_MICROS)

    def test_increment(self):
        assert SCORE_INCREASE_PER_RUN == 1.0


class TestUpdateFrecency:
    def test_first_run_equals_current_decay(self):
        # exp(0 - now_decay) is negligible next to the increment.
        assert update_frecency(0.0, NOW) == pytest.approx(NOW * DECAY)

    def test_first_run_is_positive(self):
        assert update_frecency(0.0, NOW) > 0.0

    def test_second_immediate_run_adds_ln2(self):
        first = update_frecency(0.0, NOW)
        second = update_frecency(first, NOW)
        assert second - first == pytest.approx(math.log(2), abs=1e-9)

    def test_repeated_runs_strictly_increase(self):
        frecency = 0.0
        for _ in range(5):
            updated = update_frecency(frecency, NOW)
            assert updated > frecency
            frecency = updated

    def test_one_half_life_later(self):
        first = update_frecency(0.0, NOW)
        later = NOW + HALF_LIFE_MICROS
        second = update_frecency(first, later)
        # Half of the first run's strength remains, plus one new run.
        assert second - later * DECAY == pytest.approx(math.log(1.5), abs=1e-9)

    def test_recent_run_outranks_old_run(self):
        old = update_frecency(0.0, NOW - 90 * DAY)
        recent = update_frecency(0.0, NOW)
        assert recent > old

    def test_frequent_old_use_can_outrank_single_recent_use(self):
        frequent = 0.0
        for _ in range(10):
            frequent = update_frecency(frequent, NOW - 30 * DAY)
        single = update_frecency(0.0, NOW)
        assert frequent > single

    def test_large_score_does_not_overflow(self):
        result = update_frecency(2000.0, 0)
        assert math.isfinite(result)
        assert result >= 2000.0

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_rejects_non_finite_input(self, value):
        with pytest.raises(ValueError):
            update_frecency(value, NOW)


class TestClock:
    def test_system_clock_is_microseconds(self):
        before = int(time.time() * 1_000_000)
        now = system_clock()
        after = int(time.time() * 1_000_000)
        # Allow for float rounding in time.time().
        assert before - 1_000 <= now <= after + 1_000


class TestRankKey:
    def test_orders_by_weight_then_name(self):
        servers = [
            Server(name="b", directory="/b", start_command="x", frecency=1.0),
            Server(name="a", directory="/a", start_command="x", frecency=1.0),
            Server(name="c", directory="/c", start_command="x", frecency=5.0),
            Server(name="d", directory="/d", start_command="x"),
        ]
        ordered = [server.name for server in sorted(servers, key=rank_key)]
        assert ordered == ["c", "a", "b", "d"]
