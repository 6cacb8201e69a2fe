"""Unit tests for RequestPacer."""

from __future__ import annotations

import random

import pytest

from specharvest.utils.errors import ConfigurationError
from specharvest.utils.pacing import RequestPacer


class TestRequestPacer:
    @pytest.mark.asyncio
    async def test_first_request_is_not_delayed(self) -> None:
        waits: list[float] = []

        async def fake_sleep(seconds: float) -> None:
            waits.append(seconds)

        pacer = RequestPacer(3, 8, sleep=fake_sleep)
        assert await pacer.before_request() == 0.0
        assert waits == []

    @pytest.mark.asyncio
    async def test_later_requests_wait_inside_window(self) -> None:
        waits: list[float] = []

        async def fake_sleep(seconds: float) -> None:
            waits.append(seconds)

        pacer = RequestPacer(3, 8, sleep=fake_sleep, rng=random.Random(42))
        await pacer.before_request()
        for _ in range(20):
            await pacer.before_request()

        assert len(waits) == 20
        assert all(3 <= w <= 8 for w in waits)
        assert pacer.total_waited == pytest.approx(sum(waits))

    def test_next_delay_is_reproducible_with_seeded_rng(self) -> None:
        a = RequestPacer(3, 8, rng=random.Random(7))
        b = RequestPacer(3, 8, rng=random.Random(7))
        assert [a.next_delay() for _ in range(5)] == [b.next_delay() for _ in range(5)]

    @pytest.mark.asyncio
    async def test_zero_window_never_sleeps(self) -> None:
        calls: list[float] = []

        async def fake_sleep(seconds: float) -> None:
            calls.append(seconds)

        pacer = RequestPacer(0, 0, sleep=fake_sleep)
        for _ in range(3):
            await pacer.before_request()
        assert calls == []

    @pytest.mark.parametrize("low,high", [(-1, 5), (8, 3)])
    def test_invalid_window_is_configuration_error(self, low: float, high: float) -> None:
        with pytest.raises(ConfigurationError):
            RequestPacer(low, high)
