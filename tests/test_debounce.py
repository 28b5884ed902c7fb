"""Tests for the asyncio debouncer."""

import asyncio

import pytest

from typeahead.core.debounce import Debouncer


class TestDebouncer:
    @pytest.mark.asyncio
    async def test_fires_once_after_quiet_period(self) -> None:
        calls: list[int] = []
        debouncer = Debouncer(0.02, lambda: calls.append(1))
        for _ in range(5):
            debouncer.trigger()
            await asyncio.sleep(0.005)
        assert calls == []
        await asyncio.sleep(0.05)
        assert calls == [1]
        assert debouncer.armed is False

    @pytest.mark.asyncio
    async def test_cancel_prevents_fire(self) -> None:
        calls: list[int] = []
        debouncer = Debouncer(0.01, lambda: calls.append(1))
        debouncer.trigger()
        debouncer.cancel()
        await asyncio.sleep(0.03)
        assert calls == []

    def test_cancel_is_idempotent(self) -> None:
        debouncer = Debouncer(0.01, lambda: None)
        debouncer.cancel()
        debouncer.cancel()
        assert debouncer.armed is False

    @pytest.mark.asyncio
    async def test_flush_fires_immediately(self) -> None:
        calls: list[int] = []
        debouncer = Debouncer(10.0, lambda: calls.append(1))
        debouncer.trigger()
        assert debouncer.flush() is True
        assert calls == [1]
        assert debouncer.flush() is False
        assert calls == [1]

    def test_flush_without_trigger(self) -> None:
        calls: list[int] = []
        assert Debouncer(0.01, lambda: calls.append(1)).flush() is False
        assert calls == []
