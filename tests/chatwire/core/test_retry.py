import asyncio

import pytest

from chatwire.core.exceptions import (
    NetworkError,
    ParseError,
    RateLimitedError,
    RetryLimitExceededError,
)
from chatwire.core.retry import RetryStrategy, with_retry


@pytest.fixture
def no_sleep(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    delays: list[float] = []

    async def _sleep(delay: float) -> None:
        delays.append(delay)

    monkeypatch.setattr(asyncio, 'sleep', _sleep)
    return delays


def test_compute_delay_without_jitter() -> None:
    strategy = RetryStrategy(base_backoff_sec=1.0, max_backoff_sec=60.0, jitter=False)
    assert strategy.compute_delay(1) == 1.0  # 1 * 2^(1-1)
    assert strategy.compute_delay(2) == 2.0  # 1 * 2^(2-1)
    # capped
    assert strategy.compute_delay(10) == strategy.max_backoff_sec


def test_compute_delay_jitter_bounded() -> None:
    strategy = RetryStrategy(base_backoff_sec=1.0, jitter=True)
    assert 1.0 <= strategy.compute_delay(1) <= 2.0


def test_wrapper_success_first_try() -> None:
    calls = {'cnt': 0}

    @with_retry(RetryStrategy(max_attempts=3, base_backoff_sec=0, jitter=False))
    async def _fn() -> str:
        calls['cnt'] += 1
        return 'ok'

    assert asyncio.run(_fn()) == 'ok'
    assert calls['cnt'] == 1


def test_wrapper_eventual_success(no_sleep: list[float]) -> None:
    calls = {'cnt': 0}

    @with_retry(RetryStrategy(max_attempts=3, base_backoff_sec=0.5, jitter=False))
    async def _fn() -> str:
        calls['cnt'] += 1
        if calls['cnt'] < 3:
            raise RateLimitedError('busy')
        return 'done'

    assert asyncio.run(_fn()) == 'done'
    assert calls['cnt'] == 3
    assert no_sleep == [0.5, 1.0]


@pytest.mark.usefixtures('no_sleep')
def test_wrapper_exhausted_chains_last_error() -> None:
    @with_retry(RetryStrategy(max_attempts=2, base_backoff_sec=0, jitter=False))
    async def _always_fail() -> None:
        raise NetworkError('still down')

    with pytest.raises(RetryLimitExceededError) as info:
        asyncio.run(_always_fail())
    assert isinstance(info.value.__cause__, NetworkError)


def test_non_retryable_error_propagates_immediately(no_sleep: list[float]) -> None:
    calls = {'cnt': 0}

    @with_retry(RetryStrategy(max_attempts=5, base_backoff_sec=0, jitter=False))
    async def _fn() -> None:
        calls['cnt'] += 1
        raise ParseError('bad shape')

    with pytest.raises(ParseError):
        asyncio.run(_fn())
    assert calls['cnt'] == 1
    assert no_sleep == []
