"""
Tests for the bounded polling strategy.
"""

import pytest
from unittest.mock import AsyncMock

from aa_backend.core.errors import PollExhaustedError, UpstreamError
from aa_backend.core.recovery import PollConfig, is_present, poll_until


class RecordingSleep:
    """Stands in for asyncio.sleep and records requested delays."""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


# =============================================================================
# PollConfig Tests
# =============================================================================

class TestPollConfig:

    def test_default_is_ten_attempts_three_seconds_apart(self):
        config = PollConfig()

        assert config.max_attempts == 10
        assert [config.get_delay(i) for i in range(9)] == [3.0] * 9

    def test_fixed(self):
        config = PollConfig.fixed(5, 0.25)

        assert config.max_attempts == 5
        assert config.get_delay(0) == 0.25
        assert config.get_delay(3) == 0.25

    def test_exponential_delay_is_capped(self):
        config = PollConfig(initial_delay_seconds=1.0, exponential_base=2.0, max_delay_seconds=5.0)

        assert [config.get_delay(i) for i in range(5)] == [1.0, 2.0, 4.0, 5.0, 5.0]

    def test_jitter_stays_in_range(self):
        config = PollConfig(initial_delay_seconds=10.0, jitter=True, jitter_factor=0.1)

        for _ in range(20):
            assert 9.0 <= config.get_delay(0) <= 11.0

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            PollConfig(max_attempts=0)


# =============================================================================
# poll_until Tests
# =============================================================================

class TestPollUntil:

    @pytest.mark.asyncio
    async def test_first_attempt_does_not_wait(self):
        sleep = RecordingSleep()
        operation = AsyncMock(return_value="receipt")

        result = await poll_until(operation, sleep=sleep)

        assert result == "receipt"
        assert operation.await_count == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_returns_once_result_is_present(self):
        sleep = RecordingSleep()
        operation = AsyncMock(side_effect=[None, None, "receipt"])

        result = await poll_until(operation, sleep=sleep)

        assert result == "receipt"
        assert operation.await_count == 3
        assert sleep.delays == [3.0, 3.0]

    @pytest.mark.asyncio
    async def test_exhausts_after_max_attempts(self):
        sleep = RecordingSleep()
        operation = AsyncMock(return_value=None)

        with pytest.raises(PollExhaustedError) as exc_info:
            await poll_until(operation, sleep=sleep, exhausted_message="receipt not found")

        assert operation.await_count == 10
        assert sleep.delays == [3.0] * 9
        assert exc_info.value.attempts == 10
        assert exc_info.value.message == "receipt not found"

    @pytest.mark.asyncio
    async def test_custom_predicate(self):
        operation = AsyncMock(side_effect=[{"status": "pending"}, {"status": "confirmed"}])

        result = await poll_until(
            operation,
            is_done=lambda data: data["status"] != "pending",
            sleep=RecordingSleep(),
        )

        assert result == {"status": "confirmed"}

    @pytest.mark.asyncio
    async def test_listed_errors_are_retried(self):
        operation = AsyncMock(side_effect=[UpstreamError("timeout"), "receipt"])

        result = await poll_until(operation, retry_on=(UpstreamError,), sleep=RecordingSleep())

        assert result == "receipt"
        assert operation.await_count == 2

    @pytest.mark.asyncio
    async def test_last_retried_error_is_chained(self):
        error = UpstreamError("timeout")
        operation = AsyncMock(side_effect=error)

        with pytest.raises(PollExhaustedError) as exc_info:
            await poll_until(
                operation,
                config=PollConfig.fixed(3, 0),
                retry_on=(UpstreamError,),
                sleep=RecordingSleep(),
            )

        assert operation.await_count == 3
        assert exc_info.value.__cause__ is error

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self):
        operation = AsyncMock(side_effect=RuntimeError("boom"))

        with pytest.raises(RuntimeError, match="boom"):
            await poll_until(operation, retry_on=(UpstreamError,), sleep=RecordingSleep())

        assert operation.await_count == 1


def test_is_present():
    assert is_present(0)
    assert is_present({})
    assert not is_present(None)
