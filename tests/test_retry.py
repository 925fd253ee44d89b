"""Tests for rate-limit detection and exponential backoff."""

import pytest


class TestIsRateLimitError:
    def test_typed_error(self):
        from config.exceptions import RateLimitedError
        from tools.retry import is_rate_limit_error
        assert is_rate_limit_error(RateLimitedError())

    @pytest.mark.parametrize("message", [
        "HTTP 429 Too Many Requests",
        "RESOURCE_EXHAUSTED: quota",
        "rate_limit_error",
        "Rate limit reached for requests",
    ])
    def test_message_markers(self, message):
        from tools.retry import is_rate_limit_error
        assert is_rate_limit_error(RuntimeError(message))

    def test_other_errors(self):
        from tools.retry import is_rate_limit_error
        assert not is_rate_limit_error(ValueError("bad request"))
        assert not is_rate_limit_error(RuntimeError("500 internal error"))


class TestBackoffDelay:
    def test_doubles_per_attempt(self):
        from tools.retry import backoff_delay
        delays = [backoff_delay(k, 61.0, 1.0, rng=lambda: 0.0) for k in (1, 2, 3)]
        assert delays == [61.0, 122.0, 244.0]

    def test_jitter_bounded(self):
        from tools.retry import backoff_delay
        assert backoff_delay(1, 10.0, 1.0, rng=lambda: 0.999) < 11.0


class TestWithRetry:
    @pytest.mark.asyncio
    async def test_succeeds_after_three_rate_limits(self, recording_sleep):
        from config.exceptions import RateLimitedError
        from tools.retry import with_retry

        calls = []

        async def flaky():
            calls.append(1)
            if len(calls) <= 3:
                raise RateLimitedError("429")
            return "ok"

        result = await with_retry(flaky, max_retries=3, initial_delay=61.0, sleep=recording_sleep)
        assert result == "ok"
        assert len(calls) == 4
        assert len(recording_sleep.delays) == 3
        for k, delay in enumerate(recording_sleep.delays, 1):
            assert delay >= 61.0 * 2 ** (k - 1)
            assert delay < 61.0 * 2 ** (k - 1) + 1.0

    @pytest.mark.asyncio
    async def test_fourth_rate_limit_exhausts_three_retries(self, recording_sleep):
        from config.exceptions import RateLimitedError
        from tools.retry import with_retry

        calls = []

        async def limited_four_times():
            calls.append(1)
            if len(calls) <= 4:
                raise RateLimitedError("429")
            return "ok"

        with pytest.raises(RateLimitedError):
            await with_retry(limited_four_times, max_retries=3, initial_delay=61.0, sleep=recording_sleep)
        assert len(calls) == 4
        assert len(recording_sleep.delays) == 3

    @pytest.mark.asyncio
    async def test_non_rate_limit_error_raised_immediately(self, recording_sleep):
        from tools.retry import with_retry

        calls = []

        async def broken():
            calls.append(1)
            raise ValueError("invalid argument")

        with pytest.raises(ValueError, match="invalid argument"):
            await with_retry(broken, sleep=recording_sleep)
        assert len(calls) == 1
        assert recording_sleep.delays == []

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, recording_sleep):
        from tools.retry import with_retry

        calls = []

        async def always_limited():
            calls.append(1)
            raise RuntimeError("resource_exhausted")

        with pytest.raises(RuntimeError, match="resource_exhausted"):
            await with_retry(always_limited, max_retries=2, initial_delay=1.0, sleep=recording_sleep)
        assert len(calls) == 3
        assert len(recording_sleep.delays) == 2

    @pytest.mark.asyncio
    async def test_zero_retries(self, recording_sleep):
        from config.exceptions import RateLimitedError
        from tools.retry import with_retry

        async def limited():
            raise RateLimitedError()

        with pytest.raises(RateLimitedError):
            await with_retry(limited, max_retries=0, sleep=recording_sleep)
        assert recording_sleep.delays == []


class TestRetryPolicy:
    def test_from_settings(self, settings, recording_sleep):
        from tools.retry import RetryPolicy
        policy = RetryPolicy.from_settings(settings, sleep=recording_sleep)
        assert policy.max_retries == settings.retry_max_retries
        assert policy.initial_delay == settings.retry_initial_delay
        assert policy.sleep is recording_sleep

    @pytest.mark.asyncio
    async def test_run_uses_policy_sleep(self, retry_policy, recording_sleep):
        from config.exceptions import RateLimitedError

        attempts = []

        async def once_limited():
            attempts.append(1)
            if len(attempts) == 1:
                raise RateLimitedError()
            return 42

        assert await retry_policy.run(once_limited) == 42
        assert len(recording_sleep.delays) == 1
        assert recording_sleep.delays[0] >= 61.0
