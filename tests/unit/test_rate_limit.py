"""Tests for rate limiting utilities."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from kubernetes.client.exceptions import ApiException

from route_cert_operator.utils.rate_limit import RateLimiter, handle_rate_limit_error, is_rate_limit_error


class TestRateLimiter:
    """Test cases for RateLimiter."""

    def test_decorator(self):
        """Test that the limiter wraps a callable transparently."""
        limiter = RateLimiter(100.0)

        @limiter
        def test_func(a, b, c=None):
            return f"{a}-{b}-{c}"

        assert test_func("x", "y", c="z") == "x-y-z"

    @patch("route_cert_operator.utils.rate_limit.time.sleep")
    def test_sleeps_when_calls_are_too_fast(self, mock_sleep):
        """Test that the limiter sleeps for the rest of the interval."""
        limiter = RateLimiter(1.0)

        with patch("route_cert_operator.utils.rate_limit.time.time", return_value=10.0):
            limiter.wait()
        mock_sleep.assert_not_called()

        with patch("route_cert_operator.utils.rate_limit.time.time", return_value=10.25):
            limiter.wait()
        mock_sleep.assert_called_once()
        assert mock_sleep.call_args[0][0] == pytest.approx(0.75)

    @patch("route_cert_operator.utils.rate_limit.time.sleep")
    def test_no_sleep_after_interval(self, mock_sleep):
        limiter = RateLimiter(2.0)
        with patch("route_cert_operator.utils.rate_limit.time.time", side_effect=[10.0, 10.0, 11.0, 11.0]):
            limiter.wait()
            limiter.wait()
        mock_sleep.assert_not_called()

    @patch("route_cert_operator.utils.rate_limit.time.sleep")
    def test_unlimited(self, mock_sleep):
        limiter = RateLimiter(0)
        for _ in range(3):
            limiter.wait()
        mock_sleep.assert_not_called()


class TestIsRateLimitError:
    """Test cases for is_rate_limit_error."""

    def test_429(self):
        assert is_rate_limit_error(ApiException(status=429, reason="Too Many Requests")) is True

    def test_503_rate_limit(self):
        assert is_rate_limit_error(ApiException(status=503, reason="rate limit exceeded")) is True

    def test_503_other(self):
        assert is_rate_limit_error(ApiException(status=503, reason="Service Unavailable")) is False

    def test_other_status(self):
        assert is_rate_limit_error(ApiException(status=404, reason="Not Found")) is False

    def test_not_api_exception(self):
        assert is_rate_limit_error(ValueError("429")) is False


class TestHandleRateLimitError:
    """Test cases for handle_rate_limit_error."""

    @patch("route_cert_operator.utils.rate_limit.time.sleep")
    def test_backs_off_exponentially(self, mock_sleep):
        error = ApiException(status=429, reason="Too Many Requests")

        assert handle_rate_limit_error(error, attempt=0) is True
        assert handle_rate_limit_error(error, attempt=2) is True

        assert [call[0][0] for call in mock_sleep.call_args_list] == [1, 4]

    @patch("route_cert_operator.utils.rate_limit.time.sleep")
    def test_gives_up_after_max_retries(self, mock_sleep):
        error = ApiException(status=429, reason="Too Many Requests")
        assert handle_rate_limit_error(error, attempt=3, max_retries=3) is False
        mock_sleep.assert_not_called()

    @patch("route_cert_operator.utils.rate_limit.time.sleep")
    def test_other_errors_not_retried(self, mock_sleep):
        assert handle_rate_limit_error(ApiException(status=500, reason="boom"), attempt=0) is False
        mock_sleep.assert_not_called()
