"""Unit tests for retry and HTTP error classification."""

import pytest
import requests

from core.resilience import (
    ClientError,
    NetworkError,
    RateLimitError,
    ServerError,
    classify_response_error,
    with_retry,
)
from pipelines.extractors.nba_api import _classify_nba_api_error


def make_response(status_code, headers=None, text=""):
    response = requests.Response()
    response.status_code = status_code
    response.headers.update(headers or {})
    response._content = text.encode()
    return response


class TestWithRetry:
    def test_retries_retryable_errors(self):
        calls = []

        @with_retry(max_attempts=3, base_delay=0, max_delay=0)
        def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise NetworkError("timed out")
            return "ok"

        assert flaky() == "ok"
        assert len(calls) == 3

    def test_gives_up_after_max_attempts(self):
        calls = []

        @with_retry(max_attempts=2, base_delay=0, max_delay=0)
        def always_down():
            calls.append(1)
            raise NetworkError("down")

        with pytest.raises(NetworkError):
            always_down()
        assert len(calls) == 2

    def test_client_errors_not_retried(self):
        calls = []

        @with_retry(max_attempts=3, base_delay=0, max_delay=0)
        def bad_request():
            calls.append(1)
            raise ClientError("bad", status_code=400)

        with pytest.raises(ClientError):
            bad_request()
        assert len(calls) == 1


class TestClassifyResponseError:
    def test_rate_limit(self):
        with pytest.raises(RateLimitError) as exc:
            classify_response_error(make_response(429, {"Retry-After": "7"}))
        assert exc.value.retry_after == 7

    def test_server_error(self):
        with pytest.raises(ServerError):
            classify_response_error(make_response(503))

    def test_client_error(self):
        with pytest.raises(ClientError):
            classify_response_error(make_response(404, text="missing"))

    def test_ok(self):
        classify_response_error(make_response(200))


class TestNbaApiErrorClassification:
    def test_timeout_is_retryable(self):
        with pytest.raises(NetworkError):
            _classify_nba_api_error(Exception("Read timed out"))

    def test_other_errors_pass_through(self):
        assert _classify_nba_api_error(KeyError("resultSets")) is None
