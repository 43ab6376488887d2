import pytest

from cognify.errors import (
    BackendError,
    FailureReason,
    NotConfigured,
    RateLimitExceeded,
    classify_backend_failure,
)


@pytest.mark.parametrize(
    "status_code,status,message",
    [
        (429, None, "Too Many Requests"),
        (400, "RESOURCE_EXHAUSTED", "Resource has been exhausted"),
        (403, None, "You exceeded your current quota, please check your plan"),
        (500, None, "Your credits exhausted for this billing period"),
    ],
)
def test_quota_failures(status_code, status, message):
    assert classify_backend_failure(status_code, status, message) is FailureReason.QUOTA_EXHAUSTED


@pytest.mark.parametrize(
    "status_code,status,message",
    [
        (400, "INVALID_ARGUMENT", "API key not valid. Please pass a valid API key."),
        (500, "INTERNAL", "Internal error encountered."),
        (None, None, ""),
    ],
)
def test_other_failures_are_unknown(status_code, status, message):
    assert classify_backend_failure(status_code, status, message) is FailureReason.UNKNOWN


def test_error_codes_and_messages():
    assert NotConfigured().code == "NOT_CONFIGURED"
    assert "API key" in NotConfigured().message

    limited = RateLimitExceeded(retry_after=12.5)
    assert limited.retry_after == 12.5
    assert limited.code == "RATE_LIMITED"

    error = BackendError("boom", status_code=503)
    assert error.reason is FailureReason.UNKNOWN
    assert str(error) == "boom"
