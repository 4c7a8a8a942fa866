"""Unit tests for logging processors and context helpers."""

from utils import clear_client_ip, clear_correlation_id, set_client_ip, set_correlation_id
from utils.logging import REDACTED, _add_request_context, _log4j_formatter, _redact_sensitive


def test_redacts_nested_secrets() -> None:
    event = {
        "event": "GitHub API request",
        "headers": {"Authorization": "token ghp_secret", "Accept": "application/json"},
        "github_token": "ghp_secret",
        "attempts": [{"api_key": "sk-1"}],
    }

    result = _redact_sensitive(None, "info", event)

    assert result["headers"] == {"Authorization": REDACTED, "Accept": "application/json"}
    assert result["github_token"] == REDACTED
    assert result["attempts"] == [{"api_key": REDACTED}]
    assert result["event"] == "GitHub API request"


def test_request_context_is_added_and_cleared() -> None:
    set_correlation_id("req-123")
    set_client_ip("203.0.113.9")
    try:
        event = _add_request_context(None, "info", {"event": "x"})
    finally:
        clear_correlation_id()
        clear_client_ip()

    assert event["correlation_id"] == "req-123"
    assert event["client_ip"] == "203.0.113.9"
    assert "pid" in event

    assert "correlation_id" not in _add_request_context(None, "info", {"event": "y"})


def test_log4j_format() -> None:
    line = _log4j_formatter(
        None,
        "info",
        {"timestamp": "2024-01-15T10:00:00Z", "level": "info", "event": "Rate limit exceeded", "ip": "1.2.3.4"},
    )

    assert line == '2024-01-15T10:00:00Z [info]: Rate limit exceeded {"ip":"1.2.3.4"}'


def test_set_correlation_id_generates_one() -> None:
    try:
        assert set_correlation_id()
    finally:
        clear_correlation_id()
