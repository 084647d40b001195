"""Unit tests for log redaction"""

from app.core.logging_config import censor_sensitive_data


def test_credentials_are_redacted():
    event = censor_sensitive_data(None, "info", {
        "event": "gateway_request",
        "apiKey": "secret-key",
        "atxp_connection_string": "https://accounts.atxp.ai?connection_token=abc",
        "tool_name": "prompt_agent",
    })

    assert event["apiKey"] == "***REDACTED***"
    assert event["atxp_connection_string"] == "***REDACTED***"
    assert event["tool_name"] == "prompt_agent"


def test_nested_arguments_are_redacted():
    event = censor_sensitive_data(None, "info", {
        "event": "x",
        "arguments": {"agentId": 1, "apiKey": "k"},
        "items": [{"token": "t"}, "plain"],
    })

    assert event["arguments"] == {"agentId": 1, "apiKey": "***REDACTED***"}
    assert event["items"] == [{"token": "***REDACTED***"}, "plain"]
