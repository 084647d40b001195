"""Unit tests for ATXP outcome classification"""

import pytest
from decimal import Decimal

from app.services.outcome_classifier import (
    build_flow_trace,
    classify_outcome,
    extract_response_text,
    transport_failure_trace,
    Outcome,
)


STEP_IDS = [
    "auth-start",
    "payment-preauth",
    "tool-execution-payment",
    "payment-confirmation",
    "operation-complete",
]


def statuses(trace):
    return [step.status for step in trace.steps]


class TestExtractResponseText:

    def test_prefers_first_content_text(self):
        response = {"content": [{"type": "text", "text": "hello"}], "message": "ignored"}
        assert extract_response_text(response) == "hello"

    def test_falls_back_to_message_then_error(self):
        assert extract_response_text({"message": "done"}) == "done"
        assert extract_response_text({"error": "boom"}) == "boom"

    def test_serializes_whole_response_otherwise(self):
        assert extract_response_text({"success": True, "agent": {"id": 42}}) == \
            '{"success": true, "agent": {"id": 42}}'

    def test_empty_for_missing_response(self):
        assert extract_response_text(None) == ""
        assert extract_response_text(["not", "an", "object"]) == ""


class TestClassifyOutcome:

    def test_no_response_is_failure(self):
        outcome = classify_outcome(None)
        assert outcome.has_response is False
        assert outcome.mcp_success is False

    def test_success_flag_wins_over_failure_text(self):
        outcome = classify_outcome({"success": True, "message": "Error: partial"})
        assert outcome.failure_detected is True
        assert outcome.mcp_success is True

    def test_nested_agents_success_is_positive(self):
        outcome = classify_outcome({"agents": {"success": True, "items": []}, "note": "503"})
        assert outcome.mcp_success is True

    def test_explicit_false_without_failure_text(self):
        assert classify_outcome({"success": False}).mcp_success is False

    def test_failure_text_without_positive_signal(self):
        outcome = classify_outcome({"message": "Payment declined by issuer"})
        assert outcome.failure_detected is True
        assert outcome.mcp_success is False

    def test_plain_object_is_success(self):
        assert classify_outcome({"result": "ok"}).mcp_success is True

    def test_marker_matching_is_case_insensitive(self):
        assert classify_outcome({"message": "UNAUTHORIZED"}).failure_detected is True

    def test_payment_failed_marker_suppresses_failure_markers(self):
        outcome = classify_outcome({"message": "[PAYMENT_FAILED] payment failed: 402"})
        assert outcome.payment_failed_marker is True
        assert outcome.failure_detected is False
        assert outcome.mcp_success is True

    def test_payment_failed_marker_is_case_sensitive(self):
        outcome = classify_outcome({"message": "[payment_failed] tool ran"})
        assert outcome.payment_failed_marker is False
        assert outcome.failure_detected is True


class TestBuildFlowTrace:

    def test_clean_success(self):
        result = build_flow_trace("create_agent", {"success": True, "agent": {"id": 42}}, Decimal("0.05"))

        assert result.mcp_success is True
        assert result.payment_status == "success"
        assert result.charged_cost == Decimal("0.05")
        assert [s.id for s in result.trace.steps] == STEP_IDS
        assert statuses(result.trace) == ["success"] * 5
        assert result.trace.step("payment-confirmation").cost == Decimal("0.05")
        assert result.trace.step("operation-complete").cost == Decimal("0")
        assert result.trace.total_cost == Decimal("0.05")
        assert result.trace.total_steps == 5

    def test_unauthorized_failure(self):
        result = build_flow_trace("get_agent", {"success": False, "error": "unauthorized"}, Decimal("0.01"))

        assert result.mcp_success is False
        assert statuses(result.trace) == ["success", "success", "error", "error", "error"]
        assert result.trace.step("tool-execution-payment").cost == Decimal("0.01")
        assert result.trace.step("payment-confirmation").cost == Decimal("0")
        assert result.charged_cost == Decimal("0")
        assert "unauthorized" in result.trace.step("tool-execution-payment").details

    def test_payment_failed_marker_is_warning(self):
        response = {"content": [{"type": "text", "text": "[PAYMENT_FAILED] Agent created"}]}
        result = build_flow_trace("create_agent", response, Decimal("0.05"))

        assert result.payment_status == "warning"
        assert result.trace.step("payment-confirmation").status == "warning"
        assert result.trace.step("payment-confirmation").cost == Decimal("0")
        assert result.trace.step("operation-complete").status == "success"
        assert result.trace.step("operation-complete").details.endswith("(payment not settled)")

    def test_atxp_error_takes_precedence(self):
        response = {"success": True, "atxpError": "ATXP account not funded"}
        result = build_flow_trace("prompt_agent", response, Decimal("0.01"))

        payment = result.trace.step("payment-confirmation")
        assert payment.status == "error"
        assert payment.details == "ATXP account not funded"
        assert result.mcp_success is True
        assert result.trace.step("operation-complete").details.endswith("(payment failed)")

    def test_success_with_failure_text_settles_as_error(self):
        result = build_flow_trace("prompt_agent", {"success": True, "message": "payment server timeout"}, "0.01")

        assert result.mcp_success is True
        assert result.payment_status == "error"
        assert result.charged_cost == Decimal("0")
        assert result.trace.step("payment-confirmation").details.startswith("Payment processing failed")

    def test_custom_classifier_is_used(self):
        def always_fails(response):
            return Outcome(
                has_response=True,
                response_text="forced",
                failure_detected=True,
                positive_signal=False,
                payment_failed_marker=False,
                atxp_error=None,
            )

        result = build_flow_trace("list_agents", {"success": True}, 0, classifier=always_fails)
        assert result.mcp_success is False

    def test_trace_serializes_for_the_dashboard(self):
        message = build_flow_trace("list_agents", {"success": True}, Decimal("0")).trace.to_message()

        assert message["operation"] == "list_agents"
        assert message["totalSteps"] == 5
        assert message["totalCost"] == "0.00"
        assert message["steps"][0]["id"] == "auth-start"
        assert "timestamp" in message["steps"][0]


def test_transport_failure_trace_stops_at_execution():
    trace = transport_failure_trace("get_pricing", "MCP server error: 503 - unavailable")

    assert [s.id for s in trace.steps] == STEP_IDS[:3]
    assert statuses(trace) == ["success", "success", "error"]
    assert trace.total_cost == Decimal("0")
    with pytest.raises(KeyError):
        trace.step("payment-confirmation")
