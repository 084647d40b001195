"""
Outcome Classifier - turns a raw MCP response into a five-step ATXP flow trace.

The remote server does not report payment settlement separately from the tool
result, so settlement is inferred from the response text. The inference lives
in ``classify_outcome``; ``build_flow_trace`` only narrates its verdict.

Substring matching can misread an agent's own reply that happens to contain
"error:" or a status code. That is a known limitation of the heuristic.
"""

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from app.schemas.atxp_flow import FlowStep, FlowStepStatus, FlowTrace
from app.schemas.common import to_decimal


FAILURE_MARKERS = (
    "error:",
    "failed:",
    "payment failed",
    "[payment_failed]",
    "unexpected status code",
    "insufficient funds",
    "payment declined",
    "authentication failed",
    "unauthorized",
    "payment server",
    "/charge endpoint",
    "401",
    "403",
    "500",
    "502",
    "503",
    "504",
)

# Case-sensitive: the tool ran but the server could not settle payment
PAYMENT_FAILED_MARKER = "[PAYMENT_FAILED]"

STEP_AUTH = "auth-start"
STEP_PREAUTH = "payment-preauth"
STEP_EXECUTION = "tool-execution-payment"
STEP_PAYMENT = "payment-confirmation"
STEP_COMPLETE = "operation-complete"


@dataclass(frozen=True)
class Outcome:
    """Verdict of the heuristic for one response"""
    has_response: bool
    response_text: str
    failure_detected: bool
    positive_signal: bool
    payment_failed_marker: bool
    atxp_error: Optional[str]
    explicit_failure: bool = False

    @property
    def mcp_success(self) -> bool:
        if not self.has_response:
            return False
        if self.positive_signal:
            return True
        return not self.failure_detected and not self.explicit_failure


@dataclass(frozen=True)
class ClassifiedOutcome:
    mcp_success: bool
    payment_status: FlowStepStatus
    charged_cost: Decimal
    trace: FlowTrace


def extract_response_text(response: Any) -> str:
    """
    Text the heuristic inspects.

    First of ``content[0].text``, ``message``, ``error``; otherwise the whole
    response serialized as JSON. Empty when there is no response object.
    """
    if not isinstance(response, dict):
        return ""

    content = response.get("content")
    if isinstance(content, list) and content:
        first = content[0]
        if isinstance(first, dict) and first.get("text"):
            return str(first["text"])

    for key in ("message", "error"):
        value = response.get(key)
        if value:
            return value if isinstance(value, str) else json.dumps(value, default=str)

    return json.dumps(response, default=str)


def _has_positive_signal(response: dict) -> bool:
    if response.get("success") is True:
        return True
    agents = response.get("agents")
    if isinstance(agents, dict) and agents.get("success") is True:
        return True
    content = response.get("content")
    return isinstance(content, list) and len(content) > 0


def classify_outcome(response: Any) -> Outcome:
    """
    Decide whether the underlying operation succeeded.

    A positive signal (``success: true``, ``agents.success: true`` or a
    non-empty ``content`` list) wins over failure text. Without one, the
    operation succeeded unless a failure marker appears or ``success`` is
    explicitly false. Failure markers are ignored when the text carries the
    payment-failed marker, which means the tool itself ran.
    """
    if not isinstance(response, dict):
        return Outcome(
            has_response=False,
            response_text="",
            failure_detected=False,
            positive_signal=False,
            payment_failed_marker=False,
            atxp_error=None,
        )

    text = extract_response_text(response)
    lowered = text.lower()
    marker = PAYMENT_FAILED_MARKER in text
    failure = not marker and any(m in lowered for m in FAILURE_MARKERS)

    atxp_error = response.get("atxpError")
    if atxp_error is not None and not isinstance(atxp_error, str):
        atxp_error = json.dumps(atxp_error, default=str)

    return Outcome(
        has_response=True,
        response_text=text,
        failure_detected=failure,
        positive_signal=_has_positive_signal(response),
        payment_failed_marker=marker,
        atxp_error=atxp_error,
        explicit_failure=response.get("success") is False,
    )


def _auth_step(operation: str, now: datetime) -> FlowStep:
    return FlowStep(
        id=STEP_AUTH,
        label="ATXP Authentication",
        status="success",
        timestamp=now,
        details=f"Authenticating with API key for {operation}",
    )


def _preauth_step(now: datetime) -> FlowStep:
    return FlowStep(
        id=STEP_PREAUTH,
        label="Payment Pre-Authorization",
        status="success",
        timestamp=now,
        details="MCP server validates payment capacity via ATXP",
    )


def build_flow_trace(
    operation: str,
    response: Any,
    cost: Any,
    classifier=classify_outcome,
) -> ClassifiedOutcome:
    """
    Narrate a gateway response as a five-step trace.

    Args:
        operation: Tool name shown in the step details
        response: Response object the adapter extracted, None if opaque
        cost: Cost of the call; shown as charged only if payment confirmation succeeds
        classifier: Heuristic to apply, ``classify_outcome`` by default

    Returns:
        The verdict, the payment step status, the charged cost and the trace
    """
    amount = to_decimal(cost)
    outcome = classifier(response)
    mcp_success = outcome.mcp_success
    text = outcome.response_text
    now = datetime.now(timezone.utc)

    execution = FlowStep(
        id=STEP_EXECUTION,
        label="Tool Execution + Payment",
        status="success" if mcp_success else "error",
        details=(
            f"Executing {operation} with integrated payment processing via MCP server"
            if mcp_success
            else f"{operation} execution failed: {text or 'No response from MCP server'}"
        ),
        cost=amount,
    )

    payment_status: FlowStepStatus
    if outcome.atxp_error is not None:
        payment_status = "error"
        payment_details = outcome.atxp_error
    elif outcome.payment_failed_marker:
        payment_status = "warning"
        payment_details = (
            "Payment validation failed - running in test mode. Operation "
            "completed successfully but payment could not be processed."
        )
    elif not mcp_success or outcome.failure_detected:
        payment_status = "error"
        if outcome.failure_detected:
            payment_details = f"Payment processing failed: {text}"
        else:
            payment_details = "Payment not processed due to operation failure"
    else:
        payment_status = "success"
        payment_details = (
            f'ATXP payment processed successfully. Response: "{text}"'
            if text else "ATXP payment processed successfully"
        )

    charged = amount if payment_status == "success" else Decimal("0")
    payment = FlowStep(
        id=STEP_PAYMENT,
        label="Payment Confirmation",
        status=payment_status,
        details=payment_details,
        cost=charged,
    )

    if mcp_success:
        suffix = {"error": " (payment failed)", "warning": " (payment not settled)"}
        complete_details = f"{operation} executed successfully{suffix.get(payment_status, '')}"
    else:
        complete_details = f"{operation} execution failed"
    complete = FlowStep(
        id=STEP_COMPLETE,
        label="Operation Complete",
        status="success" if mcp_success else "error",
        details=complete_details,
    )

    trace = FlowTrace(
        operation=operation,
        steps=[_auth_step(operation, now), _preauth_step(now), execution, payment, complete],
        total_cost=charged,
    )
    return ClassifiedOutcome(
        mcp_success=mcp_success,
        payment_status=payment_status,
        charged_cost=charged,
        trace=trace,
    )


def transport_failure_trace(operation: str, error_message: str) -> FlowTrace:
    """Partial trace for a call that never produced a response"""
    now = datetime.now(timezone.utc)
    return FlowTrace(
        operation=operation,
        steps=[
            _auth_step(operation, now),
            _preauth_step(now),
            FlowStep(
                id=STEP_EXECUTION,
                label="Tool Execution + Payment",
                status="error",
                details=f"{operation} execution failed: {error_message}",
            ),
        ],
    )
