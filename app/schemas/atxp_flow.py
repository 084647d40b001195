"""Pydantic schemas for the ATXP flow trace shown in the dashboard flow monitor"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Literal
from pydantic import Field, computed_field

from app.schemas.common import CamelModel, CostAmount


FlowStepStatus = Literal["pending", "in-progress", "success", "warning", "error"]


class FlowStep(CamelModel):
    """One synthetic stage of a tool invocation"""
    id: str = Field(..., description="Stable step identifier, e.g. payment-confirmation")
    label: str
    status: FlowStepStatus
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    details: str = ""
    cost: CostAmount = Decimal("0")


class FlowTrace(CamelModel):
    """
    Ordered narration of a single invocation.

    Built fresh for every request and never stored.
    """
    operation: str
    steps: List[FlowStep] = Field(default_factory=list)
    total_cost: CostAmount = Decimal("0")

    @computed_field(alias="totalSteps")
    @property
    def total_steps(self) -> int:
        return len(self.steps)

    def step(self, step_id: str) -> FlowStep:
        """Look up a step by id"""
        for step in self.steps:
            if step.id == step_id:
                return step
        raise KeyError(step_id)

    def to_message(self) -> dict:
        """JSON-ready payload for the flow monitor"""
        return self.model_dump(mode="json", by_alias=True)
