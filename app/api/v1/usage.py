"""Usage ledger reporting endpoint"""

from datetime import datetime
from fastapi import APIRouter, Depends, Query
from typing import Optional

from app.api.dependencies import get_usage_ledger, resolve_user_id
from app.schemas.usage import UsageRecord, UsageReport
from app.services.usage_ledger import UsageLedger


router = APIRouter(tags=["Usage"])


@router.get("/usage", response_model=UsageReport)
async def get_usage_report(
    user_id: Optional[str] = Query(None, alias="userId"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    ledger: UsageLedger = Depends(get_usage_ledger)
):
    """
    Summarize a user's tool usage.

    Both date bounds are inclusive and optional. ``totalCost`` is the exact
    sum of the recorded costs.
    """
    summary = await ledger.get_user_usage_report(
        resolve_user_id(user_id),
        start_date=start_date,
        end_date=end_date,
    )
    return UsageReport(
        total_cost=summary.total_cost,
        total_actions=summary.total_actions,
        successful_actions=summary.successful_actions,
        failed_actions=summary.failed_actions,
        usage=[UsageRecord.model_validate(record) for record in summary.usage],
    )
