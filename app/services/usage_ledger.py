"""
Usage Ledger Service - append-only record of tool invocation attempts.

One row is written per invocation that reached the MCP server, whatever the
outcome. Rows are never updated or deleted; the service only appends and
queries.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging_config import get_logger
from app.models.usage_record import UsageRecordModel, UsageStatus
from app.schemas.common import to_decimal

logger = get_logger(__name__)


# ============================================================================
# Data Models
# ============================================================================


@dataclass
class UsageEntry:
    """Values for one ledger row"""
    user_id: str
    tool_name: str
    cost: Decimal
    status: UsageStatus
    request: Dict[str, Any]
    response: Any = None
    agent_id: Optional[int] = None
    tokens_used: Optional[int] = None
    execution_time_ms: Optional[int] = None
    error_message: Optional[str] = None


@dataclass
class UsageSummary:
    """Totals over a set of ledger rows"""
    total_cost: Decimal
    total_actions: int
    successful_actions: int
    failed_actions: int
    usage: List[UsageRecordModel] = field(default_factory=list)


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Timestamps are stored as naive UTC"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def summarize(records: List[UsageRecordModel]) -> UsageSummary:
    """Aggregate rows; the cost total is an exact Decimal sum"""
    return UsageSummary(
        total_cost=sum((to_decimal(r.cost) for r in records), Decimal("0")),
        total_actions=len(records),
        successful_actions=sum(1 for r in records if r.status == UsageStatus.SUCCESS),
        failed_actions=sum(1 for r in records if r.status == UsageStatus.ERROR),
        usage=list(records),
    )


# ============================================================================
# Usage Ledger
# ============================================================================


class UsageLedger:
    """Append and query access to the ``mcp_tool_usage`` table"""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def record_usage(self, entry: UsageEntry) -> UsageRecordModel:
        """
        Append a ledger row and commit it.

        The commit happens here, before the caller responds, so the row is
        durable even if the response is never delivered.

        Raises:
            ValueError: If the status is PENDING, which is never written
        """
        if entry.status == UsageStatus.PENDING:
            raise ValueError("pending usage records are not written")

        record = UsageRecordModel(
            user_id=entry.user_id,
            tool_name=entry.tool_name,
            agent_id=entry.agent_id,
            cost=to_decimal(entry.cost),
            tokens_used=entry.tokens_used,
            execution_time_ms=entry.execution_time_ms,
            status=entry.status,
            error_message=entry.error_message,
            request=entry.request,
            response=entry.response,
            created_at=datetime.utcnow(),
        )

        try:
            self.db.add(record)
            await self.db.commit()
            await self.db.refresh(record)
        except Exception as e:
            await self.db.rollback()
            logger.error(
                "usage_record_write_failed",
                user_id=entry.user_id,
                tool_name=entry.tool_name,
                error=str(e),
            )
            raise

        logger.info(
            "usage_recorded",
            usage_id=record.id,
            user_id=record.user_id,
            tool_name=record.tool_name,
            status=record.status.value,
            cost=str(record.cost),
        )
        return record

    async def get_user_usage(
        self,
        user_id: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[UsageRecordModel]:
        """
        The user's rows with ``created_at`` in ``[start_date, end_date]``,
        oldest first. Either bound may be omitted.
        """
        conditions = [UsageRecordModel.user_id == user_id]
        start_date = _naive_utc(start_date)
        end_date = _naive_utc(end_date)
        if start_date is not None:
            conditions.append(UsageRecordModel.created_at >= start_date)
        if end_date is not None:
            conditions.append(UsageRecordModel.created_at <= end_date)

        query = (
            select(UsageRecordModel)
            .where(and_(*conditions))
            .order_by(UsageRecordModel.created_at, UsageRecordModel.id)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_user_usage_report(
        self,
        user_id: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> UsageSummary:
        """Usage summary for a user between two instants, bounds inclusive"""
        records = await self.get_user_usage(user_id, start_date, end_date)
        summary = summarize(records)

        logger.debug(
            "usage_report_built",
            user_id=user_id,
            total_actions=summary.total_actions,
            total_cost=str(summary.total_cost),
        )
        return summary
