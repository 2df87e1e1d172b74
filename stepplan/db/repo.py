# stepplan/db/repo.py

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stepplan.db.models import PlanTrace


async def add_plan_trace(db: AsyncSession, tr: PlanTrace) -> PlanTrace:
    db.add(tr)
    await db.commit()
    await db.refresh(tr)
    return tr


async def list_plan_traces(
    db: AsyncSession,
    chat_id: Optional[str] = None,
    limit: int = 50,
) -> list[PlanTrace]:
    q = select(PlanTrace)
    if chat_id is not None:
        q = q.where(PlanTrace.chat_id == chat_id)
    q = q.order_by(PlanTrace.created_at.desc()).limit(limit)
    res = await db.execute(q)
    return list(res.scalars().all())
