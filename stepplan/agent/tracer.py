"""
Stores the outcome of every planning call.
What it records:
- The planner input (after media context is added)
- Outcome: multi_step, single_step or fallback
- Why a fallback happened
- Planned step count and tool names

And, the main purpose:
Observability of the planner, keeping failures apart from single-step answers.
"""


import json
import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from stepplan.db.models import PlanTrace
from stepplan.db.repo import add_plan_trace
from stepplan.llm.schemas import MultiStepPlan


def new_trace_id() -> str:
    return f"pt_{uuid.uuid4().hex[:16]}"


def outcome_of(plan: MultiStepPlan) -> str:
    if plan.fallback:
        return "fallback"
    return "multi_step" if plan.is_multi_step else "single_step"


async def trace_plan(
    db: AsyncSession,
    request_text: str,
    plan: MultiStepPlan,
    chat_id: Optional[str] = None,
) -> PlanTrace:
    tr = PlanTrace(
        id=new_trace_id(),
        chat_id=chat_id,
        request_text=request_text,
        outcome=outcome_of(plan),
        fallback_reason=plan.fallback_reason.value if plan.fallback_reason else None,
        step_count=len(plan.steps),
        tools=json.dumps(plan.tools, ensure_ascii=False),
    )
    return await add_plan_trace(db, tr)


def trace_to_dict(tr: PlanTrace) -> dict:
    return {
        "id": tr.id,
        "chat_id": tr.chat_id,
        "request": tr.request_text,
        "outcome": tr.outcome,
        "fallback_reason": tr.fallback_reason,
        "step_count": tr.step_count,
        "tools": json.loads(tr.tools or "[]"),
        "at": tr.created_at.isoformat(),
    }
