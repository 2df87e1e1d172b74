from typing import AsyncIterator, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from stepplan.agent.routing import execution_plan, plan_request
from stepplan.agent.tracer import trace_to_dict
from stepplan.api.types import PlanRequestBody
from stepplan.core.config import settings
from stepplan.db.repo import list_plan_traces
from stepplan.db.session import SessionLocal
from stepplan.llm.client import TextGenerator, generate_text


"""
FastAPI routes for the planner.
What it provides:
- Health endpoint
- Plan a request (raw planner outcome + what will be executed)
- Browse recorded plan outcomes

And, the main purpose:
Expose the planner over HTTP.
"""

router = APIRouter()


async def get_db() -> AsyncIterator[AsyncSession]:
    async with SessionLocal() as db:
        yield db


def get_generator() -> TextGenerator:
    return generate_text


@router.get("/health")
async def api_health():
    return {"status": "ok", "provider": settings.LLM_PROVIDER}


@router.post("/plan")
async def api_plan(
    req: PlanRequestBody,
    db: AsyncSession = Depends(get_db),
    generator: TextGenerator = Depends(get_generator),
):
    plan = await plan_request(
        req.text,
        image_url=req.image_url,
        video_url=req.video_url,
        audio_url=req.audio_url,
        chat_id=req.chat_id,
        db=db,
        generator=generator,
    )
    return {"plan": plan.to_payload(), "execution": execution_plan(plan).to_payload()}


@router.get("/plan/traces")
async def api_plan_traces(
    chat_id: Optional[str] = None,
    limit: int = Query(50, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    traces = await list_plan_traces(db, chat_id=chat_id, limit=limit)
    return [trace_to_dict(tr) for tr in traces]
