"""
Decides how a request will be executed.
What it does:
- Cuts the request down to the text worth planning on
- Tells the planner which media came with the request
- Calls the planner and records the outcome
- Turns a planner fallback into a plain single-step plan

And, the main purpose:
The caller-side of the planner: whatever happens, return something executable.
"""


from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from stepplan.agent.planner import plan_multi_step_execution
from stepplan.agent.tracer import trace_plan
from stepplan.core.config import settings
from stepplan.core.logging import get_logger
from stepplan.llm.client import TextGenerator
from stepplan.llm.prompts import AUDIO_MARKER, IMAGE_MARKER, VIDEO_MARKER
from stepplan.llm.schemas import MultiStepPlan

log = get_logger("agent.routing")


def extract_detection_text(prompt: Optional[str]) -> str:
    """Text before the first metadata bracket, else the first line."""
    if not prompt:
        return ""
    bracket = prompt.find("[")
    if bracket > 0:
        return prompt[:bracket].strip()
    return prompt.split("\n")[0].strip()


def build_planner_context(
    prompt: Optional[str],
    *,
    image_url: Optional[str] = None,
    video_url: Optional[str] = None,
    audio_url: Optional[str] = None,
) -> str:
    text = extract_detection_text(prompt)
    if image_url:
        return f"{IMAGE_MARKER}\n{text}"
    if video_url:
        return f"{VIDEO_MARKER}\n{text}"
    if audio_url:
        return f"{AUDIO_MARKER}\n{text}"
    return text


async def plan_request(
    prompt: Optional[str],
    *,
    image_url: Optional[str] = None,
    video_url: Optional[str] = None,
    audio_url: Optional[str] = None,
    chat_id: Optional[str] = None,
    db: Optional[AsyncSession] = None,
    generator: Optional[TextGenerator] = None,
) -> MultiStepPlan:
    """Run the planner and trace the raw outcome (fallback included)."""
    context = build_planner_context(prompt, image_url=image_url, video_url=video_url, audio_url=audio_url)
    plan = await plan_multi_step_execution(context, generator=generator)

    log.info(
        f"Plan result: multi_step={plan.is_multi_step} steps={len(plan.steps)} "
        f"fallback={plan.fallback} reason={plan.fallback_reason.value if plan.fallback_reason else None}"
    )

    if db is not None and settings.PLAN_TRACE_ENABLED:
        try:
            await trace_plan(db, context, plan, chat_id=chat_id)
        except SQLAlchemyError:
            log.exception("Plan trace write failed, returning the plan untraced")
            await db.rollback()
    return plan


def execution_plan(plan: MultiStepPlan) -> MultiStepPlan:
    if plan.fallback:
        log.warning("Planner failed, treating as single-step")
        return MultiStepPlan.single_step()
    return plan


async def plan_execution(prompt: Optional[str], **kwargs) -> MultiStepPlan:
    return execution_plan(await plan_request(prompt, **kwargs))
