"""
Plans multi-step execution for one user request.
What it does:
- Builds the planning prompt for the request
- Makes one call to the fast planner model
- Recovers the plan JSON from the raw text (with one repair pass)
- Validates and normalizes the steps

And, the main purpose:
Planning is advisory. Every failure comes back as a fallback plan,
never as an exception, so a request is never blocked by its planner.
"""


from typing import Optional

from stepplan.agent.validator import validate_plan
from stepplan.core.config import settings
from stepplan.core.logging import get_logger
from stepplan.llm.client import TextGenerator, generate_text
from stepplan.llm.json_repair import parse_plan_text
from stepplan.llm.prompts import build_planner_prompt
from stepplan.llm.schemas import FallbackReason, GenerationResult, MultiStepPlan

log = get_logger("agent.planner")


async def _call_model(generator: TextGenerator, prompt: str) -> Optional[GenerationResult]:
    options = {"model": settings.PLANNER_MODEL, "temperature": settings.PLANNER_TEMPERATURE}
    try:
        result = await generator(prompt, [], options)
    except Exception:
        log.exception("Planner model call raised instead of returning an error")
        return None
    if not isinstance(result, GenerationResult):
        log.error(f"Planner model call returned {type(result).__name__}, expected GenerationResult")
        return None
    return result


async def plan_multi_step_execution(
    user_request: str,
    generator: Optional[TextGenerator] = None,
) -> MultiStepPlan:
    generator = generator or generate_text
    prompt = build_planner_prompt(user_request)

    result = await _call_model(generator, prompt)
    if result is None or not result.usable:
        reason = (result.error if result else None) or "empty response"
        log.warning(f"Planner fallback ({FallbackReason.MODEL_CALL_FAILED.value}): {reason}")
        return MultiStepPlan.fallback_for(FallbackReason.MODEL_CALL_FAILED)

    parsed = parse_plan_text(result.text)
    if not parsed.ok:
        log.warning(f"Planner fallback ({parsed.reason.value})")
        return MultiStepPlan.fallback_for(parsed.reason)

    plan = validate_plan(parsed.candidate)
    if plan.is_multi_step:
        log.info(f"Multi-step plan generated with {len(plan.steps)} steps (repaired={parsed.repaired})")
    else:
        log.info("Planner classified request as single-step")
    return plan
