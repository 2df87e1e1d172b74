"""
Validates and normalizes a candidate plan.
What it does:
- Decides multi-step vs confident single-step
- Numbers steps by position when the model didn't
- Marks tool-less steps with tool=None
- Fills missing actions and parameters

And, the main purpose:
Always hand the caller a well-formed plan, whatever the model sent.
"""


from typing import Any, Dict, List, Mapping

from stepplan.llm.schemas import MultiStepPlan, PlanStep


def _normalize_step(step: Any, index: int) -> PlanStep:
    position = index + 1
    if isinstance(step, str) and step:
        step = {"action": step}
    if not isinstance(step, Mapping):
        step = {}

    number = step.get("stepNumber")
    if not isinstance(number, int) or isinstance(number, bool):
        number = position

    tool = step.get("tool")
    if tool == "":
        tool = None

    action = step.get("action")
    if not isinstance(action, str) or action == "":
        action = f"Step {position}"

    params = step.get("parameters")
    params = dict(params) if isinstance(params, Mapping) else {}

    return PlanStep(step_number=number, tool=tool, action=action, parameters=params)


def validate_plan(candidate: Dict[str, Any]) -> MultiStepPlan:
    steps = candidate.get("steps")
    if not candidate.get("isMultiStep") or not isinstance(steps, list) or len(steps) < 2:
        return MultiStepPlan.single_step()

    normalized: List[PlanStep] = [_normalize_step(s, i) for i, s in enumerate(steps)]
    return MultiStepPlan(
        is_multi_step=True,
        steps=normalized,
        reasoning=candidate.get("reasoning"),
    )
