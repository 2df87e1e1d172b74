from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class FallbackReason(str, Enum):
    MODEL_CALL_FAILED = "model_call_failed"
    NO_STRUCTURED_PAYLOAD = "no_structured_payload"
    UNREPAIRABLE_SYNTAX = "unrepairable_syntax"


class GenerationResult(BaseModel):
    text: Optional[str] = None
    error: Optional[str] = None

    @property
    def usable(self) -> bool:
        return not self.error and bool((self.text or "").strip())


class PlanStep(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    step_number: int = Field(..., alias="stepNumber")
    tool: Any = Field(..., description="Tool name as the model wrote it, or None for a text-only step")
    action: str
    parameters: Dict[str, Any]


class MultiStepPlan(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_multi_step: bool = Field(..., alias="isMultiStep")
    steps: List[PlanStep] = []
    reasoning: Optional[Any] = None
    fallback: bool = False
    fallback_reason: Optional[FallbackReason] = Field(None, alias="fallbackReason")

    @classmethod
    def single_step(cls) -> "MultiStepPlan":
        return cls(is_multi_step=False)

    @classmethod
    def fallback_for(cls, reason: FallbackReason) -> "MultiStepPlan":
        return cls(is_multi_step=False, fallback=True, fallback_reason=reason)

    @property
    def tools(self) -> List[Any]:
        return [s.tool for s in self.steps if s.tool is not None]

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_defaults=True)


@dataclass(frozen=True)
class ParseResult:
    """Outcome of parsing raw model text: a candidate plan dict, or the reason there is none."""

    candidate: Optional[Dict[str, Any]] = None
    reason: Optional[FallbackReason] = None
    repaired: bool = False

    @property
    def ok(self) -> bool:
        return self.candidate is not None
