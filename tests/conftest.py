import pytest

from stepplan.llm.schemas import GenerationResult


VALID_PLAN = (
    '{"isMultiStep": true, "steps": ['
    '{"stepNumber": 1, "tool": "send_location", "action": "send location in Slovenia", '
    '"parameters": {"region": "Slovenia"}}, '
    '{"stepNumber": 2, "tool": "create_image", "action": "create image of lightning", '
    '"parameters": {"prompt": "lightning"}}'
    '], "reasoning": "Has sequence word \'and then\'"}'
)


@pytest.fixture
def valid_plan_text() -> str:
    return VALID_PLAN


@pytest.fixture
def make_generator():
    """Build a fake text generator; every call is appended to `calls`."""
    def factory(text=None, error=None, calls=None):
        async def generator(prompt, history=None, options=None):
            if calls is not None:
                calls.append({"prompt": prompt, "history": history, "options": options})
            return GenerationResult(text=text, error=error)
        return generator
    return factory
