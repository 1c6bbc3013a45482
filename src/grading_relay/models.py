"""
Request and Verdict Models

GradingRequest is built by the relay from a validated request body.
GradingVerdict describes the shape the model is asked to return; the relay
only checks model output against it (see review_verdict), it never rewrites
the payload.
"""

from enum import Enum
from typing import Any, List, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError

MIN_RESPONSE_LENGTH = 10
MAX_RESPONSE_LENGTH = 2000


class Verdict(str, Enum):
    CORRECT = "Correct"
    NOT_QUITE_RIGHT = "Not quite right"
    INCORRECT = "Incorrect"


class GradingRequest(BaseModel):
    """A learner response ready to be graded."""
    response_text: str = Field(min_length=MIN_RESPONSE_LENGTH, max_length=MAX_RESPONSE_LENGTH)
    learning_objective: str = Field(min_length=1)
    criteria: List[str] = Field(default_factory=list)


class CriterionFeedback(BaseModel):
    model_config = ConfigDict(extra="allow")

    criterion: str
    met: bool
    comment: str


class GradingVerdict(BaseModel):
    """Structured grading result returned to the caller."""
    model_config = ConfigDict(extra="allow")

    verdict: Verdict
    summary: str
    criteria_feedback: List[CriterionFeedback]
    next_step: str


def _format_validation_error(error: ValidationError) -> List[str]:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "verdict"
        problems.append(f"{location}: {item['msg']}")
    return problems


def _same_criterion(returned: str, expected: str) -> bool:
    # Models often echo criteria with numbering or light rewording
    a = returned.strip().casefold()
    b = expected.strip().casefold()
    return a == b or b in a or (bool(a) and a in b)


def review_verdict(payload: Any, criteria: Sequence[str]) -> List[str]:
    """
    Check model output against the verdict shape.

    Checks:
    - payload matches GradingVerdict (keys, types, verdict value)
    - one criteria_feedback item per input criterion
    - feedback items follow the input criteria order

    Args:
        payload: Parsed model JSON
        criteria: Criteria the learner was graded against

    Returns:
        List of problems (empty if the payload looks right)
    """
    if not isinstance(payload, dict):
        return [f"expected a JSON object, got {type(payload).__name__}"]

    try:
        verdict = GradingVerdict.model_validate(payload)
    except ValidationError as e:
        return _format_validation_error(e)

    problems = []
    feedback = verdict.criteria_feedback
    if len(feedback) != len(criteria):
        problems.append(
            f"criteria_feedback has {len(feedback)} items for {len(criteria)} criteria"
        )
    else:
        for i, (item, criterion) in enumerate(zip(feedback, criteria), 1):
            if not _same_criterion(item.criterion, criterion):
                problems.append(
                    f"criteria_feedback item {i} is {item.criterion!r}, expected {criterion!r}"
                )

    return problems
