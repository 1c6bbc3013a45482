"""
Grading Rubrics

Defines the prompt styles a deployment can grade with:
- criterion_referenced: neutral, criterion-by-criterion (default)
- encouraging: formative feedback with a warmer tone
- strict: summative, every criterion must be clearly evidenced

All rubrics ask for the same JSON shape and the same three verdicts, so the
caller never needs to know which one a deployment uses.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

# Verdict strings the model must choose from
VERDICTS: Tuple[str, ...] = ("Correct", "Not quite right", "Incorrect")


def format_verdict_choices(separator: str = ", ") -> str:
    """Format the verdict strings as quoted choices for a prompt."""
    return separator.join(f'"{v}"' for v in VERDICTS)


@dataclass(frozen=True)
class Rubric:
    """A named prompt template configuration."""
    name: str
    description: str
    role: str  # Opening sentence of the system instruction
    guidance: Tuple[str, ...]  # Extra system-instruction sentences
    instructions: Tuple[str, ...]  # Lines under EVALUATION INSTRUCTIONS
    summary_length: str = "1–3 sentences"

    def system_instruction(self) -> str:
        """Render the system instruction for this rubric."""
        parts: List[str] = [self.role]
        parts.extend(self.guidance)
        parts.append(
            f"Return ONLY valid JSON. The verdict MUST be one of: "
            f"{format_verdict_choices()}."
        )
        return " ".join(parts)

    def output_fields(self) -> List[str]:
        """Lines describing the JSON keys the model must return."""
        return [
            f"  verdict ({format_verdict_choices(' | ')})",
            f"  summary ({self.summary_length})",
            "  criteria_feedback (one item per criterion, in order: "
            "criterion, met (true/false), comment)",
            "  next_step (ONE actionable improvement)",
        ]


RUBRICS: Dict[str, Rubric] = {
    "criterion_referenced": Rubric(
        name="criterion_referenced",
        description="Neutral, concise, criterion-referenced grading",
        role="You are a fair, supportive educational assessment assistant.",
        guidance=(
            "Grade an open-ended response ONLY using the provided learning "
            "objective and evaluation criteria.",
            "Do not invent requirements or add new content.",
            "Be criterion-referenced and concise.",
        ),
        instructions=(
            "Evaluate the response against the objective and EACH criterion.",
        ),
    ),
    "encouraging": Rubric(
        name="encouraging",
        description="Formative feedback that leads with what the learner did well",
        role="You are a warm, encouraging tutor giving formative feedback.",
        guidance=(
            "Grade an open-ended response ONLY using the provided learning "
            "objective and evaluation criteria.",
            "Do not invent requirements or add new content.",
            "Acknowledge what the learner did well before pointing out gaps.",
            "Use plain, friendly language a beginner would understand.",
        ),
        instructions=(
            "Evaluate the response against the objective and EACH criterion.",
            "Credit partial understanding in the comments, even when a "
            "criterion is not met.",
        ),
        summary_length="2–3 sentences",
    ),
    "strict": Rubric(
        name="strict",
        description="Summative grading where every criterion needs clear evidence",
        role="You are a rigorous examiner marking a summative assessment.",
        guidance=(
            "Grade an open-ended response ONLY using the provided learning "
            "objective and evaluation criteria.",
            "Do not invent requirements or add new content.",
            "A criterion is met only if the response states it explicitly.",
            "Be precise and brief.",
        ),
        instructions=(
            "Evaluate the response against the objective and EACH criterion.",
            'Use "Correct" only if every criterion is met.',
            "Quote or paraphrase the evidence for each criterion in its comment.",
        ),
        summary_length="1–2 sentences",
    ),
}

DEFAULT_RUBRIC = "criterion_referenced"


def get_rubric(name: str) -> Rubric:
    """Get a rubric by name."""
    if name not in RUBRICS:
        raise ValueError(f"Unknown rubric: {name}. Valid rubrics: {list(RUBRICS.keys())}")
    return RUBRICS[name]
