"""
Prompt Generation

Renders the system and user instructions sent to the model for one
learner response. Rendering is deterministic: the same inputs and rubric
always produce the same two strings.
"""

from typing import Sequence, Tuple, Union

from .rubrics import DEFAULT_RUBRIC, Rubric, get_rubric


def format_criteria(criteria: Sequence[str]) -> str:
    """
    Number criteria 1..N in input order.

    Args:
        criteria: Evaluation criteria

    Returns:
        One numbered criterion per line, or a placeholder if there are none
    """
    if not criteria:
        return "(none provided)"
    return "\n".join(f"{i}. {c}" for i, c in enumerate(criteria, 1))


def build_user_instruction(
    learning_objective: str,
    criteria: Sequence[str],
    response_text: str,
    rubric: Rubric,
) -> str:
    """Render the user instruction for one learner response."""
    lines = [
        f"Learning objective:\n{learning_objective}",
        "",
        f"Evaluation criteria:\n{format_criteria(criteria)}",
        "",
        f"Learner response:\n{response_text}",
        "",
        "EVALUATION INSTRUCTIONS:",
    ]
    lines.extend(f"- {line}" for line in rubric.instructions)
    lines.append("- Provide:")
    lines.extend(rubric.output_fields())
    lines.append("Return ONLY JSON.")

    return "\n".join(lines)


def build_prompts(
    learning_objective: str,
    criteria: Sequence[str],
    response_text: str,
    rubric: Union[Rubric, str] = DEFAULT_RUBRIC,
) -> Tuple[str, str]:
    """
    Build the (system_instruction, user_instruction) pair.

    Args:
        learning_objective: What the learner is meant to demonstrate
        criteria: Evaluation criteria, numbered in the given order
        response_text: The learner's answer
        rubric: Rubric or rubric name controlling tone and instructions

    Returns:
        Tuple of (system_instruction, user_instruction)
    """
    if isinstance(rubric, str):
        rubric = get_rubric(rubric)

    system_instruction = rubric.system_instruction()
    user_instruction = build_user_instruction(
        learning_objective, criteria, response_text, rubric
    )
    return system_instruction, user_instruction
