"""
Grading Relay

Server-side relay that grades a learner's free-text answer with an LLM.
Keeps the OpenAI API key off the browser and adds origin checks and input
validation in front of the model call.
"""

__version__ = "0.1.0"

from .config import Settings, load_settings
from .prompts import build_prompts
from .relay import GradingRelay
from .rubrics import RUBRICS, get_rubric

__all__ = [
    "Settings",
    "load_settings",
    "build_prompts",
    "GradingRelay",
    "RUBRICS",
    "get_rubric",
]
