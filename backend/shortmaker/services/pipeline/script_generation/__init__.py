"""Script generation - idea to scene manifest."""

from .generator import ScriptGenerator, renumber_scenes
from .prompts import build_system_instruction, build_user_prompt, continuation_hint

__all__ = [
    "ScriptGenerator",
    "renumber_scenes",
    "build_system_instruction",
    "build_user_prompt",
    "continuation_hint",
]
