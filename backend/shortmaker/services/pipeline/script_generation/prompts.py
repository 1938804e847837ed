"""
Prompt templates for script generation
"""

from typing import Any, Dict, Optional

from shortmaker.config.constants import MAX_NARRATION_WORDS
from shortmaker.models.generation import ProductionPlan, StoryRequest

START_HINT = "This is the START of the video."

SYSTEM_TEMPLATE = """SYSTEM: You are a professional video content strategist. Output **ONLY** valid JSON.

OBJECTIVE: Create a script for a video.
{style_instruction}

CRITICAL RULES:
1. Pacing: Narration max {max_words} words per scene.
2. Visuals: Vivid descriptions for AI image gen.
3. Consistency: Use 'character_tokens' for recurring characters and 'environment_tokens' for recurring places.
4. Output exactly {count} scenes, starting from Scene #{start}.
5. {continuity}
"""

USER_TEMPLATE = """Idea: "{idea}"
Mode: "{mode}"
VisualTone: "{style_tone}"
AspectRatio: "{aspect_ratio}"
"""

SCRIPT_SCHEMA_HINT: Dict[str, Any] = {
    "title": "String (Max 6 words)",
    "final_caption": "String (Max 8 words)",
    "voice_instruction": {"voice": "String", "lang": "String", "tone": "String"},
    "output_settings": {
        "video_resolution": "String (WIDTHxHEIGHT)",
        "fps": "Number",
        "scene_duration_default": "Number",
    },
    "scenes": [
        {
            "scene_number": "Number",
            "duration_seconds": "Number",
            "narration_text": "String (The spoken script)",
            "visual_description": "String (Brief logic)",
            "character_tokens": ["String"],
            "environment_tokens": ["String"],
            "camera_directive": "String",
            "image_prompt": "String (Detailed AI art prompt)",
            "transition_to_next": "String",
            "timecodes": {"start_second": "Number", "end_second": "Number"},
        }
    ],
}


def continuation_hint(previous_narration: str) -> str:
    """Continuity hint pointing at the last narration line of the prior batch."""
    last_line = " ".join(previous_narration.split()).replace('"', "'")
    return f'CONTINUATION. Previous scene ended with: "{last_line}". Keep the story flowing.'


def build_system_instruction(
    count: int,
    start: int,
    continuity: str,
    script_style: Optional[str] = None,
) -> str:
    style_instruction = (
        f'STYLE: "{script_style}". Must adhere to this tone strictly.'
        if script_style else "STYLE: Engaging and Viral."
    )
    return SYSTEM_TEMPLATE.format(
        style_instruction=style_instruction,
        max_words=MAX_NARRATION_WORDS,
        count=count,
        start=start,
        continuity=continuity,
    )


def build_user_prompt(request: StoryRequest, plan: ProductionPlan) -> str:
    return USER_TEMPLATE.format(
        idea=request.sanitized_idea(),
        mode=request.mode.value.upper(),
        style_tone=(request.style_tone or "").replace('"', "'"),
        aspect_ratio=plan.aspect_ratio.value,
    )


__all__ = [
    "START_HINT",
    "SCRIPT_SCHEMA_HINT",
    "continuation_hint",
    "build_system_instruction",
    "build_user_prompt",
]
