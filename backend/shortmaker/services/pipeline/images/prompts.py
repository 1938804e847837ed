"""
Image prompt construction

The final prompt is assembled as:

    (<style> style), <primary prompt>, Consistent character features: ...,
    in <environment>, <quality modifiers>

Quality modifiers come from the first style category whose keywords appear
in the style string; unmatched styles get the default modifiers.
"""

from typing import Optional, Tuple

from shortmaker.config.constants import (
    DEFAULT_IMAGE_STYLE,
    MAX_IMAGE_PROMPT_CHARS,
    MIN_IMAGE_PROMPT_CHARS,
)
from shortmaker.models.manifest import Scene

# (category, keywords, modifiers); order matters
STYLE_MODIFIERS: Tuple[Tuple[str, Tuple[str, ...], str], ...] = (
    (
        "photographic",
        ("photo", "cinematic", "realistic", "film", "documentary"),
        "photorealistic, 8k uhd, cinematic lighting, sharp focus, masterpiece",
    ),
    (
        "anime",
        ("anime", "manga", "ghibli"),
        "anime art, high quality, vibrant colors, detailed",
    ),
    (
        "illustrative",
        ("illustrat", "cartoon", "comic", "storybook", "watercolor", "painting", "sketch"),
        "digital illustration, rich colors, clean linework, highly detailed",
    ),
    (
        "stylized",
        ("3d", "pixel", "low poly", "clay", "voxel", "cyberpunk", "render"),
        "stylized, 3d render, vivid lighting, high detail",
    ),
)
DEFAULT_MODIFIERS = "masterpiece, best quality, ultra-detailed"


def quality_modifiers(style: str) -> str:
    lowered = style.lower()
    for _, keywords, modifiers in STYLE_MODIFIERS:
        if any(keyword in lowered for keyword in keywords):
            return modifiers
    return DEFAULT_MODIFIERS


def primary_prompt(scene: Scene) -> str:
    """image_prompt, else visual_description, else narration_text."""
    for candidate in (scene.image_prompt, scene.visual_description, scene.narration_text):
        text = " ".join((candidate or "").split())
        if len(text) >= MIN_IMAGE_PROMPT_CHARS:
            return text
    # Everything is short: use whatever is longest
    return max(
        (" ".join((c or "").split()) for c in (scene.image_prompt, scene.visual_description, scene.narration_text)),
        key=len,
    )


def build_image_prompt(scene: Scene, style: Optional[str] = None) -> str:
    style = (style or "").strip() or DEFAULT_IMAGE_STYLE
    parts = [f"({style} style)", primary_prompt(scene)]
    if scene.character_tokens:
        parts.append(f"Consistent character features: {', '.join(scene.character_tokens)}")
    if scene.environment_tokens:
        parts.append(f"in {', '.join(scene.environment_tokens)}")
    parts.append(quality_modifiers(style))

    prompt = ", ".join(part for part in parts if part)
    return prompt[:MAX_IMAGE_PROMPT_CHARS]


__all__ = ["STYLE_MODIFIERS", "DEFAULT_MODIFIERS", "quality_modifiers", "primary_prompt", "build_image_prompt"]
