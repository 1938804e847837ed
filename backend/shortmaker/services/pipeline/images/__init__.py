"""Scene image synthesis."""

from .prompts import build_image_prompt, quality_modifiers
from .synthesizer import SceneImageSynthesizer, derive_scene_seed

__all__ = ["SceneImageSynthesizer", "derive_scene_seed", "build_image_prompt", "quality_modifiers"]
