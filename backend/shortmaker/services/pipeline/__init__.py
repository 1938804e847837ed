"""
Pipeline services - core production flow.

Pipeline Stages:
1. Script Generation - Idea to scene manifest
2. Image Synthesis - One image per scene
3. Speech Synthesis - Narration track
4. Video Assembly - Stills, captions and audio into one video

The end-to-end runner lives in ``pipeline.production``.
"""
