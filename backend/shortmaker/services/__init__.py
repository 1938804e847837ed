"""
Services package - pipeline stages, providers and infrastructure

Pipeline (Core Production Flow):
    - pipeline/script_generation: idea to scene manifest (single call or batched)
    - pipeline/images: per-scene prompt enrichment and image requests
    - pipeline/audio: narration synthesis and WAV assembly
    - pipeline/assembly: ffmpeg commands and video assembly
    - pipeline/production: end-to-end runner

Providers:
    - providers: Text / Image / Speech / Render contracts and adapters

Infrastructure (Technical Concerns):
    - infrastructure/llm: Gemini client construction
    - infrastructure/orchestration: Job State broadcaster
    - infrastructure/parsing: JSON recovery for provider output
    - infrastructure/storage: manifest persistence
"""
