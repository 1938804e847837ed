"""LLM infrastructure - Gemini client construction."""
