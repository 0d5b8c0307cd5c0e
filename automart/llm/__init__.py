"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Build prompts from a natural-language car query and candidate listings.
- Ask the model for an ordering of candidate car ids.
- Graceful fallback when the LLM is unavailable or returns invalid output.
"""
