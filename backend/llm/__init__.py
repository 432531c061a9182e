"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Ask the Groq LLM for the sentiment polarity of a review comment.
- Map the polarity score to a positive / negative / neutral label.
- Graceful fallback to a neutral score when the LLM is unavailable or returns invalid output.
"""
