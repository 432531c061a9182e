"""
Restaurant browsing and review submission.

Responsibilities:
- List restaurants with their comment counts, newest first.
- Show one restaurant with its comments and per-label sentiment statistics.
- Accept a review comment, score its sentiment and store it.
"""
