"""
Personalized car recommendation pipeline.

Responsibilities:
- Extract weighted preference tables from a user's behavior history.
- Fetch candidate cars matching the strongest preferences.
- Score candidates relative to each other and rank them.
- Summarize the top results into suggested follow-up filters.
- Fall back to default recommendations whenever personalization is not possible.
"""
