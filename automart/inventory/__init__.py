"""
Car inventory layer.

Responsibilities:
- Load the canonical car listings dataset into memory.
- Translate coarse candidate criteria into DataFrame filters.
- Hand out read-only Car records to the ranking pipeline.
"""
