"""Pipeline stages.

Each stage exposes a small, pure function API over ``promptfeed.models.Record``.
"""
