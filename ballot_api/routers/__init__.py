"""API router package."""

from ballot_api.routers import candidates, results, votes

__all__ = ["candidates", "results", "votes"]
