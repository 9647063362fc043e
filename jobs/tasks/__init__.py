"""Dramatiq actors for the engagement engine."""

# Actors bind to the broker configured here
import jobs.broker  # noqa: F401
