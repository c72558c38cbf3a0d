"""Outcome of applying one table definition."""

from enum import Enum


class ApplyAction(str, Enum):
    DROPPED = "dropped"
    SEEDED = "seeded"
    SKIPPED = "skipped"  # records present and insert not forced
    CREATED = "created"  # relational DDL only, no items
    UNCHANGED = "unchanged"  # nothing to seed


__all__ = [
    "ApplyAction",
]
