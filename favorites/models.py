"""
favorites/models.py -- Domain dataclass for a user's favorite movie.

Pure data container with zero logic. Business rules (uniqueness handling,
ownership scoping, pagination) live in favorites/service.py.

Ownership is one-directional: a Favorite carries user_id and nothing points
back from Identity. Listing a user's favorites is an explicit query.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Favorite:
    """A catalog movie saved by one user.

    (user_id, title) is unique in the store. Never mutated after insert.
    created_at is set by the store on insert.
    """

    id: str
    user_id: str
    catalog_id: str
    title: str
    year: str = ""
    director: str = ""
    poster: str = ""
    created_at: str = ""
