"""Test fixtures: sample schema DDL and seed rows."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

_FIXTURES_DIR = Path(__file__).parent


def load_ddl(target: Literal["sqlite", "postgres"] = "sqlite") -> str:
    """Return the sample DDL SQL string for the given backend.

    Args:
        target: ``'sqlite'`` (default) or ``'postgres'``.

    Returns:
        DDL string ready to execute against the target backend.
    """
    filename = f"ddl_{target}.sql"
    return (_FIXTURES_DIR / filename).read_text()


USERS = [
    {"id": 7, "name": "Ada", "email": "ada@example.com", "active": 1, "age": 36},
    {"id": 8, "name": "Brian", "email": "brian@example.com", "active": 1, "age": 29},
    {"id": 9, "name": "Chloe", "email": None, "active": 0, "age": 41},
]

POSTS = [
    {"id": 1, "user_id": 7, "title": "Relational algebra", "published": 1},
    {"id": 2, "user_id": 7, "title": "Query planners", "published": 0},
    {"id": 3, "user_id": 8, "title": "Indexes", "published": 1},
    {"id": 4, "user_id": 7, "title": "Join order", "published": 1},
    {"id": 5, "user_id": 9, "title": "Vacuum", "published": 1},
]

PROFILES = [
    {"id": 1, "user_id": 7, "bio": "Mathematician"},
]

ROLES = [
    {"id": 2, "name": "editor"},
    {"id": 3, "name": "author"},
    {"id": 5, "name": "admin"},
    {"id": 6, "name": "viewer"},
]

ROLE_USER = [
    {"user_id": 7, "role_id": 5, "granted_by": None},
    {"user_id": 7, "role_id": 6, "granted_by": None},
    {"user_id": 8, "role_id": 2, "granted_by": 7},
]

VIDEOS = [
    {"id": 1, "title": "Intro to SQL"},
]

COMMENTS = [
    {"id": 1, "body": "Great post", "commentable_type": "Post", "commentable_id": 1},
    {"id": 2, "body": "Thanks", "commentable_type": "Post", "commentable_id": 1},
    {"id": 3, "body": "Nice video", "commentable_type": "Video", "commentable_id": 1},
    {"id": 4, "body": "Orphan", "commentable_type": "Podcast", "commentable_id": 1},
]

SEED = {
    "users": USERS,
    "posts": POSTS,
    "profiles": PROFILES,
    "roles": ROLES,
    "role_user": ROLE_USER,
    "videos": VIDEOS,
    "comments": COMMENTS,
}
