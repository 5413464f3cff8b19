# API endpoints
from . import (
    auth,
    users,
    students,
    advisers,
    mentors,
    administrators,
    cohorts,
    projects,
    deadlines,
    submissions,
    relations,
    groups,
    dashboard,
    application,
    announcements,
    forum_posts,
    vote_events,
)

__all__ = [
    "auth",
    "users",
    "students",
    "advisers",
    "mentors",
    "administrators",
    "cohorts",
    "projects",
    "deadlines",
    "submissions",
    "relations",
    "groups",
    "dashboard",
    "application",
    "announcements",
    "forum_posts",
    "vote_events",
]
