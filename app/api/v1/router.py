from fastapi import APIRouter
from app.api.v1.endpoints import (
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

api_router = APIRouter()

# Identity
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(students.router, prefix="/students", tags=["Students"])
api_router.include_router(advisers.router, prefix="/advisers", tags=["Advisers"])
api_router.include_router(mentors.router, prefix="/mentors", tags=["Mentors"])
api_router.include_router(administrators.router, prefix="/administrators", tags=["Administrators"])

# Program structure
api_router.include_router(cohorts.router, prefix="/cohorts", tags=["Cohorts"])
api_router.include_router(projects.router, prefix="/projects", tags=["Projects"])
api_router.include_router(deadlines.router, prefix="/deadlines", tags=["Deadlines"])
api_router.include_router(submissions.router, prefix="/submissions", tags=["Submissions"])

# Peer evaluation
api_router.include_router(relations.router, prefix="/relations", tags=["Relations"])
api_router.include_router(groups.router, prefix="/groups", tags=["Groups"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])

# Admissions
api_router.include_router(application.router, prefix="/application", tags=["Application"])

# Community
api_router.include_router(announcements.router, prefix="/announcements", tags=["Announcements"])
api_router.include_router(forum_posts.router, prefix="/forum-posts", tags=["Forum"])
api_router.include_router(vote_events.router, prefix="/vote-events", tags=["Vote Events"])
