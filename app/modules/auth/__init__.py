# Authentication module

from app.modules.auth.dependencies import (
    get_current_user,
    get_current_actor,
    require_admin,
    require_roles,
)

from app.modules.auth.roles import (
    Actor,
    StudentRole,
    AdviserRole,
    MentorRole,
    AdministratorRole,
    NoRole,
    resolve_role,
)

__all__ = [
    # Session
    "get_current_user",
    "get_current_actor",
    "require_admin",
    "require_roles",
    # Roles
    "Actor",
    "StudentRole",
    "AdviserRole",
    "MentorRole",
    "AdministratorRole",
    "NoRole",
    "resolve_role",
]
