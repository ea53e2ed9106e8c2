from __future__ import annotations

from functools import wraps
from typing import Callable

from flask import g, request

from ..core.enums import Role
from ..core.exceptions import AuthorizationError


def bearer_token() -> str | None:
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    return header[len("Bearer "):].strip() or None


def current_user():
    """User resolved by ``login_required`` for this request."""
    return g.current_user


def build_guards(auth_service) -> tuple[Callable, Callable]:
    """Return ``(login_required, roles_required)`` decorators bound to ``auth_service``.

    Failures raise domain errors; the app-level error handler turns them into
    JSON responses.
    """

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            g.current_user = auth_service.resolve_token(bearer_token())
            return view(*args, **kwargs)

        return wrapper

    def roles_required(*roles: Role):
        def decorator(view):
            @wraps(view)
            @login_required
            def wrapper(*args, **kwargs):
                user = g.current_user
                if user.role not in roles:
                    raise AuthorizationError(
                        "Access denied. Insufficient permissions.",
                        {
                            "requiredRoles": [r.value for r in roles],
                            "userRole": user.role.value,
                        },
                    )
                return view(*args, **kwargs)

            return wrapper

        return decorator

    return login_required, roles_required
