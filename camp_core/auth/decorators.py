"""Access-level decorators for Flask views.

Each decorator runs the view behind one guard pipeline from
``camp_core.auth.guards`` and passes the request context in as ``ctx``:

    @invitations_bp.post("/<member_id>/revoke")
    @admin_required
    def revoke(ctx: RequestContext, member_id: str):
        ...

The context itself is resolved once per request by the app's
before_request hook and kept on ``flask.g.ctx``.

Place these above ``@validate_request`` so access is checked before the
body is parsed; the validated body then arrives as ``data`` alongside
``ctx``.
"""

from collections.abc import Sequence
from functools import wraps

from flask import g

from .guards import (
    ADMIN_ONLY,
    AUTHENTICATED,
    MANAGER_OR_ABOVE,
    PUBLIC,
    Guard,
    RequestContext,
    run_pipeline,
)


def current_context() -> RequestContext:
    """RequestContext for the active request (anonymous if none was resolved)."""
    ctx = g.get("ctx")
    if ctx is None:
        ctx = RequestContext()
        g.ctx = ctx
    return ctx


def guarded(guards: Sequence[Guard]):
    """Build a decorator that runs a view behind ``guards``."""
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            return run_pipeline(
                guards,
                lambda ctx: f(ctx, *args, **kwargs),
                current_context(),
            )
        return wrapper
    return decorator


public = guarded(PUBLIC)
auth_required = guarded(AUTHENTICATED)
manager_required = guarded(MANAGER_OR_ABOVE)
admin_required = guarded(ADMIN_ONLY)
