"""Guard pipeline for request handlers.

A guard is a plain function ``guard(ctx, next)``. It either raises to
reject the request or returns ``next(ctx)`` to forward it. Access levels
are ordered tuples of guards, each level extending the one below it:

    PUBLIC            ()
    AUTHENTICATED     (require_identity,)
    MANAGER_OR_ABOVE  (require_identity, require_manager)
    ADMIN_ONLY        (require_identity, require_admin)

run_pipeline() composes a tuple around a handler, first guard outermost.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from typing import Any

from ..exceptions import InsufficientRole, Unauthenticated
from .schemas import Identity, Role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestContext:
    """Per-request state, resolved once before any guard runs.

    identity is None for anonymous callers and for any bearer token that
    failed to resolve.
    """

    identity: Identity | None = None
    remote_addr: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    def require_identity(self) -> Identity:
        """Identity of an authenticated context.

        Raises:
            Unauthenticated: If no identity was resolved
        """
        if self.identity is None:
            raise Unauthenticated("Authentication required", {"code": "missing_auth"})
        return self.identity


Handler = Callable[[RequestContext], Any]
Guard = Callable[[RequestContext, Handler], Any]


# ============================================================================
# Guards
# ============================================================================


def require_identity(ctx: RequestContext, next: Handler) -> Any:
    if ctx.identity is None:
        logger.warning(f"Unauthenticated request from {ctx.remote_addr}")
    identity = ctx.require_identity()
    # Downstream guards and the handler see a narrowed context
    return next(replace(ctx, identity=identity))


def _require_role(minimum: Role) -> Guard:
    def guard(ctx: RequestContext, next: Handler) -> Any:
        identity = ctx.require_identity()
        if not identity.role.at_least(minimum):
            logger.warning(
                f"Member {identity.email} with role {identity.role.value} "
                f"denied {minimum.value} access"
            )
            raise InsufficientRole(
                f"{minimum.value.capitalize()} access required",
                {"required_role": minimum.value}
            )
        return next(ctx)

    guard.__name__ = f"require_{minimum.value.lower()}"
    return guard


require_manager = _require_role(Role.MANAGER)
require_admin = _require_role(Role.ADMIN)


# ============================================================================
# Pipelines
# ============================================================================


PUBLIC: tuple[Guard, ...] = ()
AUTHENTICATED: tuple[Guard, ...] = PUBLIC + (require_identity,)
MANAGER_OR_ABOVE: tuple[Guard, ...] = AUTHENTICATED + (require_manager,)
ADMIN_ONLY: tuple[Guard, ...] = AUTHENTICATED + (require_admin,)


def run_pipeline(guards: Sequence[Guard], handler: Handler, ctx: RequestContext) -> Any:
    """Run handler behind guards.

    Args:
        guards: Guards in order, outermost first
        handler: Called with the (possibly narrowed) context once every guard forwards
        ctx: Context resolved for the current request

    Returns:
        Whatever the handler returns
    """
    call = handler
    for guard in reversed(guards):
        call = _bind(guard, call)
    return call(ctx)


def _bind(guard: Guard, next: Handler) -> Handler:
    def step(ctx: RequestContext) -> Any:
        return guard(ctx, next)
    return step
