from typing import Annotated

from fastapi import Depends, Header, Request

from src.app_shell.config import AppConfig
from src.app_shell.context import ServiceContext
from src.components.auth import AuthenticateInput, run_authenticate
from src.domain.entities import Identity
from src.domain.errors import Unauthenticated

GUARD_MESSAGES = {
    "missing credential": "Not authorized, no token",
    "invalid token": "Not authorized, token failed",
}


# --- Context ---
def get_context(request: Request) -> ServiceContext:
    ctx: ServiceContext = request.app.state.ctx
    return ctx


def get_config(ctx: ServiceContext = Depends(get_context)) -> AppConfig:
    return ctx.config


# --- Auth ---
def get_current_identity(
    authorization: Annotated[str | None, Header()] = None,
    ctx: ServiceContext = Depends(get_context),
) -> Identity:
    """
    Auth guard. Rejects before the route body runs, so a refused upload is
    never parsed.
    """
    result = run_authenticate(AuthenticateInput(authorization=authorization), tokens=ctx.tokens)
    if not result.success or result.identity is None:
        reason = result.error or "invalid token"
        raise Unauthenticated(GUARD_MESSAGES.get(reason, "Not authorized"), detail=reason)
    return result.identity


CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]
Context = Annotated[ServiceContext, Depends(get_context)]
