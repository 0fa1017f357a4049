"""Caller identity resolution from request headers."""

from __future__ import annotations

import hmac
from collections.abc import Callable

from fastapi import Header

from app.config import AppSettings
from app.domain import ActorContext, ActorRole


def api_resolve_actor(settings: AppSettings, admin_token: str | None, actor_id: str | None) -> ActorContext:
    """Resolve the caller role and identity.

    The caller is ADMIN only when an admin token is configured and the supplied
    token matches it; every other caller is TX_ONLY.

    Args:
        settings: Runtime settings holding the optional admin token.
        admin_token: Value of the `X-Admin-Token` header.
        actor_id: Value of the `X-Actor-Id` header.

    Returns:
        ActorContext: Resolved caller context.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    normalized_actor_id = (actor_id or "").strip() or None
    configured_token = settings.admin_api_token
    if configured_token and admin_token and hmac.compare_digest(
        admin_token.strip().encode("utf-8"),
        configured_token.encode("utf-8"),
    ):
        return ActorContext(actor_id=normalized_actor_id, role=ActorRole.ADMIN)
    return ActorContext(actor_id=normalized_actor_id, role=ActorRole.TX_ONLY)


def api_create_actor_dependency(settings: AppSettings) -> Callable[..., ActorContext]:
    """Create a FastAPI dependency resolving the caller from headers.

    Args:
        settings: Runtime settings holding the optional admin token.

    Returns:
        Callable[..., ActorContext]: Dependency for `Depends(...)`.

    Raises:
        ValueError: Raised when settings is None.
    """

    if settings is None:
        raise ValueError("settings must not be None")

    def api_actor_from_headers(
        x_admin_token: str | None = Header(default=None),
        x_actor_id: str | None = Header(default=None),
    ) -> ActorContext:
        return api_resolve_actor(settings=settings, admin_token=x_admin_token, actor_id=x_actor_id)

    return api_actor_from_headers
