"""FastAPI dependencies for actor resolution and role checks.

Authentication happens upstream: the API gateway validates the session and
forwards the caller's identity in trusted headers. This module only turns
those headers into an Actor and enforces role requirements.

Headers:
    X-Actor-Id: User id (required)
    X-Actor-Role: CLIENT | QUALITY | ADMIN (required)
    X-Actor-Org: Organization id (required for CLIENT users)
    X-Actor-Name: Display name
    X-Actor-Org-Name: Organization display name

Usage:
    @router.get("/me")
    def me(actor: Actor = Depends(get_current_actor)):
        return {"id": actor.id}

    @router.get("/admin-only")
    def admin_endpoint(actor: Actor = Depends(require_role(UserRole.ADMIN))):
        ...
"""

from typing import Callable, Optional

from fastapi import Depends, Header, HTTPException, status

from domain.actors import Actor
from .roles import UserRole, has_any_role, parse_role


def get_current_actor(
    x_actor_id: Optional[str] = Header(None),
    x_actor_role: Optional[str] = Header(None),
    x_actor_org: Optional[str] = Header(None),
    x_actor_name: Optional[str] = Header(None),
    x_actor_org_name: Optional[str] = Header(None),
) -> Actor:
    """Build the Actor for the current request from gateway headers.

    Raises:
        HTTPException 401: If identity headers are missing
        HTTPException 400: If the role is unknown
    """
    if not x_actor_id or not x_actor_role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing actor identity",
        )

    try:
        role = parse_role(x_actor_role)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown role: {x_actor_role}",
        )

    return Actor(
        id=x_actor_id,
        role=role,
        organization_id=x_actor_org or None,
        name=x_actor_name,
        organization_name=x_actor_org_name,
    )


def require_role(*allowed_roles: UserRole) -> Callable:
    """Create a dependency that restricts an endpoint to some roles.

    Args:
        allowed_roles: Roles allowed to call the endpoint

    Returns:
        Callable: FastAPI dependency returning the Actor

    Example:
        @router.get("/audit")
        def query(actor: Actor = Depends(require_role(UserRole.ADMIN, UserRole.QUALITY))):
            ...
    """

    def role_dependency(actor: Actor = Depends(get_current_actor)) -> Actor:
        if not has_any_role(actor.role, allowed_roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Allowed roles: {sorted(r.value for r in allowed_roles)}",
            )
        return actor

    return role_dependency
