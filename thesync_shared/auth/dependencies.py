from collections.abc import Callable
from functools import lru_cache
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from thesync_shared.auth.config import AuthSettings
from thesync_shared.auth.tokens import TokenVerificationError, verify_token
from thesync_shared.constants import Role
from thesync_shared.models.user import CurrentUser

http_bearer = HTTPBearer(auto_error=False)


@lru_cache
def get_auth_settings() -> AuthSettings:
    return AuthSettings()


async def get_current_user_optional(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
    settings: AuthSettings = Depends(get_auth_settings),
) -> CurrentUser | None:
    if not credentials or not credentials.credentials:
        return None
    try:
        payload = verify_token(credentials.credentials, settings.access_secret, settings.algorithm)
        return CurrentUser(id=UUID(payload.sub), role=payload.role)
    except (TokenVerificationError, ValueError):
        return None


async def get_current_user_required(
    user: CurrentUser | None = Depends(get_current_user_optional),
) -> CurrentUser:
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_roles(*roles: Role) -> Callable[..., CurrentUser]:
    """
    Build a dependency that admits only the given roles.

    The allowed set is fixed when the route is registered.  An empty set means
    any authenticated principal passes; authentication is always required.
    """
    allowed = frozenset(roles)

    def _guard(current_user: CurrentUser = Depends(get_current_user_required)) -> CurrentUser:
        if allowed and current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Forbidden resource",
            )
        return current_user

    return _guard
