from typing import Any, Dict

from fastapi import Depends, HTTPException, Request, status

from posapp.config import get_settings
from posapp.core.security import decode_session_token


def get_current_user(request: Request) -> Dict[str, Any]:
    """
    Dependency returning the claims of the signed session cookie.
    Raises 401 when the cookie is missing, tampered with or expired.
    """
    token = request.cookies.get(get_settings().session_cookie)
    claims = decode_session_token(token)
    if not claims or not claims.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return claims


def get_actor_id(current_user: Dict[str, Any] = Depends(get_current_user)) -> int:
    """Numeric user id for audit columns; 0 when the session carries a text id."""
    try:
        return int(current_user.get("sub"))
    except (TypeError, ValueError):
        return 0


def require_role(allowed_roles: list):
    """
    Dependency factory to check the session's role claim.
    Usage: Depends(require_role(["Administrator"]))
    """
    def role_checker(current_user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
        if current_user.get("role") not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required role: {', '.join(allowed_roles)}"
            )
        return current_user
    return role_checker
