import logging
from typing import Annotated, Any, Dict, Optional

from fastapi import APIRouter, Depends, Form, Request, status

from posapp.config import get_settings
from posapp.core.dependencies import get_current_user
from posapp.core.responses import error_response, success_response
from posapp.core.security import create_session_token
from posapp.database import get_storage
from posapp.schemas.account import LoginForm, SessionUser
from posapp.services.auth import INVALID_CREDENTIALS, AuthService
from posapp.storage.base import StorageAdapter

router = APIRouter()
logger = logging.getLogger(__name__)

DEFAULT_LANDING_PATH = "/api/dashboard"
LOGIN_PATH = "/api/account/login"


def is_local_url(url: Optional[str]) -> bool:
    """Only same-site paths are accepted as post-login redirects."""
    if not url:
        return False
    return url.startswith("/") and not url.startswith("//") and not url.startswith("/\\")


def get_auth_service(storage: StorageAdapter = Depends(get_storage)) -> AuthService:
    return AuthService(storage)


@router.post("/login")
def login(
    request: Request,
    form: Annotated[LoginForm, Form()],
    service: AuthService = Depends(get_auth_service),
):
    """Verify credentials and issue the session cookie."""
    user = service.authenticate(form.identifier, form.password)
    if user is None:
        return error_response(status.HTTP_401_UNAUTHORIZED, INVALID_CREDENTIALS)

    settings = get_settings()
    token = create_session_token(user.claims(), remember_me=form.remember_me)
    redirect_to = form.return_url if is_local_url(form.return_url) else DEFAULT_LANDING_PATH
    response = success_response(request, f"Welcome back, {user.name}.", redirect_to)
    response.set_cookie(
        settings.session_cookie,
        token,
        max_age=settings.remember_me_days * 24 * 3600 if form.remember_me else None,
        httponly=True,
        samesite="lax",
        path="/",
    )
    return response


@router.post("/logout")
def logout(request: Request):
    response = success_response(request, "You have been signed out.", LOGIN_PATH)
    response.delete_cookie(get_settings().session_cookie, path="/")
    return response


@router.get("/me", response_model=SessionUser)
def me(current_user: Dict[str, Any] = Depends(get_current_user)):
    return SessionUser(
        id=str(current_user["sub"]),
        name=current_user.get("name", ""),
        email=current_user.get("email") or None,
        role=current_user.get("role"),
    )
