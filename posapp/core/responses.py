"""
Response helpers shared by every form-post handler.

A handler either answers with the JSON envelope {ok, message, errors?} (when
the caller asked for JSON) or redirects to the entity list and leaves the
message in a short-lived flash cookie for the next page to show.
"""

from typing import Dict, Iterable, List, Optional
from urllib.parse import quote, unquote

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse

FLASH_COOKIE = "pos.flash"
GENERIC_SAVE_ERROR = "Something went wrong while saving. Please try again."


def wants_json(request: Request) -> bool:
    if request.headers.get("x-requested-with", "").lower() == "xmlhttprequest":
        return True
    return "application/json" in request.headers.get("accept", "").lower()


def envelope(
    ok: bool,
    message: str,
    errors: Optional[Dict[str, List[str]]] = None,
    status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    content = {"ok": ok, "message": message}
    if errors:
        content["errors"] = errors
    return JSONResponse(status_code=status_code, content=content)


def success_response(request: Request, message: str, redirect_to: str) -> Response:
    """JSON envelope for XHR callers, otherwise a 303 to `redirect_to` with a flash message."""
    if wants_json(request):
        return envelope(True, message)
    response = RedirectResponse(url=redirect_to, status_code=status.HTTP_303_SEE_OTHER)
    set_flash(response, message)
    return response


def error_response(
    status_code: int,
    message: str,
    errors: Optional[Dict[str, List[str]]] = None,
) -> JSONResponse:
    return envelope(False, message, errors, status_code=status_code)


def not_found(message: str = "The requested record was not found.") -> JSONResponse:
    return error_response(status.HTTP_404_NOT_FOUND, message)


def field_errors(errors: Iterable[dict]) -> Dict[str, List[str]]:
    """Turn pydantic error dicts into {field: [messages]}."""
    result: Dict[str, List[str]] = {}
    for error in errors:
        loc = [part for part in error.get("loc", ()) if isinstance(part, str) and part != "body"]
        field = loc[-1] if loc else "__all__"
        message = error.get("msg", "Invalid value.")
        # pydantic prefixes messages raised from validators
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        result.setdefault(field, []).append(message)
    return result


def set_flash(response: Response, message: str) -> None:
    response.set_cookie(FLASH_COOKIE, quote(message), httponly=True, samesite="lax", path="/")


def pop_flash(request: Request, response: Response) -> Optional[str]:
    """Read the pending flash message and clear it."""
    value = request.cookies.get(FLASH_COOKIE)
    if value is None:
        return None
    response.delete_cookie(FLASH_COOKIE, path="/")
    return unquote(value)
