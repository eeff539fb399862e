import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from posapp.config import Settings, get_settings
from posapp.core.responses import GENERIC_SAVE_ERROR, error_response, field_errors
from posapp.database import get_storage
from posapp.exceptions import DuplicateValueError, FormValidationError, SchemaProbeError
from posapp.initializer import init_db

from posapp.routes.account import router as account_router
from posapp.routes.business_profile import router as business_profile_router
from posapp.routes.dashboard import router as dashboard_router
from posapp.routes.items import router as items_router
from posapp.routes.lookups import (
    business_types_router,
    categories_router,
    industry_types_router,
    registration_types_router,
    states_router,
)
from posapp.routes.parties import router as parties_router
from posapp.routes.roles import router as roles_router
from posapp.routes.users import router as users_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create tables and seed data (SQLite only)
    if get_settings().init_db:
        init_db(get_storage())
    yield


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            "Please correct the highlighted fields.",
            field_errors(exc.errors()),
        )

    @app.exception_handler(FormValidationError)
    async def form_validation_handler(request: Request, exc: FormValidationError):
        return error_response(status.HTTP_400_BAD_REQUEST, exc.message, exc.errors)

    @app.exception_handler(DuplicateValueError)
    async def duplicate_value_handler(request: Request, exc: DuplicateValueError):
        return error_response(status.HTTP_409_CONFLICT, exc.message, {exc.field: [exc.message]})

    @app.exception_handler(SchemaProbeError)
    async def schema_probe_handler(request: Request, exc: SchemaProbeError):
        logger.error(f"Schema probe failed on {request.url.path}: {str(exc)}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_SAVE_ERROR)

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error(f"Database error on {request.url.path}: {str(exc)}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_SAVE_ERROR)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(title="POS Back Office", lifespan=lifespan)

    # Configure CORS
    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.cors_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)

    app.include_router(account_router, prefix="/api/account", tags=["account"])
    app.include_router(business_types_router, prefix="/api/business-types", tags=["business-types"])
    app.include_router(industry_types_router, prefix="/api/industry-types", tags=["industry-types"])
    app.include_router(registration_types_router, prefix="/api/registration-types", tags=["registration-types"])
    app.include_router(states_router, prefix="/api/states", tags=["states"])
    app.include_router(categories_router, prefix="/api/categories", tags=["categories"])
    app.include_router(roles_router, prefix="/api/roles", tags=["roles"])
    app.include_router(users_router, prefix="/api/users", tags=["users"])
    app.include_router(items_router, prefix="/api/items", tags=["items"])
    app.include_router(parties_router, prefix="/api/parties", tags=["parties"])
    app.include_router(business_profile_router, prefix="/api/business-profile", tags=["business-profile"])
    app.include_router(dashboard_router, prefix="/api/dashboard", tags=["dashboard"])

    @app.get("/")
    def read_root():
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
