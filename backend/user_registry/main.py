"""
User Registry API - application entry point.
"""
import logging
from contextlib import asynccontextmanager
from typing import List

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from user_registry import config
from user_registry.config import ConfigError, load_database_settings
from user_registry.core.database import (
    check_connection,
    create_db_engine,
    create_session_factory,
    get_db,
)
from user_registry.core.logging_config import setup_logging
from user_registry.core.migrations import MigrationError, run_migrations
from user_registry.core.models import User
from user_registry.schemas import ErrorResponse, MessageResponse, UserRegister, UserResponse

logger = logging.getLogger(__name__)


# ============= LIFESPAN EVENT =============

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Runs around the serving loop.

    The engine is created and migrated before the app exists, so startup only logs;
    shutdown releases the pool.
    """
    logger.info(f"Docs: http://{config.API_HOST}:{config.API_PORT}/docs")
    logger.info("API is ready")

    yield

    logger.info("Shutting down...")
    app.state.engine.dispose()
    logger.info("Connection pool closed")


# ============= ERROR HANDLERS =============

def _format_validation_errors(errors: List[dict]) -> str:
    parts = []
    for error in errors:
        loc = [str(item) for item in error.get("loc", ()) if item != "body"]
        field = ".".join(loc)
        parts.append(f"{field}: {error['msg']}" if field else error["msg"])
    return "; ".join(parts)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    message = _format_validation_errors(exc.errors())
    logger.warning("Invalid request to %s: %s", request.url.path, message)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


router = APIRouter()


# ============= APPLICATION =============

def create_application(engine: Engine) -> FastAPI:
    """
    Build the FastAPI app around an already connected (and migrated) engine.

    :param engine: Pool shared by all request handlers
    :return: Configured application
    """
    app = FastAPI(
        title="User Registry API",
        description="Register and list users",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    # ============= CORS =============
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    app.include_router(router)

    return app


# ============= HEALTH CHECK =============

@router.get("/health", tags=["Health"])
def health(request: Request):
    """Check that the database answers"""
    try:
        check_connection(request.app.state.engine)
    except SQLAlchemyError:
        logger.error("Health check: database unavailable", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "database": False},
        )
    return {"status": "ok", "database": True}


# ============= USER ENDPOINTS =============

@router.post(
    "/api/user",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    tags=["Users"],
)
def register(user_data: UserRegister, db: Session = Depends(get_db)):
    """Register a new user"""
    logger.info("Registering user: %s", user_data.email)

    new_user = User(email=user_data.email, password=user_data.password)
    try:
        db.add(new_user)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error("Failed to insert user %s", user_data.email, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to insert user",
        )

    logger.info("User registered: %s", user_data.email)
    return MessageResponse(message="User registered successfully")


@router.get(
    "/api/users",
    response_model=List[UserResponse],
    responses={500: {"model": ErrorResponse}},
    tags=["Users"],
)
def list_users(db: Session = Depends(get_db)):
    """List every registered user"""
    try:
        users = db.query(User).order_by(User.id).all()
    except SQLAlchemyError:
        logger.error("Failed to fetch users", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch users",
        )

    logger.debug("Fetched %d users", len(users))
    return users


# ============= BOOTSTRAP =============

def run() -> None:
    """
    Start the service: config -> connection pool -> migrations -> HTTP server.

    Any failure before serving logs the reason and exits with status 1.
    """
    setup_logging()
    logger.info("User Registry API is starting...")

    try:
        settings = load_database_settings()
    except ConfigError as e:
        logger.critical("Configuration error: %s", e)
        raise SystemExit(1)

    engine = create_db_engine(settings)
    try:
        check_connection(engine)
    except SQLAlchemyError as e:
        logger.critical("Could not connect to database: %s", e)
        engine.dispose()
        raise SystemExit(1)

    try:
        run_migrations(settings)
    except MigrationError as e:
        logger.critical("%s", e)
        engine.dispose()
        raise SystemExit(1)

    app = create_application(engine)
    uvicorn.run(app, host=config.API_HOST, port=config.API_PORT, log_config=None)


if __name__ == "__main__":
    run()
