import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from .config import get_settings
from .logging_config import configure_logging
from .database import init_db, get_sessionmaker
from .auth import ensure_default_admin
from .errors import AppError, app_error_handler
from .api.health import router as health_router
from .api.users import router as users_router
from .api.achievements import router as achievements_router


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db()
        SessionLocal = get_sessionmaker()
        db = SessionLocal()
        try:
            ensure_default_admin(db)
        finally:
            db.close()
        yield

    app = FastAPI(title="Achievement Tracker", version="0.1.0", lifespan=lifespan)
    app.add_exception_handler(AppError, app_error_handler)

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    app.include_router(health_router, prefix="/api/v1")
    app.include_router(users_router, prefix="/api/v1")
    app.include_router(achievements_router, prefix="/api/v1")

    return app


app = create_app()
