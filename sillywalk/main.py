# sillywalk/main.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sillywalk.config import settings
from sillywalk.db.session import init_db
from sillywalk.logging_config import configure_logging
from sillywalk.api.deps import get_request_id
from sillywalk.api.errors import register_exception_handlers
from sillywalk.api.endpoints import applications, statistics, health

def create_app() -> FastAPI:
    configure_logging(settings.LOG_LEVEL)
    app = FastAPI(title="Silly Walk Grant Application API", version="1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "Authorization"],
        expose_headers=["X-Request-ID", "X-Application-ID", "X-Silliness-Score"],
        max_age=3600,
    )

    @app.middleware("http")
    async def assign_request_id(request: Request, call_next):
        request_id = get_request_id(request)
        response = await call_next(request)
        response.headers.setdefault("X-Request-ID", request_id)
        return response

    register_exception_handlers(app)

    # Routers (versioned)
    app.include_router(applications.router, prefix=settings.API_V1_STR)
    app.include_router(statistics.router, prefix=settings.API_V1_STR)
    app.include_router(health.router, prefix=settings.API_V1_STR)

    @app.on_event("startup")
    def on_startup():
        init_db()

    return app

app = create_app()
