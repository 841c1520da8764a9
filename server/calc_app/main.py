from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from calc_app.api.routes import calculator, sessions
from calc_app.core.config import get_settings
from calc_app.core.exceptions import register_exception_handlers
from calc_app.core.logging import configure_logging
from calc_app.core.middleware import RequestContextMiddleware


def create_app() -> FastAPI:
    """
    Application factory for the keypad calculator backend.
    Routes are attached in their respective modules and imported here.
    """

    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.api_title,
        description="Keypad-driven arithmetic expression engine with per-session state.",
        version=settings.api_version,
    )

    cors_origins = settings.resolved_cors_origins
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)
    app.add_middleware(RequestContextMiddleware)

    app.include_router(calculator.router)
    app.include_router(sessions.router)

    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
