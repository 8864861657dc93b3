from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import Settings, get_settings
from .core.logging import configure_logging
from .api.routes_search import router as search_router


def cors_origins(settings: Settings) -> list[str]:
    """
    Allowed browser origins for the chat UI.

    Prod requires FRONTEND_ORIGIN (comma separated). Elsewhere "*" is used
    when CORS_ALLOW_ALL_ORIGINS is set or no origin is configured.
    """
    configured = [
        o.strip()
        for o in (settings.FRONTEND_ORIGIN or "").split(",")
        if o.strip()
    ]
    if settings.ENV.lower() == "prod":
        if not configured:
            raise RuntimeError(
                "FRONTEND_ORIGIN must be set in production – refusing to start with wide-open CORS."
            )
        return configured
    if settings.CORS_ALLOW_ALL_ORIGINS or not configured:
        return ["*"]
    return configured


settings = get_settings()
configure_logging(settings.LOG_LEVEL)

app = FastAPI(title="Multi-source Research Assistant API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(settings),
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    allow_credentials=False,
)

app.include_router(search_router, prefix=settings.API_PREFIX)
