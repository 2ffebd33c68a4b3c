from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shared.logging import get_logger, setup_logging

from .config import get_settings
from .routes import identify

logger = get_logger("identity.app")


def _describe(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "invalid value")
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages) or "Invalid request body."


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Kinship Identity Service", version="0.1.0")

    @app.on_event("startup")
    def on_startup() -> None:
        setup_logging(settings.log_level, settings.service_name)
        logger.info(
            "identity_service_ready",
            service=settings.service_name,
            store_backend=settings.store_backend,
        )

    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": _describe(exc)})

    @app.get("/v1/healthz", tags=["system"])
    def healthz() -> dict[str, str]:
        return {"status": "ok", "service": settings.service_name}

    app.include_router(identify.router)

    return app


__all__ = ["create_app"]
