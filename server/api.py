"""FastAPI server exposing the design generation endpoints."""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from models.preferences import PreferenceValidationError
from stylegen_app.app import StyleGenApp, UnknownProviderError
from stylegen_app.logging_config import configure_logging


class DesignRequest(BaseModel):
    """Request payload for a design generation.

    Preference fields are accepted as-is and validated by ``build_preference_set``,
    so malformed values get the same 400 response as unsupported ones.
    """

    model_config = ConfigDict(extra="ignore", protected_namespaces=())

    gender: Any = None
    occasion: Any = None
    style: Any = None
    colors: Any = Field(None, description="One to five color tokens")
    patterns: Any = None
    materials: Any = None
    mood: Any = None
    season: Any = None
    model_type: str | None = Field(None, description="Model key, e.g. sdxl or flux")
    demo_mode: bool = False


def _bad_request(message: str, details: Any) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content=jsonable_encoder({"success": False, "error": message, "details": details}),
    )


def create_app(styler: StyleGenApp | None = None) -> FastAPI:
    """Build the ASGI app around a :class:`StyleGenApp`."""

    configure_logging()
    styler = styler or StyleGenApp()

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        yield
        await styler.aclose()

    app = FastAPI(title="StyleGen AI", version="0.1.0", lifespan=lifespan)
    app.state.styler = styler

    @app.exception_handler(RequestValidationError)
    async def invalid_request(_: Request, exc: RequestValidationError) -> JSONResponse:
        details = [{key: value for key, value in error.items() if key != "ctx"} for error in exc.errors()]
        return _bad_request("Invalid design request", details)

    @app.get("/api/health")
    async def healthcheck() -> dict:
        """Lightweight readiness check."""

        return {
            "status": "ok",
            "service": "stylegen-ai",
            "environment": styler.config.environment or "local",
            "demo_mode": styler.config.demo_mode,
            "providers": {name: provider.configured for name, provider in styler.providers.items()},
        }

    @app.get("/api/designs/models")
    async def list_models() -> dict:
        return {"success": True, **styler.list_models()}

    @app.get("/api/designs/test/{provider}")
    async def test_provider(provider: str) -> dict:
        """Check one provider with a small generation."""

        try:
            status = await styler.test_provider(provider)
        except UnknownProviderError:
            raise HTTPException(status_code=404, detail=f"Unknown provider '{provider}'")
        return {
            "success": status.ok,
            "provider": status.provider,
            "message": status.message,
            "model": status.model_id,
        }

    @app.post("/api/designs/generate")
    async def generate_design(request: DesignRequest):
        """Generate a design; always succeeds for valid preferences."""

        payload = request.model_dump(exclude={"model_type", "demo_mode"}, exclude_none=True)
        try:
            result = await styler.generate_design(
                payload, model_type=request.model_type, demo_mode=request.demo_mode
            )
        except PreferenceValidationError as exc:
            return _bad_request(exc.message, exc.details)

        message = (
            "Demo design generated. Configure a provider token for AI generation."
            if result.is_placeholder
            else f"Design generated successfully with the {result.provider_used} provider."
        )
        return {
            "success": True,
            "message": message,
            "demo_mode": result.is_placeholder,
            "design": {
                "title": f"{payload.get('style', '')} {payload.get('occasion', '')} Design".strip(),
                "description": (
                    f"AI-generated {payload.get('style')} {payload.get('occasion')} outfit "
                    f"for {payload.get('gender')}"
                ),
                "image_url": result.as_data_url(),
                "prompt": result.prompt,
                "provider": result.provider_used,
                "model_id": result.model_id,
                "caption": result.caption,
                "generation_time_ms": result.generation_time_ms,
                "is_placeholder": result.is_placeholder,
                "attempts": [
                    {
                        "provider": attempt.provider,
                        "attempt": attempt.attempt_number,
                        "outcome": attempt.outcome,
                        "http_status": attempt.http_status,
                    }
                    for attempt in result.attempts
                ],
            },
        }

    return app


def get_app() -> FastAPI:
    """Expose a FastAPI instance for ASGI servers."""

    return create_app()


if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run("server.api:get_app", factory=True, host="0.0.0.0", port=int(os.getenv("PORT", "5002")), reload=False)
