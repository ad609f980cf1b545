from __future__ import annotations

import logging
import time

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from .analytics.aggregator import compute_analytics
from .auth.dependencies import require_admin, require_user
from .auth.users import authenticate
from .blueprints.store import SavedBlueprint
from .catalog.cache import CachedCatalogStore
from .catalog.models import CatalogMetadata
from .catalog.store import summarize
from .config import DEFAULT_APP_CONFIG, AppConfig
from .diagnostics import check_environment
from .llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from .recommendations.models import BlueprintRequest, BlueprintResult
from .recommendations.pipeline import generate_blueprint
from .services import Services, build_services

logger = logging.getLogger(__name__)

GENERIC_SERVER_ERROR = "An internal server error occurred during blueprint generation."


class LoginRequest(BaseModel):
    username: str
    password: str


def get_services(request: Request) -> Services:
    return request.app.state.services


_MISSING_IDEA_ERRORS = {"missing", "string_too_short", "value_error"}


def _validation_message(exc: RequestValidationError) -> str:
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        if "projectIdea" in loc and error.get("type") in _MISSING_IDEA_ERRORS:
            return "projectIdea is required."
    fields = sorted({str(e["loc"][-1]) for e in exc.errors() if e.get("loc")})
    if fields:
        return f"Invalid request: {', '.join(fields)}."
    return "Invalid request."


def create_app(
    services: Services | None = None,
    config: AppConfig = DEFAULT_APP_CONFIG,
    llm_config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> FastAPI:
    """Build the application with its collaborators constructed exactly once."""
    app = FastAPI(title="StackFast Blueprint API", version="1.0.0")
    app.state.services = services or build_services(config, llm_config)
    app.add_middleware(SessionMiddleware, secret_key=config.session_secret)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": GENERIC_SERVER_ERROR})

    # ── Public endpoints ─────────────────────────────────────────────────

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    # ── Auth endpoints ───────────────────────────────────────────────────

    @app.post("/auth/login")
    def login(body: LoginRequest, request: Request) -> dict:
        user = authenticate(body.username, body.password)
        if not user:
            raise HTTPException(status_code=401, detail="Invalid credentials")
        request.session["user"] = user
        return {"status": "ok", "user": user}

    @app.post("/auth/logout")
    def logout(request: Request) -> dict:
        request.session.clear()
        return {"status": "logged_out"}

    @app.get("/auth/me")
    def auth_me(user: dict = Depends(require_user)) -> dict:
        return user

    # ── User endpoints ───────────────────────────────────────────────────

    @app.post("/generate-blueprint", response_model=BlueprintResult)
    async def generate(
        body: BlueprintRequest,
        user: dict = Depends(require_user),
        services: Services = Depends(get_services),
    ):
        start_time = time.time()
        try:
            outcome = await generate_blueprint(
                body, services.analyzer, services.catalog, services.weights,
            )
            services.blueprints.save(user["id"], body.project_idea, outcome.result)
            services.events.record_generation(
                outcome="ok",
                response_time_ms=round((time.time() - start_time) * 1000, 1),
                preferred_ids=body.preferred_tool_ids,
                complexity=outcome.analysis.complexity.value,
                analysis_fallback=outcome.analysis_fallback,
                recommended_ids=[t.id for t in outcome.result.recommended_stack],
                unfilled_categories=outcome.unfilled_categories,
            )
        except Exception:
            logger.exception("Blueprint generation failed")
            services.events.record_generation(
                outcome="failed",
                response_time_ms=round((time.time() - start_time) * 1000, 1),
                preferred_ids=body.preferred_tool_ids,
            )
            return JSONResponse(status_code=500, content={"error": GENERIC_SERVER_ERROR})
        return outcome.result

    @app.get("/blueprints", response_model=list[SavedBlueprint])
    def blueprints(
        user: dict = Depends(require_user),
        services: Services = Depends(get_services),
    ) -> list[SavedBlueprint]:
        return services.blueprints.list_for(user["id"])

    @app.get("/catalog", response_model=CatalogMetadata)
    def catalog(
        user: dict = Depends(require_user),
        services: Services = Depends(get_services),
    ) -> CatalogMetadata:
        try:
            tools = services.catalog.load_tools()
        except Exception:
            logger.exception("Catalog metadata unavailable")
            raise HTTPException(status_code=500, detail="The tool catalog is unavailable.")
        return summarize(tools)

    # ── Admin endpoints ──────────────────────────────────────────────────

    @app.get("/analytics")
    def analytics(
        user: dict = Depends(require_admin),
        services: Services = Depends(get_services),
    ) -> dict:
        return compute_analytics(services.events.events())

    @app.get("/catalog/cache-stats")
    def catalog_cache_stats(
        user: dict = Depends(require_admin),
        services: Services = Depends(get_services),
    ) -> dict:
        if isinstance(services.catalog, CachedCatalogStore):
            return {"enabled": True, **services.catalog.stats()}
        return {"enabled": False}

    @app.get("/diagnostics")
    def diagnostics(user: dict = Depends(require_admin)) -> dict:
        return check_environment(config, llm_config)

    return app


app = create_app()
