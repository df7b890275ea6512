# app.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from auditapi.config import CORS_ORIGINS, HOST, LOG_LEVEL, PORT, AuditSettings
from auditapi.core.errors import AuditError, ValidationError
from auditapi.core.orchestrator import Orchestrator
from auditapi.core.utils import URL_INVALID, validate_request
from auditapi.models.schema import AuditRequest, ErrorResponse

# ---------- logging ----------
logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
log = logging.getLogger("page-audit")


def create_app(orchestrator: Optional[Orchestrator] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "orchestrator", None) is None:
            settings = AuditSettings.from_env()
            app.state.orchestrator = Orchestrator(settings)
            log.info("Audit service ready (strategy=%s, ttl=%sms)", settings.strategy, settings.cache_ttl_ms)
        yield
        app.state.orchestrator = None

    app = FastAPI(title="Page Audit API", version="1.0.0", lifespan=lifespan)
    app.state.orchestrator = orchestrator
    app.add_middleware(CORSMiddleware, allow_origins=CORS_ORIGINS, allow_methods=["*"], allow_headers=["*"])

    @app.exception_handler(AuditError)
    async def audit_error_handler(request: Request, exc: AuditError):
        if exc.status_code >= 500:
            log.error("API error: %s", exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        log.exception("Unhandled error")
        return JSONResponse(status_code=500, content={"error": "Internal server error", "message": str(exc)})

    @app.post(
        "/api/audit",
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    async def audit(request: Request):
        try:
            body = AuditRequest.model_validate(await request.json())
        except ValueError:  # bad JSON or a body that is not an object
            raise ValidationError(URL_INVALID)
        url, device = validate_request(body.url, body.device)

        result = await request.app.state.orchestrator.audit(url, device)
        return result.to_json()

    @app.get("/health")
    async def health_check():
        return {"status": "ok"}

    @app.get("/")
    async def read_root():
        return {"message": "Page Audit API (ready)"}

    return app


app = create_app()


def main() -> None:
    uvicorn.run(app, host=HOST, port=PORT, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
