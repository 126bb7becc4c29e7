"""Commerce Audit API – FastAPI app exposing the audit pipeline."""

import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from audit_service import analyze
from errors import AuditError
from schemas import AnalyzeRequest, ErrorResponse, HealthResponse

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
log = logging.getLogger("commerce-audit")

app = FastAPI(
    title="Commerce Audit API",
    description="AI-first commerce website audit",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AuditError)
async def audit_error_handler(request: Request, exc: AuditError) -> JSONResponse:
    log.error("Analysis failed (%s): %s", type(exc).__name__, exc.message)
    body = ErrorResponse(error=exc.message, kind=type(exc).__name__)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.post("/analyze", responses={502: {"model": ErrorResponse}, 503: {"model": ErrorResponse}})
def analyze_site(body: AnalyzeRequest) -> JSONResponse:
    """
    Pipeline: scrape homepage -> AI analysis with model fallback -> validated report.
    """
    result = analyze(body.url)
    return JSONResponse(content=result.model_dump(mode="json", by_alias=True))


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    """Health check for deployment."""
    return HealthResponse(status="ok")
