"""
featuregen HTTP service.
Runs the feature toggle and gRPC generators; generated files are returned, never written.
"""
from contextlib import asynccontextmanager
from typing import Dict

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from dependencies import dependencies
from routes import features, generation

SERVICE_NAME = "featuregen"

@asynccontextmanager
async def lifespan(app: FastAPI):
    dependencies.logger.log_info(
        f"{SERVICE_NAME} API starting up",
        "startup",
        {"default_package": settings.DEFAULT_PACKAGE, "workers": settings.GENERATION_WORKERS},
    )
    yield
    dependencies.logger.log_info(f"{SERVICE_NAME} API shutting down", "shutdown")

app = FastAPI(title=f"{SERVICE_NAME} API", lifespan=lifespan)

# Stateless JSON endpoints: no cookies, only GET and POST
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    dependencies.logger.log_error(
        f"Unexpected {type(exc).__name__}: {exc}", "api", {"path": request.url.path}
    )
    return JSONResponse(
        status_code=500,
        content={"error": "Internal Server Error", "detail": str(exc)},
    )

app.include_router(features.router, prefix="/api", tags=["features"])
app.include_router(generation.router, prefix="/api", tags=["generation"])

@app.get("/api/health")
async def health_check() -> Dict[str, str]:
    return {"status": "healthy", "service": SERVICE_NAME}
