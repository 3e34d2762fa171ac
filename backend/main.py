import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from api import proxy, public, styles
from core.config import HEALTH_SHOW_PROVIDERS, SERVICE_VERSION, get_allowed_cors_origins
from db.session import dispose_engine
from services.context import build_service_context

# Configure logging with environment variable support
# Set LOG_LEVEL=WARNING in production to reduce noise, DEBUG for verbose output
log_level = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


tags_metadata = [
    {
        "name": "public",
        "description": "Sanitized map configurations and layer groups for map clients.",
    },
    {
        "name": "styles",
        "description": "Static, generated and redirected MapLibre style documents.",
    },
    {
        "name": "proxy",
        "description": "Key-injecting proxy for commercial provider styles and assets.",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await dispose_engine()


app = FastAPI(
    title="Map Configuration Service",
    description="Public basemap and overlay configurations without embedded API keys",
    version=SERVICE_VERSION,
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

app.state.context = build_service_context()


# Any OPTIONS request succeeds; CORSMiddleware (added after, so outermost)
# answers real preflights and decorates these responses.
@app.middleware("http")
async def answer_options(request: Request, call_next):
    if request.method == "OPTIONS":
        return Response(status_code=status.HTTP_200_OK)
    return await call_next(request)


# CORS
allowed_origins = get_allowed_cors_origins()
if allowed_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )
else:
    # Fallback: allow all origins but disable credentials, as browsers require
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )

# Locally hosted style documents referenced as {base}/styles/<name>.json
if app.state.context.styles_dir.is_dir():
    app.mount("/styles", StaticFiles(directory=app.state.context.styles_dir), name="styles")

# Include API routers
app.include_router(public.router, prefix="/api")
app.include_router(styles.router, prefix="/api")
app.include_router(proxy.router, prefix="/api")


@app.get("/")
async def root():
    return {"message": "Map Configuration Service is running"}


@app.get("/health")
async def health_check(request: Request):
    content = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": SERVICE_VERSION,
    }
    if HEALTH_SHOW_PROVIDERS:
        content["providers"] = request.app.state.context.credentials.configured()
    return content


# Exception handlers


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = {"error": str(exc.detail)}
    return JSONResponse(
        content=content,
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler_400(request: Request, exc: RequestValidationError):
    exc_str = f"{exc}".replace("\n", " ").replace("   ", " ")
    logging.error(f"{request.url.path}: {exc_str}")
    content = {"error": "Invalid request", "message": exc_str}
    return JSONResponse(content=content, status_code=status.HTTP_400_BAD_REQUEST)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc}")
    return JSONResponse(
        content={"error": "Internal server error"},
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
