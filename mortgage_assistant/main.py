import tomllib
from contextlib import asynccontextmanager
from http import HTTPStatus
from importlib import metadata
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mortgage_assistant.ai.chat.config import get_chat_settings
from mortgage_assistant.ai.chat.router import router as chat_router
from mortgage_assistant.ai.gemini.config import get_gemini_settings
from mortgage_assistant.config import get_app_settings, get_client_base_url
from mortgage_assistant.exceptions import AppError
from mortgage_assistant.utils.logger import logger


def get_version():
    """Get version from pyproject.toml"""
    pyproject_path = Path(__file__).parent.parent / "pyproject.toml"
    try:
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
        return data["project"]["version"]
    except FileNotFoundError:
        return metadata.version("mortgage-assistant")


def load_settings() -> None:
    """Load every settings group once so bad configuration fails at startup."""
    get_app_settings()
    get_gemini_settings()
    get_chat_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    load_settings()
    logger.info("Mortgage assistant API started")
    yield


app = FastAPI(
    title="Mortgage Assistant API",
    description="Chat with an AI assistant to run U.S. mortgage payment simulations",
    version=get_version(),
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[get_client_base_url()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["x-session-id"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
        logger.error(
            "Request failed",
            path=request.url.path,
            error=exc.message,
            error_type=type(exc).__name__,
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.public_message})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", ""),
        }
        for error in exc.errors()
    ]
    logger.info("Rejected invalid request", path=request.url.path, details=details)
    return JSONResponse(
        status_code=HTTPStatus.BAD_REQUEST,
        content={"error": "Invalid request body", "details": details},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error", path=request.url.path, error=str(exc), error_type=type(exc).__name__
    )
    return JSONResponse(
        status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


app.include_router(chat_router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {"status": "ok", "message": "Mortgage Assistant API is running"}


@app.get("/healthcheck")
async def healthcheck():
    """Health check endpoint."""
    return {"status": "ok", "message": "Mortgage Assistant API is running"}


def run() -> None:
    """Console entry point: validate configuration, then serve the API."""
    load_settings()
    settings = get_app_settings()
    uvicorn.run(app, host=settings.app_host, port=settings.app_port)


if __name__ == "__main__":
    run()
