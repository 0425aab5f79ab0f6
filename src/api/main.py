from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from ..core.logging import setup_logging
from ..core.config import settings
from ..core.db import init_db
from ..core.errors import InvoiceAppError
from .routers import documents, health, invoice, upload

logger = setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database ready", mock=settings.mock)
    yield


app = FastAPI(title="Invoice Docs", lifespan=lifespan)


# Pipeline errors become {"error": message} with the error's status code
@app.exception_handler(InvoiceAppError)
async def invoice_app_exception_handler(request: Request, exc: InvoiceAppError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.error(f"Validation error: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"error": "Invalid request", "detail": jsonable_errors(exc)},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.opt(exception=exc).error(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may hold exception instances that aren't JSON serializable
    return [{k: v for k, v in err.items() if k != "ctx"} for err in exc.errors()]


# CORS_ORIGINS can be set in .env as comma-separated list
allowed_origins = [origin.strip() for origin in settings.cors_origins.split(",")]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(upload.router)
app.include_router(invoice.router)
app.include_router(documents.router)
