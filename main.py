from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from routers import api_router
from config import settings
from database import engine, Base
from exceptions import AuthError, UpstreamFailure
from logging_config import configure_logging
import models  # ensure model registration
import logging

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.PROJECT_NAME)
# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
# Production schemas are managed by Alembic (`alembic upgrade head`); only
# auto-create tables for local SQLite databases.
if engine.url.get_backend_name() == "sqlite":
    Base.metadata.create_all(bind=engine)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})

@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError):
    if isinstance(exc, UpstreamFailure):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc.__cause__)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return _error(exc.status_code, exc.message)

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.info("%s %s invalid body", request.method, request.url.path, extra={"errors": exc.errors()})
    return _error(400, "Invalid request body")

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(500, "Internal server error")


# Include API routers
app.include_router(api_router)

@app.get("/")
async def root():
    return {"message": f"Welcome to the {settings.APP_NAME} auth API!"}

@app.get("/health")
async def health():
    return {"status": "ok"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
