"""
FastAPI application entry point
"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from interviewai.app.api.v1 import auth, resumes, sessions
from interviewai.app.core.config import settings
from interviewai.app.core.exceptions import AppError
from interviewai.app.core.logging_config import get_logger, setup_logging
from interviewai.app.db.base import Base
from interviewai.app.db.session import engine

# Import models so they register with Base.metadata
import interviewai.app.models  # noqa: F401

setup_logging()
logger = get_logger("main")

# Create database tables (Alembic migrations are the source of truth in production)
try:
    Base.metadata.create_all(bind=engine)
except Exception as e:
    logger.error("Database error: %s", e)

# Initialize FastAPI app
app = FastAPI(
    title="InterviewAI API",
    description="Interview rehearsal API - users, resumes and interview sessions",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_body(message: str, error: str | None = None) -> dict:
    body = {"success": False, "message": message}
    if error:
        body["error"] = error
    return body


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message, exc.error))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = str(exc.detail)
    if exc.status_code == 404 and exc.detail == "Not Found":
        message = f"Route {request.url.path} not found"
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(message),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"Invalid {field}: {first.get('msg')}" if field else "Invalid request"
    return JSONResponse(status_code=400, content=_error_body(message))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error path=%s", request.url.path)
    return JSONResponse(
        status_code=500,
        content=_error_body("Server Error", None if settings.is_production else repr(exc)),
    )


# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["authentication"])
app.include_router(resumes.router, prefix="/api/resumes", tags=["resumes"])
app.include_router(sessions.router, prefix="/api/sessions", tags=["sessions"])


@app.get("/")
def read_root():
    """Root endpoint"""
    return {"success": True, "message": "InterviewAI API", "version": settings.app_version}


@app.get("/health")
@app.get("/api/health")
def health_check():
    """Health check endpoint"""
    return {"success": True, "status": "healthy", "environment": settings.environment}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
