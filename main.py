"""
Main FastAPI application entry point.
"""
import uvicorn
import logging
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from routers import schedule
from config import settings
from service.exceptions import TimetableError

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Initialize the FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    debug=settings.debug,
    description="Scheduling core for weekly class timetables: periods, multi-period sessions, subject quotas and faculty conflicts.",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TimetableError)
async def timetable_error_handler(request: Request, exc: TimetableError):
    """Validation rejections from the core; state was left untouched."""
    logger.info(f"{exc.code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": exc.code, "message": exc.message, "details": exc.details}
    )


# Field names as the editor labels them
FIELD_LABELS = {
    "Faculty Ids": "Faculties",
    "Subject Id": "Subject",
    "Time Slots": "Sessions",
    "Start Minutes": "Start",
    "End Minutes": "End",
    "Period Id": "Period",
}


def _field_label(loc) -> str:
    """Turn a validation error location into the label shown in the editor."""
    path = list(loc)
    if path and path[0] in ("body", "query", "path"):
        path = path[1:]

    # Errors on the whole document (table or grid checks) have no field
    if not path:
        return "Request"

    label = " -> ".join(str(p) for p in path)
    label = "".join(f" {c}" if c.isupper() else c for c in label)
    label = label.replace("_", " ").strip().title()
    for raw, friendly in FIELD_LABELS.items():
        label = label.replace(raw, friendly)
    return label


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Convert request validation errors to the editor's form-error format.

    {
        "errors": {
            "Period": ["Period is required."],
            "Request": ["Duplicate period id 1"]
        }
    }
    """
    errors = {}

    for error in exc.errors():
        field_name = _field_label(error.get("loc", []))
        error_msg = error.get("msg", "Invalid value")
        error_type = error.get("type", "")

        if error_type == "missing":
            error_msg = f"{field_name} is required."
        elif error_type == "literal_error":
            error_msg = f"{field_name} must be one of the allowed values. {error_msg}"
        elif error_type == "value_error":
            # Messages raised by model validators
            error_msg = error_msg.removeprefix("Value error, ")
        elif "greater_than" in error_type or "less_than" in error_type:
            error_msg = f"{field_name} is out of range: {error_msg}"
        else:
            error_msg = f"{field_name}: {error_msg}"

        errors.setdefault(field_name, []).append(error_msg)

    logger.debug(f"Rejected {request.method} {request.url.path}: {errors}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"errors": errors}
    )

# Include routers
app.include_router(schedule.router, prefix="/api/v1", tags=["timetable"])


@app.get("/", tags=["health"])
async def root():
    """Root endpoint - API health check."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "status": "healthy",
        "docs": "/docs"
    }


@app.get("/health", tags=["health"])
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy"}

if __name__ == "__main__":
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload
    )
