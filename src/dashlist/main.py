import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import ProcedureError
from .logging_utils import configure_logging
from .routers import todo as todo_router
from .settings import get_settings

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "todo",
        "description": "Todo procedures: the listTodos query and the addTodo, updateTodo, "
        "markTodoAsDone and deleteTodo mutations.",
    },
]

_settings = get_settings()
configure_logging(_settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Dashlist",
    description="Todo list service exposing a public set of typed procedures.",
    version="0.1.0",
    openapi_tags=openapi_tags,
)

# Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
allow_all = (_settings.cors_allow_origins == ["*"]) or (len(_settings.cors_allow_origins) == 0)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else _settings.cors_allow_origins,
    allow_credentials=not allow_all,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return a consistent JSON structure for request validation errors.

    Response format:
        {
            "error": "ValidationError",
            "message": "Request validation failed",
            "detail": [... pydantic/fastapi error details ...]
        }
    """
    logger.info("Rejected %s %s: invalid input", request.method, request.url.path)
    return JSONResponse(
        status_code=422,
        content={
            "error": "ValidationError",
            "message": "Request validation failed",
            "detail": [
                {key: err[key] for key in ("type", "loc", "msg") if key in err}
                for err in exc.errors()
            ],
        },
    )


@app.exception_handler(ProcedureError)
async def procedure_exception_handler(request: Request, exc: ProcedureError) -> JSONResponse:
    """
    Render NotFoundError, StorageError and procedure-level ValidationError in the same
    {"error", "message", "detail"} shape with the status code of their kind.
    """
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
def health_check():
    """
    Health check endpoint.

    Returns:
        A JSON object indicating service health.
    """
    return {"message": "Healthy", "backend": _settings.persistence_backend}


# Include routers
app.include_router(todo_router.router)
