import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from streams_api.core.exceptions import InvalidRequest, ProblemDetail, StreamsError

logger = logging.getLogger(__name__)

PROBLEM_JSON = "application/problem+json"


def _respond(problem: ProblemDetail) -> JSONResponse:
    return JSONResponse(
        status_code=problem.status,
        content=problem.model_dump(mode="json", exclude_none=True),
        media_type=PROBLEM_JSON,
    )


def _describe(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body") or "body"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts) or "invalid request"


def install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StreamsError)
    async def streams_error_handler(_: Request, exc: StreamsError):
        return _respond(exc.to_problem())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(_: Request, exc: RequestValidationError):
        return _respond(InvalidRequest(_describe(exc)).to_problem())

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(_: Request, exc: StarletteHTTPException):
        title = "Not Found" if exc.status_code == 404 else "HTTP Error"
        return _respond(ProblemDetail(type="about:blank", title=title, status=exc.status_code, detail=str(exc.detail)))

    # Catch-all
    @app.exception_handler(Exception)
    async def unhandled(request: Request, exc: Exception):
        logger.exception("Unhandled error", extra={"path": request.url.path})
        return _respond(ProblemDetail(type="about:blank", title="Internal Server Error", status=500, detail=str(exc)))
