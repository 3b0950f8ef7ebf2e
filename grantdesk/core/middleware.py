import logging
import time
from typing import Callable, List

from fastapi import Request
from fastapi.responses import JSONResponse

from .errors import RepositoryError, SessionTransitionError


logger = logging.getLogger(__name__)


def _with_cors(request: Request, response: JSONResponse, allowed_origins: List[str]) -> JSONResponse:
    origin = request.headers.get("origin")
    if origin and origin in allowed_origins:
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Credentials"] = "true"
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, DELETE, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "*"
    return response


def _allowed_origins(request: Request) -> List[str]:
    config = getattr(request.app.state, "config", None)
    return config.allowed_origins() if config is not None else []


async def log_requests(request: Request, call_next: Callable):
    start_time = time.time()
    request_id = f"{int(time.time() * 1000)}-{id(request)}"

    try:
        response = await call_next(request)
        process_time = time.time() - start_time
        # Only log slow requests (>1s) or errors
        if process_time > 1.0 or response.status_code >= 400:
            logger.info(f"[{request_id}] {request.method} {request.url.path} - {response.status_code} - {process_time:.2f}s")
        return response
    except Exception as e:
        process_time = time.time() - start_time
        logger.error(f"[{request_id}] {request.method} {request.url.path} - ERROR: {str(e)} - {process_time:.2f}s")
        raise


async def repository_exception_handler(request: Request, exc: RepositoryError):
    logger.warning(f"{request.method} {request.url.path} - records API error: {exc.message}")
    response = JSONResponse(status_code=502, content={"detail": exc.message})
    return _with_cors(request, response, _allowed_origins(request))


async def session_exception_handler(request: Request, exc: SessionTransitionError):
    response = JSONResponse(status_code=409, content={"detail": str(exc)})
    return _with_cors(request, response, _allowed_origins(request))


async def global_exception_handler(request: Request, exc: Exception):
    request_id = f"{int(time.time() * 1000)}-{id(request)}"
    logger.error(f"[{request_id}] Unhandled exception in {request.method} {request.url.path}: {str(exc)}", exc_info=True)

    response = JSONResponse(status_code=500, content={"detail": "Internal server error"})
    return _with_cors(request, response, _allowed_origins(request))
