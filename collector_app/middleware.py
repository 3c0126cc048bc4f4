"""
HTTP middleware for the collector.

Applied outermost first: request logging, CORS headers, OPTIONS
short-circuit, non-POST rejection. CORS and the method filter can be
switched off from settings.
"""

import logging
import time

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import PlainTextResponse

from collector_app.api.hits import invalid_request
from collector_app.config import Settings

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Headers": "Access-Control-Allow-Headers, Access-Control-Allow-Origin",
    "Access-Control-Allow-Origin": "*",
}


async def log_requests(request: Request, call_next):
    start_time = time.perf_counter()
    response = await call_next(request)
    process_time = (time.perf_counter() - start_time) * 1000

    client = request.client.host if request.client else "unknown"
    logger.info(
        "%s %s from %s -> %s in %.1fms",
        request.method, request.url.path, client, response.status_code, process_time,
    )
    return response


async def add_cors_headers(request: Request, call_next):
    try:
        response = await call_next(request)
    except Exception:
        # Unhandled errors get the CORS headers too
        logger.exception("Unhandled error for %s %s", request.method, request.url.path)
        return PlainTextResponse(
            "Internal Server Error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            headers=CORS_HEADERS,
        )
    # Still unsent here, so short-circuited responses get them too
    response.headers.update(CORS_HEADERS)
    return response


async def respond_options(request: Request, call_next):
    # Preflight never reaches the handler
    if request.method == "OPTIONS":
        return Response(status_code=status.HTTP_200_OK)
    return await call_next(request)


async def reject_non_post_requests(request: Request, call_next):
    if request.method != "POST":
        return invalid_request()
    return await call_next(request)


def install_middleware(app: FastAPI, settings: Settings) -> None:
    """
    Register the middleware chain.

    Starlette runs the last registered middleware first, so the chain is
    added innermost first.
    """
    if settings.reject_non_post:
        app.middleware("http")(reject_non_post_requests)
    if settings.cors_enabled:
        app.middleware("http")(respond_options)
        app.middleware("http")(add_cors_headers)
    app.middleware("http")(log_requests)
