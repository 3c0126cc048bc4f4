import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from collector_app.dependencies import get_hit_service
from collector_app.schemas.hit import HitEvent
from collector_app.services.hit_service import HitService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["hits"])

INVALID_REQUEST = "Invalid request."
FORM_FIELDS = ("domain", "path", "user", "timezone")
ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def invalid_request() -> PlainTextResponse:
    return PlainTextResponse(INVALID_REQUEST, status_code=status.HTTP_400_BAD_REQUEST)


def remote_address(request: Request) -> str:
    """Transport-level peer as host:port"""
    if request.client is None:
        return ""
    return f"{request.client.host}:{request.client.port}"


@router.api_route(
    "/",
    methods=ALL_METHODS,
    response_class=PlainTextResponse,
)
async def log_hit(request: Request, hit_service: HitService = Depends(get_hit_service)):
    """
    Record one hit from a form-encoded POST.

    Every other method is rejected here as well as in the middleware, so
    the handler stays correct when the method filter is switched off.
    """
    if request.method != "POST":
        return invalid_request()

    form = await request.form()
    try:
        event = HitEvent(
            **{name: form.get(name, "") for name in FORM_FIELDS},
            address=remote_address(request),
        )
    except ValidationError as e:
        logger.warning(
            "Rejected hit from %s: %s",
            remote_address(request), e.errors(include_url=False, include_input=False),
        )
        return invalid_request()

    # Blocking insert, keep it off the event loop
    await run_in_threadpool(hit_service.record_hit, event)

    return PlainTextResponse(HitService.confirmation(event))
