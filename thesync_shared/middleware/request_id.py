import logging
import uuid
from collections.abc import Awaitable, Callable

from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)


async def request_id_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id
    logger.info("Incoming request %s %s [%s]", request.method, request.url.path, request_id)
    response = await call_next(request)
    logger.info(
        "Response status %s for %s %s [%s]",
        response.status_code,
        request.method,
        request.url.path,
        request_id,
    )
    response.headers["X-Request-ID"] = request_id
    return response
