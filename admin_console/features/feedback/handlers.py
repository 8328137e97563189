"""Exception handler that renders upstream failures through the error catalog."""

import logging
from typing import Union

from fastapi.responses import JSONResponse
from starlette.requests import Request

from admin_console.core.errors import UpstreamError, UpstreamUnavailableError, _error_payload, _extract_request_id
from admin_console.features.feedback.catalog import Feedback, Scope, present_error

logger = logging.getLogger("admin_console")


def feedback_status(feedback: Feedback, exc: Union[UpstreamError, UpstreamUnavailableError]) -> int:
    if feedback.scope == Scope.INLINE:
        return 422
    return exc.status_code


async def upstream_error_handler(request: Request, exc: Union[UpstreamError, UpstreamUnavailableError]):
    rid = exc.request_id or _extract_request_id(request)
    feedback = present_error(exc)
    status = feedback_status(feedback, exc)

    session = getattr(request.state, "session", None)
    console = getattr(request.app.state, "console", None)
    if session is not None and console is not None:
        if isinstance(exc, UpstreamError) and exc.upstream_status == 401:
            # The upstream token is no longer valid; drop the console session too.
            console.end_session(session.token)
        elif feedback.scope == Scope.BANNER:
            console.notifications.error(session.session_id, feedback.message)

    details = dict(exc.details)
    details["kind"] = feedback.kind.value
    if isinstance(exc, UpstreamError):
        details["upstream_status"] = exc.upstream_status

    logger.log(
        logging.ERROR if status >= 500 else logging.WARNING,
        "upstream.feedback",
        extra={"request_id": rid, "error_code": feedback.code, "status": status},
    )
    payload = _error_payload(
        feedback.code.lower(),
        feedback.message,
        rid,
        scope=feedback.scope.value,
        field_errors=feedback.field_errors,
        details=details,
    )
    response = JSONResponse(status_code=status, content=payload)
    response.headers["x-request-id"] = rid
    return response
