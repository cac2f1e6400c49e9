from datetime import datetime, timezone

from fastapi import Request, status
from fastapi.responses import JSONResponse

from resource_query.core.exceptions import (
    AccessError,
    DomainError,
    FilterValueError,
    GrammarError,
    ProjectionError,
    SortError,
)


ERROR_STATUS_MAP: dict[type[DomainError], int] = {
    GrammarError: status.HTTP_400_BAD_REQUEST,
    AccessError: status.HTTP_400_BAD_REQUEST,
    FilterValueError: status.HTTP_400_BAD_REQUEST,
    ProjectionError: status.HTTP_400_BAD_REQUEST,
    SortError: status.HTTP_400_BAD_REQUEST,
}


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = next(
        (ERROR_STATUS_MAP[cls] for cls in type(exc).__mro__ if cls in ERROR_STATUS_MAP),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )

    return JSONResponse(
        status_code=status_code,
        content={
            "data": None,
            "meta": {
                "request_id": getattr(request.state, "request_id", None),
                "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            },
            "errors": [
                {
                    "code": exc.code,
                    "message": exc.message,
                    "details": exc.details,
                }
            ],
        },
    )
