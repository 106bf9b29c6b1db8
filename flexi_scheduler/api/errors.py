"""Mapping of domain errors onto HTTP responses."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from flexi_scheduler.core.observability import get_logger
from flexi_scheduler.domain.shared.exceptions import DomainError, ErrorType

logger = get_logger(__name__)

STATUS_BY_ERROR_TYPE = {
    ErrorType.VALIDATION: 422,
    ErrorType.INVALID_ENTITY: 422,
    ErrorType.PRECONDITION: 409,
    ErrorType.CONCURRENCY: 409,
    ErrorType.NOT_FOUND: 404,
    ErrorType.PERSISTENCE: 503,
}


def status_for(error_type: ErrorType | str) -> int:
    return STATUS_BY_ERROR_TYPE.get(ErrorType(error_type), 500)


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    code = status_for(exc.error_type)
    if code >= 500:
        logger.error("request_failed", path=request.url.path, error=exc.to_dict())
    else:
        logger.info("request_rejected", path=request.url.path, error=exc.to_dict())
    return JSONResponse(status_code=code, content={"error": exc.to_dict()})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)  # type: ignore[arg-type]
