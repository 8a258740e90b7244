"""HTTP mapping for storefront failures Protean's handlers do not cover."""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from storefront.exceptions import (
    OrderCreationError,
    ProofUploadError,
    StorefrontError,
    WriteRejectedError,
)

logger = structlog.get_logger(__name__)

_STATUS_CODES = {
    WriteRejectedError: 403,
    ProofUploadError: 502,
    OrderCreationError: 502,
}


async def _storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    status_code = next((code for cls, code in _STATUS_CODES.items() if isinstance(exc, cls)), 500)
    logger.warning("Request failed", path=request.url.path, status_code=status_code, error=exc.message)
    return JSONResponse(status_code=status_code, content={"error": exc.message})


def register_storefront_exception_handlers(app: FastAPI) -> None:
    """Protean errors (400/404/422) plus storefront errors (403/502)."""
    register_exception_handlers(app)
    app.add_exception_handler(StorefrontError, _storefront_error_handler)
