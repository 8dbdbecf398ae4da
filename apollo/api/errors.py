"""
HTTP Error Mapping

Converts protocol and transfer failures into JSON error responses.
"""
import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

from apollo.core import errors
from apollo.ledger.tokens import TransferError

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    errors.Unauthorized: status.HTTP_403_FORBIDDEN,
    errors.RecordNotFound: status.HTTP_404_NOT_FOUND,
    errors.AlreadyInitialized: status.HTTP_409_CONFLICT,
    errors.AlreadyEnrolled: status.HTTP_409_CONFLICT,
    errors.InvalidClaimStatus: status.HTTP_409_CONFLICT,
    errors.NotInitialized: status.HTTP_409_CONFLICT,
}


async def protocol_error_handler(request: Request, exc: errors.ProtocolError) -> JSONResponse:
    status_code = ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    logger.info(f"{request.method} {request.url.path} failed: {exc.code}: {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": exc.code}
    )


async def transfer_error_handler(request: Request, exc: TransferError) -> JSONResponse:
    logger.info(f"{request.method} {request.url.path} transfer failed: {exc.code}: {exc.message}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": exc.message, "code": exc.code}
    )
