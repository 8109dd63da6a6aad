from __future__ import annotations

from fastapi import HTTPException


class ProcurementError(ValueError):
    """
    Base for every domain failure raised by the services.

    `code` is the stable machine-readable reason returned to clients;
    `status_code` is the HTTP status the API layer answers with.
    """

    code = "procurement_error"
    status_code = 400

    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class ValidationError(ProcurementError):
    code = "validation_error"
    status_code = 400


class NotFoundError(ProcurementError):
    code = "not_found"
    status_code = 404


class ConflictError(ProcurementError):
    code = "conflict"
    status_code = 409


class NoBidsError(ProcurementError):
    code = "no_bids"
    status_code = 404


class NoQualifyingBidError(ProcurementError):
    code = "no_qualifying_bid"
    status_code = 404


class PermissionDeniedError(ProcurementError):
    code = "forbidden"
    status_code = 403


class PersistenceUnavailableError(ProcurementError):
    code = "persistence_unavailable"
    status_code = 503


def to_http(exc: ProcurementError) -> HTTPException:
    return HTTPException(
        status_code=exc.status_code,
        detail={"code": exc.code, "message": exc.message},
    )
