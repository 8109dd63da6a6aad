from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder

from fuel_procurement.core.config import get_settings
from fuel_procurement.core.logging import configure_logging
from fuel_procurement.core.middleware import RequestIdMiddleware
from fuel_procurement.api.v1.router import v1_router


async def request_validation_handler(request: Request, exc: RequestValidationError):
    # same shape as a domain ValidationError
    return JSONResponse(
        status_code=400,
        content={
            "detail": {
                "code": "validation_error",
                "message": "Request body or parameters are invalid.",
                "errors": jsonable_encoder(exc.errors()),
            }
        },
    )


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
    )

    # Middleware: Request ID
    app.add_middleware(RequestIdMiddleware, header_name=settings.request_id_header)

    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # API v1
    app.include_router(v1_router, prefix=settings.api_prefix)

    return app


app = create_app()
