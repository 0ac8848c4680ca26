"""FastAPI application factory."""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pawvisit.api.routes import router
from pawvisit.errors import PawVisitError
from pawvisit.logging_context import get_request_logger, new_request_id, set_request_id
from pawvisit.services.engine import Engine, build_engine

logger = get_request_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


async def _handle_engine_error(request: Request, exc: PawVisitError) -> JSONResponse:
    log = logger.warning if exc.status_code < 500 else logger.error
    log("%s %s failed: %s (%s)", request.method, request.url.path, exc.kind, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.kind, "detail": exc.message},
    )


def create_app(engine: Optional[Engine] = None) -> FastAPI:
    app = FastAPI(title="pawvisit")
    app.state.engine = engine or build_engine()

    @app.middleware("http")
    async def assign_request_id(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or new_request_id()
        set_request_id(request_id)
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    app.add_exception_handler(PawVisitError, _handle_engine_error)
    app.include_router(router)
    logger.debug("Application created")
    return app
