import logging
from typing import Awaitable, Callable

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse

from .config import get_settings
from .domain.errors import BackendError, BackendUnavailableError
from .routers import blackouts, bookings, catalog, slots
from .utils.request_id import REQUEST_ID_HEADER, bind_request_id, set_request_id

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Tour Booking Admin API")


async def request_id_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    request_id = bind_request_id(request.headers.get(REQUEST_ID_HEADER))
    try:
        response = await call_next(request)
    finally:
        set_request_id(None)
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


app.middleware("http")(request_id_middleware)


@app.exception_handler(BackendError)
async def backend_error_handler(request: Request, exc: BackendError) -> JSONResponse:
    # Conflicts and missing resources pass through; anything else is an upstream failure.
    code = exc.status_code if exc.status_code in (404, 409) else status.HTTP_502_BAD_GATEWAY
    return JSONResponse(status_code=code, content={"detail": exc.message})


@app.exception_handler(BackendUnavailableError)
async def backend_unavailable_handler(request: Request, exc: BackendUnavailableError) -> JSONResponse:
    logger.error("booking backend unavailable: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "booking backend unavailable"},
    )


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


app.include_router(catalog.router)
app.include_router(slots.router)
app.include_router(bookings.router)
app.include_router(blackouts.router)
