from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from commute_router.adapters.api.controllers.routes import router as routes_router
from commute_router.adapters.api.controllers.stations import router as stations_router
from commute_router.adapters.api.dependencies import env_bool
from commute_router.domain.exceptions import (
    DirectionsUnavailable,
    RoutingError,
    SearchCancelled,
    StationFeedUnavailable,
)

logger = logging.getLogger("uvicorn.error")

# Routing failures that escape a controller still map to a meaningful status.
_ROUTING_ERROR_STATUS: dict[type[RoutingError], int] = {
    DirectionsUnavailable: 502,
    StationFeedUnavailable: 503,
    SearchCancelled: 409,
}

app = FastAPI(title="Commute Router")
app.include_router(routes_router)
app.include_router(stations_router)


@app.exception_handler(RoutingError)
async def routing_error_handler(request: Request, exc: RoutingError) -> JSONResponse:
    status = next(
        (code for cls, code in _ROUTING_ERROR_STATUS.items() if isinstance(exc, cls)),
        500,
    )
    logger.warning(
        "%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc
    )
    return JSONResponse(
        status_code=status, content={"detail": str(exc) or type(exc).__name__}
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort JSON 500 for bugs in synthesis or the adapters.

    Provider payloads and feed contents can end up in exception messages, so
    the detail is hidden unless COMMUTE_ROUTER_REVEAL_ERRORS is set.
    """

    logger.exception(
        "Unhandled error on %s %s", request.method, request.url.path
    )
    detail = "Internal Server Error"
    if env_bool("COMMUTE_ROUTER_REVEAL_ERRORS"):
        detail = f"{type(exc).__name__}: {exc}"
    return JSONResponse(status_code=500, content={"detail": detail})


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
