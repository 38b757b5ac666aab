import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from logiscan.api.v1.routes_catalog import router as catalog_router
from logiscan.api.v1.routes_events import router as events_router
from logiscan.api.v1.routes_movements import router as movements_router
from logiscan.api.v1.routes_scan_lists import router as scan_lists_router
from logiscan.core.errors import LogiScanError
from logiscan.core.logging_config import configure_logging
from logiscan.db.base import init_models

logger = logging.getLogger("logiscan")


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    await init_models()
    yield


app = FastAPI(title="LogiScan", lifespan=lifespan)
app.state.scan_throttles = {}

app.include_router(events_router)
app.include_router(scan_lists_router)
app.include_router(catalog_router)
app.include_router(movements_router)


@app.exception_handler(LogiScanError)
async def logiscan_error_handler(request: Request, exc: LogiScanError):
    problem = exc.to_problem()
    problem["context"] = {"path": request.url.path, "method": request.method, **problem["context"]}
    if exc.http_status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.error_code)
    return JSONResponse(status_code=exc.http_status, content=problem)


@app.get("/health")
async def health():
    return {"status": "ok"}
