#!/usr/bin/env python3
"""FastAPI server for the insider trading tracker - dashboard and JSON API."""
from typing import Optional
import logging
import sys
import os

_here = os.path.dirname(os.path.abspath(__file__))
if _here not in sys.path:
    sys.path.insert(0, _here)

from pathlib import Path
from dotenv import load_dotenv
load_dotenv(Path(_here) / ".env")

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from fastapi.responses import FileResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from insider_tracker.config import (
    CACHE_TTL_SECONDS,
    ENABLE_CACHING,
    ENVIRONMENT,
    FINNHUB_API_KEY,
    HOST,
    LOG_LEVEL,
    PORT,
    TRACKED_SYMBOLS,
)
from insider_tracker.errors import TrackerError
from insider_tracker.service import TrackerService

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Insider Trading Tracker", version="1.0.0")

STATIC_DIR = Path(_here) / "static"
STATIC_DIR.mkdir(exist_ok=True)


def get_service(request: Request) -> TrackerService:
    return request.app.state.service


@app.on_event("startup")
async def startup():
    """Build the service (and its cache) and start the cache sweep."""
    if getattr(app.state, "service", None) is None:
        app.state.service = TrackerService()
    app.state.service.start()
    logger.info(
        "Insider Trading Tracker started: environment=%s api_key=%s caching=%s ttl=%ss symbols=%d",
        ENVIRONMENT,
        "configured" if FINNHUB_API_KEY else "missing",
        "enabled" if ENABLE_CACHING else "disabled",
        CACHE_TTL_SECONDS,
        len(TRACKED_SYMBOLS),
    )
    if not FINNHUB_API_KEY:
        logger.error("FINNHUB_API_KEY is not set; data endpoints will return a configuration error")


@app.on_event("shutdown")
async def shutdown():
    """Stop the sweep and clear the cache."""
    service = getattr(app.state, "service", None)
    if service is not None:
        await service.stop()
        logger.info("Cache cleared")


@app.exception_handler(TrackerError)
async def tracker_error_handler(request: Request, exc: TrackerError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.details or "")
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg") if errors else "Invalid request."
    return JSONResponse(status_code=400, content={"success": False, "error": message, "statusCode": 400})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        content = {"success": False, "error": "Route not found", "path": request.url.path, "statusCode": 404}
    else:
        content = {"success": False, "error": str(exc.detail), "statusCode": exc.status_code}
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error", "statusCode": 500},
    )


@app.get("/")
async def index():
    """Serve the dashboard shell."""
    dash_path = STATIC_DIR / "dashboard.html"
    if dash_path.exists():
        return FileResponse(dash_path)
    index_path = STATIC_DIR / "index.html"
    if index_path.exists():
        return FileResponse(index_path)
    return {"message": "Frontend not found."}


app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")


@app.get("/health")
@app.get("/api/health")
async def health(service: TrackerService = Depends(get_service)):
    return service.health()


@app.get("/test-api")
async def test_api(service: TrackerService = Depends(get_service)):
    """Check the Finnhub token with a single AAPL request."""
    return await service.test_upstream()


@app.get("/api/insider-trades")
async def insider_trades(
    date_from: Optional[str] = Query(default=None, alias="from", description="YYYY-MM-DD (default: 30 days before 'to')"),
    date_to: Optional[str] = Query(default=None, alias="to", description="YYYY-MM-DD (default: today)"),
    sort: Optional[str] = Query(default=None, description="date | ticker | price | amount | delta"),
    order: str = Query(default="desc", pattern="^(asc|desc)$"),
    service: TrackerService = Depends(get_service),
):
    """All insider transactions across tracked symbols, newest filing first."""
    return await service.insider_trades(date_from, date_to, sort=sort, order=order)


@app.get("/api/insider-trades/summary")
async def insider_trades_summary(
    date_from: Optional[str] = Query(default=None, alias="from"),
    date_to: Optional[str] = Query(default=None, alias="to"),
    service: TrackerService = Depends(get_service),
):
    """Buy/sell volume totals plus per-ticker and daily breakdowns."""
    return await service.insider_summary(date_from, date_to)


@app.get("/api/earnings")
async def earnings(
    date_from: Optional[str] = Query(default=None, alias="from", description="YYYY-MM-DD (default: today)"),
    date_to: Optional[str] = Query(default=None, alias="to", description="YYYY-MM-DD (default: 7 days after 'from')"),
    service: TrackerService = Depends(get_service),
):
    """Earnings calendar, earliest date first."""
    return await service.earnings(date_from, date_to)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=HOST, port=PORT)
