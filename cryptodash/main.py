from fastapi import Depends, FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import asyncio
import logging

from cryptodash import config
from cryptodash.api.dependencies import get_forecast_service
from cryptodash.api.routes_market import router as market_router
from cryptodash.api.routes_predictive import router as predictive_router
from cryptodash.services.forecast_service import ForecastService

logger = logging.getLogger(__name__)


def configure_logging(level: str = config.LOG_LEVEL):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info("%s %s starting (market data: %s)", config.API_TITLE, config.API_VERSION, config.MARKET_DATA_SOURCE)
    yield
    logger.info("Server stopped")


app = FastAPI(title=config.API_TITLE, description=config.API_DESCRIPTION, version=config.API_VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(market_router, prefix="/api/v1/market", tags=["market"])
app.include_router(predictive_router, prefix="/api/v1/predictive", tags=["predictive"])


@app.get("/health")
def health_check():
    return {"status": "ok", "version": config.API_VERSION}


def _batch_payload(service: ForecastService) -> dict:
    # Blocking: provider HTTP calls plus the simulation. Run it off the event loop.
    batch = service.forecast_top(config.TOP_ASSETS_LIMIT)
    return {
        "type": "update",
        "generated_at": datetime.now(timezone.utc).isoformat(),
        **batch.model_dump(mode="json"),
    }


@app.websocket("/ws/forecasts")
async def ws_forecasts(websocket: WebSocket, service: ForecastService = Depends(get_forecast_service)):
    """Push a fresh top-volume forecast batch every refresh interval.

    Each message replaces the previous one entirely. Clients may send "ping"
    (answered with "pong") or "refresh" to get a new batch immediately.
    """
    await websocket.accept()
    logger.info("Forecast stream client connected")
    try:
        await websocket.send_json(await asyncio.to_thread(_batch_payload, service))
        while True:
            try:
                data = await asyncio.wait_for(websocket.receive_text(), timeout=config.FORECAST_REFRESH_SECONDS)
            except asyncio.TimeoutError:
                await websocket.send_json(await asyncio.to_thread(_batch_payload, service))
                continue

            if data == "ping":
                await websocket.send_text("pong")
            elif data == "refresh":
                await websocket.send_json(await asyncio.to_thread(_batch_payload, service))
    except WebSocketDisconnect:
        logger.info("Forecast stream client disconnected")


def run():
    import uvicorn

    uvicorn.run("cryptodash.main:app", host=config.API_HOST, port=config.API_PORT)
