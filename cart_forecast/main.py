import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cart_forecast.api.v1.router import api_router
from cart_forecast.core.config import get_settings
from cart_forecast.services.forecast_sink import ForecastSinkDispatcher


logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Cart Forecast Assistant")
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_allow_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def _startup_event() -> None:
    sink = ForecastSinkDispatcher(get_settings().sink)
    sink.start()
    app.state.forecast_sink = sink


@app.on_event("shutdown")
def _shutdown_event() -> None:
    sink = getattr(app.state, "forecast_sink", None)
    if sink is not None:
        sink.shutdown()


@app.get("/")
def root():
    return {"status": "ok", "message": "Forecast assistant running"}
