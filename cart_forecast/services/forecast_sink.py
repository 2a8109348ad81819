from __future__ import annotations

import logging
from typing import Optional

import requests
from apscheduler.schedulers.background import BackgroundScheduler

from cart_forecast.core.config import SinkSettings
from cart_forecast.schemas.forecast import ForecastSinkPayload


logger = logging.getLogger(__name__)


class ForecastSinkDispatcher:
    """Fire-and-forget forwarding of computed forecasts to a webhook.

    Deliveries run as one-off jobs on a background scheduler owned by the
    application; callers never wait for them and delivery errors are only
    logged. There is no retry.
    """

    def __init__(self, settings: SinkSettings) -> None:
        self._settings = settings
        self._scheduler: Optional[BackgroundScheduler] = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self) -> None:
        """Start the background scheduler if forwarding is configured.

        Calling start() on a running dispatcher is a no-op.
        """
        if not self._settings.is_active:
            logger.warning(
                "ForecastSinkDispatcher disabled (enabled=%s, webhook configured=%s)",
                self._settings.enabled,
                bool(self._settings.webhook_url),
            )
            return

        if self.running:
            logger.warning("ForecastSinkDispatcher already running, skipping start")
            return

        scheduler = BackgroundScheduler(timezone="UTC")
        scheduler.start()
        self._scheduler = scheduler
        logger.warning("ForecastSinkDispatcher started")

    def shutdown(self) -> None:
        if self._scheduler is not None:
            try:
                self._scheduler.shutdown(wait=False)
                logger.warning("ForecastSinkDispatcher stopped")
            finally:
                self._scheduler = None

    def submit(self, payload: ForecastSinkPayload) -> bool:
        """Queue ``payload`` for delivery and return without waiting.

        Returns False when the payload was dropped because the dispatcher is
        not running.
        """
        if not self.running:
            logger.warning("ForecastSinkDispatcher not running; forecast not forwarded")
            return False

        self._scheduler.add_job(
            self.deliver,
            args=[payload],
            misfire_grace_time=None,
        )
        return True

    def deliver(self, payload: ForecastSinkPayload) -> None:
        """POST the payload to the webhook. Failures are logged, never raised."""

        try:
            resp = requests.post(
                self._settings.webhook_url,
                json=payload.model_dump(by_alias=True),
                timeout=self._settings.timeout_seconds,
            )
        except requests.RequestException as exc:
            logger.warning("Failed to forward forecast to webhook: %s", exc)
            return
        except Exception:
            logger.exception("Unexpected error while forwarding forecast to webhook")
            return

        if not resp.ok:
            logger.warning(
                "Webhook rejected forecast: %s %s", resp.status_code, resp.text[:200]
            )
