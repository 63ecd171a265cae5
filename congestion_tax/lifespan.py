from __future__ import annotations

import inspect
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncContextManager

from fastapi import FastAPI

from congestion_tax.config import get_settings
from congestion_tax.tax.rules import build_tax_rules
from congestion_tax.tax.service import CongestionTaxService

Hook = Callable[[FastAPI], Awaitable[None] | None]

_STATE_ATTRS = ("settings", "tax_rules", "tax_service", "telemetry_handler", "app_label")


def _open_telemetry_sink(logger: logging.Logger, app_label: str) -> logging.Handler | None:
    logs_dir = Path("logs")
    try:
        logs_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.warning("Unable to create logs directory %s: %s", logs_dir, exc)
        return None
    handler = logging.FileHandler(logs_dir / f"{app_label}.log", encoding="utf-8")
    handler.setLevel(logging.INFO)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s - %(message)s"))
    logger.addHandler(handler)
    return handler


async def _invoke_hook(hook: Hook | None, app: FastAPI) -> None:
    if hook is None:
        return
    try:
        result = hook(app)
        if inspect.isawaitable(result):
            await result  # type: ignore[func-returns-value]
    except Exception:
        logging.getLogger("congestion_tax").exception("Application lifecycle hook failed")


def build_application_lifespan(
    app_label: str,
    *,
    startup_hook: Hook | None = None,
    shutdown_hook: Hook | None = None,
    telemetry: bool = True,
) -> Callable[[FastAPI], AsyncContextManager[None]]:
    base_logger = logging.getLogger("congestion_tax")

    @asynccontextmanager
    async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
        settings = get_settings()
        logger = base_logger.getChild(app_label)
        rules = build_tax_rules(settings)
        telemetry_handler = _open_telemetry_sink(logger, app_label) if telemetry else None

        app.state.settings = settings
        app.state.tax_rules = rules
        app.state.tax_service = CongestionTaxService(rules)
        app.state.telemetry_handler = telemetry_handler
        app.state.app_label = app_label

        logger.info(
            "Startup complete: calendar_years=%s max_daily_tax=%s single_charge_minutes=%s",
            list(rules.calendar.covered_years),
            rules.max_daily_tax,
            rules.single_charge_interval_minutes,
        )

        try:
            await _invoke_hook(startup_hook, app)
            yield
        finally:
            await _invoke_hook(shutdown_hook, app)
            if telemetry_handler is not None:
                logger.removeHandler(telemetry_handler)
                telemetry_handler.close()
            for attr in _STATE_ATTRS:
                if hasattr(app.state, attr):
                    delattr(app.state, attr)
            logger.info("Shutdown complete")

    return _lifespan
