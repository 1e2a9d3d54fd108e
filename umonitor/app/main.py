import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import HTMLResponse, JSONResponse, Response

from .config import MonitorConfig, load_config, settings
from .fetcher import StatusFetcher
from .models import ViewState
from .poller import Fetcher, PollingLoop
from .signals import IconVariant, PageSignals, icon_href, icon_svg, title_text
from .ui import render_page
from .view import build_view

load_dotenv()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

_TRUE = {"1", "true", "yes", "on"}


def _view_state(filter_text: str, sort: str, asc: str) -> ViewState:
    try:
        return ViewState(filter_text=filter_text, sort_key=sort, ascending=asc.lower() in _TRUE)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown sort column: {sort}")


def create_app(config: Optional[MonitorConfig] = None, fetcher: Optional[Fetcher] = None,
               autostart: bool = True) -> FastAPI:
    config = config or load_config()
    fetcher = fetcher or StatusFetcher(config)
    signals = PageSignals(config.title)
    poller = PollingLoop(fetcher, config, signals)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if autostart:
            poller.start()
        try:
            yield
        finally:
            await poller.stop()
            aclose = getattr(fetcher, "aclose", None)
            if aclose is not None:
                await aclose()

    app = FastAPI(title="uMonitor5 dashboard", lifespan=lifespan)
    app.state.config = config
    app.state.poller = poller
    app.state.signals = signals

    @app.get("/", response_class=HTMLResponse)
    def dashboard(filter: str = Query(""), sort: str = Query("state"), asc: str = Query("1")):
        """Target table with filter box and sortable columns"""
        state = _view_state(filter, sort, asc)
        signal = signals.signal
        rows = build_view(poller.snapshot, state)
        return HTMLResponse(render_page(
            rows, state,
            title=title_text(config.title, signal.title),
            base_title=config.title,
            icon=icon_href(signal.icon),
            color=signal.icon.value,
            refresh_s=config.refresh_interval_s,
            last_error=poller.last_error,
        ))

    @app.get("/api/view", response_class=JSONResponse)
    def api_view(filter: str = Query(""), sort: str = Query("state"), asc: str = Query("1")):
        """Filtered and sorted rows for the current snapshot"""
        state = _view_state(filter, sort, asc)
        rows = build_view(poller.snapshot, state)
        return JSONResponse({
            "filter": state.filter_text,
            "sort": state.sort_key.value,
            "ascending": state.ascending,
            "total": len(poller.snapshot),
            "rows": [r.to_dict() for r in rows],
        })

    @app.get("/api/health", response_class=JSONResponse)
    def api_health():
        signal = signals.signal
        return JSONResponse({
            "health": poller.health.value,
            "icon": signal.icon.value,
            "title": title_text(config.title, signal.title),
            "counts": poller.counts.to_dict(),
            "records": len(poller.snapshot),
            "last_error": poller.last_error,
            "last_success_at": poller.last_success_at,
            "last_attempt_at": poller.last_attempt_at,
            "cycles": poller.cycles,
        })

    @app.get("/icon/{color}.svg")
    def icon(color: str):
        try:
            variant = IconVariant(color)
        except ValueError:
            raise HTTPException(status_code=404, detail=f"No icon for {color}")
        return Response(icon_svg(variant), media_type="image/svg+xml",
                        headers={"Cache-Control": "public, max-age=86400"})

    @app.get("/health", response_class=JSONResponse)
    def health():
        return JSONResponse({"ok": True, "ts": time.time(), "polling": poller.running})

    return app


app = create_app()
