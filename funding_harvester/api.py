"""HTTP trigger surface."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from .orchestrator import Orchestrator, build_orchestrator
from .trigger import TriggerResponse, trigger_all, trigger_source


def _respond(response: TriggerResponse) -> JSONResponse:
    return JSONResponse(status_code=response.status_code, content=response.body)


def create_app(orchestrator: Orchestrator | None = None) -> FastAPI:
    """Build the FastAPI app; without an orchestrator the default one is wired on startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = app.state.orchestrator is None
        if owned:
            app.state.orchestrator = build_orchestrator()
        try:
            yield
        finally:
            if owned:
                app.state.orchestrator.store.close()

    app = FastAPI(
        title="Funding Harvester",
        description="Manual triggers for the funding opportunity harvester",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.orchestrator = orchestrator

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/scrapers")
    def run_all_scrapers() -> JSONResponse:
        return _respond(trigger_all(app.state.orchestrator))

    @app.post("/scrapers/{source}")
    def run_scraper(source: str) -> JSONResponse:
        return _respond(trigger_source(app.state.orchestrator, source))

    return app


__all__ = ["create_app"]
