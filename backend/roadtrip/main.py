import logging
import os
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from .api.routes import trip
from .config import get_log_level
from .services.session import TripSession, build_session

logging.basicConfig(
    level=get_log_level(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

templates = Jinja2Templates(directory=os.path.join(BASE_DIR, "templates"))


def create_app(session: Optional[TripSession] = None) -> FastAPI:
    app = FastAPI(
        title="Roadtrip Planner",
        version="0.1.0",
        description="Plan a multi-stop driving trip: stops, legs, totals and a cost estimate.",
    )

    app.state.session = session or build_session()

    # ---- Static files (CSS + JS) ----

    app.mount("/static", StaticFiles(directory=os.path.join(BASE_DIR, "static")), name="static")

    @app.get("/", include_in_schema=False)
    def root():
        return RedirectResponse(url="/ui")

    @app.get("/health", tags=["health"])
    def health_check():
        """
        Basic health check endpoint used for monitoring and deployment.
        """
        return JSONResponse(content={"status": "ok"})

    # ---- API Routers ----

    app.include_router(
        trip.router,
        prefix="/trip",
        tags=["trip"],
    )

    @app.get("/ui", response_class=HTMLResponse, tags=["ui"])
    async def ui_home(request: Request):
        return templates.TemplateResponse(request, "ui/index.html", {"theme": app.state.session.theme})

    return app


app = create_app()
