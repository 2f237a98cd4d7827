from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.responses import FileResponse
from fastapi.middleware.cors import CORSMiddleware
import logging
import os

from .config import settings
from .database import engine, Base
from .routers import wizard, estimate

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("budget_calculator")

# Sessions are transient, create_all is enough, no migrations
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Budget Calculator",
    description=f"House construction budget calculator for {settings.COMPANY_NAME}",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(wizard.router, prefix="/api")
app.include_router(estimate.router, prefix="/api")

# Serve a built frontend when one is deployed next to the package
frontend_path = os.path.join(os.path.dirname(__file__), "..", "frontend")
if os.path.exists(frontend_path):
    assets_path = os.path.join(frontend_path, "assets")
    if os.path.exists(assets_path):
        app.mount("/assets", StaticFiles(directory=assets_path), name="assets")

    @app.get("/")
    def serve_frontend():
        return FileResponse(os.path.join(frontend_path, "index.html"))


@app.get("/health")
def health():
    return {"status": "ok", "app": "budget-calculator"}


@app.on_event("startup")
def log_startup():
    logger.info("Budget calculator up, form handler at %s (form-name=%s)",
                settings.FORM_ENDPOINT_URL, settings.FORM_NAME)
